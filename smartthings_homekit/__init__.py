"""Expose SmartThings lights and light sensors to HomeKit."""

__version__ = "0.1.0"
