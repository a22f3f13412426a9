"""Shared helpers for building SmartThings devices and HomeKit drivers."""

from unittest.mock import AsyncMock, MagicMock

from pyhap.loader import get_loader

from smartthings_homekit.device import SmartThingsDevice

OLD = "2024-01-01T10:00:00.000Z"
NEW = "2024-01-01T11:00:00.000Z"


def attr(value, timestamp=OLD):
    return {"value": value, "timestamp": timestamp}


def make_info(*capabilities, device_id="dev-1", label="Test Light"):
    return {
        "deviceId": device_id,
        "label": label,
        "manufacturerName": "Acme",
        "deviceTypeName": "Acme Bulb",
        "components": [
            {"id": "main", "capabilities": [{"id": c} for c in capabilities]}
        ],
    }


def make_api(status=None):
    api = MagicMock()
    api.async_get_device_status = AsyncMock(return_value=status or {})
    api.async_get_device_health = AsyncMock(return_value="ONLINE")
    api.async_execute_command = AsyncMock(return_value=None)
    api.async_get_devices = AsyncMock(return_value=[])
    return api


def make_device(*capabilities, status=None, api=None):
    """Return a device whose status is fetched again on every read."""
    api = api or make_api(status)
    return SmartThingsDevice(api, make_info(*capabilities), status_max_age=0)


def make_driver():
    driver = MagicMock()
    driver.loader = get_loader()
    return driver


def sent_commands(device):
    """Return (capability, command, arguments) for every command sent."""
    return [
        call.args[1:] for call in device._api.async_execute_command.await_args_list
    ]
