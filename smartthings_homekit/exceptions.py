"""Errors raised by the SmartThings HomeKit bridge."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError
from pyhap.const import HAP_SERVER_STATUS


class CommunicationError(HomeAssistantError):
    """The device could not be reached or returned an incomplete status.

    HomeKit shows the accessory as "Not Responding" when a characteristic
    read or write fails with this error.
    """

    status = HAP_SERVER_STATUS.SERVICE_COMMUNICATION_FAILURE


class SmartThingsApiError(HomeAssistantError):
    """A request to the SmartThings REST API failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize the error with the HTTP status, if there was one."""
        super().__init__(message)
        self.status = status
