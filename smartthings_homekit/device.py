"""Status cache and command dispatch for a single SmartThings device."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
import logging
from time import monotonic
from typing import Any

from .api import SmartThingsApi
from .const import (
    ATTR_TIMESTAMP,
    ATTR_VALUE,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_STATUS_MAX_AGE,
    HEALTH_ONLINE,
    MANUFACTURER,
)
from .exceptions import SmartThingsApiError
from .util import parse_timestamp

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeState:
    """Value of one device attribute and when the device last reported it."""

    value: Any
    timestamp: datetime | None


class DeviceStatus:
    """Read-only snapshot of the attributes reported by a device.

    The snapshot maps capability -> attribute -> {"value", "timestamp"}, as
    returned for the main component by the SmartThings status endpoint.
    """

    def __init__(self, data: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._data: Mapping[str, Mapping[str, Any]] = data or {}

    def attribute(self, capability: str, attribute: str) -> AttributeState | None:
        """Return the state of an attribute, or None if it was not reported."""
        raw = (self._data.get(capability) or {}).get(attribute)
        if not isinstance(raw, Mapping):
            return None
        return AttributeState(
            raw.get(ATTR_VALUE), parse_timestamp(raw.get(ATTR_TIMESTAMP))
        )

    def value(self, capability: str, attribute: str) -> Any:
        """Return the value of an attribute, or None if it was not reported."""
        state = self.attribute(capability, attribute)
        return None if state is None else state.value


class StatusCache:
    """Hold the last status snapshot of a device and refresh it on demand.

    Callers that ask for a refresh while one is in flight share its result.
    A snapshot younger than ``max_age`` seconds is reused without a request.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Mapping[str, Any]]],
        max_age: float = DEFAULT_STATUS_MAX_AGE,
    ) -> None:
        self._fetch = fetch
        self._max_age = max_age
        self._status = DeviceStatus()
        self._updated: float | None = None
        self._refresh_task: asyncio.Task[bool] | None = None

    @property
    def status(self) -> DeviceStatus:
        return self._status

    @property
    def is_fresh(self) -> bool:
        return self._updated is not None and monotonic() - self._updated < self._max_age

    def invalidate(self) -> None:
        """Force the next refresh to contact the device."""
        self._updated = None

    async def async_refresh(self) -> bool:
        """Refresh the snapshot, returning False when the device was unreachable."""
        if self.is_fresh:
            return True
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(self._async_fetch())
        return await asyncio.shield(self._refresh_task)

    async def _async_fetch(self) -> bool:
        try:
            data = await self._fetch()
        except SmartThingsApiError as err:
            _LOGGER.error("Could not fetch device status: %s", err)
            return False
        except asyncio.TimeoutError:
            _LOGGER.error("Timed out fetching device status")
            return False
        # Replaced wholesale, never merged
        self._status = DeviceStatus(data)
        self._updated = monotonic()
        return True


class SmartThingsDevice:
    """A SmartThings device as seen by the HomeKit accessories."""

    def __init__(
        self,
        api: SmartThingsApi,
        info: Mapping[str, Any],
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        status_max_age: float = DEFAULT_STATUS_MAX_AGE,
    ) -> None:
        self._api = api
        self._timeout = command_timeout
        self._online = True
        self.device_id: str = info["deviceId"]
        self.label: str = info.get("label") or info.get("name") or self.device_id
        self.manufacturer: str = info.get("manufacturerName") or MANUFACTURER
        self.model: str = info.get("deviceTypeName") or info.get("name") or "Unknown"
        components = info.get("components") or []
        self.capabilities: frozenset[str] = frozenset(
            capability["id"]
            for capability in (components[0].get("capabilities", []) if components else [])
        )
        self.status_cache = StatusCache(self._async_fetch_status, status_max_age)

    def __repr__(self) -> str:
        return f"<SmartThingsDevice {self.label} ({self.device_id})>"

    @property
    def status(self) -> DeviceStatus:
        """Return the last fetched status snapshot."""
        return self.status_cache.status

    @property
    def is_online(self) -> bool:
        """Return whether the device answered its last status refresh."""
        return self._online

    async def _async_fetch_status(self) -> Mapping[str, Any]:
        try:
            status = await asyncio.wait_for(
                self._api.async_get_device_status(self.device_id), self._timeout
            )
        except (SmartThingsApiError, asyncio.TimeoutError):
            self._online = False
            raise
        self._online = True
        await self.async_update_health()
        return status

    async def async_update_health(self) -> bool:
        """Update the online flag from the SmartThings health endpoint."""
        try:
            state = await asyncio.wait_for(
                self._api.async_get_device_health(self.device_id), self._timeout
            )
        except (SmartThingsApiError, asyncio.TimeoutError) as err:
            _LOGGER.debug("Could not get health of %s: %s", self.label, err)
            return self._online
        self._online = state == HEALTH_ONLINE
        if not self._online:
            _LOGGER.warning("%s reports health %s", self.label, state)
        return self._online

    async def async_refresh_status(self) -> bool:
        """Refresh the cached status of the device."""
        return await self.status_cache.async_refresh()

    async def async_send_command(
        self, capability: str, command: str, arguments: list[Any] | None = None
    ) -> bool:
        """Send one command to the device and report whether it was accepted."""
        _LOGGER.debug(
            "Sending %s.%s(%s) to %s", capability, command, arguments, self.label
        )
        try:
            await asyncio.wait_for(
                self._api.async_execute_command(
                    self.device_id, capability, command, arguments
                ),
                self._timeout,
            )
        except asyncio.TimeoutError:
            _LOGGER.error(
                "Timed out sending %s.%s to %s", capability, command, self.label
            )
            return False
        except SmartThingsApiError as err:
            _LOGGER.error(
                "Command %s.%s failed for %s: %s", capability, command, self.label, err
            )
            return False
        self.status_cache.invalidate()
        return True
