"""Build the HomeKit bridge that carries every SmartThings accessory."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
from fnv_hash_fast import fnv1a_32
from pyhap.accessory import Bridge
from pyhap.accessory_driver import AccessoryDriver
from pyhap.const import STANDALONE_AID

from . import (  # noqa: F401
    __version__,
    type_lights,
    type_sensors,
)
from .accessories import get_accessory
from .api import SmartThingsApi
from .const import (
    CONF_COMMAND_TIMEOUT,
    CONF_EXCLUDE_DEVICES,
    CONF_NAME,
    CONF_STATUS_MAX_AGE,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_NAME,
    DEFAULT_STATUS_MAX_AGE,
    MANUFACTURER,
)
from .device import SmartThingsDevice

_LOGGER = logging.getLogger(__name__)

AID_MIN = 2
AID_MAX = 0xFFFFFFFF


def get_aid(device_id: str, used: set[int]) -> int:
    """Return a stable accessory id for a device that is not in use yet."""
    aid = fnv1a_32(device_id.encode("utf-8"))
    while aid < AID_MIN or aid in used:
        aid = aid + 1 if aid < AID_MAX else AID_MIN
    return aid


class SmartThingsBridge(Bridge):
    """Bridge that closes the API session when the driver stops."""

    def __init__(
        self,
        driver: AccessoryDriver,
        name: str,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(driver, name)
        self._session = session
        self.set_info_service(
            manufacturer=MANUFACTURER,
            model="Bridge",
            serial_number=name,
            firmware_revision=__version__,
        )

    async def stop(self) -> None:
        """Stop the accessories, then release the HTTP session."""
        await super().stop()
        if self._session is not None and not self._session.closed:
            await self._session.close()


async def async_build_bridge(
    driver: AccessoryDriver,
    api: SmartThingsApi,
    config: dict[str, Any],
    session: aiohttp.ClientSession | None = None,
) -> SmartThingsBridge:
    """Create a bridge with one accessory per supported SmartThings device."""
    bridge = SmartThingsBridge(driver, config.get(CONF_NAME, DEFAULT_NAME), session)
    excluded = set(config.get(CONF_EXCLUDE_DEVICES, []))
    used: set[int] = {STANDALONE_AID}

    for info in await api.async_get_devices():
        device_id = info.get("deviceId")
        if not device_id or device_id in excluded:
            _LOGGER.debug("Skipping device %s", info.get("label") or device_id)
            continue
        device = SmartThingsDevice(
            api,
            info,
            command_timeout=config.get(CONF_COMMAND_TIMEOUT, DEFAULT_COMMAND_TIMEOUT),
            status_max_age=config.get(CONF_STATUS_MAX_AGE, DEFAULT_STATUS_MAX_AGE),
        )
        aid = get_aid(device_id, used)
        acc = get_accessory(driver, device, aid, config)
        if acc is None:
            continue
        await device.async_update_health()
        used.add(aid)
        bridge.add_accessory(acc)

    _LOGGER.info(
        "Bridging %d SmartThings accessories as %s",
        len(bridge.accessories),
        bridge.display_name,
    )
    return bridge
