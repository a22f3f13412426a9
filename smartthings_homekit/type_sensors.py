"""Class to hold all sensor accessories."""

from __future__ import annotations

import logging
from typing import Any

from pyhap.const import CATEGORY_SENSOR

from .accessories import TYPES, HomeAccessory
from .const import (
    ATTR_ILLUMINANCE,
    CAPABILITY_ILLUMINANCE,
    CHAR_CURRENT_AMBIENT_LIGHT_LEVEL,
    CONF_POLL_SENSORS,
    DEFAULT_POLL_SENSORS,
    SERV_LIGHT_SENSOR,
)
from .exceptions import CommunicationError

_LOGGER = logging.getLogger(__name__)


@TYPES.register("LightSensor")
class LightSensor(HomeAccessory):
    """Generate a LightSensor accessory for an illuminance sensor."""

    def __init__(self, *args: Any) -> None:
        """Initialize a LightSensor accessory object."""
        super().__init__(*args, category=CATEGORY_SENSOR)
        serv_light = self.add_preload_service(SERV_LIGHT_SENSOR)
        self.char_light = serv_light.configure_char(
            CHAR_CURRENT_AMBIENT_LIGHT_LEVEL, value=0
        )
        self.start_polling_state(
            self.config.get(CONF_POLL_SENSORS, DEFAULT_POLL_SENSORS),
            self.async_get_light_level,
            self.char_light,
        )

    async def async_get_light_level(self) -> float:
        """Return the illuminance in lux."""
        status = await self.async_refresh_status()
        lux = status.value(CAPABILITY_ILLUMINANCE, ATTR_ILLUMINANCE)
        _LOGGER.debug("Light value from %s: %s", self.display_name, lux)
        if lux is None:
            raise CommunicationError(f"{self.display_name} reported no illuminance")
        return lux
