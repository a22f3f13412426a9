"""Collection of useful functions for the SmartThings HomeKit bridge."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

from homeassistant.util import dt as dt_util
from homeassistant.util.color import (
    color_temperature_mired_to_kelvin,
    color_temperature_to_hs,
)
from homeassistant.util.json import load_json
import voluptuous as vol

from .const import (
    CONF_ACCESS_TOKEN,
    CONF_COMMAND_TIMEOUT,
    CONF_EXCLUDE_DEVICES,
    CONF_NAME,
    CONF_PERSIST_FILE,
    CONF_POLL_LIGHTS,
    CONF_POLL_SENSORS,
    CONF_PORT,
    CONF_STATUS_MAX_AGE,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_NAME,
    DEFAULT_PERSIST_FILE,
    DEFAULT_POLL_LIGHTS,
    DEFAULT_POLL_SENSORS,
    DEFAULT_PORT,
    DEFAULT_STATUS_MAX_AGE,
    MAX_COLOR_TEMP_KELVIN,
    MIN_COLOR_TEMP_KELVIN,
)

_LOGGER = logging.getLogger(__name__)


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_ACCESS_TOKEN): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): str,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=65535)
        ),
        vol.Optional(CONF_PERSIST_FILE, default=DEFAULT_PERSIST_FILE): str,
        vol.Optional(CONF_POLL_LIGHTS, default=DEFAULT_POLL_LIGHTS): vol.Coerce(int),
        vol.Optional(CONF_POLL_SENSORS, default=DEFAULT_POLL_SENSORS): vol.Coerce(
            int
        ),
        vol.Optional(CONF_COMMAND_TIMEOUT, default=DEFAULT_COMMAND_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_STATUS_MAX_AGE, default=DEFAULT_STATUS_MAX_AGE): vol.All(
            vol.Coerce(float), vol.Range(min=0)
        ),
        vol.Optional(CONF_EXCLUDE_DEVICES, default=[]): [str],
    },
    extra=vol.ALLOW_EXTRA,
)


def validate_config(config: dict[str, Any]) -> dict[str, Any]:
    """Validate a bridge configuration and fill in the defaults."""
    return CONFIG_SCHEMA(config)


def load_config(path: str) -> dict[str, Any]:
    """Load and validate the bridge configuration from a JSON file."""
    config = load_json(path)
    if not isinstance(config, dict):
        raise vol.Invalid(f"Expected a JSON object in {path}")
    return validate_config(config)


def clamp_kelvin(kelvin: float) -> float:
    """Limit a color temperature to the range SmartThings accepts."""
    return max(MIN_COLOR_TEMP_KELVIN, min(MAX_COLOR_TEMP_KELVIN, kelvin))


def kelvin_to_mired(kelvin: float) -> int:
    """Convert a device color temperature to the HomeKit mired value."""
    return round(1_000_000 / clamp_kelvin(kelvin))


def mired_to_kelvin(mired: float) -> int:
    """Convert a HomeKit mired value to a device color temperature."""
    return round(clamp_kelvin(1_000_000 / mired))


def hue_to_percent(hue: float) -> int:
    """Convert a HomeKit hue (0-360 degrees) to SmartThings percent."""
    return round(hue / 360 * 100)


def percent_to_hue(percent: float) -> int:
    """Convert a SmartThings hue percent to HomeKit degrees."""
    return round(percent / 100 * 360)


def mired_to_hue_saturation(mired: float) -> tuple[int, int]:
    """Return the hue and saturation HomeKit shows for a color temperature."""
    hue, saturation = color_temperature_to_hs(color_temperature_mired_to_kelvin(mired))
    return round(hue), round(saturation)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a SmartThings attribute timestamp as an aware UTC datetime.

    Timestamps without an offset are taken to be UTC.
    """
    if value is None:
        return None
    parsed = value if isinstance(value, datetime) else dt_util.parse_datetime(str(value))
    if parsed is None:
        _LOGGER.debug("Ignoring unparsable timestamp %s", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_util.UTC)
    return dt_util.as_utc(parsed)
