"""Class to hold all light accessories."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import logging
from typing import Any

from pyhap.characteristic import Characteristic
from pyhap.const import CATEGORY_LIGHTBULB

from .accessories import TYPES, HomeAccessory
from .const import (
    ATTR_COLOR_TEMPERATURE,
    ATTR_HUE,
    ATTR_LEVEL,
    ATTR_SATURATION,
    ATTR_SWITCH,
    CAPABILITY_COLOR_CONTROL,
    CAPABILITY_COLOR_TEMPERATURE,
    CAPABILITY_SWITCH,
    CAPABILITY_SWITCH_LEVEL,
    CHAR_BRIGHTNESS,
    CHAR_COLOR_TEMPERATURE,
    CHAR_HUE,
    CHAR_ON,
    CHAR_SATURATION,
    COMMAND_OFF,
    COMMAND_ON,
    COMMAND_SET_COLOR,
    COMMAND_SET_COLOR_TEMPERATURE,
    COMMAND_SET_LEVEL,
    CONF_POLL_LIGHTS,
    DEFAULT_POLL_LIGHTS,
    MAX_COLOR_TEMP_MIRED,
    MIN_COLOR_TEMP_MIRED,
    PROP_MAX_VALUE,
    PROP_MIN_VALUE,
    SERV_LIGHTBULB,
    STATE_ON,
)
from .exceptions import CommunicationError
from .util import (
    hue_to_percent,
    kelvin_to_mired,
    mired_to_hue_saturation,
    mired_to_kelvin,
    percent_to_hue,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LightCapabilities:
    """Optional light features of a device. On/off is always present."""

    level: bool = False
    color_temperature: bool = False
    color_control: bool = False

    @classmethod
    def from_capabilities(cls, capabilities: Iterable[str]) -> LightCapabilities:
        """Resolve the features from the capability ids a device declares."""
        capabilities = frozenset(capabilities)
        return cls(
            level=CAPABILITY_SWITCH_LEVEL in capabilities,
            color_temperature=CAPABILITY_COLOR_TEMPERATURE in capabilities,
            color_control=CAPABILITY_COLOR_CONTROL in capabilities,
        )


class PendingColorCommand:
    """Hue and saturation writes waiting to go out as one setColor command.

    SmartThings rejects setHue and setSaturation on their own (HTTP 424,
    "connector failed"), so both values are staged here until the pair is
    complete.
    """

    def __init__(self) -> None:
        self.hue: int | None = None
        self.saturation: float | None = None

    @property
    def complete(self) -> bool:
        return self.hue is not None and self.saturation is not None

    def clear(self) -> None:
        self.hue = None
        self.saturation = None

    @contextmanager
    def flush(self) -> Iterator[dict[str, Any]]:
        """Yield the combined color, clearing both slots however the send ends."""
        if not self.complete:
            raise ValueError("Cannot send a color without both hue and saturation")
        try:
            yield {ATTR_HUE: self.hue, ATTR_SATURATION: self.saturation}
        finally:
            self.clear()


@TYPES.register("Light")
class Light(HomeAccessory):
    """Generate a Light accessory for a SmartThings switch or bulb.

    Currently supports: state, brightness, color temperature, hue/saturation.
    """

    def __init__(self, *args: Any) -> None:
        """Initialize a new Light accessory object."""
        super().__init__(*args, category=CATEGORY_LIGHTBULB)
        self._pending_color = PendingColorCommand()
        self.capabilities = capabilities = LightCapabilities.from_capabilities(
            self.device.capabilities
        )

        self.chars: list[str] = []
        if capabilities.level:
            self.chars.append(CHAR_BRIGHTNESS)
        if capabilities.color_temperature:
            self.chars.append(CHAR_COLOR_TEMPERATURE)
        if capabilities.color_control:
            self.chars.extend([CHAR_HUE, CHAR_SATURATION])

        serv_light = self.add_preload_service(SERV_LIGHTBULB, self.chars)
        self.char_on = serv_light.configure_char(
            CHAR_ON,
            value=False,
            setter_callback=self.async_setter(self.async_set_switch_state),
        )
        self.char_brightness: Characteristic | None = None
        self.char_color_temp: Characteristic | None = None
        self.char_hue: Characteristic | None = None
        self.char_saturation: Characteristic | None = None

        if capabilities.level:
            _LOGGER.debug("%s supports switchLevel", self.display_name)
            self.char_brightness = serv_light.configure_char(
                CHAR_BRIGHTNESS,
                value=100,
                setter_callback=self.async_setter(self.async_set_level),
            )

        if capabilities.color_temperature:
            _LOGGER.debug("%s supports colorTemperature", self.display_name)
            # 110 mired is about 9000K, the coldest SmartThings accepts
            self.char_color_temp = serv_light.configure_char(
                CHAR_COLOR_TEMPERATURE,
                value=MIN_COLOR_TEMP_MIRED,
                properties={
                    PROP_MIN_VALUE: MIN_COLOR_TEMP_MIRED,
                    PROP_MAX_VALUE: MAX_COLOR_TEMP_MIRED,
                },
                setter_callback=self.async_setter(self.async_set_color_temp),
            )

        if capabilities.color_control:
            _LOGGER.debug("%s supports colorControl", self.display_name)
            self.char_hue = serv_light.configure_char(
                CHAR_HUE, value=0, setter_callback=self.async_setter(self.async_set_hue)
            )
            self.char_saturation = serv_light.configure_char(
                CHAR_SATURATION,
                value=0,
                setter_callback=self.async_setter(self.async_set_saturation),
            )

        interval = self.config.get(CONF_POLL_LIGHTS, DEFAULT_POLL_LIGHTS)
        self.start_polling_state(interval, self.async_get_switch_state, self.char_on)
        if self.char_brightness is not None:
            self.start_polling_state(
                interval, self.async_get_level, self.char_brightness
            )
        if self.char_color_temp is not None:
            self.start_polling_state(
                interval, self.async_get_color_temp, self.char_color_temp
            )
        if self.char_hue is not None:
            self.start_polling_state(interval, self.async_get_hue, self.char_hue)
            self.start_polling_state(
                interval, self.async_get_saturation, self.char_saturation
            )

    async def async_get_switch_state(self) -> bool:
        """Return whether the light is on."""
        status = await self.async_refresh_status()
        state = status.value(CAPABILITY_SWITCH, ATTR_SWITCH)
        _LOGGER.debug("Switch state of %s: %s", self.display_name, state)
        if state is None:
            raise CommunicationError(f"{self.display_name} reported no switch state")
        return state == STATE_ON

    async def async_set_switch_state(self, value: bool) -> None:
        """Turn the light on or off.

        A rejected command is only logged, HomeKit picks up the real state on
        the next poll.
        """
        _LOGGER.debug("Set switch state of %s to %s", self.display_name, value)
        self.check_online()
        command = COMMAND_ON if value else COMMAND_OFF
        if await self.device.async_send_command(CAPABILITY_SWITCH, command):
            _LOGGER.debug("%s: %s succeeded", self.display_name, command)
        else:
            _LOGGER.error("Command failed for %s", self.display_name)

    async def async_get_level(self) -> int:
        """Return the brightness of the light."""
        status = await self.async_refresh_status()
        level = status.value(CAPABILITY_SWITCH_LEVEL, ATTR_LEVEL)
        if level is None:
            _LOGGER.error("Undefined level for %s", self.display_name)
            raise CommunicationError(f"{self.display_name} reported no level")
        return int(level)

    async def async_set_level(self, value: int) -> None:
        """Set the brightness of the light."""
        _LOGGER.debug("Set level of %s to %s", self.display_name, value)
        self.check_online()
        if not await self.device.async_send_command(
            CAPABILITY_SWITCH_LEVEL, COMMAND_SET_LEVEL, [int(value)]
        ):
            _LOGGER.error("Failed to send setLevel command for %s", self.display_name)
            raise CommunicationError(f"Failed to set level of {self.display_name}")

    async def async_get_color_temp(self) -> int:
        """Return the color temperature in mired."""
        status = await self.async_refresh_status()
        kelvin = status.value(CAPABILITY_COLOR_TEMPERATURE, ATTR_COLOR_TEMPERATURE)
        if kelvin is None:
            _LOGGER.error("Undefined color temperature for %s", self.display_name)
            raise CommunicationError(
                f"{self.display_name} reported no color temperature"
            )
        mired = kelvin_to_mired(kelvin)
        _LOGGER.debug("%s: %sK converted to %s mired", self.display_name, kelvin, mired)
        return mired

    async def async_set_color_temp(self, value: int) -> None:
        """Set the color temperature and show the matching color."""
        self.check_online()
        kelvin = mired_to_kelvin(value)
        _LOGGER.debug("%s: %s mired converted to %sK", self.display_name, value, kelvin)
        if not await self.device.async_send_command(
            CAPABILITY_COLOR_TEMPERATURE, COMMAND_SET_COLOR_TEMPERATURE, [kelvin]
        ):
            raise CommunicationError(
                f"Failed to set color temperature of {self.display_name}"
            )
        if self.char_hue is not None and self.char_saturation is not None:
            hue, saturation = mired_to_hue_saturation(value)
            self.char_saturation.set_value(saturation)
            self.char_hue.set_value(hue)

    async def async_get_hue_saturation(self) -> tuple[float, float]:
        """Return the hue and saturation HomeKit should show.

        The device keeps color temperature and hue/saturation as unrelated
        attributes. When the color temperature was written last, the stored
        hue/saturation no longer describe the light and are replaced by the
        color of the current temperature.
        """
        status = await self.async_refresh_status()
        color_temp = status.attribute(
            CAPABILITY_COLOR_TEMPERATURE, ATTR_COLOR_TEMPERATURE
        )
        hue_state = status.attribute(CAPABILITY_COLOR_CONTROL, ATTR_HUE)
        saturation_state = status.attribute(CAPABILITY_COLOR_CONTROL, ATTR_SATURATION)

        hue = None
        if hue_state is not None and hue_state.value is not None:
            hue = percent_to_hue(hue_state.value)
        saturation = saturation_state.value if saturation_state is not None else None

        color_timestamps = [
            state.timestamp
            for state in (hue_state, saturation_state)
            if state is not None and state.timestamp is not None
        ]
        if (
            color_temp is not None
            and color_temp.timestamp is not None
            and color_temp.value is not None
            and color_timestamps
            and color_temp.timestamp > max(color_timestamps)
        ):
            hue, saturation = mired_to_hue_saturation(kelvin_to_mired(color_temp.value))
            _LOGGER.debug(
                "%s: color temperature is newer, using hue %s saturation %s",
                self.display_name,
                hue,
                saturation,
            )

        if hue is None or saturation is None:
            _LOGGER.error("Undefined hue or saturation for %s", self.display_name)
            raise CommunicationError(f"{self.display_name} reported no color")
        return hue, saturation

    async def async_get_hue(self) -> float:
        hue, _ = await self.async_get_hue_saturation()
        return hue

    async def async_get_saturation(self) -> float:
        _, saturation = await self.async_get_hue_saturation()
        return saturation

    async def async_set_hue(self, value: float) -> None:
        """Stage a hue write and send the color once saturation is known."""
        self.check_online()
        hue_pct = hue_to_percent(value)
        _LOGGER.debug("Hue arc value of %s converted to hue percent %s", value, hue_pct)
        self._pending_color.hue = hue_pct
        await self.async_set_color()

    async def async_set_saturation(self, value: float) -> None:
        """Stage a saturation write and send the color once hue is known."""
        self.check_online()
        _LOGGER.debug("Set saturation of %s to %s", self.display_name, value)
        self._pending_color.saturation = value
        await self.async_set_color()

    async def async_set_color(self) -> None:
        """Send the staged hue and saturation as a single setColor command."""
        if not self._pending_color.complete:
            _LOGGER.debug("setColor for %s waits for hue and saturation", self.display_name)
            return

        with self._pending_color.flush() as color:
            _LOGGER.debug("Sending color %s to %s", color, self.display_name)
            if not await self.device.async_send_command(
                CAPABILITY_COLOR_CONTROL, COMMAND_SET_COLOR, [color]
            ):
                raise CommunicationError(f"Failed to set color of {self.display_name}")
