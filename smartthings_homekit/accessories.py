"""Extend the basic Accessory class for SmartThings devices."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import Any

from homeassistant.util.decorator import Registry
from pyhap import util
from pyhap.accessory import Accessory
from pyhap.accessory_driver import AccessoryDriver
from pyhap.characteristic import Characteristic
from pyhap.const import CATEGORY_OTHER

from . import __version__
from .const import CAPABILITY_ILLUMINANCE, CAPABILITY_SWITCH
from .device import DeviceStatus, SmartThingsDevice
from .exceptions import CommunicationError

_LOGGER = logging.getLogger(__name__)

TYPES: Registry[str, type[HomeAccessory]] = Registry()


def get_accessory(
    driver: AccessoryDriver,
    device: SmartThingsDevice,
    aid: int | None,
    config: dict[str, Any],
) -> HomeAccessory | None:
    """Take a SmartThings device and return the matching HomeKit accessory."""
    if not aid:
        _LOGGER.warning(
            'The device "%s" is not supported, since it generates an invalid aid',
            device.label,
        )
        return None

    a_type = None
    if CAPABILITY_SWITCH in device.capabilities:
        a_type = "Light"
    elif CAPABILITY_ILLUMINANCE in device.capabilities:
        a_type = "LightSensor"

    if a_type is None:
        _LOGGER.debug(
            "%s has no supported capabilities: %s",
            device.label,
            sorted(device.capabilities),
        )
        return None

    _LOGGER.debug('Add "%s" as "%s"', device.label, a_type)
    return TYPES[a_type](driver, device.label, device, aid, config)


class StatePoller:
    """Keep a characteristic in step with an async getter.

    Host reads are answered from the last value the getter produced. The
    getter runs every ``interval`` seconds once the accessory runs, or once
    at start-up when the interval is not positive.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        getter: Callable[[], Awaitable[Any]],
        char: Characteristic,
    ) -> None:
        self.name = name
        self.interval = interval
        self.char = char
        self.available = False
        self.refreshing = False
        self._getter = getter

    async def async_poll(self) -> bool:
        """Run a single tick, leaving the characteristic alone on failure."""
        try:
            value = await self._getter()
        except CommunicationError as err:
            _LOGGER.debug("Skipping poll of %s: %s", self.name, err)
            self.available = False
            return False
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception("Unexpected error polling %s", self.name)
            self.available = False
            return False
        self.available = True
        self.char.set_value(value)
        return True

    async def async_run(self, stop_event) -> None:
        """Poll until the stop event is set."""
        while True:
            await self.async_poll()
            if self.interval <= 0 or await util.event_wait(stop_event, self.interval):
                break


class HomeAccessory(Accessory):
    """Adapter class for Accessory."""

    def __init__(
        self,
        driver: AccessoryDriver,
        name: str,
        device: SmartThingsDevice,
        aid: int,
        config: dict[str, Any],
        *args: Any,
        category: int = CATEGORY_OTHER,
        **kwargs: Any,
    ) -> None:
        """Initialize a Accessory object."""
        super().__init__(driver=driver, display_name=name, aid=aid, *args, **kwargs)
        self.device = device
        self.config = config or {}
        self.category = category
        self.pollers: list[StatePoller] = []
        self.set_info_service(
            manufacturer=device.manufacturer,
            model=device.model,
            serial_number=device.device_id,
            firmware_revision=__version__,
        )

    def start_polling_state(
        self,
        interval: float,
        getter: Callable[[], Awaitable[Any]],
        char: Characteristic,
    ) -> None:
        """Serve host reads of char through getter, polling it every interval.

        With an interval of zero or less the getter runs once when the
        accessory starts, and after that only when HomeKit reads a stale value.
        """
        if interval <= 0:
            _LOGGER.debug(
                "%s: polling of %s disabled", self.display_name, char.display_name
            )
        poller = StatePoller(
            f"{self.display_name} {char.display_name}", interval, getter, char
        )
        char.getter_callback = self._state_getter(poller)
        self.pollers.append(poller)

    @property
    def available(self) -> bool:
        """Return whether HomeKit gets values or a communication failure.

        The accessory is unavailable while the device is offline, and while
        any characteristic failed its last refresh or was never read.
        Asking refreshes stale characteristics, so an unreachable device is
        tried again on the next HomeKit read.
        """
        for poller in self.pollers:
            self.refresh_if_stale(poller)
        return self.device.is_online and all(
            poller.available for poller in self.pollers
        )

    def _state_getter(self, poller: StatePoller) -> Callable[[], Any]:
        def _getter() -> Any:
            self.refresh_if_stale(poller)
            return poller.char.value

        return _getter

    def refresh_if_stale(self, poller: StatePoller) -> None:
        """Refresh one characteristic unless the status is fresh or one is running."""
        if poller.refreshing or (
            poller.available and self.device.status_cache.is_fresh
        ):
            return
        poller.refreshing = True
        self.driver.async_add_job(self._async_refresh(poller))

    async def _async_refresh(self, poller: StatePoller) -> None:
        try:
            await poller.async_poll()
        finally:
            poller.refreshing = False

    async def async_update_state(self) -> None:
        """Read every characteristic from the device once."""
        for poller in self.pollers:
            await poller.async_poll()

    async def run(self) -> None:
        """Start the state pollers."""
        for poller in self.pollers:
            self.driver.async_add_job(poller.async_run(self.driver.aio_stop_event))

    def check_online(self) -> None:
        """Raise when the device is known to be unreachable."""
        if not self.device.is_online:
            _LOGGER.error("%s is offline", self.display_name)
            raise CommunicationError(f"{self.display_name} is offline")

    async def async_refresh_status(self) -> DeviceStatus:
        """Refresh the device status or fail with CommunicationError."""
        if not await self.device.async_refresh_status():
            _LOGGER.error("Could not get device status for %s", self.display_name)
            raise CommunicationError(
                f"Could not get device status for {self.display_name}"
            )
        return self.device.status

    def async_setter(
        self, handler: Callable[[Any], Awaitable[None]]
    ) -> Callable[[Any], None]:
        """Wrap an async setter as a HAP-python setter callback.

        The offline check happens synchronously so HomeKit gets a
        communication failure right away. The write itself runs on the
        driver loop, in the order HomeKit sent it.
        """

        def _setter(value: Any) -> None:
            self.check_online()
            self.driver.async_add_job(self._async_run_setter(handler, value))

        return _setter

    async def _async_run_setter(
        self, handler: Callable[[Any], Awaitable[None]], value: Any
    ) -> None:
        try:
            await handler(value)
        except CommunicationError as err:
            _LOGGER.warning(
                "%s: %s(%s) failed: %s",
                self.display_name,
                handler.__name__,
                value,
                err,
            )
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception(
                "%s: unexpected error in %s(%s)",
                self.display_name,
                handler.__name__,
                value,
            )
        else:
            return
        # Put the device's actual state back in place of the rejected value
        await self.async_update_state()
