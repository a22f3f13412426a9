"""Tests for building the bridge."""

import pytest

from smartthings_homekit.bridge import SmartThingsBridge, async_build_bridge, get_aid
from smartthings_homekit.const import CONF_EXCLUDE_DEVICES
from smartthings_homekit.type_lights import Light
from smartthings_homekit.type_sensors import LightSensor
from tests.support.device_helpers import make_api, make_info


class TestGetAid:

    def test_stable(self):
        assert get_aid("dev-1", set()) == get_aid("dev-1", set())

    def test_avoids_used(self):
        aid = get_aid("dev-1", set())
        assert get_aid("dev-1", {aid}) != aid

    def test_never_reserved(self):
        assert get_aid("dev-1", set()) >= 2


class TestBuildBridge:

    @pytest.mark.asyncio
    async def test_adds_supported_devices(self, hk_driver):
        api = make_api()
        api.async_get_devices.return_value = [
            make_info("switch", "switchLevel", device_id="light", label="Lamp"),
            make_info("illuminanceMeasurement", device_id="sensor", label="Lux"),
            make_info("lock", device_id="lock", label="Door"),
        ]
        bridge = await async_build_bridge(hk_driver, api, {})

        assert isinstance(bridge, SmartThingsBridge)
        kinds = {acc.display_name: type(acc) for acc in bridge.accessories.values()}
        assert kinds == {"Lamp": Light, "Lux": LightSensor}
        assert api.async_get_device_health.await_count == 2

    @pytest.mark.asyncio
    async def test_excluded_devices(self, hk_driver):
        api = make_api()
        api.async_get_devices.return_value = [
            make_info("switch", device_id="light", label="Lamp"),
        ]
        bridge = await async_build_bridge(
            hk_driver, api, {CONF_EXCLUDE_DEVICES: ["light"]}
        )
        assert bridge.accessories == {}
