"""Tests for the status cache and command dispatch."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from smartthings_homekit.device import DeviceStatus, SmartThingsDevice, StatusCache
from smartthings_homekit.exceptions import SmartThingsApiError
from smartthings_homekit.util import parse_timestamp
from tests.support.device_helpers import OLD, attr, make_api, make_info


class TestDeviceStatus:

    def test_attribute(self):
        status = DeviceStatus({"switchLevel": {"level": attr(42)}})
        state = status.attribute("switchLevel", "level")
        assert state.value == 42
        assert state.timestamp == parse_timestamp(OLD)

    def test_missing_capability(self):
        status = DeviceStatus({})
        assert status.attribute("switchLevel", "level") is None
        assert status.value("switchLevel", "level") is None

    def test_missing_timestamp(self):
        status = DeviceStatus({"switch": {"switch": {"value": "on"}}})
        assert status.attribute("switch", "switch").timestamp is None
        assert status.value("switch", "switch") == "on"


class TestStatusCache:

    @pytest.mark.asyncio
    async def test_refresh_replaces_snapshot(self):
        fetch = AsyncMock(
            side_effect=[
                {"switch": {"switch": attr("on")}, "switchLevel": {"level": attr(5)}},
                {"switch": {"switch": attr("off")}},
            ]
        )
        cache = StatusCache(fetch, max_age=0)
        assert await cache.async_refresh() is True
        assert await cache.async_refresh() is True
        assert cache.status.value("switch", "switch") == "off"
        assert cache.status.value("switchLevel", "level") is None

    @pytest.mark.asyncio
    async def test_fresh_snapshot_is_reused(self):
        fetch = AsyncMock(return_value={})
        cache = StatusCache(fetch, max_age=60)
        await cache.async_refresh()
        await cache.async_refresh()
        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_invalidate_forces_fetch(self):
        fetch = AsyncMock(return_value={})
        cache = StatusCache(fetch, max_age=60)
        await cache.async_refresh()
        cache.invalidate()
        await cache.async_refresh()
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_share_request(self):
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            return {}

        fetch_mock = AsyncMock(side_effect=fetch)
        cache = StatusCache(fetch_mock, max_age=0)
        first = asyncio.ensure_future(cache.async_refresh())
        second = asyncio.ensure_future(cache.async_refresh())
        await asyncio.sleep(0)
        release.set()
        assert await asyncio.gather(first, second) == [True, True]
        assert fetch_mock.await_count == 1

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_snapshot(self):
        fetch = AsyncMock(
            side_effect=[{"switch": {"switch": attr("on")}}, SmartThingsApiError("x")]
        )
        cache = StatusCache(fetch, max_age=0)
        await cache.async_refresh()
        assert await cache.async_refresh() is False
        assert cache.status.value("switch", "switch") == "on"

    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self):
        cache = StatusCache(AsyncMock(side_effect=asyncio.TimeoutError), max_age=0)
        assert await cache.async_refresh() is False


class TestSmartThingsDevice:

    def test_metadata(self):
        device = SmartThingsDevice(
            make_api(), make_info("switch", "switchLevel", label="Desk")
        )
        assert device.device_id == "dev-1"
        assert device.label == "Desk"
        assert device.manufacturer == "Acme"
        assert device.model == "Acme Bulb"
        assert device.capabilities == frozenset({"switch", "switchLevel"})

    def test_no_components(self):
        device = SmartThingsDevice(make_api(), {"deviceId": "dev-2"})
        assert device.capabilities == frozenset()
        assert device.label == "dev-2"

    @pytest.mark.asyncio
    async def test_refresh_updates_status(self):
        api = make_api({"switch": {"switch": attr("on")}})
        device = SmartThingsDevice(api, make_info("switch"), status_max_age=0)
        assert await device.async_refresh_status() is True
        assert device.status.value("switch", "switch") == "on"
        api.async_get_device_status.assert_awaited_with("dev-1")

    @pytest.mark.asyncio
    async def test_refresh_failure_marks_offline(self):
        api = make_api()
        api.async_get_device_status.side_effect = SmartThingsApiError("down", 500)
        device = SmartThingsDevice(api, make_info("switch"), status_max_age=0)
        assert await device.async_refresh_status() is False
        assert device.is_online is False

    @pytest.mark.asyncio
    async def test_health(self):
        api = make_api()
        device = SmartThingsDevice(api, make_info("switch"))
        api.async_get_device_health.return_value = "OFFLINE"
        assert await device.async_update_health() is False
        api.async_get_device_health.return_value = "ONLINE"
        assert await device.async_update_health() is True

    @pytest.mark.asyncio
    async def test_health_failure_keeps_flag(self):
        api = make_api()
        api.async_get_device_health.side_effect = SmartThingsApiError("x")
        device = SmartThingsDevice(api, make_info("switch"))
        assert await device.async_update_health() is True

    @pytest.mark.asyncio
    async def test_send_command(self):
        api = make_api()
        device = SmartThingsDevice(api, make_info("switch"), status_max_age=60)
        await device.async_refresh_status()
        assert await device.async_send_command("switchLevel", "setLevel", [10]) is True
        api.async_execute_command.assert_awaited_once_with(
            "dev-1", "switchLevel", "setLevel", [10]
        )
        assert device.status_cache.is_fresh is False

    @pytest.mark.asyncio
    async def test_send_command_error(self):
        api = make_api()
        api.async_execute_command.side_effect = SmartThingsApiError("bad", 422)
        device = SmartThingsDevice(api, make_info("switch"))
        assert await device.async_send_command("switch", "on") is False

    @pytest.mark.asyncio
    async def test_send_command_timeout(self):
        api = make_api()

        async def hang(*args):
            await asyncio.sleep(10)

        api.async_execute_command.side_effect = hang
        device = SmartThingsDevice(api, make_info("switch"), command_timeout=0.01)
        assert await device.async_send_command("switch", "on") is False
