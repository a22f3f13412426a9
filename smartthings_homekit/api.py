"""Minimal SmartThings REST API client."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from .const import API_BASE, COMPONENT_MAIN
from .exceptions import SmartThingsApiError

_LOGGER = logging.getLogger(__name__)


class SmartThingsApi:
    """Talk to the SmartThings cloud on behalf of every bridged device."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        token: str,
        base_url: str = API_BASE,
    ) -> None:
        self._session = session
        self._token = token
        self._base_url = base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    async def _request(
        self, method: str, path_or_url: str, json: Any | None = None
    ) -> Any:
        url = (
            path_or_url
            if path_or_url.startswith("http")
            else f"{self._base_url}{path_or_url}"
        )
        _LOGGER.debug("%s %s payload=%s", method, url, json)
        try:
            async with self._session.request(
                method, url, headers=self._headers(), json=json
            ) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    raise SmartThingsApiError(
                        f"{method} {url} failed with {resp.status}: {text}",
                        resp.status,
                    )
                return await resp.json(content_type=None)
        except aiohttp.ClientError as err:
            raise SmartThingsApiError(f"{method} {url} failed: {err}") from err

    async def async_get_devices(self) -> list[dict[str, Any]]:
        """Return every device visible to the access token."""
        devices: list[dict[str, Any]] = []
        url: str | None = "/devices"
        while url:
            data = await self._request("GET", url)
            devices.extend(data.get("items", []))
            url = ((data.get("_links") or {}).get("next") or {}).get("href")
        _LOGGER.debug("Found %d SmartThings devices", len(devices))
        return devices

    async def async_get_device_status(self, device_id: str) -> dict[str, Any]:
        """Return the status of the main component of a device."""
        data = await self._request("GET", f"/devices/{device_id}/status")
        return (data.get("components") or {}).get(COMPONENT_MAIN, {})

    async def async_get_device_health(self, device_id: str) -> str | None:
        """Return the health state reported for a device."""
        data = await self._request("GET", f"/devices/{device_id}/health")
        return data.get("state")

    async def async_execute_command(
        self,
        device_id: str,
        capability: str,
        command: str,
        arguments: list[Any] | None = None,
    ) -> None:
        """Execute a single command on the main component of a device."""
        payload = {
            "commands": [
                {
                    "component": COMPONENT_MAIN,
                    "capability": capability,
                    "command": command,
                    "arguments": arguments or [],
                }
            ]
        }
        await self._request("POST", f"/devices/{device_id}/commands", json=payload)
