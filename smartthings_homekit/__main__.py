"""Run the SmartThings HomeKit bridge from the command line."""

from __future__ import annotations

import argparse
import logging
import signal

import aiohttp
from pyhap.accessory_driver import AccessoryDriver

from .api import SmartThingsApi
from .bridge import SmartThingsBridge, async_build_bridge
from .const import CONF_ACCESS_TOKEN, CONF_PERSIST_FILE, CONF_PORT
from .util import load_config

_LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Expose SmartThings lights and light sensors to HomeKit"
    )
    parser.add_argument(
        "-c",
        "--config",
        default="smartthings_homekit.json",
        help="Path to the JSON configuration file",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    config = load_config(args.config)
    driver = AccessoryDriver(
        port=config[CONF_PORT], persist_file=config[CONF_PERSIST_FILE]
    )

    async def _async_setup() -> SmartThingsBridge:
        session = aiohttp.ClientSession()
        api = SmartThingsApi(session, config[CONF_ACCESS_TOKEN])
        return await async_build_bridge(driver, api, config, session)

    bridge = driver.loop.run_until_complete(_async_setup())
    driver.add_accessory(accessory=bridge)
    signal.signal(signal.SIGTERM, driver.signal_handler)
    _LOGGER.info("Starting %s", bridge.display_name)
    driver.start()


if __name__ == "__main__":
    main()
