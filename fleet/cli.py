"""
The entry point for the CLI tool
"""

import asyncio

import uvloop
from aiohttp import web

from fleet import logger
from fleet.app import build_app
from fleet.config import server_mode
from fleet.version import __version__, name


def run():
    """Builds the app and runs it on a uvloop event loop."""
    loop = uvloop.new_event_loop()
    loop.set_debug(server_mode in ("development", "testing"))
    asyncio.set_event_loop(loop)

    logger.info(f'Starting {name} %s!', __version__)
    web.run_app(build_app(), loop=loop)


if __name__ == '__main__':
    run()
