"""
Signals
-------

Defines a number of signals that the aiohttp server uses
to set up and tear down the resources it depends on.

Each signal must accept an the ``app`` argument.
"""
from aiohttp import web
from tortoise import Tortoise, connections

from fleet import logger
from fleet.config import model_modules, timezone


async def initialize_database(app: web.Application):
    """Initializes and generates the schema for our database."""
    logger.info("Connecting to %s", app['database_uri'])
    await Tortoise.init(
        db_url=app['database_uri'],
        modules=model_modules,
        use_tz=True,
        timezone=timezone,
    )
    await Tortoise.generate_schemas(safe=True)


async def close_database_connections(app: web.Application):
    """Closes the open database connections."""
    await connections.close_all()


def register_signals(app: web.Application, init_database=True):
    """Registers all the signals at the appropriate hooks."""
    if init_database:
        app.on_startup.append(initialize_database)

    app.on_cleanup.append(close_database_connections)
