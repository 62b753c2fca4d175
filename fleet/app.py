"""
App
-----
"""

import sentry_sdk
from aiohttp import web

from fleet import logger
from fleet.config import server_mode, database_url, sentry_dsn
from fleet.service import RentalManager, EventManager, MaintenanceManager, TransitionLogger
from fleet.signals import register_signals
from fleet.version import __version__, name


def build_app(db_uri=None, *, init_database=True):
    """
    Sets up the app with its managers. The outer interface attaches
    its routes to the returned application.
    """
    app = web.Application()

    app['rental_manager'] = RentalManager()
    app['event_manager'] = EventManager()
    app['maintenance_manager'] = MaintenanceManager()
    app['transition_logger'] = TransitionLogger(app['rental_manager'], app['event_manager'],
                                                app['maintenance_manager'])
    app['database_uri'] = db_uri if db_uri is not None else database_url

    register_signals(app, init_database)

    # set up sentry exception tracking
    if server_mode != "development" and sentry_dsn is not None:
        logger.info("Starting Sentry Logging")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=server_mode,
            release=f"{name}@{__version__}"
        )

    return app
