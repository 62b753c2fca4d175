import os

server_mode = os.getenv("FLEET_MODE", "development")
"""The operational mode of the server."""

database_url = os.getenv("DATABASE_URL", "sqlite://:memory:")
"""The tortoise connection string for the fleet database."""

sentry_dsn = os.getenv("SENTRY_DSN", None)
"""The sentry DSN, exceptions are only reported when this is set."""

discount_at_return = os.getenv("FLEET_DISCOUNT_AT_RETURN", "1") not in ("0", "false", "False", "")
"""Whether the tier discount is recomputed when the rental is returned, rather than frozen at the start."""

timezone = os.getenv("FLEET_TIMEZONE", "UTC")
"""The timezone tortoise uses for datetime fields."""

model_modules = {"models": ["fleet.models"]}
"""The tortoise model modules."""
