"""
Logging setup for applications embedding the permission engine.
"""

import logging

from authz.core.config import Settings, settings as default_settings


def configure_logging(settings: Settings = None) -> None:
    """Configure root logging from settings."""
    settings = settings or default_settings
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
    )
    # SQL echo is controlled by database_echo, keep the engine logger quiet otherwise
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
