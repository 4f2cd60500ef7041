"""
Logging setup for the API process.

Modules log through ``logging.getLogger(__name__)``; this only configures
the root handler once per process.
"""

import logging

from .config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # httpx logs every request at INFO, which is noise for payment calls
    logging.getLogger("httpx").setLevel(logging.WARNING)
