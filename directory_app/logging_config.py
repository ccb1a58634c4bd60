"""
Logging setup for the link directory.

Modules log through ``logging.getLogger(__name__)``; this only installs the
root handler and level once at startup.
"""

import logging

from directory_app.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure root logging from settings (idempotent)."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
