"""Logging setup shared by the CLI and the API."""

import logging
from typing import Optional


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    Args:
        level: Log level name (e.g. "DEBUG"). Falls back to settings.log_level.
    """
    if level is None:
        from .config import get_settings
        level = get_settings().log_level

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
