"""Logging configuration."""

import logging
import sys
from typing import Optional

from suggestion_lifecycle.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers and the level they are capped at
_NOISY_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn": logging.INFO,
}


def setup_logging(level: Optional[str] = None) -> int:
    """
    Configure application logging.

    Args:
        level: Level name for the ``suggestion_lifecycle`` loggers. Defaults to
            ``Settings.log_level``; unknown names fall back to INFO.

    Returns:
        The numeric level applied to the application loggers.
    """
    level_name = (level or get_settings().log_level).upper()
    app_level = logging.getLevelName(level_name)
    if not isinstance(app_level, int):
        app_level = logging.INFO

    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("suggestion_lifecycle").setLevel(app_level)

    for name, cap in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(cap)
    return app_level
