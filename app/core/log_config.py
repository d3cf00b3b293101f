"""Logging setup shared by the API process and the CLI scripts."""

import logging
import os

from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"

ACCESS_LOGGER_NAME = "app.access"


def configure_logging(settings: Settings) -> None:
    """Apply the root log format/level and attach the access-log file handler if configured."""
    logging.basicConfig(level=settings.LOG_LEVEL, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger().setLevel(settings.LOG_LEVEL)

    if settings.ACCESS_LOG_FILE:
        access_logger = logging.getLogger(ACCESS_LOGGER_NAME)
        path = os.path.abspath(settings.ACCESS_LOG_FILE)
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == path
            for h in access_logger.handlers
        ):
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
            access_logger.addHandler(handler)
