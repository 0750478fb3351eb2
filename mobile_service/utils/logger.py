# mobile_service/utils/logger.py
"""
Logging for the API process, the reminder job and the setup scripts.

Everything goes through the root logger: console plus logs/<LOG_FILE>,
rotated by size. Service modules tag their lines ([BOOKING], [GUARD],
[REMINDER], ...) so one file can be grepped per concern.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from mobile_service.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# httpx logs every Resend call at INFO
QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    file_handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, settings.LOG_FILE),
        maxBytes=settings.LOG_MAX_MB * 1024 * 1024,
        backupCount=settings.LOG_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setLevel(LOG_LEVEL)
    file_handler.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(file_handler)

    if LOG_LEVEL != "DEBUG":
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; `logger = get_logger(__name__)` at import time."""
    _configure_root_logger()
    return logging.getLogger(name)
