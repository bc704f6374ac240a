"""
Logging configuration shared by the API, the scheduler and the scripts
"""

import logging
import sys
from typing import Optional
from core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every statement or connection at INFO/DEBUG
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "apscheduler",
    "multipart",
)


def setup_logging(level: Optional[str] = None):
    """
    Configure the root logger once for the process.

    Args:
        level: Overrides LOG_LEVEL (e.g. "DEBUG" from a --verbose flag)
    """
    name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.getLogger().setLevel(log_level)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured at {name} level")
