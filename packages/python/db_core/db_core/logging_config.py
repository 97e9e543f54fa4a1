"""loguru setup for processes that host the idea and sketch repositories."""

import os
import sys
from typing import Optional

from loguru import logger


def configure_logging(level: Optional[str] = None) -> str:
    """Route loguru output to stderr at ``level`` (or ``LOG_LEVEL``/``LOGURU_LEVEL``)."""

    level = level or os.getenv("LOG_LEVEL") or os.getenv("LOGURU_LEVEL") or "INFO"
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.info("Logger configured at {level} level", level=level)
    return level
