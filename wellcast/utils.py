"""
Shared utilities: logging setup and timestamp formatting.
"""

import logging
from datetime import datetime, timezone
from typing import Optional


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Package-wide logger; library modules log through child loggers."""
    logger = logging.getLogger("wellcast")
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """
    UTC ISO-8601 with millisecond precision and a Z suffix.

    Parsing the result and formatting it again yields the identical string.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
