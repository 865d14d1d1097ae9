"""
SwachhSathi - Logging Configuration
Console logging for the API process and the command-line runner.
"""

import logging
import sys
from typing import Optional

from swachhsathi.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

# Client libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "google", "firebase_admin")


def resolve_level(level: Optional[str] = None) -> int:
    """
    Map a level name to its numeric value.

    Without an explicit level, DEBUG is used when `settings.debug` is set in
    development and `settings.log_level` otherwise. Unknown names fall back
    to INFO.
    """
    if level is None:
        if settings.debug and settings.app_env == "development":
            return logging.DEBUG
        level = settings.log_level

    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure the root handler and return the ``swachhsathi`` logger.

    Args:
        level: Log level name; see `resolve_level`
        format_string: Custom format string for log messages

    Returns:
        The package logger
    """
    log_level = resolve_level(level)

    logging.basicConfig(
        level=log_level,
        format=format_string or LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    logger = logging.getLogger("swachhsathi")
    logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, log_level))

    return logger
