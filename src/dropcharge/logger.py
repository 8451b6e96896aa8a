"""
Logging configuration for DropCharge.

One stdout handler lives on the "dropcharge" package logger; module
loggers are its children and propagate to it. Messages carry an uppercase
tag (EXTRACT, FETCH, STORE, ...) naming the pipeline stage.
"""
import logging
import sys
from typing import Optional

from .config import Config

PACKAGE_LOGGER = "dropcharge"


class _StdoutHandler(logging.StreamHandler):
    """Marker type so repeated setup reuses the package handler."""


def setup_logger(level: Optional[str] = None, format_string: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger. Safe to call more than once.

    Args:
        level: Log level name, defaults to LOG_LEVEL
        format_string: Formatter pattern, defaults to LOG_FORMAT

    Returns:
        The "dropcharge" logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    numeric_level = getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO)

    handler = next((h for h in package_logger.handlers if isinstance(h, _StdoutHandler)), None)
    if handler is None:
        handler = _StdoutHandler(sys.stdout)
        package_logger.addHandler(handler)

    handler.setFormatter(logging.Formatter(format_string or Config.LOG_FORMAT))
    package_logger.setLevel(numeric_level)
    package_logger.propagate = False

    return package_logger


logger = setup_logger()


def get_logger(name: str) -> logging.Logger:
    """Child logger of the package logger for a module name."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
