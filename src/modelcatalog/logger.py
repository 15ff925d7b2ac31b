"""
Logging configuration for the model catalog.
"""
import logging
import re
import sys
from typing import Optional

from .config import Config

_CACHE_PATTERN = re.compile(r"cache", re.IGNORECASE)

_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[34m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
    "CACHE": "\033[90m",
}
_RESET = "\033[0m"


class CacheAwareFormatter(logging.Formatter):
    """
    Formatter that tags cache traffic separately from ordinary log levels.

    Any record whose message mentions the cache is shown with the level
    name ``CACHE`` so hits and misses stand out from fetch noise. With
    ``color=True`` the level tag is wrapped in ANSI color codes.
    """

    def __init__(self, fmt: Optional[str] = None, *, color: bool = False) -> None:
        super().__init__(fmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        tag = "CACHE" if _CACHE_PATTERN.search(record.getMessage()) else levelname
        if self.color:
            record.levelname = f"{_COLORS.get(tag, '')}{tag}{_RESET}"
        else:
            record.levelname = tag
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logger(
    name: str,
    level: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    level = level or Config.LOG_LEVEL
    format_string = format_string or Config.LOG_FORMAT

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(CacheAwareFormatter(format_string, color=Config.LOG_COLOR))

    logger.addHandler(handler)

    # Package loggers below are children of this one; only the root
    # package logger owns a handler.
    logger.propagate = False

    return logger


# Create default logger for the package
logger = setup_logger("modelcatalog")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Child loggers propagate to the package logger configured above, so
    they share its handler and level.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    if name == "modelcatalog" or name.startswith("modelcatalog."):
        return logging.getLogger(name)
    return logging.getLogger(f"modelcatalog.{name}")
