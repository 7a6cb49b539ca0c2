"""Logging setup for the bridge process.

stdout carries protocol traffic, so every handler installed here writes
to stderr.
"""

from __future__ import annotations

import logging
import sys

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "fatal")

# Mapping from CLI log level names to Python logging levels
LEVEL_NAME_TO_PYTHON: dict[str, int] = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,  # Python has no FATAL distinct from CRITICAL
}

LOGGER_NAME = "mcp_bridge"
LOG_FORMAT = "%(asctime)s %(levelname)-5s [MCP-Bridge] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_python_level(level: str) -> int:
    """
    Resolve a CLI log level name.

    Raises:
        ValueError: If the name is not one of LOG_LEVELS.
    """
    try:
        return LEVEL_NAME_TO_PYTHON[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None


def configure_logging(level: str = "info", stream=None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: One of LOG_LEVELS.
        stream: Output stream, stderr by default.

    Returns:
        The root ``mcp_bridge`` logger.
    """
    python_level = to_python_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(python_level)
    logger.propagate = False

    # Replace handlers so repeated setup doesn't duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(python_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    return logger


def trace(logger: logging.Logger, message: str) -> None:
    """Log at TRACE level."""
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, message)
