"""Logging setup.

stdout carries MCP JSON-RPC traffic, so every log record goes to stderr.
"""

import os
import sys

from loguru import logger

DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function} - {message}"


def setup_logging(level=None):
    """Route loguru output to stderr at ``level`` (or ``ADT_LOG_LEVEL``)."""
    level = (level or os.getenv("ADT_LOG_LEVEL") or DEFAULT_LEVEL).upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    return level
