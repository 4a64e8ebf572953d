"""Loguru sink configuration."""

from __future__ import annotations

import sys

from loguru import logger

CONSOLE_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Replace loguru's default sink.

    Args:
        level: Minimum level for both sinks
        log_file: Optional path for a rotating file sink
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)
    if log_file:
        logger.add(log_file, level=level, format=FILE_FORMAT, rotation="5 MB", retention=3)
