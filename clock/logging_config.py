"""Loguru logging configuration."""

import os
import sys

from loguru import logger


def setup_logging(level: str | None = None) -> None:
    """Configure the loguru log level.

    Falls back to the LOG_LEVEL environment variable, then WARNING, so normal
    command output stays clean.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "WARNING")

    logger.remove()  # drop the default handler
    logger.add(
        sys.stderr,
        format="<level>{time:YYYY-MM-DD HH:mm:ss} | {name}:{function}:{line} | {message}</level>",
        level=level.upper(),
        colorize=True,
        backtrace=True,
        diagnose=True,
    )
