"""Loguru setup for hosts that embed the worker."""

import os
import sys
from typing import Any

from loguru import logger

DEFAULT_FORMAT = "<level>{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {message}</level>"


def setup_logging(level: str | None = None, sink: Any = None, fmt: str = DEFAULT_FORMAT) -> int:
    """Replace loguru's handlers with a single sink and return its handler id.

    ``level`` falls back to the ``LOG_LEVEL`` environment variable, then INFO.
    ``sink`` defaults to the current ``sys.stderr``.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")

    logger.remove()
    return logger.add(
        sink if sink is not None else sys.stderr,
        format=fmt,
        level=level.upper(),
        colorize=False,
        backtrace=True,
        diagnose=False,
    )
