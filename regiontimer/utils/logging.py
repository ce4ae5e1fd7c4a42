"""Logging utilities built on top of :mod:`loguru`."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

TIMER_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | "
    "<cyan>{thread.name}</cyan> | {message}"
)


def setup_logging(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    fmt: str = TIMER_FORMAT,
) -> None:
    """Configure the global loguru logger for timer output.

    Region start/stop events are logged at ``TRACE``; pass ``level="TRACE"``
    to follow them per thread. Reports from ``TimerSet.log_report`` go out at
    ``INFO`` by default.

    Args:
        log_file: Optional file path for log sink.
        level: Minimum log level (string understood by loguru).
        fmt: loguru format string shared by every sink.
    """

    logger.remove()
    logger.add(sys.stderr, level=level, format=fmt)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level=level, format=fmt, rotation="10 MB", retention="7 days")


__all__ = ["TIMER_FORMAT", "setup_logging", "logger"]
