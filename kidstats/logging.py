"""Loguru-based logging for kidstats.

Library modules log with ``logging.getLogger(__name__)`` and never
configure handlers. Entry points call :func:`setup_logging` (or
:func:`configure_from_settings`), which sends stdlib records through
loguru so everything lands in one console stream and one rotating file.

Example:
    >>> from kidstats.logging import setup_logging, get_logger
    >>> setup_logging(level="DEBUG", log_dir="logs")
    >>> log = get_logger(__name__)
    >>> log.info("Recorded {} for game {}", "TWO_MADE", game_id)

Status Tags:
    >>> from kidstats.logging import SUCCESS, FAIL, WARN
    >>> log.info(f"{SUCCESS} Game ended 48-40")
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from kidstats.config import Settings

SUCCESS = "\033[92m[SUCCESS]\033[0m"
FAIL = "\033[91m[FAIL]\033[0m"
WARN = "\033[93m[WARN]\033[0m"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"
LOG_FILE_PATTERN = "kidstats_{time:YYYY-MM-DD}.log"


class InterceptHandler(logging.Handler):
    """Forwards stdlib ``logging`` records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Report the caller of the stdlib logger, not this handler
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    log_dir: str | Path = "logs",
    rotation: str = "1 day",
    retention: str = "30 days",
    serialize: bool = True,
    console: bool = True,
) -> None:
    """Install the console and file sinks and intercept stdlib logging.

    Calling it again replaces the previous configuration.

    Args:
        level: Minimum level for both sinks.
        log_dir: Directory for the rotating log file (created if missing).
        rotation: Loguru rotation rule, e.g. "1 day" or "10 MB".
        retention: How long rotated files are kept.
        serialize: Write the file sink as JSON records.
        console: Also log to stderr.
    """
    logger.remove()

    if console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / LOG_FILE_PATTERN,
        level=level,
        format=FILE_FORMAT,
        rotation=rotation,
        retention=retention,
        serialize=serialize,
        enqueue=True,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def configure_from_settings(settings: Settings, verbose: bool = False) -> None:
    """Apply :func:`setup_logging` with values from settings.

    Args:
        settings: Loaded settings.
        verbose: Force DEBUG regardless of the configured level.
    """
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_dir=settings.log_dir_obj,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        serialize=settings.log_json,
    )


def get_logger(name: str) -> Any:
    """Loguru logger bound to ``name``."""
    return logger.bind(name=name)


__all__ = [
    "FAIL",
    "SUCCESS",
    "WARN",
    "configure_from_settings",
    "get_logger",
    "logger",
    "setup_logging",
]
