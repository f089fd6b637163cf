"""Logging configuration for the album-sync application."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

CONSOLE_FORMAT = "%(asctime)s - %(location)-24s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(location)-24s - %(levelname)-8s - %(message)s"

# Libraries whose INFO/DEBUG chatter would drown album-sync's own output
NOISY_LOGGERS = ("mutagen", "markdown_it")


class LocationFormatter(logging.Formatter):
    """Formatter exposing ``file:line`` of the call site as ``%(location)s``."""

    def format(self, record: Any) -> str:
        """Format log record with combined location field."""
        record.location = f"{record.filename}:{record.lineno}"
        return super().format(record)


class ColoredFormatter(LocationFormatter):
    """Location formatter with an ANSI-colored level name."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: Any) -> str:
        """Format log record with colors."""
        levelname = record.levelname
        color = self.COLORS.get(levelname, self.RESET)
        # Pad before coloring so escape codes don't count towards the width
        record.levelname = f"{color}{levelname:<8}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(
    log_file: Path, level: int, max_file_size: int, backup_count: int
) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(
        LocationFormatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
) -> None:
    """Set up application logging.

    Replaces any handlers already installed on the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file, rotated by size
        console_output: Whether to output logs to stdout
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of rotated log files to keep
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        root_logger.addHandler(_console_handler(level))
    if log_file:
        root_logger.addHandler(
            _file_handler(Path(log_file), level, max_file_size, backup_count)
        )

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized - Level: %s", log_level)
    if log_file:
        logger.info("Log file: %s", log_file)


def configure_third_party_loggers() -> None:
    """Keep library loggers at WARNING."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
