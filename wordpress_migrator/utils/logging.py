"""
Logging module for the WordPress content migration tool
"""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from typing import Any, Optional

from wordpress_migrator.constants import (
    ARCHIVE_DIR_NAME,
    ARCHIVE_TIMESTAMP_FORMAT,
    LOG_FILE_NAME,
)

LOGGER_NAME = "wordpress_migrator"


class EnhancedFormatter(logging.Formatter):
    """
    Formatter that switches to a detailed layout in verbose mode and appends
    the structured context passed through ``log_with_context``.
    """

    _STANDARD_ATTRS = frozenset(
        logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    ) | {"message", "asctime"}

    def __init__(
        self,
        fmt=None,
        datefmt=None,
        style="%",
        verbose=False,
        include_context=False,
    ):
        if verbose:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"
        elif not fmt:
            fmt = "%(asctime)s - %(levelname)s - %(message)s"

        super().__init__(fmt, datefmt, style)
        self.include_context = include_context

    def format(self, record):
        result = super().format(record)

        if self.include_context:
            context = {
                key: value
                for key, value in record.__dict__.items()
                if key not in self._STANDARD_ATTRS
            }
            if context:
                pairs = " ".join(f"{k}={v}" for k, v in sorted(context.items()))
                result += f" [{pairs}]"

        return result


def archive_previous_log(data_dir: str) -> Optional[str]:
    """
    Move the log of the previous invocation into the archive directory.

    Args:
        data_dir: The migrator data directory

    Returns:
        The archive path, or None if there was no previous log
    """
    log_file = os.path.join(data_dir, LOG_FILE_NAME)
    if not os.path.exists(log_file):
        return None

    archive_dir = os.path.join(data_dir, ARCHIVE_DIR_NAME)
    os.makedirs(archive_dir, exist_ok=True)

    stamp = datetime.now().strftime(ARCHIVE_TIMESTAMP_FORMAT)
    destination = os.path.join(archive_dir, f"log_{stamp}.log")
    counter = 1
    while os.path.exists(destination):
        counter += 1
        destination = os.path.join(archive_dir, f"log_{stamp}_{counter}.log")

    shutil.move(log_file, destination)
    return destination


def setup_main_log_file(data_dir: str) -> logging.FileHandler:
    """
    Set up the file handler for the run log, rotating the previous one first.

    Args:
        data_dir: The migrator data directory

    Returns:
        The file handler for the run log
    """
    os.makedirs(data_dir, exist_ok=True)
    archived = archive_previous_log(data_dir)

    log_file = os.path.join(data_dir, LOG_FILE_NAME)
    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)  # Always use DEBUG level for file handlers
    file_handler.setFormatter(
        EnhancedFormatter(
            "%(asctime)s - %(levelname)s - %(message)s", include_context=True
        )
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(file_handler)

    if archived:
        logger.debug(f"Previous log archived to: {archived}")
    logger.info(f"Log file created at: {log_file}")
    return file_handler


def setup_logger(verbose: bool = False, data_dir: Optional[str] = None) -> logging.Logger:
    """
    Set up and return the logger with appropriate formatting.

    Args:
        verbose: If True, set console handler to DEBUG level; otherwise INFO level
        data_dir: Optional data directory for the run log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Clear any existing handlers to prevent duplicate messages
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)  # Always set logger to DEBUG to capture all logs

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(EnhancedFormatter(verbose=verbose))
    logger.addHandler(console_handler)

    if data_dir:
        setup_main_log_file(data_dir)

    return logger


def log_with_context(level: int, message: str, **kwargs: Any) -> None:
    """
    Log a message with additional context information.

    Args:
        level: The logging level (e.g., logging.INFO)
        message: The log message
        **kwargs: Additional context to include in the log record
    """
    exc_info = kwargs.pop("exc_info", None)
    # Filter out None values from kwargs
    extras = {k: v for k, v in kwargs.items() if v is not None}

    logger = logging.getLogger(LOGGER_NAME)
    logger.log(level, message, extra=extras, exc_info=exc_info)


def get_logger() -> logging.Logger:
    """Get the migrator logger, creating it with defaults if needed."""
    migrator_logger = logging.getLogger(LOGGER_NAME)
    if not migrator_logger.handlers:
        migrator_logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(EnhancedFormatter())
        migrator_logger.addHandler(handler)
    return migrator_logger


# Module logger - will be properly initialized when setup_logger is called
logger = get_logger()
