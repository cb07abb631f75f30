"""Logging setup for the auction backend.

Everything under the ``auction`` package logs through
``logging.getLogger(__name__)``; those loggers propagate to the package logger
configured here. Timestamps are ISO 8601. File output rotates by size.
"""

import logging
import logging.handlers
import os
from typing import List, Optional

PACKAGE_LOGGER = "auction"

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
ISO_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def parse_level(level: str) -> int:
    """Numeric logging level for a level name, case-insensitive."""
    name = level.strip().upper()
    if name not in LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LEVELS)}")
    return getattr(logging, name)


def _handlers(
    name: str,
    log_dir: str,
    file_logging: bool,
    console_logging: bool,
    max_bytes: int,
    backup_count: int,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, f"{name}.log"),
            maxBytes=max_bytes,
            backupCount=backup_count,
        ))
    if console_logging:
        handlers.append(logging.StreamHandler())
    return handlers


def setup_logger(
    name: str = PACKAGE_LOGGER,
    log_dir: str = "./logs",
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure and return the logger called ``name``.

    Calling it again only updates the level; handlers are attached once.

    Args:
        name: Logger name, the package logger by default
        log_dir: Directory for ``<name>.log`` when file logging is on
        level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL
        log_format: Record format, ``DEFAULT_FORMAT`` when omitted
        date_format: Timestamp format, ISO 8601 when omitted
        file_logging: Write to a rotating file in ``log_dir``
        console_logging: Write to stderr
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(level))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        log_format or DEFAULT_FORMAT,
        datefmt=date_format or ISO_DATE_FORMAT,
    )
    for handler in _handlers(name, log_dir, file_logging, console_logging, max_bytes, backup_count):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def configure_from_settings(settings) -> logging.Logger:
    """Configure the package logger from application settings."""
    return setup_logger(
        PACKAGE_LOGGER,
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.log_to_file,
    )
