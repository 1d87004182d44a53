"""Logging setup for the wizard service."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from hubwizard.config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# chatty third-party loggers kept at WARNING unless debugging
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logger(
    name: str = "hubwizard",
    log_file: Optional[str] = "./logs/hubwizard.log",
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 3,
    level: int | str = logging.INFO,
) -> logging.Logger:
    """Setup console logging, plus a rotating log file, with ISO 8601 timestamps.

    Args:
        name: Logger name
        log_file: Path to log file (created if doesn't exist), None for console only
        max_bytes: Max size before rotation
        backup_count: Number of rotated files to keep
        level: Logging level, as a number or a name like "DEBUG"

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers if already configured
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure the hubwizard logger from settings."""
    logger = setup_logger("hubwizard", settings.log_file, level=settings.log_level)

    if settings.log_level != "DEBUG":
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger
