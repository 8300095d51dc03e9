"""Logging configuration and setup for MarketChat."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from marketchat.core.config.models import LoggingConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "marketchat.log"


def setup_logging(
    level: str = "INFO",
    directory: str | Path = "logs",
    max_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure root logger with file and console handlers.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        directory: Directory for log files.
        max_size_mb: Maximum size in MB before rotation.
        backup_count: Number of backup files to keep.
    """
    log_dir = Path(directory)
    log_dir.mkdir(parents=True, exist_ok=True)
    numeric_level = getattr(logging, level.upper())

    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # httpx logs every request at INFO, including full URLs
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    logging.info(f"Logging initialized: level={level}, directory={log_dir}")


def setup_logging_from_config(config: LoggingConfig, level_override: str | None = None) -> None:
    """Configure logging from a LoggingConfig section.

    Args:
        config: Logging section of the root configuration.
        level_override: Level that replaces the configured one (e.g. DEBUG for --verbose).
    """
    setup_logging(
        level=level_override or config.level,
        directory=config.directory,
        max_size_mb=config.max_size_mb,
        backup_count=config.backup_count,
    )
