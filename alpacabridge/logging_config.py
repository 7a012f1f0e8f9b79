"""
alpacabridge Logging Configuration

Provides logging setup for applications embedding the client library:
- Console output with a consistent format
- Optional structured JSON format (machine-parseable)
- Rotating file handlers with size limits
- Per-component log level configuration

The library itself only creates loggers (logging.getLogger(__name__)); it
never installs handlers unless setup_logging() is called.

Usage:
    from alpacabridge.logging_config import setup_logging, get_logger

    setup_logging(log_level="DEBUG", log_file="alpaca.log")
    set_component_level("transport", "INFO")
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Module-level constants
ROOT_LOGGER_NAME = "alpacabridge"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# LogRecord attributes that are not user-supplied "extra" fields
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Format records as one JSON object per line, including extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, DEFAULT_DATE_FORMAT),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _level(name: str) -> int:
    return LOG_LEVELS.get(name.upper(), logging.INFO)


def setup_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str | Path] = None,
    json_format: bool = False,
) -> None:
    """Configure logging for the alpacabridge namespace.

    Replaces any handlers previously installed by this function.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file, rotated by size
        json_format: If True, emit structured JSON lines
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(_level(log_level))
    root_logger.handlers.clear()

    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(_level(log_level))
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from logging.handlers import RotatingFileHandler

        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=DEFAULT_MAX_BYTES,
            backupCount=DEFAULT_BACKUP_COUNT,
        )
        file_handler.setLevel(_level(log_level))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the alpacabridge namespace.

    Args:
        name: Logger name (typically __name__ of the calling module)
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_component_level(component: str, level: str) -> None:
    """Set log level for one component module.

    Example:
        set_component_level("transport", "DEBUG")  # Every request attempt
        set_component_level("client", "ERROR")     # Hide bulk-fetch warnings
    """
    logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}").setLevel(_level(level))
