"""Logging setup for the pay calculator CLI."""

import json
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

from paycalc.utils.logging_utils import _ContextFilter

STANDARD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Attributes every LogRecord has; anything else came from LogContext or extra={}
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with context fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_"):
                log_data[key] = value

        # Decimals and dates in context fields
        return json.dumps(log_data, default=str)


class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'standard' or 'json'
        log_file: Optional path of a rotating log file
        max_file_size: Rotation size in bytes
        backup_count: Number of rotated files kept
    """

    VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    VALID_FORMATS = ("standard", "json")

    def __init__(
        self,
        log_level: str = "INFO",
        log_format: str = "standard",
        log_file: Optional[str] = None,
        max_file_size: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ):
        if log_level.upper() not in self.VALID_LEVELS:
            raise ValueError(
                f"Invalid log level: {log_level}. "
                f"Must be one of {', '.join(self.VALID_LEVELS)}"
            )
        if log_format not in self.VALID_FORMATS:
            raise ValueError(
                f"Invalid log format: {log_format}. "
                f"Must be one of {', '.join(self.VALID_FORMATS)}"
            )

        self.log_level = log_level.upper()
        self.log_format = log_format
        self.log_file = log_file
        self.max_file_size = max_file_size
        self.backup_count = backup_count

    @classmethod
    def from_env(cls, log_level: Optional[str] = None) -> "LoggingConfig":
        """
        Build the configuration from LOG_LEVEL, LOG_FORMAT and LOG_FILE.

        Args:
            log_level: Level overriding LOG_LEVEL (e.g. from --verbose)
        """
        return cls(
            log_level=log_level or os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard").lower(),
            log_file=os.getenv("LOG_FILE") or None,
        )

    def create_formatter(self) -> logging.Formatter:
        if self.log_format == "json":
            return JSONFormatter()
        return logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def configure_logging(config: LoggingConfig) -> None:
    """
    Install handlers on the root logger.

    Log output goes to stderr so report output on stdout stays clean. Any
    previously installed handlers are replaced.
    """
    root_logger = logging.getLogger()
    reset_logging()
    root_logger.setLevel(getattr(logging, config.log_level))

    formatter = config.create_formatter()
    context_filter = _ContextFilter()

    handlers = [logging.StreamHandler()]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
            )
        )

    for handler in handlers:
        handler.setLevel(getattr(logging, config.log_level))
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def reset_logging() -> None:
    """Remove all root handlers and restore the default WARNING level."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.WARNING)
