"""Structured logging configuration for ARIA."""

import logging
import sys
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Key=value log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        line = " ".join(f"{k}={v}" for k, v in log_data.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        from .config import get_settings

        if get_settings().environment == "dev":
            logger.setLevel(logging.DEBUG)
        else:
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """Log with additional key=value context fields."""
    logger.log(level, msg, extra={"extra_data": kwargs})
