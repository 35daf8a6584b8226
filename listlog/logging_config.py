"""
Structured logging configuration for listlog.

Provides JSON-formatted logs with list_id support so that polling and sync
activity for several lists can be told apart.

Environment Variables:
    LISTLOG_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    LISTLOG_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from listlog.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, list_id="a1B2c3")
    logger.info("Loaded changelog", extra={"events": 12})
"""

import logging
import os
import sys
from typing import Any, Optional

from pythonjsonlogger.json import JsonFormatter

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ListIdFilter(logging.Filter):
    """
    Logging filter that adds list_id to all log records.

    Ensures all logs have a list_id field, even if not set via LoggerAdapter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "list_id"):
            record.list_id = "-"  # type: ignore
        return True


def setup_logging(default_level: str = "INFO") -> None:
    """
    Configure root logger with structured logging.

    Reads configuration from environment variables:
    - LISTLOG_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: default_level)
    - LISTLOG_LOG_FORMAT: json, text (default: json)

    Logs go to stderr so command output on stdout stays parseable.
    """
    level = LEVELS.get(os.getenv("LISTLOG_LOG_LEVEL", default_level).upper(), logging.INFO)
    log_format = os.getenv("LISTLOG_LOG_FORMAT", "json").lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(list_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s [list_id=%(list_id)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    # Handler-level so records from child loggers get the field too.
    handler.addFilter(ListIdFilter())
    root_logger.addHandler(handler)


def get_logger(name: str, list_id: Optional[Any] = None) -> logging.LoggerAdapter:
    """
    Get a logger tagged with a list id.

    Args:
        name: Logger name (typically __name__)
        list_id: Id of the list the caller works on

    Returns:
        LoggerAdapter with list_id in extra fields
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"list_id": "-" if list_id is None else str(list_id)})
