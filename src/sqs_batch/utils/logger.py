"""
Module: logger.py
Description: Structured logging configuration for the batch processor.

Configures structlog for JSON output optimized for CloudWatch Logs.
Every module logs through get_logger() so batch, group and message
context shows up as structured keys.

Key Components:
- JSON output for CloudWatch compatibility
- Timestamp and log level processors
- Level filtering driven by settings.log_level
- get_logger() helper function

Dependencies: structlog, logging, datetime
"""

import logging
from datetime import datetime, timezone

import structlog

from sqs_batch.config.settings import settings


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add upper-cased log level to the event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(log_level: str = settings.log_level) -> None:
    """
    Configure structlog processors and level filtering.

    Called once at import time with the configured level. Loggers are
    cached on first use, so a later call only affects loggers that
    have not logged yet; applications changing the level must do so
    at startup, before any processing.

    Args:
        log_level: Minimum level name to emit (DEBUG, INFO, ...)
    """
    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            # Render as JSON for CloudWatch compatibility
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Delete group sent", group_size=10, queue_url=url)
        {"event": "Delete group sent", "group_size": 10, "queue_url": "...", "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)
