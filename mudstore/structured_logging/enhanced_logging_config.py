"""
Structlog-based logging configuration for mudstore.

This module wires structlog onto the standard library logging package so the
migration tool emits structured key-value (or JSON) lines on stderr and,
optionally, into a rotating log file. Sensitive values are sanitized before
any renderer sees them.
"""

# pylint: disable=too-few-public-methods  # Reason: Logging state container with focused responsibility

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory

from mudstore.structured_logging.logging_processors import redact_database_urls, sanitize_sensitive_data

# Module-level logger for internal use
# NOTE: Infrastructure files may use structlog.get_logger() directly to avoid
# circular imports during logging system initialization.
logger = structlog.get_logger(__name__)

LOG_FORMATS = ("key_value", "json")
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


class _LoggingState:
    """State container for logging initialization to avoid global statements."""

    initialized: bool = False
    signature: str | None = None
    handlers: list[logging.Handler] = []


_logging_state = _LoggingState()


def _select_renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer(default=str)
    return structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "logger", "event"])


def _install_handlers(log_level: str, log_file: str | Path | None) -> None:
    """Replace any handlers installed by a previous configuration."""
    root_logger = logging.getLogger()
    for handler in _logging_state.handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _logging_state.handlers = []

    formatter = logging.Formatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    _logging_state.handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=DEFAULT_MAX_BYTES,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        _logging_state.handlers.append(file_handler)

    for handler in _logging_state.handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def configure_structlog(
    log_level: str = "INFO",
    log_file: str | Path | None = None,
    log_format: str = "key_value",
    *,
    force_reconfigure: bool = False,
) -> None:
    """
    Configure structlog and the standard library handlers behind it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a rotating log file
        log_format: 'key_value' or 'json'
        force_reconfigure: When True, reconfigure even if the settings are unchanged
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unsupported log format: {log_format}")

    signature = json.dumps(
        {"level": log_level.upper(), "file": str(log_file) if log_file else None, "format": log_format},
        sort_keys=True,
    )
    if _logging_state.initialized and _logging_state.signature == signature and not force_reconfigure:
        logger.debug("configure_structlog skipped; logging already initialized", config_signature=signature)
        return

    _install_handlers(log_level, log_file)

    structlog.configure(
        processors=[
            # Security first - sanitize sensitive data
            sanitize_sensitive_data,
            redact_database_urls,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _select_renderer(log_format),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )

    _logging_state.initialized = True
    _logging_state.signature = signature

    get_logger("mudstore.structured_logging.setup").debug(
        "Logging configured",
        log_level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a Structlog logger with the specified name.

    This is the public API for obtaining loggers. All application code
    should use this function rather than calling structlog.get_logger()
    directly.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured Structlog logger instance
    """
    return structlog.get_logger(name)
