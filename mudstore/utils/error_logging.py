"""
Error logging utilities for mudstore.

This module provides standardized error logging functions that ensure
consistent error handling and logging across the storage layer. Third-party
failures (filesystem, JSON parsing, SQLAlchemy) are converted into the
mudstore error taxonomy here.
"""

import json
import traceback
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from mudstore.exceptions import (
    ErrorContext,
    MudStoreError,
    SerializationError,
    StorageIOError,
    create_error_context,
)
from mudstore.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

# Third-party exception mapping, checked in order (most specific first)
THIRD_PARTY_EXCEPTION_MAPPING: tuple[tuple[type[BaseException], type[MudStoreError]], ...] = (
    (json.JSONDecodeError, StorageIOError),
    (SQLAlchemyError, StorageIOError),
    (OSError, StorageIOError),
    (UnicodeDecodeError, StorageIOError),
    (ValueError, SerializationError),
    (TypeError, SerializationError),
)


def log_and_raise(
    exception_class: type[MudStoreError],
    message: str,
    context: ErrorContext | None = None,
    details: dict[str, Any] | None = None,
    user_friendly: str | None = None,
    logger_name: str | None = None,
    **error_kwargs: Any,
) -> None:
    """
    Log an error and raise a mudstore exception.

    Args:
        exception_class: The mudstore exception class to raise
        message: Technical error message
        context: Error context information
        details: Additional error details
        user_friendly: Message suitable for the console
        logger_name: Specific logger name to use (defaults to current module)
        **error_kwargs: Class-specific arguments such as config_key or path

    Raises:
        The specified mudstore exception
    """
    error_logger = get_logger(logger_name) if logger_name else logger

    if context is None:
        context = create_error_context()

    error_logger.error(
        f"Error logged and exception raised: {message}",
        error_type=exception_class.__name__,
        details=details or {},
        user_friendly=user_friendly,
    )

    raise exception_class(
        message,
        context,
        details=details,
        user_friendly=user_friendly,
        **error_kwargs,
    )


def wrap_third_party_exception(
    exc: Exception,
    context: ErrorContext | None = None,
    operation: str = "unknown",
    path: str | None = None,
    logger_name: str | None = None,
) -> MudStoreError:
    """
    Wrap a third-party exception in a mudstore error.

    Args:
        exc: The original exception
        context: Error context information
        operation: Storage operation that failed (read, write, upsert, ...)
        path: File path or table the operation targeted
        logger_name: Specific logger name to use (defaults to current module)

    Returns:
        MudStoreError instance
    """
    if isinstance(exc, MudStoreError):
        return exc

    error_logger = get_logger(logger_name) if logger_name else logger

    error_class: type[MudStoreError] = MudStoreError
    for third_party_class, mapped_class in THIRD_PARTY_EXCEPTION_MAPPING:
        if isinstance(exc, third_party_class):
            error_class = mapped_class
            break
    else:
        error_logger.warning(
            "Unmapped third-party exception",
            original_type=exc.__class__.__name__,
            original_message=str(exc),
        )

    if context is None:
        context = create_error_context(operation=operation)

    details = {
        "original_type": f"{exc.__class__.__module__}.{exc.__class__.__name__}",
        "original_message": str(exc),
        "traceback": traceback.format_exc(),
    }

    error_logger.info(
        "Third-party exception wrapped",
        original_type=details["original_type"],
        mudstore_type=error_class.__name__,
        context=context.to_dict(),
    )

    target = f" ({path})" if path else ""
    if error_class is StorageIOError:
        return StorageIOError(
            f"{operation} failed{target}: {exc}",
            context,
            operation=operation,
            path=path,
            details=details,
        )
    if error_class is SerializationError:
        return SerializationError(
            f"{operation} failed{target}: {exc}",
            context,
            entity=context.entity,
            record_key=context.record_key,
            details=details,
        )
    return MudStoreError(f"{operation} failed{target}: {exc}", context, details=details)
