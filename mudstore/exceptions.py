"""
Exception hierarchy for mudstore.

Every failure raised by the storage layer is a MudStoreError carrying an
ErrorContext, so the CLI entry point and the migration report can say which
operation, entity and record went wrong. Configuration and IO failures abort
an operation; serialization failures are recovered per record by the
orchestrator.
"""

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from mudstore.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """
    Contextual information for error handling.

    Provides structured context for error reporting: which migration step was
    running, against which backend, and for which entity and record.
    """

    operation: str | None = None
    backend: str | None = None
    entity: str | None = None
    record_key: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "operation": self.operation,
            "backend": self.backend,
            "entity": self.entity,
            "record_key": self.record_key,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class MudStoreError(Exception):
    """
    Base exception for all mudstore errors.

    Provides structured error handling with context and metadata
    for proper error categorization and debugging.
    """

    # Level used when the error is logged at construction
    log_level = "error"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
        user_friendly: str | None = None,
    ):
        """
        Initialize mudstore error.

        Args:
            message: Technical error message
            context: Error context information
            details: Additional error details
            user_friendly: Message suitable for the console
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}
        self.user_friendly = user_friendly or message
        self.timestamp = datetime.now(UTC)

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with structured context."""
        getattr(logger, self.log_level)(
            "mudstore error occurred",
            error_type=self.__class__.__name__,
            message=self.message,
            context=self.context.to_dict(),
            details=self.details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for reports."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "user_friendly": self.user_friendly,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(MudStoreError):
    """Configuration and setup errors, e.g. a networked backend without a URL."""

    def __init__(self, message: str, context: ErrorContext | None = None, config_key: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class NotFoundError(MudStoreError):
    """An expected source file, database or table is absent."""

    log_level = "warning"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        **kwargs,
    ):
        super().__init__(message, context, **kwargs)
        self.resource_type = resource_type
        self.resource_id = resource_id
        if resource_type:
            self.details["resource_type"] = resource_type
        if resource_id:
            self.details["resource_id"] = resource_id


class SerializationError(MudStoreError):
    """A single record could not be converted between document and row shape."""

    log_level = "warning"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        entity: str | None = None,
        field: str | None = None,
        record_key: str | None = None,
        **kwargs,
    ):
        context = context or ErrorContext(entity=entity, record_key=record_key)
        super().__init__(message, context, **kwargs)
        self.entity = entity
        self.field = field
        self.record_key = record_key
        if entity:
            self.details["entity"] = entity
        if field:
            self.details["field"] = field
        if record_key:
            self.details["record_key"] = record_key


class StorageIOError(MudStoreError):
    """Filesystem or database failure while reading or writing a backend."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        operation: str = "unknown",
        path: str | None = None,
        **kwargs,
    ):
        super().__init__(message, context, **kwargs)
        self.operation = operation
        self.path = path
        self.details["operation"] = operation
        if path:
            self.details["path"] = path


def create_error_context(**kwargs) -> ErrorContext:
    """
    Create an error context with the given parameters.

    Args:
        **kwargs: Context parameters

    Returns:
        ErrorContext object
    """
    return ErrorContext(**kwargs)


def handle_exception(exc: Exception, context: ErrorContext | None = None) -> MudStoreError:
    """
    Convert a generic exception to a mudstore error.

    Args:
        exc: The original exception
        context: Error context

    Returns:
        MudStoreError instance
    """
    if isinstance(exc, MudStoreError):
        return exc

    details = {
        "original_type": exc.__class__.__name__,
        "traceback": traceback.format_exc(),
    }

    if isinstance(exc, OSError):
        return StorageIOError(str(exc), context, details=details, user_friendly="A storage operation failed")

    if isinstance(exc, (ValueError, TypeError)):
        return SerializationError(str(exc), context, details=details, user_friendly="Invalid record data")

    return MudStoreError(str(exc), context, details=details, user_friendly="An unexpected error occurred")
