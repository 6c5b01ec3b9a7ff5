"""
Exception hierarchy for the file processing service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.
The HTTP layer maps each kind to a status code in one place
(backend.api.error_handlers).

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class FileServiceException(Exception):
    """Base exception for all file processing service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(FileServiceException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class UnauthenticatedError(FileServiceException):
    """Raised when the caller identity is missing or invalid."""


class ForbiddenError(FileServiceException):
    """Raised when the caller does not own the requested resource."""


class NotFoundError(FileServiceException):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        resource: str,
        resource_id: Any,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details[f"{resource.lower()}_id"] = resource_id
        super().__init__(f"{resource} with ID {resource_id} not found.", details)


class StorageError(FileServiceException):
    """Raised when durable byte storage cannot be written or read."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details)


class PersistenceError(FileServiceException):
    """Raised when the relational store rejects or fails an operation."""


class InvalidStatusTransition(PersistenceError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(
        self,
        file_id: int,
        current: str,
        target: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize invalid transition error.

        Args:
            file_id: File record ID
            current: Status the record is in
            target: Status that was requested
            details: Additional context
        """
        details = details or {}
        details.update({"file_id": file_id, "current": current, "target": target})
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move file {file_id} from {current} to {target}", details
        )


class QueueError(FileServiceException):
    """Raised when a job cannot be enqueued or acknowledged."""


class ProcessingError(FileServiceException):
    """Raised by the worker when extraction or result persistence fails."""

    def __init__(
        self,
        message: str,
        file_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_id is not None:
            details["file_id"] = file_id
        self.file_id = file_id
        super().__init__(message, details)


class InvalidJobError(FileServiceException):
    """Raised when a dequeued job can never succeed (bad name, payload, or missing file)."""
