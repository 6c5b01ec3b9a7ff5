"""
Core business logic module.

Contains the exception hierarchy and the content extraction step run
by the worker. No I/O frameworks are imported here.
"""

from backend.core.exceptions import (
    FileServiceException,
    ForbiddenError,
    InvalidJobError,
    InvalidStatusTransition,
    NotFoundError,
    PersistenceError,
    ProcessingError,
    QueueError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)
from backend.core.extraction import ExtractionResult, Extractor, Md5DigestExtractor

__all__ = [
    # Exceptions
    "FileServiceException",
    "ValidationError",
    "UnauthenticatedError",
    "ForbiddenError",
    "NotFoundError",
    "StorageError",
    "PersistenceError",
    "InvalidStatusTransition",
    "QueueError",
    "ProcessingError",
    "InvalidJobError",
    # Extraction
    "Extractor",
    "ExtractionResult",
    "Md5DigestExtractor",
]
