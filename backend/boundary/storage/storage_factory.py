"""
Storage factory for selecting between local disk (dev) and S3 (prod).

Depends on STORAGE_BACKEND environment variable.

Dependencies: backend.boundary.storage, backend.configs
System role: Storage backend instantiation and selection
"""

import logging

from backend.boundary.storage.base import FileStorage
from backend.boundary.storage.local_storage import LocalFileStorage
from backend.boundary.storage.s3_storage import S3FileStorage
from backend.configs.storage import StorageSettings

logger = logging.getLogger(__name__)


def get_file_storage(settings: StorageSettings) -> FileStorage:
    """
    Factory function to get file storage based on configuration.

    Args:
        settings: Storage settings

    Returns:
        LocalFileStorage or S3FileStorage: Configured storage backend

    Raises:
        ValueError: If STORAGE_BACKEND is invalid
    """
    backend = settings.backend.lower()

    if backend == "local":
        logger.info(
            f"{__name__}:get_file_storage - Using local storage at {settings.upload_dest}"
        )
        return LocalFileStorage(settings.upload_dest, chunk_size=settings.chunk_size_bytes)

    elif backend == "s3":
        logger.info(
            f"{__name__}:get_file_storage - Using S3 storage bucket {settings.s3_bucket}"
        )
        return S3FileStorage(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            prefix=settings.s3_prefix,
            chunk_size=settings.chunk_size_bytes,
        )

    else:
        raise ValueError(
            f"Invalid STORAGE_BACKEND: {backend}. Must be 'local' or 's3'."
        )
