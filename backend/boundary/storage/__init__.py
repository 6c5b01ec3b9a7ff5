"""
Durable byte storage for uploaded files.

Exports:
  - FileStorage, StoredObject, generate_storage_name: Contract and helpers
  - LocalFileStorage, S3FileStorage: Backends
  - get_file_storage(): Backend selection from settings
"""

from backend.boundary.storage.base import FileStorage, StoredObject, generate_storage_name
from backend.boundary.storage.local_storage import LocalFileStorage
from backend.boundary.storage.s3_storage import S3FileStorage
from backend.boundary.storage.storage_factory import get_file_storage

__all__ = [
    "FileStorage",
    "StoredObject",
    "generate_storage_name",
    "LocalFileStorage",
    "S3FileStorage",
    "get_file_storage",
]
