"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, TimestampMixin: Model building blocks
  - DatabaseConnection, get_async_db(): Async connection management
  - FileRecordModel, FileStatus: File record entity and lifecycle enum
  - file_crud: CRUD operation singleton

Dependencies: sqlalchemy, backend.configs
System role: Database adapter providing persistent storage for file records
"""

from backend.boundary.db.base import Base, TimestampMixin
from backend.boundary.db.connection import DatabaseConnection, get_async_db
from backend.boundary.db.models.file_model import FileRecordModel, FileStatus
from backend.boundary.db.CRUD import BaseCRUD, FileCRUD, file_crud

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Connection
    "DatabaseConnection",
    "get_async_db",
    # Models
    "FileRecordModel",
    "FileStatus",
    # CRUD
    "BaseCRUD",
    "FileCRUD",
    "file_crud",
]
