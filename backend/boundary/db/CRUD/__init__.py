"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from backend.boundary.db.CRUD import file_crud

    # Use singleton instances
    record = await file_crud.get_by_id(db, file_id)

    # Or instantiate classes directly for custom behavior
    from backend.boundary.db.CRUD import FileCRUD
    custom_crud = FileCRUD()
"""

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.file_crud import FileCRUD, file_crud

__all__ = [
    "BaseCRUD",
    "FileCRUD",
    "file_crud",
]
