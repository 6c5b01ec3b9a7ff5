"""
Database models package.

Exports:
  - FileRecordModel, FileStatus: File record ORM model and status enum
  - STATUS_TRANSITIONS, TERMINAL_STATUSES, can_transition: State machine table

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Database model definitions for domain entities
"""

from backend.boundary.db.models.file_model import (
    STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    FileRecordModel,
    FileStatus,
    can_transition,
)

__all__ = [
    "FileRecordModel",
    "FileStatus",
    "STATUS_TRANSITIONS",
    "TERMINAL_STATUSES",
    "can_transition",
]
