"""
File domain models and schemas.

Request/response schemas for upload, status lookup and listing.
The storage path is deliberately absent from every response model.

Dependencies: pydantic
System role: File API contracts
"""

from datetime import datetime

from pydantic import Field, field_validator

from backend.boundary.db.base import as_utc
from backend.boundary.db.models.file_model import FileStatus
from backend.models.common import CamelModel, PaginatedResponse

UPLOAD_QUEUED_MESSAGE = "File uploaded successfully and queued for processing."


class FileRecordResponse(CamelModel):
    """Response schema for a single file record."""

    id: int
    owner_id: int
    original_filename: str
    mimetype: str
    size: int
    title: str | None = None
    description: str | None = None
    status: FileStatus
    extracted_data: str | None = None
    uploaded_at: datetime
    updated_at: datetime

    @field_validator("uploaded_at", "updated_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class FileUploadResponse(CamelModel):
    """Response schema for an accepted upload."""

    id: int
    status: FileStatus
    original_filename: str
    title: str | None = None
    description: str | None = None
    message: str = Field(default=UPLOAD_QUEUED_MESSAGE)


FileListResponse = PaginatedResponse[FileRecordResponse]
