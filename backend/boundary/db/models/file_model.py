"""
File record ORM model.

One row per uploaded file: who owns it, where its bytes live, and the
outcome of background processing.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Durable state for the upload → queue → worker pipeline
"""

import enum

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TimestampMixin


class FileStatus(str, enum.Enum):
    """
    File processing lifecycle states.

    UPLOADED: Bytes stored and job enqueued, awaiting a worker
    PROCESSING: A worker has picked the job up
    PROCESSED: Extraction succeeded; extracted_data holds the summary
    FAILED: Extraction failed; extracted_data holds "Error: <message>"
    """

    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    PROCESSED = "PROCESSED"
    FAILED = "FAILED"


# source status -> statuses it may move to
STATUS_TRANSITIONS: dict[FileStatus, frozenset[FileStatus]] = {
    FileStatus.UPLOADED: frozenset({FileStatus.PROCESSING}),
    FileStatus.PROCESSING: frozenset(
        {FileStatus.PROCESSING, FileStatus.PROCESSED, FileStatus.FAILED}
    ),
    FileStatus.FAILED: frozenset({FileStatus.PROCESSING}),
    FileStatus.PROCESSED: frozenset({FileStatus.PROCESSING}),
}

TERMINAL_STATUSES = frozenset({FileStatus.PROCESSED, FileStatus.FAILED})


def can_transition(current: FileStatus, target: FileStatus) -> bool:
    return target in STATUS_TRANSITIONS.get(current, frozenset())


class FileRecordModel(Base, TimestampMixin):
    """
    File record ORM model.

    owner_id and storage_path are written once at creation. status only
    moves along STATUS_TRANSITIONS and extracted_data is only written by
    the worker. storage_path is never exposed through the API.

    Attributes:
        id: Integer primary key (auto-increment)
        owner_id: ID of the authenticated user who uploaded the file
        original_filename: Client-supplied filename
        storage_path: Opaque storage handle for the bytes
        mimetype: Client-supplied content type
        size: Byte count actually stored
        title: Optional title (max 255 chars)
        description: Optional free text
        status: Lifecycle state enum
        extracted_data: Processing summary or error text
        uploaded_at: Creation timestamp (UTC)
        updated_at: Last write timestamp (UTC)
    """

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)

    storage_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        doc="Storage handle for the uploaded bytes",
    )

    mimetype: Mapped[str] = mapped_column(String(255), nullable=False)

    size: Mapped[int] = mapped_column(Integer, nullable=False)

    title: Mapped[str | None] = mapped_column(String(255), nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[FileStatus] = mapped_column(
        Enum(FileStatus, native_enum=False, length=32),
        nullable=False,
        default=FileStatus.UPLOADED,
        index=True,
    )

    extracted_data: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Digest summary on success, error text on failure",
    )

    def __repr__(self) -> str:
        return f"<FileRecordModel id={self.id} owner_id={self.owner_id} status={self.status}>"
