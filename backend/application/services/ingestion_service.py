"""
Ingestion service orchestrator.

Accepts an upload: validates it, streams the bytes to durable storage,
creates the UPLOADED record and enqueues its processing job.

Failure handling:
  - Bytes are removed if the record cannot be created.
  - If enqueue fails after the record was committed, the record and its
    bytes are removed. If that compensation itself fails, the record is
    left UPLOADED with its bytes intact and requeue_stale_uploads()
    picks it up later.

Dependencies: backend.boundary.db.CRUD, backend.boundary.storage,
    backend.application.services.job_producer
System role: Entry point of the upload → queue → worker pipeline
"""

import logging
from datetime import timedelta
from typing import AsyncIterable, AsyncIterator, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.application.services.job_producer import FileJobProducer
from backend.boundary.db.CRUD.file_crud import file_crud
from backend.boundary.storage.base import FileStorage, StoredObject, generate_storage_name
from backend.core.exceptions import (
    PersistenceError,
    QueueError,
    StorageError,
    ValidationError,
)
from backend.models.file import FileUploadResponse

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255
MAX_FILENAME_LENGTH = 255
DEFAULT_MIMETYPE = "application/octet-stream"


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes:
        ...


async def iter_upload(upload: AsyncReadable, chunk_size: int) -> AsyncIterator[bytes]:
    """Yield an uploaded file's bytes in chunks (works with FastAPI UploadFile)."""
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        yield chunk


class IngestionService:
    """
    Upload orchestrator.

    One instance per request: it holds that request's database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: FileStorage,
        producer: FileJobProducer,
        max_file_size: int,
    ) -> None:
        """
        Initialize ingestion service.

        Args:
            db: AsyncSession for database operations
            storage: Durable byte storage
            producer: Job producer for the processing queue
            max_file_size: Maximum accepted upload size in bytes
        """
        self.db = db
        self.storage = storage
        self.producer = producer
        self.max_file_size = max_file_size

    def _validate(
        self,
        original_filename: str | None,
        title: str | None,
        declared_size: int | None,
    ) -> None:
        if not original_filename:
            raise ValidationError("No file was uploaded.", field="file")
        if len(original_filename) > MAX_FILENAME_LENGTH:
            raise ValidationError(
                f"File name must be at most {MAX_FILENAME_LENGTH} characters.", field="file"
            )
        if title is not None and len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"Title must be at most {MAX_TITLE_LENGTH} characters.", field="title"
            )
        if declared_size is not None and declared_size > self.max_file_size:
            raise ValidationError(
                f"File exceeds maximum size of {self.max_file_size} bytes.",
                field="file",
                details={"size": declared_size},
            )

    async def _enforce_limit(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
        received = 0
        async for chunk in chunks:
            received += len(chunk)
            if received > self.max_file_size:
                raise ValidationError(
                    f"File exceeds maximum size of {self.max_file_size} bytes.",
                    field="file",
                )
            yield chunk

    async def _store(self, chunks: AsyncIterable[bytes], original_filename: str) -> StoredObject:
        name = generate_storage_name(original_filename)
        try:
            stored = await self.storage.save(self._enforce_limit(chunks), name)
        except (ValidationError, StorageError):
            raise
        except Exception as e:
            raise StorageError(f"Failed to store uploaded file: {e}") from e

        if stored.size == 0:
            await self._discard_bytes(stored.path)
            raise ValidationError("Uploaded file is empty.", field="file")
        return stored

    async def _discard_bytes(self, path: str) -> None:
        try:
            await self.storage.delete(path)
            logger.info(f"{__name__}:_discard_bytes - Removed orphaned bytes", extra={"path": path})
        except StorageError as e:
            logger.error(
                f"{__name__}:_discard_bytes - Failed to remove orphaned bytes: {e}",
                extra={"path": path},
            )

    async def upload(
        self,
        chunks: AsyncIterable[bytes],
        original_filename: str | None,
        mimetype: str | None,
        owner_id: int,
        title: str | None = None,
        description: str | None = None,
        declared_size: int | None = None,
    ) -> FileUploadResponse:
        """
        Store an uploaded file and queue it for processing.

        Args:
            chunks: File bytes, streamed
            original_filename: Client-supplied filename
            mimetype: Client-supplied content type
            owner_id: Authenticated uploader
            title: Optional title (max 255 characters)
            description: Optional description
            declared_size: Size announced by the client, if any

        Returns:
            FileUploadResponse: New record ID, status UPLOADED and confirmation

        Raises:
            ValidationError: Missing file, empty file, name or title too long,
                or file too large
            StorageError: Bytes could not be written
            PersistenceError: Record could not be created
            QueueError: Job could not be enqueued (record rolled back)
        """
        self._validate(original_filename, title, declared_size)
        stored = await self._store(chunks, original_filename)

        logger.info(
            f"{__name__}:upload - Creating file record for {original_filename}",
            extra={"owner_id": owner_id, "size": stored.size, "mimetype": mimetype},
        )

        try:
            record = await file_crud.create_file(
                self.db,
                owner_id=owner_id,
                original_filename=original_filename,
                storage_path=stored.path,
                mimetype=mimetype or DEFAULT_MIMETYPE,
                size=stored.size,
                title=title,
                description=description,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:upload - Failed to create file record: {e}")
            await self.db.rollback()
            await self._discard_bytes(stored.path)
            raise PersistenceError(
                "Failed to save file information.",
                {"original_filename": original_filename},
            ) from e

        try:
            await self.producer.enqueue_file(record.id)
        except QueueError as e:
            logger.error(
                f"{__name__}:upload - Failed to queue file {record.id}: {e}",
                extra={"file_id": record.id},
            )
            await self._compensate(record.id, stored.path)
            raise

        return FileUploadResponse(
            id=record.id,
            status=record.status,
            original_filename=record.original_filename,
            title=record.title,
            description=record.description,
        )

    async def _compensate(self, file_id: int, path: str) -> None:
        try:
            await file_crud.delete_by_id(self.db, file_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            # bytes stay so the stale-upload sweep can still process the record
            logger.error(
                f"{__name__}:_compensate - Could not remove record {file_id}; "
                f"it stays UPLOADED until requeued: {e}",
                extra={"file_id": file_id},
            )
            return
        await self._discard_bytes(path)

    async def requeue_stale_uploads(
        self,
        older_than: timedelta,
        limit: int | None = None,
    ) -> list[int]:
        """
        Re-enqueue records that have stayed UPLOADED past a grace period.

        Recovers records whose job was lost between creation and enqueue.
        A record that already has a live job may get a second one; the
        worker tolerates duplicate deliveries.

        Args:
            older_than: Minimum age of the record
            limit: Maximum number of records to requeue

        Returns:
            list[int]: IDs successfully requeued
        """
        try:
            stale = await file_crud.get_stale_uploaded(self.db, older_than, limit)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to query stale uploads: {e}") from e

        requeued: list[int] = []
        for record in stale:
            try:
                await self.producer.enqueue_file(record.id)
            except QueueError as e:
                logger.error(
                    f"{__name__}:requeue_stale_uploads - Failed to requeue file {record.id}: {e}"
                )
                continue
            requeued.append(record.id)

        logger.info(
            f"{__name__}:requeue_stale_uploads - Requeued {len(requeued)} of {len(stale)} stale uploads"
        )
        return requeued
