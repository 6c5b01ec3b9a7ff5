"""
File processing worker.

Consumes file jobs and drives each record through
UPLOADED → PROCESSING → PROCESSED | FAILED:

1. Reject jobs with the wrong name or a malformed payload (no retry)
2. Load the record; a missing record fails the job (no retry)
3. Skip records already PROCESSED unless redelivery policy is "reprocess"
4. Mark PROCESSING and commit
5. Stream the stored bytes through the extractor
6. Mark PROCESSED with the summary, or FAILED with "Error: <message>"

Processing failures are re-raised as ProcessingError so the queue's
retry policy decides whether the job is delivered again.

Dependencies: sqlalchemy, backend.boundary, backend.core
System role: Consumer side of the upload → worker pipeline
"""

import asyncio
import logging
from typing import Literal

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.CRUD.file_crud import file_crud
from backend.boundary.db.models.file_model import FileStatus
from backend.boundary.queue.base import JobQueue, QueuedJob
from backend.boundary.storage.base import FileStorage
from backend.core.exceptions import (
    FileServiceException,
    InvalidJobError,
    InvalidStatusTransition,
    ProcessingError,
    QueueError,
)
from backend.configs.settings import Settings
from backend.core.extraction import Extractor, Md5DigestExtractor
from backend.models.job import FileJobPayload
from backend.observability.correlation import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

ERROR_MESSAGE_LIMIT = 250
QUEUE_ERROR_BACKOFF_SECONDS = 5.0

JobOutcome = Literal["processed", "skipped"]


def failure_text(error: BaseException) -> str:
    """Text stored in extracted_data for a failed record."""
    message = error.message if isinstance(error, FileServiceException) else str(error)
    message = message or type(error).__name__
    return f"Error: {message[:ERROR_MESSAGE_LIMIT]}"


class FileWorker:
    """
    Background file processor.

    Attributes:
        job_name: Only jobs carrying this name are processed
        redelivery_policy: "skip" acknowledges jobs for PROCESSED records
            without work; "reprocess" runs them again
        concurrency: Number of consumer loops run by run()
        wait_seconds: Long-poll wait per dequeue
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        storage: FileStorage,
        queue: JobQueue,
        extractor: Extractor,
        job_name: str,
        redelivery_policy: Literal["skip", "reprocess"] = "skip",
        concurrency: int = 1,
        wait_seconds: float = 20,
    ) -> None:
        self.session_factory = session_factory
        self.storage = storage
        self.queue = queue
        self.extractor = extractor
        self.job_name = job_name
        self.redelivery_policy = redelivery_policy
        self.concurrency = concurrency
        self.wait_seconds = wait_seconds
        self._stop = asyncio.Event()

    def _parse(self, job: QueuedJob) -> int:
        if job.name != self.job_name:
            logger.warning(
                f"{__name__}:_parse - Job {job.id} has name '{job.name}', "
                f"expected '{self.job_name}'",
            )
            raise InvalidJobError(
                f"Unexpected job name '{job.name}'",
                {"job_id": job.id, "expected": self.job_name},
            )
        try:
            return FileJobPayload.model_validate(job.payload).file_id
        except PydanticValidationError as e:
            raise InvalidJobError(
                f"Malformed job payload: {job.payload!r}", {"job_id": job.id}
            ) from e

    async def process_job(self, job: QueuedJob) -> JobOutcome:
        """
        Process one delivery.

        Args:
            job: Dequeued job

        Returns:
            "processed" or "skipped"

        Raises:
            InvalidJobError: The job can never succeed
            ProcessingError: Processing failed; record marked FAILED where possible
        """
        file_id = self._parse(job)
        logger.info(
            f"{__name__}:process_job - Processing file {file_id}",
            extra={"job_id": job.id, "attempt": job.attempt},
        )

        async with self.session_factory() as db:
            try:
                record = await file_crud.get_by_id(db, file_id)
            except SQLAlchemyError as e:
                raise ProcessingError(f"Failed to load file record: {e}", file_id) from e

            if record is None:
                logger.error(
                    f"{__name__}:process_job - File {file_id} not found for job {job.id}"
                )
                raise InvalidJobError(
                    f"File with ID {file_id} not found.", {"file_id": file_id}
                )

            if record.status == FileStatus.PROCESSED and self.redelivery_policy == "skip":
                logger.info(
                    f"{__name__}:process_job - File {file_id} already processed; skipping",
                    extra={"job_id": job.id},
                )
                return "skipped"

            try:
                await file_crud.transition_status(db, file_id, FileStatus.PROCESSING)
                await db.commit()
            except (SQLAlchemyError, InvalidStatusTransition) as e:
                await db.rollback()
                raise ProcessingError(
                    f"Failed to mark file as processing: {e}", file_id
                ) from e

            try:
                result = await self.extractor.extract(
                    self.storage.iter_chunks(record.storage_path),
                    record.original_filename,
                    record.size,
                )
                await file_crud.transition_status(
                    db, file_id, FileStatus.PROCESSED, extracted_data=result.summary
                )
                await db.commit()
            except Exception as e:
                logger.error(
                    f"{__name__}:process_job - Failed to process file {file_id}: {e}",
                    extra={"job_id": job.id, "attempt": job.attempt},
                )
                await db.rollback()
                await self._mark_failed(db, file_id, e)
                message = e.message if isinstance(e, FileServiceException) else str(e)
                raise ProcessingError(message or type(e).__name__, file_id) from e

        logger.info(
            f"{__name__}:process_job - File {file_id} processed",
            extra={"job_id": job.id, "extracted_data": result.summary[:100]},
        )
        return "processed"

    async def _mark_failed(self, db: AsyncSession, file_id: int, error: BaseException) -> None:
        try:
            await file_crud.transition_status(
                db, file_id, FileStatus.FAILED, extracted_data=failure_text(error)
            )
            await db.commit()
        except (SQLAlchemyError, InvalidStatusTransition) as e:
            await db.rollback()
            logger.error(
                f"{__name__}:_mark_failed - Could not mark file {file_id} as FAILED: {e}"
            )

    async def handle(self, job: QueuedJob) -> None:
        """
        Process one delivery and report the outcome to the queue.

        Args:
            job: Dequeued job
        """
        set_correlation_id(job.id)
        try:
            try:
                await self.process_job(job)
            except InvalidJobError as e:
                await self.queue.fail(job, e.message, retryable=False)
            except ProcessingError as e:
                await self.queue.fail(job, e.message, retryable=True)
            except Exception as e:
                logger.exception(f"{__name__}:handle - Unexpected error for job {job.id}")
                await self.queue.fail(job, str(e) or type(e).__name__, retryable=True)
            else:
                await self.queue.ack(job)
        except QueueError as e:
            # delivery becomes visible again after the visibility timeout
            logger.error(f"{__name__}:handle - Could not report job {job.id}: {e}")
        finally:
            clear_correlation_id()

    async def drain(self) -> int:
        """
        Handle jobs until none is immediately available.

        Returns:
            int: Number of deliveries handled
        """
        handled = 0
        while True:
            job = await self.queue.dequeue(wait_seconds=0)
            if job is None:
                return handled
            await self.handle(job)
            handled += 1

    async def _consume(self, consumer: int) -> None:
        while not self._stop.is_set():
            try:
                job = await self.queue.dequeue(self.wait_seconds)
            except QueueError as e:
                logger.error(f"{__name__}:_consume - Dequeue failed on consumer {consumer}: {e}")
                await asyncio.sleep(QUEUE_ERROR_BACKOFF_SECONDS)
                continue
            if job is not None:
                await self.handle(job)

    async def run(self) -> None:
        """Run consumer loops until stop() is called."""
        self._stop.clear()
        logger.info(
            f"{__name__}:run - Worker started",
            extra={"concurrency": self.concurrency, "job_name": self.job_name},
        )
        await asyncio.gather(*(self._consume(i) for i in range(self.concurrency)))
        logger.info(f"{__name__}:run - Worker stopped")

    def stop(self) -> None:
        """Ask consumer loops to exit after their current job."""
        self._stop.set()


def build_file_worker(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    storage: FileStorage,
    queue: JobQueue,
) -> FileWorker:
    """
    Assemble a FileWorker from application settings.

    Args:
        settings: Application settings
        session_factory: Session factory of a connected DatabaseConnection
        storage: Storage backend holding the uploaded bytes
        queue: Queue backend the API enqueues to

    Returns:
        FileWorker: Ready to run()
    """
    return FileWorker(
        session_factory=session_factory,
        storage=storage,
        queue=queue,
        extractor=Md5DigestExtractor(
            min_delay=settings.worker.extraction_delay_min_seconds,
            max_delay=settings.worker.extraction_delay_max_seconds,
        ),
        job_name=settings.queue.job_name,
        redelivery_policy=settings.worker.redelivery_policy,
        concurrency=settings.worker.concurrency,
        wait_seconds=settings.queue.wait_time_seconds,
    )
