"""
File job producer.

Enqueues exactly one processing job per file record onto the
configured queue under the configured job name.

Dependencies: backend.boundary.queue, backend.models.job
System role: Producer side of the upload → worker pipeline
"""

import logging

from backend.boundary.queue.base import JobQueue
from backend.core.exceptions import QueueError
from backend.models.job import FileJobPayload

logger = logging.getLogger(__name__)


class FileJobProducer:
    """Publish file processing jobs."""

    def __init__(self, queue: JobQueue, job_name: str, queue_name: str = "") -> None:
        """
        Initialize producer.

        Args:
            queue: Queue backend
            job_name: Type tag every job carries (the worker checks it)
            queue_name: Logical queue name, used for logging
        """
        self.queue = queue
        self.job_name = job_name
        self.queue_name = queue_name

    async def enqueue_file(self, file_id: int) -> str:
        """
        Enqueue a processing job for a file record.

        Args:
            file_id: File record ID

        Returns:
            str: Queue-assigned job ID

        Raises:
            QueueError: The job could not be enqueued
        """
        payload = FileJobPayload(file_id=file_id).to_message()
        try:
            job_id = await self.queue.enqueue(self.job_name, payload)
        except QueueError:
            raise
        except Exception as e:
            raise QueueError(
                f"Failed to enqueue job for file {file_id}: {e}",
                {"file_id": file_id, "queue": self.queue_name},
            ) from e

        logger.info(
            f"{__name__}:enqueue_file - File {file_id} queued",
            extra={
                "file_id": file_id,
                "job_id": job_id,
                "job_name": self.job_name,
                "queue": self.queue_name,
            },
        )
        return job_id
