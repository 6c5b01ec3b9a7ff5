"""
Job queue factory for selecting between in-process (dev) and SQS (prod).

Depends on QUEUE_BACKEND environment variable.

Dependencies: backend.boundary.queue, backend.configs
System role: Queue backend instantiation and selection
"""

import logging

from backend.boundary.queue.base import JobQueue, RetryPolicy
from backend.boundary.queue.memory_queue import InMemoryJobQueue
from backend.boundary.queue.sqs_queue import SQSJobQueue
from backend.configs.queue import QueueSettings

logger = logging.getLogger(__name__)


def get_job_queue(settings: QueueSettings) -> JobQueue:
    """
    Factory function to get the job queue based on configuration.

    Args:
        settings: Queue settings (backend, connection and retry policy)

    Returns:
        InMemoryJobQueue or SQSJobQueue: Configured queue instance

    Raises:
        ValueError: If QUEUE_BACKEND is invalid
    """
    backend = settings.backend.lower()
    retry_policy = RetryPolicy.from_settings(settings)

    if backend == "memory":
        logger.info(
            f"{__name__}:get_job_queue - Creating in-process queue (local dev mode)"
        )
        return InMemoryJobQueue(
            retry_policy=retry_policy,
            visibility_timeout=settings.visibility_timeout_seconds,
            failed_retention=settings.failed_retention,
        )

    elif backend == "sqs":
        logger.info(
            f"{__name__}:get_job_queue - Creating SQS queue {settings.queue_name}"
        )
        return SQSJobQueue(
            queue_url=settings.sqs_queue_url,
            queue_name=settings.queue_name,
            region=settings.sqs_region,
            failed_queue_url=settings.sqs_failed_queue_url,
            retry_policy=retry_policy,
            visibility_timeout=settings.visibility_timeout_seconds,
            failed_retention=settings.failed_retention,
        )

    else:
        raise ValueError(
            f"Invalid QUEUE_BACKEND: {backend}. Must be 'memory' or 'sqs'."
        )
