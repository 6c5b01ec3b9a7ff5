"""
Job queue boundary.

Exports:
  - JobQueue, QueuedJob, FailedJob, RetryPolicy: Contract and envelope types
  - InMemoryJobQueue, SQSJobQueue: Backends
  - get_job_queue(): Backend selection from settings
"""

from backend.boundary.queue.base import FailedJob, JobQueue, QueuedJob, RetryPolicy
from backend.boundary.queue.memory_queue import InMemoryJobQueue
from backend.boundary.queue.queue_factory import get_job_queue
from backend.boundary.queue.sqs_queue import SQSJobQueue

__all__ = [
    "JobQueue",
    "QueuedJob",
    "FailedJob",
    "RetryPolicy",
    "InMemoryJobQueue",
    "SQSJobQueue",
    "get_job_queue",
]
