"""
Job queue contract and retry policy.

Defines the at-least-once queue interface the producer and worker use,
the job envelope handed to consumers and the retry policy every
backend applies when a job fails.

Dependencies: backend.configs
System role: Abstraction over the message broker
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from backend.configs.queue import QueueSettings


@dataclass(frozen=True)
class RetryPolicy:
    """
    Declared retry behaviour for failed jobs.

    Attributes:
        max_attempts: Total deliveries allowed per job (1 = no retry)
        backoff: "fixed" waits delay_seconds every time; "exponential"
            doubles it after each failed attempt
        delay_seconds: Base delay before the next attempt
        max_delay_seconds: Cap applied to the computed delay
    """

    max_attempts: int = 1
    backoff: Literal["fixed", "exponential"] = "exponential"
    delay_seconds: float = 1.0
    max_delay_seconds: float = 600.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff not in ("fixed", "exponential"):
            raise ValueError(f"Unknown backoff: {self.backoff}")

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        return cls(max_attempts=1)

    @classmethod
    def from_settings(cls, settings: QueueSettings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            backoff=settings.retry_backoff,
            delay_seconds=settings.retry_delay_seconds,
            max_delay_seconds=settings.retry_max_delay_seconds,
        )

    def should_retry(self, attempt: int) -> bool:
        """True if a job that just failed its ``attempt``-th delivery gets another."""
        return attempt < self.max_attempts

    def delay_for(self, attempt: int) -> float:
        """
        Seconds to wait before redelivering a job that failed ``attempt``.

        Args:
            attempt: 1-based number of the delivery that failed

        Returns:
            float: Delay in seconds, capped at max_delay_seconds
        """
        if self.backoff == "fixed":
            delay = self.delay_seconds
        else:
            delay = self.delay_seconds * (2 ** max(attempt - 1, 0))
        return min(delay, self.max_delay_seconds)


@dataclass
class QueuedJob:
    """
    A delivered job.

    Attributes:
        id: Queue-assigned job ID
        name: Job type tag set by the producer
        payload: Decoded job data
        attempt: 1-based delivery count for this job
        receipt: Backend handle needed to ack/fail this delivery
    """

    id: str
    name: str
    payload: dict[str, Any]
    attempt: int = 1
    receipt: str | None = None


@dataclass
class FailedJob:
    """A job that exhausted its retries or failed permanently."""

    id: str
    name: str
    payload: dict[str, Any]
    attempts: int
    error: str
    failed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class JobQueue(ABC):
    """
    At-least-once job queue.

    A job may be delivered more than once (after a visibility timeout or
    a retry). Consumers ack on success or fail on error; fail applies the
    queue's RetryPolicy.
    """

    retry_policy: RetryPolicy

    @abstractmethod
    async def enqueue(self, name: str, payload: dict[str, Any]) -> str:
        """
        Add a job.

        Returns:
            str: Queue-assigned job ID

        Raises:
            QueueError: Broker rejected or was unreachable
        """

    @abstractmethod
    async def dequeue(self, wait_seconds: float | None = None) -> QueuedJob | None:
        """
        Take the next visible job, waiting up to ``wait_seconds``.

        Returns:
            QueuedJob, or None if nothing arrived in time or the queue is closed
        """

    @abstractmethod
    async def ack(self, job: QueuedJob) -> None:
        """Mark a delivery as done; the job is removed."""

    @abstractmethod
    async def fail(self, job: QueuedJob, error: str, retryable: bool = True) -> bool:
        """
        Report a failed delivery.

        Args:
            job: The delivery that failed
            error: Failure description kept with the failed job
            retryable: False for failures that can never succeed

        Returns:
            bool: True if the job will be redelivered, False if it was
            moved to the failed-job store
        """

    @abstractmethod
    async def failed_jobs(self) -> list[FailedJob]:
        """Most recent failed jobs, oldest first (bounded)."""

    async def close(self) -> None:
        """Release broker resources; pending dequeues return None."""
