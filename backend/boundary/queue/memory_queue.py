"""
In-process job queue.

Single-process implementation of the JobQueue contract for local
development and tests. Mirrors the broker semantics the worker relies
on: per-delivery receipts, visibility timeout redelivery, delayed
retries and a bounded failed-job store.

Dependencies: asyncio
System role: Development/test queue backend
"""

import asyncio
import itertools
import logging
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any

from backend.boundary.queue.base import FailedJob, JobQueue, QueuedJob, RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class _Message:
    id: str
    name: str
    payload: dict[str, Any]
    seq: int
    visible_at: float
    attempts: int = 0
    receipt: str | None = None


class InMemoryJobQueue(JobQueue):
    """
    asyncio-based queue with broker-like delivery semantics.

    A dequeued job stays invisible for ``visibility_timeout`` seconds;
    if neither ack nor fail arrives in that window it is delivered again
    with a new receipt and an incremented attempt count.
    """

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        visibility_timeout: float = 300.0,
        failed_retention: int = 50,
    ) -> None:
        """
        Initialize the queue.

        Args:
            retry_policy: Policy applied by fail() (default: no retry)
            visibility_timeout: Seconds before an unacknowledged job reappears
            failed_retention: Maximum failed jobs kept
        """
        self.retry_policy = retry_policy or RetryPolicy.no_retry()
        self.visibility_timeout = visibility_timeout
        self._messages: dict[str, _Message] = {}
        self._failed: deque[FailedJob] = deque(maxlen=failed_retention)
        self._seq = itertools.count()
        self._changed = asyncio.Condition()
        self._closed = False

    @staticmethod
    def _now() -> float:
        return asyncio.get_running_loop().time()

    async def enqueue(self, name: str, payload: dict[str, Any]) -> str:
        job_id = str(uuid.uuid4())
        async with self._changed:
            self._messages[job_id] = _Message(
                id=job_id,
                name=name,
                payload=dict(payload),
                seq=next(self._seq),
                visible_at=self._now(),
            )
            self._changed.notify()
        logger.debug("%s:enqueue - Job %s added", __name__, job_id, extra={"job_name": name})
        return job_id

    def _next_visible(self, now: float) -> _Message | None:
        candidates = [m for m in self._messages.values() if m.visible_at <= now]
        if not candidates:
            return None
        return min(candidates, key=lambda m: (m.visible_at, m.seq))

    def _next_wakeup(self) -> float | None:
        if not self._messages:
            return None
        return min(m.visible_at for m in self._messages.values())

    async def dequeue(self, wait_seconds: float | None = None) -> QueuedJob | None:
        deadline = None if wait_seconds is None else self._now() + wait_seconds
        async with self._changed:
            while not self._closed:
                now = self._now()
                message = self._next_visible(now)
                if message is not None:
                    message.attempts += 1
                    message.receipt = uuid.uuid4().hex
                    message.visible_at = now + self.visibility_timeout
                    return QueuedJob(
                        id=message.id,
                        name=message.name,
                        payload=dict(message.payload),
                        attempt=message.attempts,
                        receipt=message.receipt,
                    )

                timeout = None
                wakeup = self._next_wakeup()
                if wakeup is not None:
                    timeout = max(wakeup - now, 0)
                if deadline is not None:
                    remaining = deadline - now
                    if remaining <= 0:
                        return None
                    timeout = remaining if timeout is None else min(timeout, remaining)

                try:
                    await asyncio.wait_for(self._changed.wait(), timeout)
                except asyncio.TimeoutError:
                    pass
        return None

    def _current(self, job: QueuedJob) -> _Message | None:
        message = self._messages.get(job.id)
        if message is None or message.receipt != job.receipt:
            logger.warning(
                "%s - Stale delivery for job %s ignored",
                __name__,
                job.id,
                extra={"attempt": job.attempt},
            )
            return None
        return message

    async def ack(self, job: QueuedJob) -> None:
        async with self._changed:
            if self._current(job) is not None:
                del self._messages[job.id]

    async def fail(self, job: QueuedJob, error: str, retryable: bool = True) -> bool:
        async with self._changed:
            message = self._current(job)
            if message is None:
                return False

            if retryable and self.retry_policy.should_retry(message.attempts):
                delay = self.retry_policy.delay_for(message.attempts)
                message.visible_at = self._now() + delay
                message.receipt = None
                self._changed.notify()
                logger.info(
                    "%s:fail - Job %s will be retried in %.2fs",
                    __name__,
                    job.id,
                    delay,
                    extra={"attempt": message.attempts, "error": error},
                )
                return True

            del self._messages[job.id]
            self._failed.append(
                FailedJob(
                    id=message.id,
                    name=message.name,
                    payload=dict(message.payload),
                    attempts=message.attempts,
                    error=error,
                )
            )
        logger.warning(
            "%s:fail - Job %s failed after %d attempt(s)",
            __name__,
            job.id,
            job.attempt,
            extra={"error": error, "retryable": retryable},
        )
        return False

    async def failed_jobs(self) -> list[FailedJob]:
        return list(self._failed)

    async def pending_count(self) -> int:
        """Jobs not yet acked or failed (visible or in flight)."""
        return len(self._messages)

    async def close(self) -> None:
        async with self._changed:
            self._closed = True
            self._changed.notify_all()
