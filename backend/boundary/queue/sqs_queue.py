"""
Amazon SQS job queue.

Implements the JobQueue contract on a standard SQS queue:

- enqueue → send_message with the job name as a message attribute
- dequeue → receive_message long poll; ApproximateReceiveCount is the attempt
- ack → delete_message
- fail (retry) → change_message_visibility to the backoff delay
- fail (final) → copy to the failed-job queue, then delete_message

boto3 is synchronous, so every call runs in a worker thread.

Dependencies: boto3
System role: Production queue backend
"""

import asyncio
import json
import logging
from collections import deque
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from backend.boundary.queue.base import FailedJob, JobQueue, QueuedJob, RetryPolicy
from backend.core.exceptions import QueueError

logger = logging.getLogger(__name__)

JOB_NAME_ATTRIBUTE = "jobName"
# SQS hard limit for ChangeMessageVisibility
MAX_VISIBILITY_TIMEOUT_SECONDS = 12 * 60 * 60


class SQSJobQueue(JobQueue):
    """SQS-backed job queue."""

    def __init__(
        self,
        queue_url: str | None = None,
        queue_name: str | None = None,
        region: str = "ap-southeast-2",
        failed_queue_url: str | None = None,
        retry_policy: RetryPolicy | None = None,
        visibility_timeout: int = 300,
        failed_retention: int = 50,
        client=None,
    ) -> None:
        """
        Initialize SQS queue.

        Args:
            queue_url: Queue URL (resolved from queue_name when omitted)
            queue_name: Queue name used to look up the URL
            region: AWS region for SQS
            failed_queue_url: Queue receiving jobs that failed for good
            retry_policy: Policy applied by fail() (default: no retry)
            visibility_timeout: Seconds a received job stays invisible
            failed_retention: Failed jobs remembered by this process
            client: Pre-built boto3 SQS client (tests inject a mock)

        Raises:
            ValueError: Neither queue_url nor queue_name given
        """
        if not queue_url and not queue_name:
            raise ValueError("SQSJobQueue requires queue_url or queue_name")
        self._queue_url = queue_url
        self._queue_name = queue_name
        self._failed_queue_url = failed_queue_url
        self.retry_policy = retry_policy or RetryPolicy.no_retry()
        self.visibility_timeout = visibility_timeout
        self._failed: deque[FailedJob] = deque(maxlen=failed_retention)
        self._sqs_client = client or boto3.client("sqs", region_name=region)

    async def _call(self, operation: str, **kwargs) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(getattr(self._sqs_client, operation), **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "%s:%s - SQS call failed: %s",
                __name__,
                operation,
                e,
                extra={"queue_url": self._queue_url},
            )
            raise QueueError(f"SQS {operation} failed: {e}", {"operation": operation}) from e

    async def queue_url(self) -> str:
        if self._queue_url is None:
            response = await self._call("get_queue_url", QueueName=self._queue_name)
            self._queue_url = response["QueueUrl"]
        return self._queue_url

    async def enqueue(self, name: str, payload: dict[str, Any]) -> str:
        response = await self._call(
            "send_message",
            QueueUrl=await self.queue_url(),
            MessageBody=json.dumps(payload),
            MessageAttributes={
                JOB_NAME_ATTRIBUTE: {"DataType": "String", "StringValue": name}
            },
        )
        return response["MessageId"]

    async def dequeue(self, wait_seconds: float | None = None) -> QueuedJob | None:
        wait = 20 if wait_seconds is None else max(0, min(int(wait_seconds), 20))
        response = await self._call(
            "receive_message",
            QueueUrl=await self.queue_url(),
            MaxNumberOfMessages=1,
            WaitTimeSeconds=wait,
            VisibilityTimeout=self.visibility_timeout,
            AttributeNames=["ApproximateReceiveCount"],
            MessageAttributeNames=["All"],
        )
        messages = response.get("Messages", [])
        if not messages:
            return None
        return self._to_job(messages[0])

    @staticmethod
    def _to_job(message: dict[str, Any]) -> QueuedJob:
        try:
            payload = json.loads(message.get("Body") or "")
        except json.JSONDecodeError:
            logger.warning(
                "%s:_to_job - Message %s has a non-JSON body",
                __name__,
                message.get("MessageId"),
            )
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        attributes = message.get("MessageAttributes", {})
        name = attributes.get(JOB_NAME_ATTRIBUTE, {}).get("StringValue", "")
        attempt = int(message.get("Attributes", {}).get("ApproximateReceiveCount", "1"))
        return QueuedJob(
            id=message["MessageId"],
            name=name,
            payload=payload,
            attempt=attempt,
            receipt=message["ReceiptHandle"],
        )

    async def ack(self, job: QueuedJob) -> None:
        await self._call(
            "delete_message",
            QueueUrl=await self.queue_url(),
            ReceiptHandle=job.receipt,
        )

    async def fail(self, job: QueuedJob, error: str, retryable: bool = True) -> bool:
        if retryable and self.retry_policy.should_retry(job.attempt):
            delay = int(self.retry_policy.delay_for(job.attempt))
            await self._call(
                "change_message_visibility",
                QueueUrl=await self.queue_url(),
                ReceiptHandle=job.receipt,
                VisibilityTimeout=min(delay, MAX_VISIBILITY_TIMEOUT_SECONDS),
            )
            logger.info(
                "%s:fail - Job %s will be retried in %ds",
                __name__,
                job.id,
                delay,
                extra={"attempt": job.attempt, "error": error},
            )
            return True

        if self._failed_queue_url:
            await self._call(
                "send_message",
                QueueUrl=self._failed_queue_url,
                MessageBody=json.dumps(
                    {
                        "jobId": job.id,
                        "jobName": job.name,
                        "payload": job.payload,
                        "attempts": job.attempt,
                        "error": error,
                    }
                ),
            )
        await self.ack(job)
        self._failed.append(
            FailedJob(
                id=job.id,
                name=job.name,
                payload=dict(job.payload),
                attempts=job.attempt,
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
