"""
Unit tests for SQSJobQueue with a mocked boto3 client.

System role: Verification of the SQS wire mapping
"""

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from backend.boundary.queue.base import QueuedJob, RetryPolicy
from backend.boundary.queue.sqs_queue import JOB_NAME_ATTRIBUTE, SQSJobQueue
from backend.core.exceptions import QueueError

QUEUE_URL = "https://sqs.ap-southeast-2.amazonaws.com/123/file-processing-queue"
FAILED_URL = "https://sqs.ap-southeast-2.amazonaws.com/123/file-processing-failed"


def _message(body: str, receive_count: str = "1", name: str = "process-file-job") -> dict:
    return {
        "MessageId": "msg-1",
        "ReceiptHandle": "receipt-1",
        "Body": body,
        "Attributes": {"ApproximateReceiveCount": receive_count},
        "MessageAttributes": {JOB_NAME_ATTRIBUTE: {"DataType": "String", "StringValue": name}},
    }


@pytest.fixture
def sqs_client() -> MagicMock:
    client = MagicMock()
    client.send_message.return_value = {"MessageId": "msg-1"}
    client.receive_message.return_value = {}
    return client


def _job(attempt: int = 1) -> QueuedJob:
    return QueuedJob(
        id="msg-1",
        name="process-file-job",
        payload={"fileId": 3},
        attempt=attempt,
        receipt="receipt-1",
    )


class TestSQSJobQueue:
    """Test suite for SQSJobQueue."""

    def test_init_should_require_url_or_name(self, sqs_client) -> None:
        with pytest.raises(ValueError):
            SQSJobQueue(client=sqs_client)

    async def test_enqueue_should_send_json_body_and_job_name(self, sqs_client) -> None:
        """Test the payload is JSON and the job name rides as a message attribute."""
        # Arrange
        queue = SQSJobQueue(queue_url=QUEUE_URL, client=sqs_client)

        # Act
        job_id = await queue.enqueue("process-file-job", {"fileId": 3})

        # Assert
        assert job_id == "msg-1"
        kwargs = sqs_client.send_message.call_args.kwargs
        assert kwargs["QueueUrl"] == QUEUE_URL
        assert json.loads(kwargs["MessageBody"]) == {"fileId": 3}
        assert kwargs["MessageAttributes"][JOB_NAME_ATTRIBUTE]["StringValue"] == "process-file-job"

    async def test_queue_url_should_be_resolved_from_name_once(self, sqs_client) -> None:
        # Arrange
        sqs_client.get_queue_url.return_value = {"QueueUrl": QUEUE_URL}
        queue = SQSJobQueue(queue_name="file-processing-queue", client=sqs_client)

        # Act
        await queue.enqueue("process-file-job", {"fileId": 1})
        await queue.enqueue("process-file-job", {"fileId": 2})

        # Assert
        sqs_client.get_queue_url.assert_called_once_with(QueueName="file-processing-queue")
        assert sqs_client.send_message.call_args.kwargs["QueueUrl"] == QUEUE_URL

    async def test_dequeue_should_map_message_to_job(self, sqs_client) -> None:
        """Test ApproximateReceiveCount becomes the attempt number."""
        # Arrange
        sqs_client.receive_message.return_value = {
            "Messages": [_message(json.dumps({"fileId": 3}), receive_count="2")]
        }
        queue = SQSJobQueue(queue_url=QUEUE_URL, client=sqs_client)

        # Act
        job = await queue.dequeue(wait_seconds=5)

        # Assert
        assert job == QueuedJob(
            id="msg-1",
            name="process-file-job",
            payload={"fileId": 3},
            attempt=2,
            receipt="receipt-1",
        )
        kwargs = sqs_client.receive_message.call_args.kwargs
        assert kwargs["WaitTimeSeconds"] == 5
        assert kwargs["MaxNumberOfMessages"] == 1

    async def test_dequeue_should_return_none_when_empty(self, sqs_client) -> None:
        queue = SQSJobQueue(queue_url=QUEUE_URL, client=sqs_client)

        assert await queue.dequeue(wait_seconds=0) is None

    async def test_dequeue_should_tolerate_non_json_body(self, sqs_client) -> None:
        """Test a garbage body yields an empty payload for the worker to reject."""
        sqs_client.receive_message.return_value = {"Messages": [_message("not json")]}
        queue = SQSJobQueue(queue_url=QUEUE_URL, client=sqs_client)

        job = await queue.dequeue(wait_seconds=0)

        assert job.payload == {}

    async def test_ack_should_delete_message(self, sqs_client) -> None:
        queue = SQSJobQueue(queue_url=QUEUE_URL, client=sqs_client)

        await queue.ack(_job())

        sqs_client.delete_message.assert_called_once_with(
            QueueUrl=QUEUE_URL, ReceiptHandle="receipt-1"
        )

    async def test_retryable_fail_should_change_visibility(self, sqs_client) -> None:
        """Test a retry resets visibility to the backoff delay instead of deleting."""
        # Arrange
        policy = RetryPolicy(max_attempts=3, backoff="exponential", delay_seconds=10)
        queue = SQSJobQueue(queue_url=QUEUE_URL, retry_policy=policy, client=sqs_client)

        # Act
        will_retry = await queue.fail(_job(attempt=2), "transient")

        # Assert
        assert will_retry is True
        sqs_client.change_message_visibility.assert_called_once_with(
            QueueUrl=QUEUE_URL, ReceiptHandle="receipt-1", VisibilityTimeout=20
        )
        sqs_client.delete_message.assert_not_called()

    async def test_final_fail_should_forward_to_failed_queue_and_delete(self, sqs_client) -> None:
        """Test an exhausted job is copied to the failed queue then removed."""
        # Arrange
        queue = SQSJobQueue(
            queue_url=QUEUE_URL,
            failed_queue_url=FAILED_URL,
            retry_policy=RetryPolicy(max_attempts=2, delay_seconds=0),
            client=sqs_client,
        )

        # Act
        will_retry = await queue.fail(_job(attempt=2), "still broken")

        # Assert
        assert will_retry is False
        kwargs = sqs_client.send_message.call_args.kwargs
        assert kwargs["QueueUrl"] == FAILED_URL
        assert json.loads(kwargs["MessageBody"])["error"] == "still broken"
        sqs_client.delete_message.assert_called_once()
        failed = await queue.failed_jobs()
        assert failed[0].attempts == 2

    async def test_client_error_should_become_queue_error(self, sqs_client) -> None:
        # Arrange
        sqs_client.send_message.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "SendMessage"
        )
        queue = SQSJobQueue(queue_url=QUEUE_URL, client=sqs_client)

        # Act & Assert
        with pytest.raises(QueueError):
            await queue.enqueue("process-file-job", {"fileId": 1})
