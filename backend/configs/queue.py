"""
Job queue configuration settings.

Manages queue backend selection, SQS connection parameters and the
retry policy applied when a job fails.

Dependencies: pydantic, pydantic_settings
System role: Async job queue configuration for file processing
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueueSettings(BaseSettings):
    """Queue backend and retry policy configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUEUE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: Literal["sqs", "memory"] = Field(
        default="sqs",
        description="Queue implementation (sqs for deployments, memory for dev/tests)",
    )
    queue_name: str = Field(
        default="file-processing-queue",
        description="Logical queue name",
    )
    job_name: str = Field(
        default="process-file-job",
        description="Job type tag attached to every enqueued job",
    )

    sqs_region: str = Field(default="ap-southeast-2", description="AWS region for SQS")
    sqs_queue_url: str | None = Field(
        default=None,
        description="SQS queue URL; resolved from queue_name when unset",
    )
    sqs_failed_queue_url: str | None = Field(
        default=None,
        description="SQS queue receiving jobs that exhausted their retries",
    )
    wait_time_seconds: int = Field(
        default=20,
        description="Long-poll wait for dequeue (SQS caps this at 20)",
    )
    visibility_timeout_seconds: int = Field(
        default=300,
        description="Seconds a dequeued job stays invisible before redelivery",
    )

    # Retry policy
    retry_max_attempts: int = Field(
        default=1,
        ge=1,
        description="Total delivery attempts per job (1 = no retry)",
    )
    retry_backoff: Literal["fixed", "exponential"] = Field(
        default="exponential",
        description="Backoff curve between attempts",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base delay before the next attempt",
    )
    retry_max_delay_seconds: float = Field(
        default=600.0,
        ge=0,
        description="Upper bound on the backoff delay",
    )
    failed_retention: int = Field(
        default=50,
        ge=0,
        description="Number of failed jobs kept for diagnostics",
    )

    @field_validator("wait_time_seconds")
    @classmethod
    def _cap_wait_time(cls, value: int) -> int:
        return max(0, min(value, 20))
