"""
Worker configuration settings.

Concurrency, redelivery handling and simulated extraction latency
for the background file processor.

Dependencies: pydantic_settings
System role: Background worker configuration
"""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkerSettings(BaseSettings):
    """Background worker configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WORKER_",
        case_sensitive=False,
        extra="ignore",
    )

    concurrency: int = Field(
        default=1,
        ge=1,
        description="Number of jobs processed concurrently per worker process",
    )
    embedded: bool = Field(
        default=False,
        description="Run a worker inside the API process (required with the memory queue)",
    )
    redelivery_policy: Literal["skip", "reprocess"] = Field(
        default="skip",
        description="What to do when a job arrives for an already PROCESSED file",
    )
    extraction_delay_min_seconds: float = Field(
        default=0.0,
        ge=0,
        description="Lower bound of simulated extraction latency",
    )
    extraction_delay_max_seconds: float = Field(
        default=0.0,
        ge=0,
        description="Upper bound of simulated extraction latency",
    )

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "WorkerSettings":
        if self.extraction_delay_max_seconds < self.extraction_delay_min_seconds:
            raise ValueError(
                "extraction_delay_max_seconds must be >= extraction_delay_min_seconds"
            )
        return self
