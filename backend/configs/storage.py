"""
Durable byte storage configuration.

Settings for where uploaded file bytes live (local disk or S3)
and upload size limits.

Dependencies: pydantic_settings
System role: Storage backend configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for uploaded file storage."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: Literal["local", "s3"] = Field(
        default="local",
        description="Storage implementation",
    )
    upload_dest: str = Field(
        default="./uploads",
        description="Directory for the local storage backend",
    )
    max_file_size_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Maximum accepted upload size (default 10 MiB)",
    )
    chunk_size_bytes: int = Field(
        default=64 * 1024,
        gt=0,
        description="Chunk size for streaming reads and writes",
    )

    s3_bucket: str = Field(
        default="file-processing-dev-uploads",
        description="S3 bucket for uploaded bytes",
    )
    s3_region: str = Field(
        default="ap-southeast-2",
        description="AWS region for S3 bucket",
    )
    s3_prefix: str = Field(
        default="uploads/",
        description="Key prefix for stored objects",
    )
