"""
S3 storage backend.

Stores uploads as objects in an S3 bucket. Incoming chunks are spooled
to a temporary file (memory first, disk past a threshold) and handed to
boto3's managed upload; reads stream the object body in chunks.

Dependencies: boto3
System role: Production storage for uploaded bytes
"""

import asyncio
import logging
import tempfile
from typing import AsyncIterable, AsyncIterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from backend.boundary.storage.base import FileStorage, StoredObject
from backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)

SPOOL_MAX_MEMORY_BYTES = 1024 * 1024


class S3FileStorage(FileStorage):
    """Store uploaded bytes in S3."""

    def __init__(
        self,
        bucket: str,
        region: str = "ap-southeast-2",
        prefix: str = "uploads/",
        chunk_size: int = 64 * 1024,
        client=None,
    ) -> None:
        """
        Initialize S3 storage.

        Args:
            bucket: S3 bucket name
            region: AWS region for S3 bucket
            prefix: Key prefix for every stored object
            chunk_size: Read size for iter_chunks
            client: Pre-built boto3 S3 client (tests inject a mock)
        """
        self._bucket = bucket
        self._region = region
        self._prefix = prefix
        self.chunk_size = chunk_size
        self._s3_client = client or boto3.client("s3", region_name=region)

    def _key(self, name: str) -> str:
        return f"{self._prefix}{name}"

    async def save(self, chunks: AsyncIterable[bytes], name: str) -> StoredObject:
        key = self._key(name)
        size = 0
        with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_MEMORY_BYTES) as spool:
            async for chunk in chunks:
                spool.write(chunk)
                size += len(chunk)
            spool.seek(0)
            try:
                await asyncio.to_thread(
                    self._s3_client.upload_fileobj, spool, self._bucket, key
                )
            except (ClientError, BotoCoreError) as e:
                raise StorageError(f"Failed to upload object to S3: {e}", key) from e

        logger.debug(
            "%s:save - Uploaded %d bytes",
            __name__,
            size,
            extra={"bucket": self._bucket, "key": key, "size": size},
        )
        return StoredObject(path=key, size=size)

    async def iter_chunks(self, path: str) -> AsyncIterator[bytes]:
        try:
            response = await asyncio.to_thread(
                self._s3_client.get_object, Bucket=self._bucket, Key=path
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise StorageError(f"File not found in S3: {path}", path) from e
            raise StorageError(f"Failed to read object from S3: {e}", path) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to read object from S3: {e}", path) from e

        body = response["Body"]
        try:
            while True:
                try:
                    chunk = await asyncio.to_thread(body.read, self.chunk_size)
                except (ClientError, BotoCoreError) as e:
                    raise StorageError(f"Failed to read object from S3: {e}", path) from e
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()

    async def delete(self, path: str) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.delete_object, Bucket=self._bucket, Key=path
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete object from S3: {e}", path) from e

    async def exists(self, path: str) -> bool:
        try:
            await asyncio.to_thread(
                self._s3_client.head_object, Bucket=self._bucket, Key=path
            )
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey"):
                return False
            raise StorageError(f"Failed to stat object in S3: {e}", path) from e
