"""
Plain helpers shared by test modules.

System role: Test utilities (not fixtures)
"""

from typing import AsyncIterator


async def byte_stream(data: bytes, chunk_size: int = 4) -> AsyncIterator[bytes]:
    """Yield ``data`` in fixed-size chunks."""
    for start in range(0, len(data), chunk_size):
        yield data[start : start + chunk_size]

JOB_NAME = "process-file-job"
QUEUE_NAME = "file-processing-queue"
TEST_JWT_SECRET = "test-secret-with-at-least-32-characters!"
MAX_FILE_SIZE = 1024
