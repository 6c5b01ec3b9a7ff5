"""
Content extraction step.

The worker hands each file's byte stream to an Extractor and stores the
returned summary. The shipped extractor computes an MD5 digest; other
extractors can be plugged in without touching the worker.

Dependencies: hashlib (stdlib)
System role: Pluggable processing step of the file pipeline
"""

import asyncio
import hashlib
import logging
import random
from dataclasses import dataclass
from typing import AsyncIterable, Protocol

logger = logging.getLogger(__name__)

SUMMARY_FILENAME_LIMIT = 50


@dataclass(frozen=True)
class ExtractionResult:
    """Output of an extractor."""

    digest: str
    size: int
    summary: str


class Extractor(Protocol):
    """Anything that turns a byte stream into an ExtractionResult."""

    async def extract(
        self,
        chunks: AsyncIterable[bytes],
        original_filename: str,
        declared_size: int,
    ) -> ExtractionResult:
        ...


def format_summary(digest: str, size: int, original_filename: str) -> str:
    """Human-readable summary stored as the record's extracted data."""
    return (
        f"MD5 Checksum: {digest}, Size: {size} bytes, "
        f"Original: {original_filename[:SUMMARY_FILENAME_LIMIT]}"
    )


class Md5DigestExtractor:
    """
    MD5 digest extractor.

    The digest depends only on the bytes, not on how they were chunked.
    An optional random delay between ``min_delay`` and ``max_delay``
    seconds stands in for real extraction cost.
    """

    def __init__(self, min_delay: float = 0.0, max_delay: float = 0.0) -> None:
        if max_delay < min_delay:
            raise ValueError("max_delay must be >= min_delay")
        self.min_delay = min_delay
        self.max_delay = max_delay

    async def extract(
        self,
        chunks: AsyncIterable[bytes],
        original_filename: str,
        declared_size: int,
    ) -> ExtractionResult:
        """
        Digest a byte stream.

        Args:
            chunks: File bytes in any chunking
            original_filename: Client-supplied filename (truncated in the summary)
            declared_size: Size recorded at upload, reported in the summary

        Returns:
            ExtractionResult: Hex digest, bytes read and summary line
        """
        if self.max_delay > 0:
            delay = random.uniform(self.min_delay, self.max_delay)
            logger.debug("%s:extract - Simulating %.2fs of processing", __name__, delay)
            await asyncio.sleep(delay)

        md5 = hashlib.md5()
        read = 0
        async for chunk in chunks:
            md5.update(chunk)
            read += len(chunk)

        digest = md5.hexdigest()
        if read != declared_size:
            logger.warning(
                "%s:extract - Read %d bytes, record says %d",
                __name__,
                read,
                declared_size,
                extra={"original_filename": original_filename},
            )
        return ExtractionResult(
            digest=digest,
            size=read,
            summary=format_summary(digest, declared_size, original_filename),
        )
