"""
Local filesystem storage backend.

Stores uploads as flat files under a configured directory. Blocking
file calls run in worker threads so the event loop is never blocked.

Dependencies: asyncio, pathlib
System role: Development and single-host storage for uploaded bytes
"""

import asyncio
import logging
from pathlib import Path
from typing import AsyncIterable, AsyncIterator

from backend.boundary.storage.base import FileStorage, StoredObject
from backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Store uploaded bytes on the local filesystem."""

    def __init__(self, root: str | Path, chunk_size: int = 64 * 1024) -> None:
        """
        Initialize local storage.

        Args:
            root: Directory that holds stored files (created if missing)
            chunk_size: Read size for iter_chunks
        """
        self.root = Path(root)
        self.chunk_size = chunk_size
        self.root.mkdir(parents=True, exist_ok=True)

    async def save(self, chunks: AsyncIterable[bytes], name: str) -> StoredObject:
        target = self.root / name
        size = 0
        try:
            handle = await asyncio.to_thread(open, target, "xb")
        except OSError as e:
            raise StorageError(f"Failed to open file for writing: {e}", str(target)) from e

        try:
            async for chunk in chunks:
                await asyncio.to_thread(handle.write, chunk)
                size += len(chunk)
        except OSError as e:
            await asyncio.to_thread(handle.close)
            await self.delete(str(target))
            raise StorageError(f"Failed to write file: {e}", str(target)) from e
        except BaseException:
            # upstream stream error (e.g. size limit): drop the partial file
            await asyncio.to_thread(handle.close)
            await self.delete(str(target))
            raise
        await asyncio.to_thread(handle.close)

        logger.debug(
            "%s:save - Stored %d bytes",
            __name__,
            size,
            extra={"path": str(target), "size": size},
        )
        return StoredObject(path=str(target), size=size)

    async def iter_chunks(self, path: str) -> AsyncIterator[bytes]:
        try:
            handle = await asyncio.to_thread(open, path, "rb")
        except OSError as e:
            raise StorageError(f"Failed to read stored file: {e}", path) from e

        try:
            while True:
                try:
                    chunk = await asyncio.to_thread(handle.read, self.chunk_size)
                except OSError as e:
                    raise StorageError(f"Failed to read stored file: {e}", path) from e
                if not chunk:
                    break
                yield chunk
        finally:
            await asyncio.to_thread(handle.close)

    async def delete(self, path: str) -> None:
        try:
            await asyncio.to_thread(Path(path).unlink, True)
        except OSError as e:
            raise StorageError(f"Failed to delete stored file: {e}", path) from e

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).is_file)
