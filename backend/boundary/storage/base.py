"""
Durable byte storage contract.

Defines the interface every storage backend implements and the
naming rule for stored objects.

Dependencies: None
System role: Abstraction over where uploaded bytes live
"""

import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from typing import AsyncIterable, AsyncIterator

MAX_EXTENSION_LENGTH = 16


def generate_storage_name(original_filename: str) -> str:
    """
    Build an unguessable object name that keeps the original extension.

    Args:
        original_filename: Client-supplied filename

    Returns:
        str: 32 random hex characters plus the lower-cased extension,
        which is dropped when longer than MAX_EXTENSION_LENGTH
    """
    suffix = PurePath(original_filename).suffix.lower()
    if len(suffix) > MAX_EXTENSION_LENGTH:
        suffix = ""
    return f"{secrets.token_hex(16)}{suffix}"


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful write."""

    path: str
    size: int


class FileStorage(ABC):
    """
    Abstract storage for uploaded file bytes.

    Implementations stream data in both directions; whole files are never
    held in memory. ``path`` values are opaque handles produced by
    ``save`` and consumed by ``iter_chunks`` and ``delete``.
    """

    chunk_size: int = 64 * 1024

    @abstractmethod
    async def save(self, chunks: AsyncIterable[bytes], name: str) -> StoredObject:
        """
        Persist a stream of chunks under ``name``.

        A partially written object is removed before the error propagates.

        Raises:
            StorageError: Backend write failed
        """

    @abstractmethod
    def iter_chunks(self, path: str) -> AsyncIterator[bytes]:
        """
        Stream a stored object back in ``chunk_size`` pieces.

        Raises:
            StorageError: Object missing or unreadable
        """

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove a stored object. Missing objects are not an error."""

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """True if the object is present."""
