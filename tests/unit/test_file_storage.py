"""
Unit tests for the storage backends.

System role: Verification of durable byte storage
"""

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from backend.boundary.storage.base import MAX_EXTENSION_LENGTH, generate_storage_name
from backend.boundary.storage.local_storage import LocalFileStorage
from backend.boundary.storage.s3_storage import S3FileStorage
from backend.boundary.storage.storage_factory import get_file_storage
from backend.configs.storage import StorageSettings
from backend.core.exceptions import StorageError
from tests.utils import byte_stream


async def _read_all(storage, path: str) -> bytes:
    return b"".join([chunk async for chunk in storage.iter_chunks(path)])


class TestGenerateStorageName:
    def test_should_keep_lowercased_extension(self) -> None:
        name = generate_storage_name("Report.PDF")

        assert name.endswith(".pdf")
        assert len(name) == 32 + len(".pdf")

    def test_should_be_unique(self) -> None:
        assert generate_storage_name("a.txt") != generate_storage_name("a.txt")

    def test_should_drop_overlong_extension(self) -> None:
        name = generate_storage_name("a." + "b" * 300)

        assert len(name) == 32
        assert "." not in name

    def test_should_keep_extension_at_length_limit(self) -> None:
        extension = "." + "c" * (MAX_EXTENSION_LENGTH - 1)

        assert generate_storage_name(f"a{extension}").endswith(extension)

    async def test_overlong_extension_should_save(self, storage: LocalFileStorage) -> None:
        stored = await storage.save(byte_stream(b"x"), generate_storage_name("a." + "b" * 300))

        assert await storage.exists(stored.path)


class TestLocalFileStorage:
    """Test suite for LocalFileStorage."""

    async def test_save_and_read_back(self, storage: LocalFileStorage) -> None:
        """Test saved bytes stream back identically in chunk_size pieces."""
        # Arrange
        data = b"hello world"

        # Act
        stored = await storage.save(byte_stream(data), "greeting.txt")
        chunks = [chunk async for chunk in storage.iter_chunks(stored.path)]

        # Assert
        assert stored.size == len(data)
        assert b"".join(chunks) == data
        assert all(len(c) <= storage.chunk_size for c in chunks)

    async def test_delete_should_remove_and_tolerate_missing(self, storage) -> None:
        stored = await storage.save(byte_stream(b"x"), "x.bin")

        await storage.delete(stored.path)
        await storage.delete(stored.path)

        assert await storage.exists(stored.path) is False

    async def test_save_should_refuse_to_overwrite(self, storage) -> None:
        await storage.save(byte_stream(b"first"), "same.bin")

        with pytest.raises(StorageError):
            await storage.save(byte_stream(b"second"), "same.bin")

    async def test_save_should_drop_partial_file_on_stream_error(
        self, storage: LocalFileStorage
    ) -> None:
        """Test an upstream error removes what was written so far."""

        # Arrange
        async def broken_stream():
            yield b"partial"
            raise RuntimeError("client went away")

        # Act
        with pytest.raises(RuntimeError):
            await storage.save(broken_stream(), "broken.bin")

        # Assert
        assert not (Path(storage.root) / "broken.bin").exists()

    async def test_iter_chunks_should_raise_for_missing_file(self, storage) -> None:
        with pytest.raises(StorageError) as exc_info:
            await _read_all(storage, str(storage.root / "missing.bin"))

        assert exc_info.value.message.startswith("Failed to read stored file")


class TestS3FileStorage:
    """Test suite for S3FileStorage with a mocked client."""

    async def test_save_should_upload_with_prefixed_key(self) -> None:
        # Arrange
        client = MagicMock()
        uploaded = {}

        def fake_upload(fileobj, bucket, key):
            uploaded["body"] = fileobj.read()
            uploaded["bucket"] = bucket
            uploaded["key"] = key

        client.upload_fileobj.side_effect = fake_upload
        storage = S3FileStorage(bucket="files", prefix="uploads/", client=client)

        # Act
        stored = await storage.save(byte_stream(b"abcdef"), "obj.txt")

        # Assert
        assert stored.path == "uploads/obj.txt"
        assert stored.size == 6
        assert uploaded == {"body": b"abcdef", "bucket": "files", "key": "uploads/obj.txt"}

    async def test_iter_chunks_should_stream_body(self) -> None:
        client = MagicMock()
        client.get_object.return_value = {"Body": io.BytesIO(b"0123456789")}
        storage = S3FileStorage(bucket="files", chunk_size=4, client=client)

        chunks = [chunk async for chunk in storage.iter_chunks("uploads/obj")]

        assert chunks == [b"0123", b"4567", b"89"]

    async def test_missing_object_should_raise_storage_error(self) -> None:
        # Arrange
        client = MagicMock()
        client.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        storage = S3FileStorage(bucket="files", client=client)

        # Act & Assert
        with pytest.raises(StorageError, match="File not found in S3"):
            await _read_all(storage, "uploads/missing")

    async def test_exists_should_map_404_to_false(self) -> None:
        client = MagicMock()
        client.head_object.side_effect = ClientError(
            {"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject"
        )
        storage = S3FileStorage(bucket="files", client=client)

        assert await storage.exists("uploads/missing") is False


class TestGetFileStorage:
    def test_local_backend(self, temp_dir) -> None:
        storage = get_file_storage(
            StorageSettings(backend="local", upload_dest=str(temp_dir / "u"))
        )

        assert isinstance(storage, LocalFileStorage)
