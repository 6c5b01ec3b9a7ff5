"""
Test suite for the MD5 digest extractor.

System role: Verification of the pluggable extraction step
"""

import hashlib

import pytest

from backend.core.extraction import Md5DigestExtractor, format_summary
from tests.utils import byte_stream

HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"


class TestMd5DigestExtractor:
    """Test suite for Md5DigestExtractor.extract()."""

    async def test_extract_should_digest_hello(self) -> None:
        """Test the digest of b'hello' matches the known MD5."""
        # Act
        result = await Md5DigestExtractor().extract(byte_stream(b"hello"), "hello.txt", 5)

        # Assert
        assert result.digest == HELLO_MD5
        assert result.size == 5
        assert result.summary == (
            f"MD5 Checksum: {HELLO_MD5}, Size: 5 bytes, Original: hello.txt"
        )

    @pytest.mark.parametrize("chunk_size", [1, 2, 7, 64, 10_000])
    async def test_extract_should_not_depend_on_chunking(self, chunk_size: int) -> None:
        """Test identical bytes give identical digests whatever the chunk size."""
        # Arrange
        data = bytes(range(256)) * 9
        expected = hashlib.md5(data).hexdigest()

        # Act
        result = await Md5DigestExtractor().extract(
            byte_stream(data, chunk_size), "blob.bin", len(data)
        )

        # Assert
        assert result.digest == expected

    async def test_extract_should_handle_empty_stream(self) -> None:
        """Test an empty stream digests to the MD5 of no bytes."""
        result = await Md5DigestExtractor().extract(byte_stream(b""), "empty", 0)

        assert result.digest == hashlib.md5(b"").hexdigest()
        assert result.size == 0

    def test_init_should_reject_inverted_delay_bounds(self) -> None:
        """Test max_delay below min_delay is refused."""
        with pytest.raises(ValueError):
            Md5DigestExtractor(min_delay=2.0, max_delay=1.0)

    async def test_extract_should_sleep_within_bounds(self, monkeypatch) -> None:
        """Test the simulated delay is drawn from the configured range."""
        # Arrange
        slept: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            slept.append(seconds)

        monkeypatch.setattr("backend.core.extraction.asyncio.sleep", fake_sleep)

        # Act
        await Md5DigestExtractor(min_delay=2.0, max_delay=5.0).extract(
            byte_stream(b"x"), "x", 1
        )

        # Assert
        assert len(slept) == 1
        assert 2.0 <= slept[0] <= 5.0


class TestFormatSummary:
    """Test suite for format_summary()."""

    def test_format_summary_should_truncate_filename_to_50_chars(self) -> None:
        """Test long filenames are cut to 50 characters."""
        name = "a" * 80 + ".txt"

        summary = format_summary("abc", 10, name)

        assert summary.endswith("Original: " + "a" * 50)

    def test_format_summary_should_report_declared_size(self) -> None:
        """Test the size shown is the one passed in."""
        assert "Size: 1234 bytes" in format_summary("abc", 1234, "f")
