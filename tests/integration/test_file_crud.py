"""
Integration tests for FileCRUD against SQLite.

System role: Verification of file record persistence and transitions
"""

from datetime import timedelta

import pytest

from backend.boundary.db.base import as_utc, utc_now
from backend.boundary.db.CRUD.file_crud import file_crud
from backend.boundary.db.models.file_model import FileStatus, can_transition
from backend.core.exceptions import InvalidStatusTransition


async def _create(session, owner_id: int = 1, name: str = "a.txt"):
    record = await file_crud.create_file(
        session,
        owner_id=owner_id,
        original_filename=name,
        storage_path=f"/tmp/{name}",
        mimetype="text/plain",
        size=5,
    )
    await session.commit()
    return record


class TestCreateAndRead:
    """Tests for create_file() and reads."""

    async def test_create_file_should_start_uploaded(self, test_async_db, load_record) -> None:
        """Test new records are UPLOADED with no extracted data."""
        # Act
        record = await _create(test_async_db)

        # Assert
        loaded = await load_record(record.id)
        assert loaded.status == FileStatus.UPLOADED
        assert loaded.extracted_data is None
        assert loaded.owner_id == 1
        assert as_utc(loaded.uploaded_at) == as_utc(loaded.updated_at)

    async def test_get_by_id_should_return_none_for_unknown_id(self, test_async_db) -> None:
        assert await file_crud.get_by_id(test_async_db, 9999) is None


class TestListByOwner:
    """Tests for list_by_owner() and count_by_owner()."""

    async def test_list_should_return_newest_first(self, test_async_db) -> None:
        """Test records come back by uploaded_at descending, id breaking ties."""
        # Arrange
        ids = [(await _create(test_async_db, name=f"f{i}.txt")).id for i in range(4)]

        # Act
        records = await file_crud.list_by_owner(test_async_db, 1, limit=10)

        # Assert
        assert [r.id for r in records] == list(reversed(ids))

    async def test_list_should_scope_to_owner(self, test_async_db) -> None:
        """Test other users' records are never listed or counted."""
        # Arrange
        await _create(test_async_db, owner_id=1)
        await _create(test_async_db, owner_id=2)
        await _create(test_async_db, owner_id=2)

        # Act
        records = await file_crud.list_by_owner(test_async_db, 2, limit=10)
        total = await file_crud.count_by_owner(test_async_db, 2)

        # Assert
        assert {r.owner_id for r in records} == {2}
        assert total == 2

    async def test_list_should_apply_offset_and_limit(self, test_async_db) -> None:
        # Arrange
        ids = [(await _create(test_async_db)).id for _ in range(5)]

        # Act
        page = await file_crud.list_by_owner(test_async_db, 1, limit=2, offset=2)

        # Assert
        assert [r.id for r in page] == [ids[2], ids[1]]


class TestTransitionStatus:
    """Tests for transition_status()."""

    async def test_transition_should_follow_lifecycle(self, test_async_db, load_record) -> None:
        """Test UPLOADED -> PROCESSING -> PROCESSED stores the summary."""
        # Arrange
        record = await _create(test_async_db)

        # Act
        await file_crud.transition_status(test_async_db, record.id, FileStatus.PROCESSING)
        await file_crud.transition_status(
            test_async_db, record.id, FileStatus.PROCESSED, extracted_data="done"
        )
        await test_async_db.commit()

        # Assert
        loaded = await load_record(record.id)
        assert loaded.status == FileStatus.PROCESSED
        assert loaded.extracted_data == "done"

    async def test_transition_should_reject_skipping_processing(self, test_async_db) -> None:
        """Test UPLOADED cannot jump straight to PROCESSED."""
        record = await _create(test_async_db)

        with pytest.raises(InvalidStatusTransition) as exc_info:
            await file_crud.transition_status(test_async_db, record.id, FileStatus.PROCESSED)

        assert exc_info.value.current == "UPLOADED"
        assert exc_info.value.target == "PROCESSED"

    async def test_transition_should_return_none_for_missing_record(self, test_async_db) -> None:
        result = await file_crud.transition_status(test_async_db, 424242, FileStatus.PROCESSING)

        assert result is None

    async def test_transition_should_strictly_advance_updated_at(
        self, test_async_db, load_record
    ) -> None:
        """Test every write moves updated_at forward, even within one clock tick."""
        # Arrange
        record = await _create(test_async_db)
        seen = [as_utc((await load_record(record.id)).updated_at)]

        # Act
        for target in (FileStatus.PROCESSING, FileStatus.PROCESSING, FileStatus.FAILED):
            await file_crud.transition_status(test_async_db, record.id, target)
            await test_async_db.commit()
            seen.append(as_utc((await load_record(record.id)).updated_at))

        # Assert
        assert all(later > earlier for earlier, later in zip(seen, seen[1:]))

    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (FileStatus.UPLOADED, FileStatus.PROCESSING, True),
            (FileStatus.UPLOADED, FileStatus.FAILED, False),
            (FileStatus.PROCESSING, FileStatus.PROCESSING, True),
            (FileStatus.PROCESSING, FileStatus.UPLOADED, False),
            (FileStatus.FAILED, FileStatus.PROCESSING, True),
            (FileStatus.FAILED, FileStatus.PROCESSED, False),
            (FileStatus.PROCESSED, FileStatus.PROCESSING, True),
            (FileStatus.PROCESSED, FileStatus.UPLOADED, False),
        ],
    )
    def test_can_transition_table(self, current, target, allowed) -> None:
        assert can_transition(current, target) is allowed


class TestGetStaleUploaded:
    """Tests for get_stale_uploaded()."""

    async def test_should_return_only_old_uploaded_records(self, test_async_db) -> None:
        """Test only UPLOADED records past the grace period are returned."""
        # Arrange
        old = await _create(test_async_db, name="old.txt")
        old_processing = await _create(test_async_db, name="busy.txt")
        await _create(test_async_db, name="fresh.txt")
        an_hour_ago = utc_now() - timedelta(hours=1)
        old.uploaded_at = an_hour_ago
        old_processing.uploaded_at = an_hour_ago
        old_processing.status = FileStatus.PROCESSING
        await test_async_db.commit()

        # Act
        stale = await file_crud.get_stale_uploaded(test_async_db, timedelta(minutes=10))

        # Assert
        assert [r.id for r in stale] == [old.id]
