"""
File record CRUD operations.

Provides Create, Read, Delete operations for FileRecordModel with
owner-scoped pagination and the conditional status transition used
by the worker.

Dependencies: sqlalchemy, backend.boundary.db.models.file_model
System role: File record persistence operations
"""

from datetime import datetime, timedelta
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.base import next_timestamp, utc_now
from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.models.file_model import (
    FileRecordModel,
    FileStatus,
    can_transition,
)
from backend.core.exceptions import InvalidStatusTransition


class FileCRUD(BaseCRUD[FileRecordModel]):
    """
    CRUD operations for FileRecordModel.

    Extends BaseCRUD with owner-scoped listing and status transitions
    that enforce the file lifecycle state machine.
    """

    def __init__(self) -> None:
        """Initialize FileCRUD with FileRecordModel."""
        super().__init__(FileRecordModel)

    async def create_file(
        self,
        session: AsyncSession,
        owner_id: int,
        original_filename: str,
        storage_path: str,
        mimetype: str,
        size: int,
        title: str | None = None,
        description: str | None = None,
    ) -> FileRecordModel:
        """
        Insert a new record in status UPLOADED.

        Args:
            session: Async database session
            owner_id: Uploading user ID
            original_filename: Client-supplied filename
            storage_path: Storage handle returned by FileStorage.save
            mimetype: Client-supplied content type
            size: Stored byte count
            title: Optional title
            description: Optional description

        Returns:
            Created FileRecordModel with generated ID and timestamps
        """
        now = utc_now()
        return await self.create(
            session,
            owner_id=owner_id,
            original_filename=original_filename,
            storage_path=storage_path,
            mimetype=mimetype,
            size=size,
            title=title,
            description=description,
            status=FileStatus.UPLOADED,
            uploaded_at=now,
            updated_at=now,
        )

    async def list_by_owner(
        self,
        session: AsyncSession,
        owner_id: int,
        limit: int,
        offset: int = 0,
    ) -> Sequence[FileRecordModel]:
        """
        Retrieve a page of records owned by a user, newest first.

        Ties on uploaded_at are broken by id so pages are stable.

        Args:
            session: Async database session
            owner_id: Owning user ID
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            Sequence of FileRecordModels ordered by uploaded_at descending
        """
        stmt = (
            select(FileRecordModel)
            .where(FileRecordModel.owner_id == owner_id)
            .order_by(FileRecordModel.uploaded_at.desc(), FileRecordModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_owner(self, session: AsyncSession, owner_id: int) -> int:
        """
        Count records owned by a user.

        Args:
            session: Async database session
            owner_id: Owning user ID

        Returns:
            Number of records owned by the user
        """
        stmt = (
            select(func.count())
            .select_from(FileRecordModel)
            .where(FileRecordModel.owner_id == owner_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    async def transition_status(
        self,
        session: AsyncSession,
        id: int,
        target: FileStatus,
        extracted_data: str | None = None,
    ) -> FileRecordModel | None:
        """
        Move a record to a new status if the lifecycle allows it.

        The row is read with SELECT ... FOR UPDATE (a no-op on SQLite) so
        the check and the write happen atomically within the transaction.
        updated_at always advances.

        Args:
            session: Async database session
            id: File record ID
            target: Requested status
            extracted_data: Summary or error text to store (None keeps current)

        Returns:
            Updated FileRecordModel, or None if the record does not exist

        Raises:
            InvalidStatusTransition: Target not reachable from current status
        """
        stmt = (
            select(FileRecordModel)
            .where(FileRecordModel.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        record = result.scalar_one_or_none()
        if record is None:
            return None

        if not can_transition(record.status, target):
            raise InvalidStatusTransition(id, record.status.value, target.value)

        record.status = target
        if extracted_data is not None:
            record.extracted_data = extracted_data
        record.updated_at = next_timestamp(record.updated_at)
        await session.flush()
        return record

    async def get_stale_uploaded(
        self,
        session: AsyncSession,
        older_than: timedelta,
        limit: int | None = None,
    ) -> Sequence[FileRecordModel]:
        """
        Retrieve records still UPLOADED after a grace period.

        Used by the reconciliation sweep to re-enqueue records whose job
        was lost.

        Args:
            session: Async database session
            older_than: Minimum age measured from uploaded_at
            limit: Maximum number of records to return

        Returns:
            Sequence of FileRecordModels, oldest first
        """
        cutoff: datetime = utc_now() - older_than
        stmt = (
            select(FileRecordModel)
            .where(
                FileRecordModel.status == FileStatus.UPLOADED,
                FileRecordModel.uploaded_at < cutoff,
            )
            .order_by(FileRecordModel.uploaded_at.asc(), FileRecordModel.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


file_crud = FileCRUD()
