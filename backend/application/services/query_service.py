"""
File query service.

Owner-scoped point lookup and paginated listing of file records.

Dependencies: backend.boundary.db.CRUD, backend.models.file
System role: Read side of the file API
"""

import logging
import math

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD.file_crud import file_crud
from backend.core.exceptions import ForbiddenError, NotFoundError, PersistenceError
from backend.models.common import PageMeta
from backend.models.file import FileListResponse, FileRecordResponse

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def normalize_pagination(page: int | None, limit: int | None) -> tuple[int, int]:
    """
    Apply pagination defaults and the page size cap.

    Args:
        page: Requested page (absent or < 1 → 1)
        limit: Requested page size (absent or < 1 → 10, capped at 100)

    Returns:
        tuple[int, int]: (page, limit)
    """
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    return page, min(limit, MAX_LIMIT)


def last_page(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total > 0 else 1


class FileQueryService:
    """Read-only access to a caller's file records."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize query service.

        Args:
            db: AsyncSession for database operations
        """
        self.db = db

    async def get(self, file_id: int, owner_id: int) -> FileRecordResponse:
        """
        Fetch one record for its owner.

        Existence is checked before ownership, so a missing record is
        NotFound for every caller.

        Args:
            file_id: File record ID
            owner_id: Authenticated caller

        Returns:
            FileRecordResponse: Record without its storage path

        Raises:
            NotFoundError: No record with that ID
            ForbiddenError: Record belongs to someone else
        """
        try:
            record = await file_crud.get_by_id(self.db, file_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load file {file_id}: {e}") from e

        if record is None:
            logger.warning(
                f"{__name__}:get - File {file_id} not found",
                extra={"owner_id": owner_id},
            )
            raise NotFoundError("File", file_id)

        if record.owner_id != owner_id:
            logger.warning(
                f"{__name__}:get - User {owner_id} denied access to file {file_id}",
                extra={"file_owner_id": record.owner_id},
            )
            raise ForbiddenError("You do not have permission to access this file.")

        return FileRecordResponse.model_validate(record)

    async def list(
        self,
        owner_id: int,
        page: int | None = None,
        limit: int | None = None,
    ) -> FileListResponse:
        """
        List the caller's records, newest first.

        Args:
            owner_id: Authenticated caller
            page: 1-based page number
            limit: Page size

        Returns:
            FileListResponse: Page of records and pagination metadata
        """
        page, limit = normalize_pagination(page, limit)
        offset = (page - 1) * limit
        try:
            total = await file_crud.count_by_owner(self.db, owner_id)
            # offsets past the end may not fit the database integer type
            records = []
            if offset < total:
                records = await file_crud.list_by_owner(
                    self.db, owner_id, limit=limit, offset=offset
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list files: {e}") from e

        return FileListResponse(
            data=[FileRecordResponse.model_validate(r) for r in records],
            meta=PageMeta(
                total=total,
                page=page,
                limit=limit,
                last_page=last_page(total, limit),
            ),
        )
