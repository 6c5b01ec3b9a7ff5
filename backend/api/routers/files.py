"""
File API endpoints.

Routes:
- POST /files/upload - Upload a file and queue it for processing
- GET /files/{id} - Status and result of one file
- GET /files - Paginated list of the caller's files

All routes require a bearer token. Errors are rendered by
backend.api.error_handlers.

Dependencies: backend.application.services, backend.models
System role: File HTTP API
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from backend.api.deps import (
    get_current_user,
    get_ingestion_service,
    get_query_service,
    get_settings_dependency,
)
from backend.application.services.ingestion_service import IngestionService, iter_upload
from backend.application.services.query_service import FileQueryService
from backend.configs import Settings
from backend.models.file import FileListResponse, FileRecordResponse, FileUploadResponse
from backend.models.user import AuthenticatedUser

router = APIRouter(prefix="/files", tags=["files"])


async def _no_bytes():
    return
    yield


@router.post(
    "/upload",
    response_model=FileUploadResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def upload_file(
    user: AuthenticatedUser = Depends(get_current_user),
    file: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    service: IngestionService = Depends(get_ingestion_service),
    settings: Settings = Depends(get_settings_dependency),
) -> FileUploadResponse:
    """
    Upload a file for asynchronous processing.

    The bytes are stored, a record is created with status UPLOADED and
    one processing job is queued. Poll GET /files/{id} for the outcome.

    Args:
        user: Authenticated caller
        file: Multipart file part
        title: Optional title (max 255 characters)
        description: Optional description
        service: Injected IngestionService
        settings: Application settings

    Returns:
        FileUploadResponse: Record ID, status and confirmation message

    Raises:
        ValidationError(400): Missing/empty file, title too long, file too large
        StorageError/PersistenceError/QueueError(500): Upload could not be completed
    """
    if file is None:
        chunks = _no_bytes()
        filename, mimetype, size = None, None, None
    else:
        chunks = iter_upload(file, settings.storage.chunk_size_bytes)
        filename, mimetype, size = file.filename, file.content_type, file.size

    return await service.upload(
        chunks,
        original_filename=filename,
        mimetype=mimetype,
        owner_id=user.id,
        title=title,
        description=description,
        declared_size=size,
    )


@router.get("/{file_id}", response_model=FileRecordResponse)
async def get_file(
    file_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FileQueryService = Depends(get_query_service),
) -> FileRecordResponse:
    """
    Get one file's status and extracted data.

    Raises:
        NotFoundError(404): No such file
        ForbiddenError(403): File belongs to another user
    """
    return await service.get(file_id, user.id)


@router.get("", response_model=FileListResponse)
async def list_files(
    page: int | None = Query(default=None, description="1-based page (default 1)"),
    limit: int | None = Query(default=None, description="Page size (default 10, max 100)"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: FileQueryService = Depends(get_query_service),
) -> FileListResponse:
    """
    List the caller's files, newest first.

    Example Response:
        {
            "data": [{"id": 7, "status": "PROCESSED", ...}],
            "meta": {"total": 21, "page": 1, "limit": 10, "lastPage": 3}
        }
    """
    return await service.list(user.id, page=page, limit=limit)
