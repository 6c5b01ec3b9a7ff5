"""
Error-kind → HTTP response mapping.

Every failing request gets the same JSON body:
{statusCode, timestamp, path, method, errorType, message}

ERROR_STATUS_MAP is the single table mapping domain exceptions to
status codes; lookups walk the exception's MRO so subclasses inherit
their parent's status.

Dependencies: fastapi, starlette, backend.core.exceptions
System role: Uniform error responses for the HTTP API
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core.exceptions import (
    FileServiceException,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    ProcessingError,
    QueueError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)
from backend.models.common import ErrorResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

ERROR_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    RequestValidationError: status.HTTP_400_BAD_REQUEST,
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    QueueError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ProcessingError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: Exception) -> int:
    """Status code for an exception (500 when no entry matches)."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the JSON error response and log it."""
    log_message = (
        f"{__name__} - {request.method} {request.url.path} - Status: {status_code} "
        f"- ErrorType: {error_type} - Message: {message}"
    )
    if status_code >= 500:
        logger.error(log_message)
    else:
        logger.warning(log_message)

    body = ErrorResponse(
        status_code=status_code,
        timestamp=datetime.now(timezone.utc),
        path=request.url.path,
        method=request.method,
        error_type=error_type,
        message=message,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
        headers=headers,
    )


def _auth_headers(status_code: int) -> dict[str, str] | None:
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return {"WWW-Authenticate": "Bearer"}
    return None


async def file_service_exception_handler(
    request: Request, exc: FileServiceException
) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            f"{__name__}:file_service_exception_handler - {exc}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    return error_response(
        request,
        status_code,
        type(exc).__name__,
        exc.message,
        headers=_auth_headers(status_code),
    )


def format_validation_errors(exc: RequestValidationError) -> str:
    """Join request validation errors as 'location: message; ...'."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(
        request,
        status_for(exc),
        ValidationError.__name__,
        format_validation_errors(exc),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(
        request,
        exc.status_code,
        "HTTPException",
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"{__name__}:unhandled_exception_handler - {type(exc).__name__}: {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        INTERNAL_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application."""
    app.add_exception_handler(FileServiceException, file_service_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
