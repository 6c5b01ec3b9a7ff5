"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived resources
(settings, storage backend, queue) are created once by the application
lifespan and kept on ``app.state``; services are built per request
around that request's database session.

Dependencies: backend.configs, backend.application, backend.boundary
System role: DI container for service injection
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.application.services import (
    FileJobProducer,
    FileQueryService,
    IngestionService,
)
from backend.boundary.db import get_async_db
from backend.boundary.queue.base import JobQueue
from backend.boundary.storage.base import FileStorage
from backend.configs import Settings


def get_settings_dependency(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_file_storage(request: Request) -> FileStorage:
    """Storage backend created at startup."""
    return request.app.state.storage


def get_job_queue(request: Request) -> JobQueue:
    """Queue backend created at startup."""
    return request.app.state.queue


def get_job_producer(
    queue: JobQueue = Depends(get_job_queue),
    settings: Settings = Depends(get_settings_dependency),
) -> FileJobProducer:
    """
    Get file job producer.

    Returns:
        FileJobProducer: Producer bound to the configured queue and job name
    """
    return FileJobProducer(queue, settings.queue.job_name, settings.queue.queue_name)


def get_ingestion_service(
    db: AsyncSession = Depends(get_async_db),
    storage: FileStorage = Depends(get_file_storage),
    producer: FileJobProducer = Depends(get_job_producer),
    settings: Settings = Depends(get_settings_dependency),
) -> IngestionService:
    """
    Get ingestion service instance.

    Args:
        db: Async database session (injected via Depends)
        storage: Storage backend (injected via Depends)
        producer: Job producer (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        IngestionService: Upload orchestrator for this request
    """
    return IngestionService(
        db=db,
        storage=storage,
        producer=producer,
        max_file_size=settings.storage.max_file_size_bytes,
    )


def get_query_service(db: AsyncSession = Depends(get_async_db)) -> FileQueryService:
    """
    Get file query service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        FileQueryService: Query service instance
    """
    return FileQueryService(db=db)
