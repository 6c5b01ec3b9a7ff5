"""
FastAPI application entry point.

Initializes FastAPI app, registers routers and error handlers, adds
middleware, and manages shared resources in the lifespan.

Dependencies: fastapi, backend.api, backend.boundary, backend.observability, backend.configs
System role: Application initialization and configuration
"""

import asyncio
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api import api_router
from backend.api.error_handlers import register_exception_handlers
from backend.boundary.db.connection import DatabaseConnection
from backend.boundary.queue.queue_factory import get_job_queue
from backend.boundary.storage.storage_factory import get_file_storage
from backend.configs import Settings, get_settings
from backend.observability.logger import configure_logging
from backend.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from backend.workers.file_worker import build_file_worker

logger = logging.getLogger(__name__)


def _log_worker_exit(task: asyncio.Task) -> None:
    """Report an embedded worker that ended with an error before shutdown."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "%s:_log_worker_exit - Embedded worker crashed: %s",
            __name__,
            exc,
            exc_info=exc,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup: connect the database, create the storage and queue backends
    and (when enabled) start an embedded worker. Shutdown releases them
    in reverse order.
    """
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    settings.validate_secrets()

    database = DatabaseConnection(settings.database)
    await database.connect()
    app.state.database = database
    app.state.storage = get_file_storage(settings.storage)
    app.state.queue = get_job_queue(settings.queue)

    worker_task = None
    if settings.worker.embedded:
        worker = build_file_worker(
            settings, database.session_factory, app.state.storage, app.state.queue
        )
        app.state.worker = worker
        worker_task = asyncio.create_task(worker.run())
        worker_task.add_done_callback(_log_worker_exit)
        logger.info("%s:lifespan - Embedded worker started", __name__)

    logger.info(
        "%s:lifespan - Application startup complete",
        __name__,
        extra={
            "environment": settings.environment,
            "queue_backend": settings.queue.backend,
            "storage_backend": settings.storage.backend,
        },
    )

    try:
        yield
    finally:
        if worker_task is not None:
            app.state.worker.stop()
            await app.state.queue.close()
            # a crash was already logged by _log_worker_exit
            await asyncio.gather(worker_task, return_exceptions=True)
        else:
            await app.state.queue.close()
        await database.dispose()
        logger.info("%s:lifespan - Application shutdown", __name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to run with (default: loaded from the environment)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="File Processing API",
        description="Authenticated uploads with asynchronous digest processing",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings

    register_exception_handlers(app)

    # Add observability middleware (added first = last to execute)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routes
    app.include_router(api_router, prefix="/api/v1")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:create_app",
        factory=True,
        host="localhost",
        port=8082,
        reload=True,
    )
