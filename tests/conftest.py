"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite-backed database, local storage in a temp dir, in-memory
queue, worker factory, application settings and bearer tokens.
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, PyJWT
System role: Test infrastructure and fixture management
"""

import shutil
import tempfile
from pathlib import Path
from typing import AsyncIterator

import jwt
import pytest

from backend.application.services.ingestion_service import IngestionService
from backend.application.services.job_producer import FileJobProducer
from backend.boundary.db.connection import DatabaseConnection
from backend.boundary.queue.base import RetryPolicy
from backend.boundary.queue.memory_queue import InMemoryJobQueue
from backend.boundary.storage.local_storage import LocalFileStorage
from backend.configs.auth import AuthSettings
from backend.configs.database import DatabaseSettings
from backend.configs.queue import QueueSettings
from backend.configs.settings import Settings
from backend.configs.storage import StorageSettings
from backend.configs.worker import WorkerSettings
from backend.core.extraction import Md5DigestExtractor
from backend.workers.file_worker import FileWorker

from tests.utils import JOB_NAME, MAX_FILE_SIZE, QUEUE_NAME, TEST_JWT_SECRET


@pytest.fixture
async def database(temp_dir: Path) -> AsyncIterator[DatabaseConnection]:
    """
    File-backed SQLite database with all tables created.

    Each session gets its own connection, as with a real server.

    Yields:
        DatabaseConnection: Connected database (disposed after the test)
    """
    connection = DatabaseConnection(
        DatabaseSettings(
            url=f"sqlite+aiosqlite:///{temp_dir / 'files.db'}",
            create_tables=True,
        )
    )
    await connection.connect()
    yield connection
    await connection.drop_tables()
    await connection.dispose()


@pytest.fixture
async def test_async_db(database: DatabaseConnection):
    """
    Session on the test database.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with database.session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def load_record(database: DatabaseConnection):
    """
    Read a record through a fresh session (never a cached instance).

    Returns:
        Callable: await load_record(file_id) -> FileRecordModel | None
    """
    from backend.boundary.db.CRUD.file_crud import file_crud

    async def _load(file_id: int):
        async with database.session_factory() as session:
            return await file_crud.get_by_id(session, file_id)

    return _load


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for test files.

    Yields:
        Path: Path to temporary directory
    """
    temp_path = Path(tempfile.mkdtemp(prefix="fileproc_test_"))
    yield temp_path

    if temp_path.exists():
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def storage(temp_dir: Path) -> LocalFileStorage:
    """Local storage with a small chunk size so reads span several chunks."""
    return LocalFileStorage(temp_dir / "uploads", chunk_size=3)


@pytest.fixture
def memory_queue() -> InMemoryJobQueue:
    """In-memory queue without retries."""
    return InMemoryJobQueue(retry_policy=RetryPolicy.no_retry(), visibility_timeout=30)


@pytest.fixture
def producer(memory_queue: InMemoryJobQueue) -> FileJobProducer:
    return FileJobProducer(memory_queue, JOB_NAME, QUEUE_NAME)


@pytest.fixture
def ingestion_service(test_async_db, storage, producer) -> IngestionService:
    return IngestionService(
        db=test_async_db,
        storage=storage,
        producer=producer,
        max_file_size=MAX_FILE_SIZE,
    )


@pytest.fixture
def make_worker(database: DatabaseConnection, storage: LocalFileStorage):
    """
    Factory building a FileWorker on the test database and storage.

    Returns:
        Callable: make_worker(queue, redelivery_policy="skip", job_name=JOB_NAME)
    """

    def _make(
        queue: InMemoryJobQueue,
        redelivery_policy: str = "skip",
        job_name: str = JOB_NAME,
        extractor=None,
    ) -> FileWorker:
        return FileWorker(
            session_factory=database.session_factory,
            storage=storage,
            queue=queue,
            extractor=extractor or Md5DigestExtractor(),
            job_name=job_name,
            redelivery_policy=redelivery_policy,
            wait_seconds=0,
        )

    return _make


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """
    Settings for an application backed by SQLite, local storage and the
    in-memory queue, with an embedded worker.
    """
    return Settings(
        environment="test",
        database=DatabaseSettings(
            url=f"sqlite+aiosqlite:///{temp_dir / 'test.db'}",
            create_tables=True,
        ),
        storage=StorageSettings(
            backend="local",
            upload_dest=str(temp_dir / "uploads"),
            max_file_size_bytes=MAX_FILE_SIZE,
            chunk_size_bytes=16,
        ),
        queue=QueueSettings(
            backend="memory",
            queue_name=QUEUE_NAME,
            job_name=JOB_NAME,
            wait_time_seconds=1,
            retry_max_attempts=1,
        ),
        worker=WorkerSettings(embedded=True),
        auth=AuthSettings(jwt_secret=TEST_JWT_SECRET),
    )


@pytest.fixture
def make_token():
    """
    Factory minting bearer tokens the API accepts.

    Returns:
        Callable: make_token(user_id, email=None, secret=TEST_JWT_SECRET, **claims)
    """

    def _make(user_id, email: str | None = None, secret: str = TEST_JWT_SECRET, **claims) -> str:
        payload = {"sub": str(user_id), **claims}
        if email:
            payload["email"] = email
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    """Factory for Authorization headers: auth_headers(user_id)."""

    def _headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers
