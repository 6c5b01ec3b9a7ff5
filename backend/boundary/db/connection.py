"""
Database connection management.

Provides an explicit connection object owning the async engine and
session factory, plus the FastAPI dependency for session injection.
The API lifespan and the worker entry point each create one
DatabaseConnection, connect it at startup and dispose it at shutdown.

Dependencies: sqlalchemy, backend.configs
System role: Database connection lifecycle management
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from backend.boundary.db.base import Base
from backend.boundary.db.models import file_model  # noqa: F401  registers tables
from backend.configs.database import DatabaseSettings

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Owner of the async engine and session factory.

    Attributes:
        settings: Database configuration used to build the engine
    """

    def __init__(self, settings: DatabaseSettings) -> None:
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _engine_kwargs(self) -> dict:
        kwargs: dict = {"echo": self.settings.echo_sql}
        if self.settings.is_sqlite:
            if ":memory:" in self.settings.async_database_url:
                # one shared connection so every session sees the same database
                kwargs["poolclass"] = StaticPool
            return kwargs
        kwargs.update(
            pool_size=self.settings.pool_size,
            max_overflow=self.settings.max_overflow,
            pool_timeout=self.settings.pool_timeout,
            pool_pre_ping=True,
        )
        return kwargs

    async def connect(self) -> None:
        """
        Create the engine and session factory.

        Creates missing tables when ``create_tables`` is enabled.

        Raises:
            ArgumentError: If database URL is invalid
            SQLAlchemyError: If table creation fails
        """
        if self._engine is not None:
            return

        self._engine = create_async_engine(
            self.settings.async_database_url, **self._engine_kwargs()
        )
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        if self.settings.create_tables:
            await self.create_tables()

        logger.info(
            "%s:connect - Database engine created",
            __name__,
            extra={"dialect": self._engine.dialect.name},
        )

    async def create_tables(self) -> None:
        """Create all tables registered on Base.metadata (idempotent)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all tables. Irreversible; development and tests only."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> None:
        """
        Run a trivial query to verify connectivity.

        Raises:
            SQLAlchemyError: If the database is unreachable
        """
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("%s:dispose - Database engine disposed", __name__)

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseConnection.connect() has not been called")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseConnection.connect() has not been called")
        return self._session_factory


async def get_async_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection with automatic cleanup.

    Opens a session from the application's DatabaseConnection (stored on
    ``app.state.database`` by the lifespan) and closes it after the route
    completes, even if exceptions occur.

    Yields:
        AsyncSession: Async SQLAlchemy database session (scoped to request lifetime)

    Usage:
        from fastapi import Depends

        @router.get("/files/{id}")
        async def get_file(id: int, db: AsyncSession = Depends(get_async_db)):
            return await file_crud.get_by_id(db, id)
    """
    database: DatabaseConnection = request.app.state.database
    async with database.session_factory() as session:
        yield session
