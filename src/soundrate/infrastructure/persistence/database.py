"""Database session management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from soundrate.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Database connection and session manager."""

    def __init__(self, settings: Settings) -> None:
        """Initialize database with settings."""
        self.settings = settings
        url = settings.database.url

        engine_kwargs: dict[str, Any] = {"echo": settings.database.echo}

        # Only apply pool settings for PostgreSQL
        if "postgresql" in url:
            engine_kwargs.update(
                {
                    "pool_pre_ping": settings.database.pool_pre_ping,
                    "pool_size": settings.database.pool_size,
                    "max_overflow": settings.database.max_overflow,
                    "pool_timeout": settings.database.pool_timeout,
                    "pool_recycle": settings.database.pool_recycle,
                }
            )
        elif "sqlite" in url:
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            # Hey future me – every new connection to ":memory:" is a NEW empty database.
            # StaticPool hands out the one connection so tests see the tables they created.
            if ":memory:" in url:
                engine_kwargs["poolclass"] = StaticPool

        self._engine = create_async_engine(url, **engine_kwargs)

        if "sqlite" in url:
            self._enable_sqlite_savepoints()

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _enable_sqlite_savepoints(self) -> None:
        """Let SQLAlchemy emit BEGIN itself so SAVEPOINT works on SQLite.

        The sqlite driver defers BEGIN until the first DML statement, which breaks
        begin_nested(). The rating hooks rely on savepoints, so take over BEGIN.
        """

        @event.listens_for(self._engine.sync_engine, "connect")
        def disable_driver_begin(dbapi_conn: Any, _connection_record: Any) -> None:
            dbapi_conn.isolation_level = None

        @event.listens_for(self._engine.sync_engine, "begin")
        def emit_begin(conn: Any) -> None:
            conn.exec_driver_sql("BEGIN")

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for database operations."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database connection."""
        await self._engine.dispose()

    async def create_tables(self) -> None:
        """Create all tables that don't exist yet."""
        from soundrate.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")

