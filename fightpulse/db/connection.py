from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import urlsplit

from sqlalchemy import event, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fightpulse.settings import POSTGRES_ASYNC_PREFIX, get_settings

logger = logging.getLogger(__name__)


def _validate_database_url(database_url: str) -> str:
    """Validate the resolved connection string before an engine is created.

    PostgreSQL URLs must carry a host and database name; SQLite URLs are
    accepted as-is because they only ever point at local files or memory.
    """

    normalized_url = database_url.strip()
    if not normalized_url:
        raise RuntimeError(
            "DATABASE_URL is set but empty. Provide a valid PostgreSQL connection string."
        )

    if normalized_url.startswith("sqlite+aiosqlite"):
        return normalized_url

    if not normalized_url.startswith(POSTGRES_ASYNC_PREFIX):
        raise RuntimeError(
            "DATABASE_URL must use the PostgreSQL scheme. "
            "Expected a URL beginning with 'postgresql://', 'postgres://', or 'postgresql+psycopg://'."
        )

    parts = urlsplit(normalized_url)
    if not parts.hostname or not parts.path:
        raise RuntimeError(
            "DATABASE_URL appears malformed. Verify the host and database name are present."
        )

    return normalized_url


def get_database_url() -> str:
    """Return the validated async database URL for the current settings."""

    return _validate_database_url(get_settings().resolved_database_url)


def get_database_type() -> str:
    """Return ``postgresql`` or ``sqlite`` for the active configuration."""

    return get_settings().database_type


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ``FOREIGN KEY`` clauses unless the pragma is set per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine(url: str | None = None) -> AsyncEngine:
    """Create the async SQLAlchemy engine for the configured database."""

    url = _validate_database_url(url) if url else get_database_url()

    if url.startswith("sqlite"):
        database = make_url(url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_async_engine(url, future=True, echo=False)
        _enable_sqlite_foreign_keys(engine)
        return engine

    return create_async_engine(
        url,
        future=True,
        echo=False,
        pool_size=10,  # Maintain 10 warm connections
        max_overflow=20,  # Allow up to 30 total connections
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=1800,  # Recycle connections every 30 min
        pool_timeout=30,  # Timeout for getting connection from pool
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def get_session(engine: AsyncEngine | None = None) -> AsyncIterator[AsyncSession]:
    engine = engine or get_engine()
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session


# Global engine/session instances for FastAPI dependency injection
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the global engine instance."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily create a session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections held by the global engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency to provide database session.

    Yields async session and ensures proper cleanup even on errors.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
