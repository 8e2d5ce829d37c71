"""Base repository utilities shared across all repository implementations.

Repositories are the persistence gateway consumed by the services: they run
queries against an :class:`AsyncSession` and translate SQLAlchemy failures into
the tagged :mod:`fightpulse.errors` variants so callers never need to inspect
driver-specific exception codes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fightpulse.errors import PersistenceConflict, PersistenceError


class BaseRepository:
    """Base repository providing common functionality for all repositories."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def _gateway_call(self, operation: str) -> AsyncIterator[None]:
        """Translate SQLAlchemy exceptions raised inside the block."""

        try:
            yield
        except IntegrityError as exc:
            raise PersistenceConflict(
                f"{operation} violated a unique constraint",
                operation=operation,
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"{operation} failed: {type(exc).__name__}",
                operation=operation,
            ) from exc


class SessionUnitOfWork:
    """Commit/rollback boundary used to isolate one ingestion unit from another."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise PersistenceError(
                f"commit failed: {type(exc).__name__}", operation="commit"
            ) from exc

    async def rollback(self) -> None:
        await self._session.rollback()
