"""Shared fixtures: in-memory SQLite sessions and a wired ingestion coordinator."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fightpulse.db.models import Base, Fighter
from fightpulse.db.repositories import (
    EventRepository,
    FighterRepository,
    FightRepository,
    SessionUnitOfWork,
)
from fightpulse.services.ingestion import IngestionCoordinator, IngestionNormalizer


@pytest_asyncio.fixture
async def session() -> AsyncIterator[AsyncSession]:
    """Provide an in-memory SQLite session for integration-style tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, expire_on_commit=False)
    async with async_session() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()
    await engine.dispose()


@pytest.fixture
def coordinator(session: AsyncSession) -> IngestionCoordinator:
    return IngestionCoordinator(
        events=EventRepository(session),
        fighters=FighterRepository(session),
        fights=FightRepository(session),
        unit_of_work=SessionUnitOfWork(session),
        normalizer=IngestionNormalizer(),
    )


@pytest_asyncio.fixture
async def fighter(session: AsyncSession) -> Fighter:
    row = Fighter(first_name="Dan", last_name="Hooker", weight_class="Lightweight")
    session.add(row)
    await session.commit()
    return row
