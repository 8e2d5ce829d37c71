from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

from fightpulse.db.connection import _validate_database_url, create_engine, get_session
from fightpulse.db.models import Base, Fight


@pytest.mark.parametrize(
    "url",
    [
        "   ",
        "mysql+aiomysql://root@localhost/app",
        "postgresql+psycopg://",
    ],
)
def test_validate_database_url_rejects_bad_urls(url: str) -> None:
    with pytest.raises(RuntimeError):
        _validate_database_url(url)


def test_validate_database_url_accepts_supported_urls() -> None:
    assert _validate_database_url(" sqlite+aiosqlite:///:memory: ") == (
        "sqlite+aiosqlite:///:memory:"
    )
    postgres = "postgresql+psycopg://fight:pw@db:5432/fightpulse"
    assert _validate_database_url(postgres) == postgres


@pytest.mark.asyncio
async def test_sqlite_engine_creates_directory_and_enforces_foreign_keys(
    tmp_path: Path,
) -> None:
    database = tmp_path / "nested" / "app.db"
    engine = create_engine(f"sqlite+aiosqlite:///{database}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        assert database.exists()

        async with get_session(engine) as session:
            session.add(
                Fight(event_id="missing", fighter_a_id="nobody", fighter_b_id="no-one")
            )
            with pytest.raises(IntegrityError):
                await session.flush()
            await session.rollback()
    finally:
        await engine.dispose()
