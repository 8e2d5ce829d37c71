#!/usr/bin/env python
"""Create the FightPulse tables directly from the ORM metadata.

Intended for local SQLite databases and tests; PostgreSQL deployments use
``alembic upgrade head`` instead.
"""
import asyncio

from dotenv import load_dotenv

load_dotenv()

from fightpulse.db.connection import create_engine, get_database_url
from fightpulse.db.models import Base
from fightpulse.main import _sanitize_database_url, validate_environment


async def init_db() -> None:
    engine = create_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print(f"✓ Tables created on {_sanitize_database_url(get_database_url())}")


if __name__ == "__main__":
    validate_environment()
    asyncio.run(init_db())
