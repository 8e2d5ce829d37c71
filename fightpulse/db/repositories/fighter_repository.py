"""Fighter repository backing ingestion and the follow registry."""

from __future__ import annotations

from sqlalchemy import select

from fightpulse.db.models import Fighter
from fightpulse.db.repositories.base import BaseRepository


class FighterRepository(BaseRepository):
    """Lookups and writes for :class:`Fighter` rows."""

    async def get_fighter(self, fighter_id: str) -> Fighter | None:
        async with self._gateway_call("fighter lookup by id"):
            return await self._session.get(Fighter, fighter_id)

    async def find_by_name(self, first_name: str, last_name: str) -> Fighter | None:
        """Return the oldest fighter with an exact (first, last) name match.

        Names are not unique at the database level, so this is a best-effort
        first match rather than a guaranteed identity.
        """
        query = (
            select(Fighter)
            .where(Fighter.first_name == first_name, Fighter.last_name == last_name)
            .order_by(Fighter.created_at, Fighter.id)
            .limit(1)
        )
        async with self._gateway_call("fighter lookup by name"):
            result = await self._session.execute(query)
        return result.scalars().first()

    async def create_fighter(self, fighter: Fighter) -> Fighter:
        self._session.add(fighter)
        async with self._gateway_call("fighter insert"):
            await self._session.flush()
        return fighter

    async def save_fighter(self, fighter: Fighter) -> Fighter:
        async with self._gateway_call("fighter update"):
            await self._session.flush()
        return fighter
