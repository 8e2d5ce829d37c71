"""Fight repository for the ingestion upsert flow.

This repository handles:
- Natural-key lookup by (event, fighter A, fighter B)
- Fight inserts and in-place updates
"""

from __future__ import annotations

from sqlalchemy import select

from fightpulse.db.models import Fight
from fightpulse.db.repositories.base import BaseRepository


class FightRepository(BaseRepository):
    """Repository for fight CRUD operations."""

    async def find_by_participants(
        self, event_id: str, fighter_a_id: str, fighter_b_id: str
    ) -> Fight | None:
        """Return the fight for the exact ordered triple.

        The pair is not symmetric: swapping fighter A and B addresses a
        different row.
        """
        query = select(Fight).where(
            Fight.event_id == event_id,
            Fight.fighter_a_id == fighter_a_id,
            Fight.fighter_b_id == fighter_b_id,
        )
        async with self._gateway_call("fight lookup"):
            result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def create_fight(self, fight: Fight) -> Fight:
        """Create a new fight record in the database."""
        self._session.add(fight)
        async with self._gateway_call("fight insert"):
            await self._session.flush()
        return fight

    async def save_fight(self, fight: Fight) -> Fight:
        async with self._gateway_call("fight update"):
            await self._session.flush()
        return fight
