"""Database-oriented helpers for the user → fighter follow relation."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from fightpulse.db.models import Follow
from fightpulse.db.repositories.base import BaseRepository


class FollowRepository(BaseRepository):
    """Encapsulates SQLAlchemy operations required by the follow registry."""

    async def find_follow(self, user_id: str, fighter_id: str) -> Follow | None:
        query = select(Follow).where(
            Follow.user_id == user_id, Follow.fighter_id == fighter_id
        )
        async with self._gateway_call("follow lookup"):
            result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def create_follow(self, user_id: str, fighter_id: str) -> Follow:
        """Insert the pair inside a savepoint.

        A duplicate pair surfaces as :class:`~fightpulse.errors.PersistenceConflict`
        while the surrounding transaction stays usable.
        """
        follow = Follow(user_id=user_id, fighter_id=fighter_id)
        async with self._gateway_call("follow insert"):
            async with self._session.begin_nested():
                self._session.add(follow)
        return follow

    async def delete_follow(self, user_id: str, fighter_id: str) -> int:
        """Delete by the composite pair and return the number of removed rows."""
        statement = delete(Follow).where(
            Follow.user_id == user_id, Follow.fighter_id == fighter_id
        )
        async with self._gateway_call("follow delete"):
            result = await self._session.execute(statement)
        return result.rowcount or 0

    async def list_follows(self, user_id: str) -> list[Follow]:
        """Return the user's follows with fighters loaded, most recent first."""
        query = (
            select(Follow)
            .options(selectinload(Follow.fighter))
            .where(Follow.user_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .execution_options(populate_existing=True)
        )
        async with self._gateway_call("follow listing"):
            result = await self._session.execute(query)
        return list(result.scalars().all())
