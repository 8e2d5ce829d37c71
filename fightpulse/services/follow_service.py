"""Business logic behind the follows API endpoints."""

from __future__ import annotations

import logging

from fightpulse.db.repositories import FighterRepository, FollowRepository
from fightpulse.errors import PersistenceConflict
from fightpulse.schemas.follow import FollowedFighter, FollowListResponse, FollowStatus

logger = logging.getLogger(__name__)


class FollowService:
    """Idempotent follow/unfollow over the (user, fighter) pair."""

    def __init__(
        self,
        *,
        follows: FollowRepository,
        fighters: FighterRepository,
    ) -> None:
        self._follows = follows
        self._fighters = fighters

    async def follow(self, *, user_id: str, fighter_id: str) -> FollowStatus:
        """Follow a fighter; following twice is a no-op.

        Raises:
            LookupError: when ``fighter_id`` does not reference a fighter.
        """

        if await self._fighters.get_fighter(fighter_id) is None:
            raise LookupError(f"Fighter {fighter_id} not found")

        existing = await self._follows.find_follow(user_id, fighter_id)
        if existing is not None:
            return FollowStatus(
                user_id=user_id,
                fighter_id=fighter_id,
                following=True,
                changed=False,
                followed_at=existing.created_at,
            )

        try:
            follow = await self._follows.create_follow(user_id, fighter_id)
        except PersistenceConflict:
            # A concurrent request inserted the same pair first.
            logger.debug("Follow %s -> %s already exists", user_id, fighter_id)
            return FollowStatus(
                user_id=user_id,
                fighter_id=fighter_id,
                following=True,
                changed=False,
            )

        return FollowStatus(
            user_id=user_id,
            fighter_id=fighter_id,
            following=True,
            changed=True,
            followed_at=follow.created_at,
        )

    async def unfollow(self, *, user_id: str, fighter_id: str) -> int:
        """Remove the pair and return how many rows went away (0 or 1)."""

        return await self._follows.delete_follow(user_id, fighter_id)

    async def list_followed(self, *, user_id: str) -> FollowListResponse:
        follows = await self._follows.list_follows(user_id)
        return FollowListResponse(
            total=len(follows),
            follows=[FollowedFighter.model_validate(follow) for follow in follows],
        )


__all__ = ["FollowService"]
