"""User repository for identity sync."""

from __future__ import annotations

from sqlalchemy import select

from fightpulse.db.models import User
from fightpulse.db.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    """Lookups and writes for :class:`User` rows."""

    async def find_by_auth0_id(self, auth0_id: str) -> User | None:
        query = select(User).where(User.auth0_id == auth0_id)
        async with self._gateway_call("user lookup by subject"):
            result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def get_user(self, user_id: str) -> User | None:
        async with self._gateway_call("user lookup by id"):
            return await self._session.get(User, user_id)

    async def create_user(self, user: User) -> User:
        self._session.add(user)
        async with self._gateway_call("user insert"):
            await self._session.flush()
        return user

    async def save_user(self, user: User) -> User:
        async with self._gateway_call("user update"):
            await self._session.flush()
        return user
