"""Synchronise identity-provider claims into local user records.

The sync runs on every authenticated request, so the update path avoids
rewriting profile columns when nothing changed and only refreshes the
last-login timestamp.
"""

from __future__ import annotations

import logging
import re

from fightpulse.db.models import User, utcnow
from fightpulse.db.repositories import UserRepository
from fightpulse.errors import MissingRequiredClaim
from fightpulse.schemas.user import IdentityClaim

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


def generate_username(email: str, name: str | None = None) -> str:
    """Derive a username from the display name, else the email local part."""

    if name:
        return _WHITESPACE_RUN.sub("_", name.lower())
    return email.split("@")[0]


class IdentitySyncService:
    """Find-or-create users keyed by the identity-provider subject id."""

    def __init__(self, repository: UserRepository) -> None:
        self._repository = repository

    async def sync_user(self, claim: IdentityClaim) -> User:
        """Create or refresh the local user described by ``claim``.

        ``email_verified`` is monotonic: a claim reporting ``False`` never
        downgrades a user that was already verified.

        Raises:
            MissingRequiredClaim: when the claim carries no email.
        """

        if not claim.email:
            raise MissingRequiredClaim("email")

        login_time = claim.login_time or utcnow()
        user = await self._repository.find_by_auth0_id(claim.sub)

        if user is None:
            user = User(
                auth0_id=claim.sub,
                email=claim.email,
                username=generate_username(claim.email, claim.name),
                profile_pic=claim.picture,
                email_verified=bool(claim.email_verified),
                last_login_at=login_time,
            )
            await self._repository.create_user(user)
            logger.info("Created user %s for subject %s", user.id, claim.sub)
            return user

        final_verified = bool(claim.email_verified) or user.email_verified
        picture = claim.picture if claim.picture is not None else user.profile_pic
        profile_outdated = (
            user.email != claim.email
            or user.profile_pic != picture
            or user.email_verified != final_verified
        )

        if profile_outdated:
            user.email = claim.email
            user.profile_pic = picture
            user.email_verified = final_verified
            logger.debug("Refreshing profile for user %s", user.id)
        user.last_login_at = login_time

        await self._repository.save_user(user)
        return user

    async def find_by_subject(self, subject: str) -> User | None:
        return await self._repository.find_by_auth0_id(subject)

    async def find_by_id(self, user_id: str) -> User | None:
        return await self._repository.get_user(user_id)


__all__ = ["IdentitySyncService", "generate_username"]
