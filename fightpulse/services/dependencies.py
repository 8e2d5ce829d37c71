"""FastAPI dependency wiring for the FightPulse services.

Services and repositories stay free of web-layer concerns; the factories here
resolve the request-scoped database session, build the collaborators and hand
the finished service to the routers. Tests override individual factories via
``app.dependency_overrides``.
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fightpulse.db.connection import get_db
from fightpulse.db.models import User
from fightpulse.db.repositories import (
    EventRepository,
    FighterRepository,
    FightRepository,
    FollowRepository,
    SessionUnitOfWork,
    UserRepository,
)
from fightpulse.errors import MissingRequiredClaim
from fightpulse.services.auth_service import ClaimVerifier, InvalidToken
from fightpulse.services.follow_service import FollowService
from fightpulse.services.identity_service import IdentitySyncService
from fightpulse.services.ingestion import IngestionCoordinator, IngestionNormalizer
from fightpulse.settings import get_settings

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def get_claim_verifier() -> ClaimVerifier:
    return ClaimVerifier.from_settings(get_settings())


def get_identity_service(
    session: AsyncSession = Depends(get_db),
) -> IdentitySyncService:
    return IdentitySyncService(UserRepository(session))


def get_follow_service(session: AsyncSession = Depends(get_db)) -> FollowService:
    return FollowService(
        follows=FollowRepository(session),
        fighters=FighterRepository(session),
    )


def get_ingestion_coordinator(
    session: AsyncSession = Depends(get_db),
) -> IngestionCoordinator:
    """Wire repositories around one session; each unit commits on that session."""

    return IngestionCoordinator(
        events=EventRepository(session),
        fighters=FighterRepository(session),
        fights=FightRepository(session),
        unit_of_work=SessionUnitOfWork(session),
        normalizer=IngestionNormalizer(),
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    verifier: ClaimVerifier = Depends(get_claim_verifier),
    identity: IdentitySyncService = Depends(get_identity_service),
) -> User:
    """Verify the bearer token, sync the caller and return the local user.

    Every failure (no token, bad token, token without an email claim) is
    reported as HTTP 401.
    """

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authenticated")

    try:
        claim = verifier.verify(credentials.credentials)
        return await identity.sync_user(claim)
    except InvalidToken as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise _unauthorized(str(exc)) from exc
    except MissingRequiredClaim as exc:
        logger.warning("Bearer token missing claim %s", exc.claim)
        raise _unauthorized(
            "Access token missing email claim. Check the identity provider action."
        ) from exc


__all__ = [
    "get_claim_verifier",
    "get_follow_service",
    "get_identity_service",
    "get_ingestion_coordinator",
    "require_current_user",
]
