"""User profile endpoints backed by the identity sync."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from fightpulse.db.models import User
from fightpulse.errors import MissingRequiredClaim
from fightpulse.schemas.user import IdentityClaim, UserRead, VerificationStatus
from fightpulse.services.dependencies import get_identity_service, require_current_user
from fightpulse.services.identity_service import IdentitySyncService

router = APIRouter()


@router.post("/profile", response_model=UserRead)
async def sync_profile(
    claim: IdentityClaim,
    _: User = Depends(require_current_user),
    identity: IdentitySyncService = Depends(get_identity_service),
) -> UserRead:
    """Sync the identity claim posted by the frontend and return the stored user.

    The body claim is used as-is; the bearer token only gates access.
    """

    try:
        user = await identity.sync_user(claim)
    except MissingRequiredClaim as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return UserRead.model_validate(user)


@router.get("/status", response_model=VerificationStatus)
async def verification_status(
    user: User = Depends(require_current_user),
) -> VerificationStatus:
    """Report the email-verified flag, already refreshed from the token by the guard."""

    return VerificationStatus(verified=bool(user.email_verified))
