"""FastAPI router for following fighters."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path

from fightpulse.db.models import User
from fightpulse.schemas.follow import FollowListResponse, FollowStatus
from fightpulse.services.dependencies import get_follow_service, require_current_user
from fightpulse.services.follow_service import FollowService

router = APIRouter()


@router.post("/fighters/{fighter_id}/follow", response_model=FollowStatus)
async def follow_fighter(
    fighter_id: str = Path(..., min_length=1),
    user: User = Depends(require_current_user),
    service: FollowService = Depends(get_follow_service),
) -> FollowStatus:
    """Follow a fighter. Repeating the call is a no-op."""

    try:
        return await service.follow(user_id=user.id, fighter_id=fighter_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/fighters/{fighter_id}/follow", response_model=FollowStatus)
async def unfollow_fighter(
    fighter_id: str = Path(..., min_length=1),
    user: User = Depends(require_current_user),
    service: FollowService = Depends(get_follow_service),
) -> FollowStatus:
    """Stop following a fighter; unfollowing a fighter that is not followed succeeds."""

    removed = await service.unfollow(user_id=user.id, fighter_id=fighter_id)
    return FollowStatus(
        user_id=user.id,
        fighter_id=fighter_id,
        following=False,
        changed=removed > 0,
    )


@router.get("/user/follows", response_model=FollowListResponse)
async def list_followed_fighters(
    user: User = Depends(require_current_user),
    service: FollowService = Depends(get_follow_service),
) -> FollowListResponse:
    return await service.list_followed(user_id=user.id)
