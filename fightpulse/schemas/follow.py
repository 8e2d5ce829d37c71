"""Pydantic schemas that power the follows API surface."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FighterSummary(BaseModel):
    """Fighter details embedded in follow listings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    nickname: str | None = None
    weight_class: str | None = None
    country: str | None = None
    image_url: str | None = None
    wins: int = 0
    losses: int = 0
    draws: int = 0
    no_contests: int = 0


class FollowedFighter(BaseModel):
    """One follow row joined with the followed fighter."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Surrogate primary key for the follow row")
    user_id: str
    fighter_id: str
    created_at: datetime = Field(..., description="When the user started following.")
    fighter: FighterSummary


class FollowStatus(BaseModel):
    """Outcome of a follow or unfollow call.

    ``changed`` is ``False`` when the call was a no-op (already following, or
    nothing to remove).
    """

    user_id: str
    fighter_id: str
    following: bool
    changed: bool
    followed_at: datetime | None = None


class FollowListResponse(BaseModel):
    total: int
    follows: list[FollowedFighter] = Field(default_factory=list)
