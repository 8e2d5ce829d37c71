"""Schemas for identity claims and the synced user record."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IdentityClaim(BaseModel):
    """Verified attributes asserted by the identity provider about the caller.

    ``email`` is typed optional so a claim without it can still be represented;
    the identity sync rejects such claims with ``MissingRequiredClaim`` instead
    of defaulting the value.
    """

    model_config = ConfigDict(populate_by_name=True)

    sub: str = Field(..., min_length=1, description="Identity-provider subject id")
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    email_verified: bool | None = None
    login_time: datetime | None = Field(None, alias="loginTime")


class UserRead(BaseModel):
    """User record returned by the profile endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    auth0_id: str
    email: str
    username: str
    profile_pic: str | None = None
    email_verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class VerificationStatus(BaseModel):
    verified: bool
