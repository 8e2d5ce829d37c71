"""Pydantic schemas for the scraper ingestion endpoint.

Scraped records arrive in camelCase (``eventUrl``, ``fighterA``, ``noContests``)
and are accepted by alias or by field name. Record-level models are lenient:
unknown keys are ignored and most fields are optional, because one malformed
record must only cost that record, never the batch.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IngestionType(str, Enum):
    """Kinds of scrape runs the ingestion endpoint accepts."""

    COMPLETED_EVENTS = "completed_events"
    UPCOMING_EVENTS = "upcoming_events"


class _ScrapedRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ScrapedFighter(_ScrapedRecord):
    """Fighter object variant of a fight participant."""

    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    name: str | None = Field(
        None, description="Full display name, parsed when first/last are absent."
    )
    nickname: str | None = None
    country: str | None = None
    image_url: str | None = Field(None, alias="imageUrl")
    weight_class: str | None = Field(None, alias="weightClass")
    wins: int | None = Field(None, ge=0)
    losses: int | None = Field(None, ge=0)
    draws: int | None = Field(None, ge=0)
    no_contests: int | None = Field(None, ge=0, alias="noContests")


class ScrapedFight(_ScrapedRecord):
    """A bout on a scraped fight card.

    ``fighter_a``/``fighter_b`` accept either a display-name string or a
    :class:`ScrapedFighter` object.
    """

    fighter_a: str | ScrapedFighter | None = Field(None, alias="fighterA")
    fighter_b: str | ScrapedFighter | None = Field(None, alias="fighterB")
    weight_class: str | None = Field(None, alias="weightClass")
    is_main_event: bool = Field(False, alias="isMainEvent")
    is_title_fight: bool = Field(False, alias="isTitleFight")
    winner: str | None = None
    result: str | None = None
    method: str | None = None
    round: str | None = None

    @field_validator("round", mode="before")
    @classmethod
    def _round_as_text(cls, value: Any) -> Any:
        """Rounds are normalised from text; integers are folded into that path."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ScrapedEvent(_ScrapedRecord):
    """An event as emitted by the scraper."""

    name: str = Field(..., min_length=1)
    date: str | None = Field(None, description='Human readable, e.g. "November 01, 2025"')
    location: str | None = None
    venue: str | None = None
    image_url: str | None = Field(None, alias="imageUrl")
    event_url: str | None = Field(None, alias="eventUrl")
    # Fights stay raw so each one is validated as its own unit.
    fights: list[Any] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Event name must not be blank")
        return cleaned

    @field_validator("event_url")
    @classmethod
    def _blank_url_is_absent(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class IngestionPayload(BaseModel):
    """Validated envelope. ``data`` stays raw so each record is parsed in isolation."""

    type: IngestionType
    data: list[Any]

    @property
    def is_completed(self) -> bool:
        return self.type is IngestionType.COMPLETED_EVENTS


class EntityCounts(BaseModel):
    created: int = 0
    updated: int = 0


class IngestionSummary(BaseModel):
    """Aggregated outcome of one ingestion batch, including partial failures."""

    success: bool = True
    type: IngestionType
    total: int
    events: EntityCounts = Field(default_factory=EntityCounts)
    fighters: EntityCounts = Field(default_factory=EntityCounts)
    fights: EntityCounts = Field(default_factory=EntityCounts)
    errors: list[str] = Field(default_factory=list)
    timestamp: datetime


class IngestionFailure(BaseModel):
    """In-body rejection of a malformed payload (still served with HTTP 200)."""

    success: bool = False
    error: str
    timestamp: datetime


__all__ = [
    "EntityCounts",
    "IngestionFailure",
    "IngestionPayload",
    "IngestionSummary",
    "IngestionType",
    "ScrapedEvent",
    "ScrapedFight",
    "ScrapedFighter",
]
