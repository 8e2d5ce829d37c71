"""Shared type definitions for the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from fightpulse.db.models import FightResult


class UpsertOutcome(str, Enum):
    """What an upsert did to the row addressed by a natural key."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class ParsedLocation:
    """Raw location string plus the city/country derived from it."""

    location: str | None
    city: str | None
    country: str | None


@dataclass(frozen=True, slots=True)
class ParsedName:
    first_name: str
    last_name: str

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass(frozen=True, slots=True)
class NormalizedFighter:
    """Canonical fighter shape; ``display_name`` is what winner strings match against."""

    first_name: str
    last_name: str
    display_name: str
    nickname: str | None = None
    weight_class: str | None = None
    country: str | None = None
    image_url: str | None = None
    wins: int | None = None
    losses: int | None = None
    draws: int | None = None
    no_contests: int | None = None

    @property
    def carries_record(self) -> bool:
        """Counters are only trusted when the payload supplies a win count."""
        return self.wins is not None


@dataclass(frozen=True, slots=True)
class NormalizedFight:
    fighter_a: NormalizedFighter
    fighter_b: NormalizedFighter
    result: FightResult
    round: int | None
    method: str | None
    weight_class: str | None
    is_main_event: bool
    is_title_fight: bool

    @property
    def label(self) -> str:
        return f"{self.fighter_a.display_name} vs {self.fighter_b.display_name}"


@dataclass(frozen=True, slots=True)
class NormalizedEvent:
    name: str
    date: date
    location: ParsedLocation
    venue: str | None
    image_url: str | None
    event_url: str | None
    is_completed: bool
    fights: tuple[Any, ...] = field(default_factory=tuple)
