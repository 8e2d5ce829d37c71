"""Normalisation of loosely structured scraper records.

The scraper emits free-text values: dates such as ``"November 01, 2025"``,
locations such as ``"Las Vegas, Nevada, USA"``, fighter display names and
result strings in several encodings. The helpers below turn those into the
canonical shapes in :mod:`fightpulse.services.ingestion.types`.

Failures that make a record unusable raise tagged errors
(:class:`~fightpulse.errors.UnresolvedDate`,
:class:`~fightpulse.errors.UnresolvedFighterName`); everything else degrades to
``None`` or :attr:`FightResult.UNKNOWN`.
"""

from __future__ import annotations

from datetime import date, datetime

from fightpulse.db.models import FightResult
from fightpulse.errors import UnresolvedDate, UnresolvedFighterName
from fightpulse.schemas.ingestion import ScrapedEvent, ScrapedFight, ScrapedFighter
from fightpulse.services.ingestion.types import (
    NormalizedEvent,
    NormalizedFight,
    NormalizedFighter,
    ParsedLocation,
    ParsedName,
)


_DATE_FORMATS = (
    "%B %d, %Y",  # November 01, 2025
    "%b %d, %Y",  # Nov 01, 2025
    "%A, %B %d, %Y",  # Saturday, November 01, 2025
    "%B %d %Y",
    "%d %B %Y",
    "%Y-%m-%d",
    "%m/%d/%Y",
)

_DRAW_MARKERS = ("draw", "tie")
_NO_CONTEST_MARKERS = ("no contest", "no-contest", "nc")


def clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    if not text or text == "--":
        return None
    return text


def parse_date(value: str | None) -> date:
    """Parse a human-readable event date.

    Raises:
        UnresolvedDate: when no known format matches.
    """
    text = clean_text(value)
    if not text:
        raise UnresolvedDate(value)

    # "Nov. 16, 2024" -> "Nov 16, 2024"
    text_normalized = " ".join(text.replace(".", "").split())
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text_normalized, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as exc:
        raise UnresolvedDate(value) from exc


def parse_location(value: str | None) -> ParsedLocation:
    """Split ``"City, Region, Country"`` into its city and country parts.

    The city is only derived when at least two components exist; the raw
    string is always kept verbatim.
    """
    if not value or not value.strip():
        return ParsedLocation(location=None, city=None, country=None)

    parts = [part.strip() for part in value.split(",")]
    country = parts[-1] if parts else None
    city = parts[0] if len(parts) > 1 else None
    return ParsedLocation(location=value, city=city or None, country=country or None)


def parse_fighter_name(value: str | None) -> ParsedName:
    """Split a display name into first and last name.

    One token is treated as a last name; with more tokens everything after
    the first one forms the last name, so ``"Jose Aldo Junior"`` keeps
    ``"Aldo Junior"`` together.

    Raises:
        UnresolvedFighterName: when the value has no tokens.
    """
    tokens = (value or "").split()
    if not tokens:
        raise UnresolvedFighterName(value)
    if len(tokens) == 1:
        return ParsedName(first_name="", last_name=tokens[0])
    return ParsedName(first_name=tokens[0], last_name=" ".join(tokens[1:]))


def parse_round(value: str | None) -> int | None:
    """Return the ending round, or ``None`` when nothing usable was recorded."""
    text = clean_text(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def resolve_fight_result(
    *,
    winner: str | None,
    result_text: str | None,
    fighter_a_name: str,
    fighter_b_name: str,
) -> FightResult:
    """Map a winner name or free-text result onto :class:`FightResult`.

    The winner is compared case-sensitively against the trimmed display names.
    When it matches neither side, the result text decides between draw and no
    contest; anything else stays unknown.
    """
    winner_name = clean_text(winner)
    if winner_name:
        if winner_name == fighter_a_name.strip():
            return FightResult.FIGHTER_A_WIN
        if winner_name == fighter_b_name.strip():
            return FightResult.FIGHTER_B_WIN

    text = (result_text or "").lower()
    if any(marker in text for marker in _DRAW_MARKERS):
        return FightResult.DRAW
    if any(marker in text for marker in _NO_CONTEST_MARKERS):
        return FightResult.NO_CONTEST
    return FightResult.UNKNOWN


def normalize_fighter(
    value: str | ScrapedFighter | None, *, weight_class: str | None = None
) -> NormalizedFighter:
    """Normalise either participant variant (display string or object)."""
    if value is None or isinstance(value, str):
        parsed = parse_fighter_name(value)
        return NormalizedFighter(
            first_name=parsed.first_name,
            last_name=parsed.last_name,
            display_name=(value or "").strip(),
            weight_class=weight_class,
        )

    first_name = clean_text(value.first_name)
    last_name = clean_text(value.last_name)
    if last_name is None and first_name is None:
        parsed = parse_fighter_name(value.name)
        display_name = (value.name or "").strip()
    elif last_name is None:
        # "firstName" alone behaves like a single-token name.
        parsed = ParsedName(first_name="", last_name=first_name or "")
        display_name = parsed.display_name
    else:
        parsed = ParsedName(first_name=first_name or "", last_name=last_name)
        display_name = clean_text(value.name) or parsed.display_name

    return NormalizedFighter(
        first_name=parsed.first_name,
        last_name=parsed.last_name,
        display_name=display_name,
        nickname=clean_text(value.nickname),
        weight_class=clean_text(value.weight_class) or weight_class,
        country=clean_text(value.country),
        image_url=clean_text(value.image_url),
        wins=value.wins,
        losses=value.losses,
        draws=value.draws,
        no_contests=value.no_contests,
    )


class IngestionNormalizer:
    """Turns validated scraper records into canonical entity shapes."""

    def normalize_event(self, record: ScrapedEvent, *, is_completed: bool) -> NormalizedEvent:
        return NormalizedEvent(
            name=record.name,
            date=parse_date(record.date),
            location=parse_location(record.location),
            venue=clean_text(record.venue),
            image_url=clean_text(record.image_url),
            event_url=record.event_url,
            is_completed=is_completed,
            fights=tuple(record.fights),
        )

    def normalize_fight(self, record: ScrapedFight, *, is_completed: bool) -> NormalizedFight:
        weight_class = clean_text(record.weight_class)
        fighter_a = normalize_fighter(record.fighter_a, weight_class=weight_class)
        fighter_b = normalize_fighter(record.fighter_b, weight_class=weight_class)

        if is_completed:
            result = resolve_fight_result(
                winner=record.winner,
                result_text=record.result,
                fighter_a_name=fighter_a.display_name,
                fighter_b_name=fighter_b.display_name,
            )
        else:
            result = FightResult.UNKNOWN

        return NormalizedFight(
            fighter_a=fighter_a,
            fighter_b=fighter_b,
            result=result,
            round=parse_round(record.round),
            method=clean_text(record.method),
            weight_class=weight_class,
            is_main_event=record.is_main_event,
            is_title_fight=record.is_title_fight,
        )


__all__ = [
    "IngestionNormalizer",
    "clean_text",
    "normalize_fighter",
    "parse_date",
    "parse_fighter_name",
    "parse_location",
    "parse_round",
    "resolve_fight_result",
]
