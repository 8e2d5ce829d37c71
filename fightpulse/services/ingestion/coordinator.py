"""Upsert coordination for scraped event batches.

Batch walk::

    for each event:        parse -> upsert event -> commit
        for each fight:    validate -> resolve fighters -> map result -> upsert -> commit

Every event and every fight is its own unit of work. A failing unit is rolled
back, recorded as a human-readable string in the summary and skipped; the walk
then continues with the next sibling, so a batch never aborts early. Counters
are only folded into the summary after the unit commits.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from fightpulse.db.models import DEFAULT_PROMOTION, Event, Fight, Fighter, utcnow
from fightpulse.db.repositories import (
    EventRepository,
    FighterRepository,
    FightRepository,
    SessionUnitOfWork,
)
from fightpulse.errors import FightPulseError, PayloadValidationError, UnresolvedDate
from fightpulse.schemas.ingestion import (
    EntityCounts,
    IngestionPayload,
    IngestionSummary,
    IngestionType,
    ScrapedEvent,
    ScrapedFight,
)
from fightpulse.services.ingestion.normalizer import IngestionNormalizer
from fightpulse.services.ingestion.types import (
    NormalizedEvent,
    NormalizedFight,
    NormalizedFighter,
    UpsertOutcome,
)

logger = logging.getLogger(__name__)

# Failures that cost a single unit of work instead of the whole batch.
_UNIT_ERRORS = (FightPulseError, SQLAlchemyError, ValidationError, ValueError)


def validate_payload(raw: Any) -> IngestionPayload:
    """Validate the ingestion envelope before any record is touched.

    Raises:
        PayloadValidationError: when ``type`` is missing/unknown or ``data`` is
            not an array.
    """
    if not isinstance(raw, Mapping):
        raise PayloadValidationError(
            "Invalid payload. Expected { type: string, data: array }"
        )

    payload_type = raw.get("type")
    data = raw.get("data")
    if not payload_type or not isinstance(data, list):
        raise PayloadValidationError(
            "Invalid payload. Expected { type: string, data: array }",
            type=payload_type,
        )

    try:
        ingestion_type = IngestionType(payload_type)
    except ValueError as exc:
        raise PayloadValidationError(
            'Invalid type. Must be "completed_events" or "upcoming_events"',
            type=payload_type,
        ) from exc

    return IngestionPayload(type=ingestion_type, data=data)


def _describe_record(record: Any) -> str:
    if isinstance(record, Mapping):
        name = record.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return "<unnamed event>"


def describe_error(exc: Exception) -> str:
    """One-line rendering of ``exc``; pydantic errors become ``loc: msg`` pairs."""
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'record'}: {error['msg']}"
            for error in exc.errors()
        )
    return str(exc)


@dataclass
class _UnitCounts:
    """Counters accumulated inside one unit, merged only after it commits."""

    fighters_created: int = 0
    fighters_updated: int = 0
    fights_created: int = 0
    fights_updated: int = 0


@dataclass
class _BatchTally:
    events: EntityCounts = field(default_factory=EntityCounts)
    fighters: EntityCounts = field(default_factory=EntityCounts)
    fights: EntityCounts = field(default_factory=EntityCounts)
    errors: list[str] = field(default_factory=list)

    def record_event(self, outcome: UpsertOutcome) -> None:
        _bump(self.events, outcome)

    def merge(self, unit: _UnitCounts) -> None:
        self.fighters.created += unit.fighters_created
        self.fighters.updated += unit.fighters_updated
        self.fights.created += unit.fights_created
        self.fights.updated += unit.fights_updated


def _bump(counts: EntityCounts, outcome: UpsertOutcome) -> None:
    if outcome is UpsertOutcome.CREATED:
        counts.created += 1
    elif outcome is UpsertOutcome.UPDATED:
        counts.updated += 1


class IngestionCoordinator:
    """Decides create-vs-update per entity and aggregates per-run statistics."""

    def __init__(
        self,
        *,
        events: EventRepository,
        fighters: FighterRepository,
        fights: FightRepository,
        unit_of_work: SessionUnitOfWork,
        normalizer: IngestionNormalizer,
    ) -> None:
        self._events = events
        self._fighters = fighters
        self._fights = fights
        self._unit_of_work = unit_of_work
        self._normalizer = normalizer

    async def ingest(self, payload: IngestionPayload) -> IngestionSummary:
        """Process every record of ``payload`` sequentially and summarise the run."""

        tally = _BatchTally()
        for record in payload.data:
            await self._ingest_event(record, payload.is_completed, tally)

        summary = IngestionSummary(
            success=True,
            type=payload.type,
            total=len(payload.data),
            events=tally.events,
            fighters=tally.fighters,
            fights=tally.fights,
            errors=tally.errors,
            timestamp=datetime.now(timezone.utc),
        )
        logger.info(
            "Ingested %s batch: %s records, events %s/%s, fighters %s/%s, "
            "fights %s/%s (created/updated), %s errors",
            payload.type.value,
            summary.total,
            summary.events.created,
            summary.events.updated,
            summary.fighters.created,
            summary.fighters.updated,
            summary.fights.created,
            summary.fights.updated,
            len(summary.errors),
        )
        return summary

    async def _ingest_event(
        self, record: Any, is_completed: bool, tally: _BatchTally
    ) -> None:
        label = _describe_record(record)
        try:
            scraped = ScrapedEvent.model_validate(record)
            label = scraped.name
            normalized = self._normalizer.normalize_event(
                scraped, is_completed=is_completed
            )
            event, outcome = await self.upsert_event(normalized)
            event_id = event.id
            await self._unit_of_work.commit()
        except UnresolvedDate:
            tally.errors.append(f"Invalid date for event: {label}")
            logger.warning("Skipping event %s: unparseable date", label)
            return
        except _UNIT_ERRORS as exc:
            await self._unit_of_work.rollback()
            message = describe_error(exc)
            tally.errors.append(f"Error processing {label}: {message}")
            logger.warning("Error ingesting event %s: %s", label, message)
            return

        tally.record_event(outcome)

        for index, fight_record in enumerate(normalized.fights, start=1):
            await self._ingest_fight(
                fight_record,
                event_id=event_id,
                event_name=normalized.name,
                position=index,
                is_completed=is_completed,
                tally=tally,
            )

    async def _ingest_fight(
        self,
        record: Any,
        *,
        event_id: str,
        event_name: str,
        position: int,
        is_completed: bool,
        tally: _BatchTally,
    ) -> None:
        unit = _UnitCounts()
        label = f"fight #{position}"
        try:
            scraped = ScrapedFight.model_validate(record)
            normalized = self._normalizer.normalize_fight(
                scraped, is_completed=is_completed
            )
            label = normalized.label
            await self._upsert_fight_unit(normalized, event_id, is_completed, unit)
            await self._unit_of_work.commit()
        except _UNIT_ERRORS as exc:
            await self._unit_of_work.rollback()
            message = describe_error(exc)
            tally.errors.append(f"Error processing {label} in {event_name}: {message}")
            logger.warning("Error ingesting %s in %s: %s", label, event_name, message)
            return

        tally.merge(unit)

    async def _upsert_fight_unit(
        self,
        normalized: NormalizedFight,
        event_id: str,
        is_completed: bool,
        unit: _UnitCounts,
    ) -> None:
        fighter_ids: list[str] = []
        for participant in (normalized.fighter_a, normalized.fighter_b):
            fighter, outcome = await self.find_or_create_fighter(
                participant, is_completed=is_completed
            )
            fighter_ids.append(fighter.id)
            if outcome is UpsertOutcome.CREATED:
                unit.fighters_created += 1
            elif outcome is UpsertOutcome.UPDATED:
                unit.fighters_updated += 1

        _, outcome = await self.upsert_fight(
            normalized,
            event_id=event_id,
            fighter_a_id=fighter_ids[0],
            fighter_b_id=fighter_ids[1],
        )
        if outcome is UpsertOutcome.CREATED:
            unit.fights_created += 1
        else:
            unit.fights_updated += 1

    async def upsert_event(self, data: NormalizedEvent) -> tuple[Event, UpsertOutcome]:
        """Create or update an event keyed by URL, else by (name, date)."""

        if data.event_url:
            existing = await self._events.find_by_url(data.event_url)
        else:
            existing = await self._events.find_by_name_and_date(data.name, data.date)

        if existing is not None:
            if data.event_url:
                existing.name = data.name
                existing.date = data.date
            existing.location = data.location.location
            existing.city = data.location.city
            existing.country = data.location.country
            existing.venue = data.venue or existing.venue
            existing.image_url = data.image_url or existing.image_url
            existing.promotion = DEFAULT_PROMOTION
            existing.is_completed = data.is_completed
            existing.updated_at = utcnow()
            await self._events.save_event(existing)
            return existing, UpsertOutcome.UPDATED

        event = Event(
            name=data.name,
            date=data.date,
            location=data.location.location,
            city=data.location.city,
            country=data.location.country,
            venue=data.venue,
            image_url=data.image_url,
            promotion=DEFAULT_PROMOTION,
            is_completed=data.is_completed,
            event_url=data.event_url,
        )
        await self._events.create_event(event)
        return event, UpsertOutcome.CREATED

    async def find_or_create_fighter(
        self, data: NormalizedFighter, *, is_completed: bool
    ) -> tuple[Fighter, UpsertOutcome]:
        """Resolve a fighter by exact (first, last) name, creating it when absent.

        Existing fighters only take new values from completed-event payloads
        that carry a win count; otherwise they are left untouched.
        """

        existing = await self._fighters.find_by_name(data.first_name, data.last_name)
        if existing is not None:
            if not (is_completed and data.carries_record):
                return existing, UpsertOutcome.UNCHANGED

            existing.nickname = data.nickname or existing.nickname
            existing.weight_class = data.weight_class
            existing.country = data.country or existing.country
            existing.image_url = data.image_url or existing.image_url
            existing.wins = data.wins or 0
            existing.losses = data.losses or 0
            existing.draws = data.draws or 0
            existing.no_contests = data.no_contests or 0
            existing.updated_at = utcnow()
            await self._fighters.save_fighter(existing)
            return existing, UpsertOutcome.UPDATED

        fighter = Fighter(
            first_name=data.first_name,
            last_name=data.last_name,
            nickname=data.nickname,
            weight_class=data.weight_class,
            country=data.country,
            image_url=data.image_url,
            wins=data.wins or 0,
            losses=data.losses or 0,
            draws=data.draws or 0,
            no_contests=data.no_contests or 0,
        )
        await self._fighters.create_fighter(fighter)
        return fighter, UpsertOutcome.CREATED

    async def upsert_fight(
        self,
        data: NormalizedFight,
        *,
        event_id: str,
        fighter_a_id: str,
        fighter_b_id: str,
    ) -> tuple[Fight, UpsertOutcome]:
        """Create or update the fight addressed by the ordered (event, A, B) triple."""

        existing = await self._fights.find_by_participants(
            event_id, fighter_a_id, fighter_b_id
        )
        if existing is not None:
            existing.weight_class = data.weight_class
            existing.is_main_event = data.is_main_event
            existing.is_title_fight = data.is_title_fight
            existing.result = data.result
            existing.round = data.round
            existing.method = data.method
            existing.updated_at = utcnow()
            await self._fights.save_fight(existing)
            return existing, UpsertOutcome.UPDATED

        fight = Fight(
            event_id=event_id,
            fighter_a_id=fighter_a_id,
            fighter_b_id=fighter_b_id,
            weight_class=data.weight_class,
            is_main_event=data.is_main_event,
            is_title_fight=data.is_title_fight,
            result=data.result,
            round=data.round,
            method=data.method,
        )
        await self._fights.create_fight(fight)
        return fight, UpsertOutcome.CREATED


def summarize_counts(summary: IngestionSummary) -> Sequence[tuple[str, int, int]]:
    """Rows of (entity, created, updated) used by the CLI summary table."""
    return (
        ("events", summary.events.created, summary.events.updated),
        ("fighters", summary.fighters.created, summary.fighters.updated),
        ("fights", summary.fights.created, summary.fights.updated),
    )


__all__ = [
    "IngestionCoordinator",
    "summarize_counts",
    "validate_payload",
]
