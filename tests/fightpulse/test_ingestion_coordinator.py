"""Integration tests for the ingestion upsert flow against in-memory SQLite."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fightpulse.db.models import Event, Fight, Fighter, FightResult
from fightpulse.db.repositories import EventRepository
from fightpulse.errors import PayloadValidationError, PersistenceError
from fightpulse.schemas.ingestion import IngestionPayload, IngestionType
from fightpulse.services.ingestion import IngestionCoordinator, validate_payload


def _event(name: str = "UFC 305", **overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "name": name,
        "date": "August 17, 2024",
        "location": "Perth, Western Australia, Australia",
        "venue": "RAC Arena",
        "fights": [
            {
                "fighterA": "Dan Hooker",
                "fighterB": "Mateusz Gamrot",
                "winner": "Dan Hooker",
                "method": "Decision - Split",
                "round": "3",
                "weightClass": "Lightweight",
            }
        ],
    }
    record.update(overrides)
    return record


def _payload(*records: dict[str, Any], completed: bool = True) -> IngestionPayload:
    kind = "completed_events" if completed else "upcoming_events"
    return validate_payload({"type": kind, "data": list(records)})


async def _count(session: AsyncSession, model: type) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


def test_validate_payload_rejects_unknown_type() -> None:
    with pytest.raises(PayloadValidationError) as excinfo:
        validate_payload({"type": "past_events", "data": []})
    assert "Invalid type" in str(excinfo.value)


@pytest.mark.parametrize(
    "raw",
    [None, [], "events", {"type": "completed_events"}, {"type": "completed_events", "data": {}}],
)
def test_validate_payload_rejects_malformed_envelope(raw: Any) -> None:
    with pytest.raises(PayloadValidationError) as excinfo:
        validate_payload(raw)
    assert str(excinfo.value) == "Invalid payload. Expected { type: string, data: array }"


def test_validate_payload_accepts_envelope() -> None:
    payload = validate_payload({"type": "upcoming_events", "data": [{"name": "x"}]})
    assert payload.type is IngestionType.UPCOMING_EVENTS
    assert payload.is_completed is False


@pytest.mark.asyncio
async def test_ingest_creates_event_fighters_and_fight(
    coordinator: IngestionCoordinator, session: AsyncSession
) -> None:
    summary = await coordinator.ingest(_payload(_event()))

    assert summary.success is True
    assert summary.total == 1
    assert summary.errors == []
    assert (summary.events.created, summary.events.updated) == (1, 0)
    assert (summary.fighters.created, summary.fighters.updated) == (2, 0)
    assert (summary.fights.created, summary.fights.updated) == (1, 0)

    event = (await session.execute(select(Event))).scalar_one()
    assert event.date == date(2024, 8, 17)
    assert event.city == "Perth"
    assert event.country == "Australia"
    assert event.promotion == "UFC"
    assert event.is_completed is True

    fight = (await session.execute(select(Fight))).scalar_one()
    assert fight.result == FightResult.FIGHTER_A_WIN.value
    assert fight.round == 3
    assert fight.method == "Decision - Split"


@pytest.mark.asyncio
async def test_reingesting_same_event_updates_instead_of_creating(
    coordinator: IngestionCoordinator, session: AsyncSession
) -> None:
    await coordinator.ingest(_payload(_event()))
    summary = await coordinator.ingest(_payload(_event(venue="Perth Arena")))

    assert (summary.events.created, summary.events.updated) == (0, 1)
    assert (summary.fights.created, summary.fights.updated) == (0, 1)
    # Existing fighters without a win count are left untouched.
    assert (summary.fighters.created, summary.fighters.updated) == (0, 0)

    assert await _count(session, Event) == 1
    assert await _count(session, Fight) == 1
    assert await _count(session, Fighter) == 2
    event = (await session.execute(select(Event))).scalar_one()
    assert event.venue == "Perth Arena"


@pytest.mark.asyncio
async def test_event_url_is_preferred_natural_key(
    coordinator: IngestionCoordinator, session: AsyncSession
) -> None:
    url = "http://ufcstats.com/event-details/abc"
    await coordinator.ingest(_payload(_event(eventUrl=url, fights=[])))
    summary = await coordinator.ingest(
        _payload(_event(name="UFC 305: Du Plessis vs Adesanya", eventUrl=url, fights=[]))
    )

    assert summary.events.updated == 1
    event = await EventRepository(session).find_by_url(url)
    assert event is not None
    assert event.name == "UFC 305: Du Plessis vs Adesanya"
    assert await _count(session, Event) == 1


@pytest.mark.asyncio
async def test_swapping_fighter_order_creates_distinct_fight(
    coordinator: IngestionCoordinator, session: AsyncSession
) -> None:
    swapped = _event(
        fights=[{"fighterA": "Mateusz Gamrot", "fighterB": "Dan Hooker"}]
    )
    await coordinator.ingest(_payload(_event()))
    summary = await coordinator.ingest(_payload(swapped))

    assert summary.fights.created == 1
    event = (await session.execute(select(Event))).scalar_one()
    fights = (
        (await session.execute(select(Fight).where(Fight.event_id == event.id)))
        .scalars()
        .all()
    )
    assert len(fights) == 2
    assert {fight.result for fight in fights} == {
        FightResult.FIGHTER_A_WIN.value,
        FightResult.UNKNOWN.value,
    }


@pytest.mark.asyncio
async def test_bad_date_only_skips_that_event(
    coordinator: IngestionCoordinator, session: AsyncSession
) -> None:
    summary = await coordinator.ingest(
        _payload(
            _event(name="UFC Broken", date="sometime soon"),
            _event(name="UFC 306", fights=[]),
        )
    )

    assert summary.total == 2
    assert summary.events.created == 1
    assert summary.errors == ["Invalid date for event: UFC Broken"]
    assert await _count(session, Event) == 1
    assert await _count(session, Fighter) == 0


@pytest.mark.asyncio
async def test_invalid_event_record_is_reported_and_skipped(
    coordinator: IngestionCoordinator,
) -> None:
    summary = await coordinator.ingest(
        _payload({"name": "   ", "date": "August 17, 2024"}, _event(fights=[]))
    )

    assert summary.events.created == 1
    assert len(summary.errors) == 1
    assert summary.errors[0].startswith("Error processing <unnamed event>:")


@pytest.mark.asyncio
async def test_unparseable_fighter_name_skips_only_that_fight(
    coordinator: IngestionCoordinator, session: AsyncSession
) -> None:
    record = _event(
        fights=[
            {"fighterA": "   ", "fighterB": "Mateusz Gamrot"},
            {"fighterA": "Tai Tuivasa", "fighterB": "Jairzinho Rozenstruik"},
        ]
    )
    summary = await coordinator.ingest(_payload(record))

    assert summary.events.created == 1
    assert summary.fights.created == 1
    assert summary.fighters.created == 2
    assert len(summary.errors) == 1
    assert "in UFC 305" in summary.errors[0]
    assert await _count(session, Fight) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "bad_fight",
    [
        {"fighterA": 123, "fighterB": "Mateusz Gamrot"},
        {"fighterA": {"name": "Dan Hooker", "wins": -1}, "fighterB": "Mateusz Gamrot"},
        {"fighterA": "Dan Hooker", "fighterB": "Mateusz Gamrot", "isMainEvent": None},
        {"fighterA": "Dan Hooker", "fighterB": "Mateusz Gamrot", "round": 2.5},
    ],
)
async def test_malformed_fight_skips_only_that_fight(
    coordinator: IngestionCoordinator, session: AsyncSession, bad_fight: dict[str, Any]
) -> None:
    record = _event(
        fights=[
            bad_fight,
            {"fighterA": "Tai Tuivasa", "fighterB": "Jairzinho Rozenstruik"},
        ]
    )
    summary = await coordinator.ingest(_payload(record))

    assert summary.events.created == 1
    assert summary.fights.created == 1
    assert summary.fighters.created == 2
    assert len(summary.errors) == 1
    error = summary.errors[0]
    assert error.startswith("Error processing fight #1 in UFC 305: ")
    assert "\n" not in error
    assert "errors.pydantic.dev" not in error
    assert await _count(session, Event) == 1
    fight = (await session.execute(select(Fight))).scalar_one()
    fighter_a = await session.get(Fighter, fight.fighter_a_id)
    assert fighter_a is not None
    assert fighter_a.last_name == "Tuivasa"


@pytest.mark.asyncio
async def test_invalid_event_error_is_summarised_per_field(
    coordinator: IngestionCoordinator,
) -> None:
    summary = await coordinator.ingest(
        _payload({"name": "UFC 307", "date": "October 05, 2024", "fights": "tbd"})
    )

    assert summary.events.created == 0
    assert summary.errors == ["Error processing UFC 307: fights: Input should be a valid list"]


@pytest.mark.asyncio
async def test_failed_fight_rolls_back_its_fighters(
    coordinator: IngestionCoordinator,
    session: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def _failing_upsert(*args: Any, **kwargs: Any):
        raise PersistenceError("fight insert failed: OperationalError")

    monkeypatch.setattr(coordinator, "upsert_fight", _failing_upsert)
    summary = await coordinator.ingest(_payload(_event()))

    assert summary.events.created == 1
    assert (summary.fighters.created, summary.fights.created) == (0, 0)
    assert summary.errors == [
        "Error processing Dan Hooker vs Mateusz Gamrot in UFC 305: "
        "fight insert failed: OperationalError"
    ]
    assert await _count(session, Event) == 1
    assert await _count(session, Fighter) == 0


@pytest.mark.asyncio
async def test_completed_event_with_record_overwrites_fighter_stats(
    coordinator: IngestionCoordinator, session: AsyncSession, fighter: Fighter
) -> None:
    fighter.nickname = "The Hangman"
    fighter.country = "New Zealand"
    await session.commit()

    record = _event(
        fights=[
            {
                "fighterA": {
                    "firstName": "Dan",
                    "lastName": "Hooker",
                    "wins": 24,
                    "losses": 12,
                    "weightClass": "Lightweight",
                },
                "fighterB": "Mateusz Gamrot",
            }
        ]
    )
    summary = await coordinator.ingest(_payload(record))

    assert (summary.fighters.created, summary.fighters.updated) == (1, 1)
    await session.refresh(fighter)
    assert (fighter.wins, fighter.losses, fighter.draws, fighter.no_contests) == (24, 12, 0, 0)
    assert fighter.nickname == "The Hangman"
    assert fighter.country == "New Zealand"


@pytest.mark.asyncio
async def test_upcoming_event_never_overwrites_fighter_stats(
    coordinator: IngestionCoordinator, session: AsyncSession, fighter: Fighter
) -> None:
    fighter.wins = 23
    await session.commit()

    record = _event(
        fights=[
            {
                "fighterA": {"name": "Dan Hooker", "wins": 99},
                "fighterB": "Mateusz Gamrot",
                "winner": "Dan Hooker",
            }
        ]
    )
    summary = await coordinator.ingest(_payload(record, completed=False))

    assert summary.fighters.updated == 0
    await session.refresh(fighter)
    assert fighter.wins == 23
    event = (await session.execute(select(Event))).scalar_one()
    assert event.is_completed is False
    fight = (await session.execute(select(Fight))).scalar_one()
    assert fight.result == FightResult.UNKNOWN.value
