#!/usr/bin/env python
"""Load a scraped ``{type, data}`` JSON file through the ingestion pipeline.

Examples::

    python scripts/ingest_events.py data/completed_events.json
    python scripts/ingest_events.py data/upcoming_events.json --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

load_dotenv()

from fightpulse.db.connection import dispose_engine, get_session
from fightpulse.db.repositories import (
    EventRepository,
    FighterRepository,
    FightRepository,
    SessionUnitOfWork,
)
from fightpulse.errors import FightPulseError, PayloadValidationError
from fightpulse.schemas.ingestion import IngestionPayload, ScrapedEvent, ScrapedFight
from fightpulse.services.ingestion import (
    IngestionCoordinator,
    IngestionNormalizer,
    describe_error,
    summarize_counts,
    validate_payload,
)

console = Console()
logger = logging.getLogger(__name__)


def _load_payload(path: Path) -> Any:
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def preview(payload: IngestionPayload) -> tuple[int, int, list[str]]:
    """Normalise every record without touching the database.

    Returns the number of usable events and fights plus the error strings a
    real run would report for records that cannot be normalised.
    """
    normalizer = IngestionNormalizer()
    events = fights = 0
    errors: list[str] = []
    for record in payload.data:
        try:
            scraped = ScrapedEvent.model_validate(record)
            event = normalizer.normalize_event(scraped, is_completed=payload.is_completed)
        except (FightPulseError, ValidationError) as exc:
            errors.append(f"Error processing record: {describe_error(exc)}")
            continue
        events += 1
        for fight in event.fights:
            try:
                scraped_fight = ScrapedFight.model_validate(fight)
                normalizer.normalize_fight(scraped_fight, is_completed=payload.is_completed)
            except (FightPulseError, ValidationError) as exc:
                errors.append(
                    f"Error processing fight in {event.name}: {describe_error(exc)}"
                )
                continue
            fights += 1
    return events, fights, errors


async def _ingest(payload: IngestionPayload):
    async with get_session() as session:
        coordinator = IngestionCoordinator(
            events=EventRepository(session),
            fighters=FighterRepository(session),
            fights=FightRepository(session),
            unit_of_work=SessionUnitOfWork(session),
            normalizer=IngestionNormalizer(),
        )
        summary = await coordinator.ingest(payload)
    await dispose_engine()
    return summary


def _print_errors(errors: list[str]) -> None:
    if not errors:
        return
    console.print(f"\n[red]{len(errors)} record(s) skipped:[/red]")
    for error in errors:
        console.print(f"  • {error}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Ingest a scraped events payload into the FightPulse database."
    )
    parser.add_argument("payload", type=Path, help="Path to a {type, data} JSON file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and normalise records without writing to the database",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        payload = validate_payload(_load_payload(args.payload))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[red]Could not read {args.payload}: {exc}[/red]")
        return 1
    except PayloadValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        return 1

    if args.dry_run:
        events, fights, errors = preview(payload)
        console.print(
            f"[bold]Dry run[/bold] ({payload.type.value}): "
            f"{events}/{len(payload.data)} events and {fights} fights would be upserted"
        )
        _print_errors(errors)
        return 0

    summary = asyncio.run(_ingest(payload))

    table = Table("Entity", "Created", "Updated", title=f"Ingestion: {summary.type.value}")
    for entity, created, updated in summarize_counts(summary):
        table.add_row(entity, str(created), str(updated))
    console.print(table)
    console.print(f"[bold]Records processed:[/bold] {summary.total}")
    _print_errors(summary.errors)
    return 0


if __name__ == "__main__":
    sys.exit(main())
