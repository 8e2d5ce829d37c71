"""Scraper ingestion endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from fightpulse.errors import PayloadValidationError
from fightpulse.schemas.ingestion import IngestionFailure, IngestionSummary
from fightpulse.services.dependencies import get_ingestion_coordinator
from fightpulse.services.ingestion import IngestionCoordinator, validate_payload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/events", response_model=IngestionSummary | IngestionFailure)
async def ingest_events(
    request: Request,
    coordinator: IngestionCoordinator = Depends(get_ingestion_coordinator),
) -> IngestionSummary | IngestionFailure:
    """Upsert a batch of scraped events with their fights and fighters.

    A malformed envelope is answered in-body with ``success: false`` and
    HTTP 200 so the scraper can log it without retrying.
    """

    try:
        raw = await request.json()
    except ValueError:
        raw = None

    try:
        payload = validate_payload(raw)
    except PayloadValidationError as exc:
        logger.warning("Rejected ingestion payload: %s", exc)
        return IngestionFailure(error=str(exc), timestamp=datetime.now(timezone.utc))

    return await coordinator.ingest(payload)
