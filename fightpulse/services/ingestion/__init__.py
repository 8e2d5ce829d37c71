"""Scraper ingestion pipeline: payload validation, normalisation and upserts."""

from fightpulse.services.ingestion.coordinator import (
    IngestionCoordinator,
    describe_error,
    summarize_counts,
    validate_payload,
)
from fightpulse.services.ingestion.normalizer import IngestionNormalizer
from fightpulse.services.ingestion.types import UpsertOutcome

__all__ = [
    "IngestionCoordinator",
    "IngestionNormalizer",
    "UpsertOutcome",
    "describe_error",
    "summarize_counts",
    "validate_payload",
]
