"""Domain error variants shared by the identity, follow and ingestion flows.

Every error carries an :class:`ErrorKind` tag plus a ``context`` mapping with
the structured values that caused it, so handlers can branch on ``kind``
instead of inspecting message strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure categories raised by the core services."""

    VALIDATION = "validation"
    MISSING_REQUIRED_CLAIM = "missing_required_claim"
    UNRESOLVED_DATE = "unresolved_date"
    UNRESOLVED_FIGHTER_NAME = "unresolved_fighter_name"
    PERSISTENCE_CONFLICT = "persistence_conflict"
    PERSISTENCE_ERROR = "persistence_error"


class FightPulseError(Exception):
    """Base class for tagged domain errors."""

    kind: ErrorKind

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context

    def __str__(self) -> str:
        return self.message


class PayloadValidationError(FightPulseError):
    """The top-level ingestion payload is malformed and was rejected wholesale."""

    kind = ErrorKind.VALIDATION


class MissingRequiredClaim(FightPulseError):
    """An identity claim lacks a field the sync cannot proceed without."""

    kind = ErrorKind.MISSING_REQUIRED_CLAIM

    def __init__(self, claim: str) -> None:
        super().__init__(f"Identity claim is missing required field '{claim}'", claim=claim)
        self.claim = claim


class UnresolvedDate(FightPulseError):
    kind = ErrorKind.UNRESOLVED_DATE

    def __init__(self, raw_value: str | None) -> None:
        super().__init__(f"Unable to parse date {raw_value!r}", raw_value=raw_value)
        self.raw_value = raw_value


class UnresolvedFighterName(FightPulseError):
    kind = ErrorKind.UNRESOLVED_FIGHTER_NAME

    def __init__(self, raw_value: str | None) -> None:
        super().__init__(f"Invalid fighter name {raw_value!r}", raw_value=raw_value)
        self.raw_value = raw_value


class PersistenceConflict(FightPulseError):
    """A unique constraint rejected the write; callers treat it as a no-op."""

    kind = ErrorKind.PERSISTENCE_CONFLICT


class PersistenceError(FightPulseError):
    """Any other persistence gateway failure."""

    kind = ErrorKind.PERSISTENCE_ERROR


__all__ = [
    "ErrorKind",
    "FightPulseError",
    "MissingRequiredClaim",
    "PayloadValidationError",
    "PersistenceConflict",
    "PersistenceError",
    "UnresolvedDate",
    "UnresolvedFighterName",
]
