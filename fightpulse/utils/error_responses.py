"""Structured error payloads rendered by the application exception handlers."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from fightpulse.errors import ErrorKind
from fightpulse.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from fightpulse.utils.request_context import REQUEST_ID_HEADER, get_request_id

# Domain error kind -> (HTTP status, public error category).
ERROR_KIND_STATUS: dict[ErrorKind, tuple[int, ErrorType]] = {
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, ErrorType.VALIDATION_ERROR),
    ErrorKind.MISSING_REQUIRED_CLAIM: (
        status.HTTP_400_BAD_REQUEST,
        ErrorType.VALIDATION_ERROR,
    ),
    ErrorKind.UNRESOLVED_DATE: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorType.VALIDATION_ERROR,
    ),
    ErrorKind.UNRESOLVED_FIGHTER_NAME: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorType.VALIDATION_ERROR,
    ),
    ErrorKind.PERSISTENCE_CONFLICT: (status.HTTP_409_CONFLICT, ErrorType.CONFLICT),
    ErrorKind.PERSISTENCE_ERROR: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorType.DATABASE_ERROR,
    ),
}


def validation_details(errors: Iterable[dict[str, Any]]) -> list[ValidationErrorDetail]:
    """Flatten pydantic error dictionaries into ``field``/``message`` pairs."""

    details = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            ValidationErrorDetail(
                field=".".join(location) or "body",
                message=error.get("msg", "Invalid value"),
                value=error.get("input"),
            )
        )
    return details


def error_json_response(
    *,
    error_type: ErrorType,
    message: str,
    status_code: int,
    path: str,
    detail: str | None = None,
    retry_after: int | None = None,
    errors: list[ValidationErrorDetail] | None = None,
) -> JSONResponse:
    """Render an :class:`ErrorResponse` stamped with request id and timestamp."""

    request_id = get_request_id() or None
    fields = dict(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=datetime.now(timezone.utc),
        request_id=request_id,
        path=path,
        retry_after=retry_after,
    )
    if errors is not None:
        body: ErrorResponse = ValidationErrorResponse(errors=errors, **fields)
    else:
        body = ErrorResponse(**fields)

    headers = {REQUEST_ID_HEADER: request_id} if request_id else {}
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


__all__ = ["ERROR_KIND_STATUS", "error_json_response", "validation_details"]
