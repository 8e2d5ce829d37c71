"""Request-scoped identifier shared by middleware, handlers and log lines."""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id(incoming: str | None = None) -> str:
    """Reuse a caller-supplied identifier when present, else mint a UUID4."""

    if incoming and incoming.strip():
        return incoming.strip()
    return str(uuid.uuid4())


def set_request_id(request_id: str) -> Token[str]:
    return _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


__all__ = [
    "REQUEST_ID_HEADER",
    "get_request_id",
    "new_request_id",
    "set_request_id",
]
