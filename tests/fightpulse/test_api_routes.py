"""Route tests driving the FastAPI app over ASGI with an in-memory database."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fightpulse.db.connection import get_db
from fightpulse.db.models import Fighter
from fightpulse.main import app
from fightpulse.services.dependencies import get_claim_verifier
from tests.fightpulse.tokens import build_verifier, make_token


@pytest_asyncio.fixture
async def client(session: AsyncSession) -> AsyncIterator[AsyncClient]:
    async def _override_db() -> AsyncIterator[AsyncSession]:
        yield session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_claim_verifier] = build_verifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


def _auth(**claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(**claims)}"}


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_ingestion_returns_summary(client: AsyncClient) -> None:
    payload = {
        "type": "completed_events",
        "data": [
            {
                "name": "UFC 305",
                "date": "August 17, 2024",
                "location": "Perth, Western Australia, Australia",
                "fights": [
                    {
                        "fighterA": "Dan Hooker",
                        "fighterB": "Mateusz Gamrot",
                        "winner": "Dan Hooker",
                    }
                ],
            },
            {"name": "UFC Broken", "date": "later", "fights": []},
        ],
    }

    response = await client.post("/ingestion/events", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["type"] == "completed_events"
    assert body["total"] == 2
    assert body["events"] == {"created": 1, "updated": 0}
    assert body["fighters"] == {"created": 2, "updated": 0}
    assert body["fights"] == {"created": 1, "updated": 0}
    assert body["errors"] == ["Invalid date for event: UFC Broken"]
    assert "timestamp" in body


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"data": []}, "Invalid payload. Expected { type: string, data: array }"),
        (
            {"type": "completed_events", "data": "nope"},
            "Invalid payload. Expected { type: string, data: array }",
        ),
        (
            {"type": "past_events", "data": []},
            'Invalid type. Must be "completed_events" or "upcoming_events"',
        ),
        ([1, 2, 3], "Invalid payload. Expected { type: string, data: array }"),
    ],
)
async def test_malformed_ingestion_payload_is_rejected_in_body(
    client: AsyncClient, payload: object, message: str
) -> None:
    response = await client.post("/ingestion/events", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"] == message
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_non_json_ingestion_body_is_rejected_in_body(client: AsyncClient) -> None:
    response = await client.post(
        "/ingestion/events",
        content=b"definitely not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 200
    assert response.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer garbage"},
        {"Authorization": f"Basic {make_token()}"},
    ],
)
async def test_protected_routes_require_valid_bearer(
    client: AsyncClient, headers: dict[str, str]
) -> None:
    response = await client.get("/follows/user/follows", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_without_email_claim_is_unauthorized(client: AsyncClient) -> None:
    response = await client.get("/user/status", headers=_auth(email=None))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_follow_flow(
    client: AsyncClient, fighter: Fighter
) -> None:
    headers = _auth()
    url = f"/follows/fighters/{fighter.id}/follow"

    first = await client.post(url, headers=headers)
    assert first.status_code == 200
    assert first.json()["changed"] is True

    again = await client.post(url, headers=headers)
    assert again.status_code == 200
    assert again.json()["changed"] is False
    assert again.json()["following"] is True

    listing = await client.get("/follows/user/follows", headers=headers)
    assert listing.status_code == 200
    body = listing.json()
    assert body["total"] == 1
    assert body["follows"][0]["fighter"]["last_name"] == "Hooker"

    removed = await client.delete(url, headers=headers)
    assert removed.status_code == 200
    assert removed.json() == {
        "user_id": first.json()["user_id"],
        "fighter_id": fighter.id,
        "following": False,
        "changed": True,
        "followed_at": None,
    }

    removed_again = await client.delete(url, headers=headers)
    assert removed_again.status_code == 200
    assert removed_again.json()["changed"] is False


@pytest.mark.asyncio
async def test_follow_unknown_fighter_returns_404(client: AsyncClient) -> None:
    response = await client.post("/follows/fighters/nobody/follow", headers=_auth())
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_user_status_reflects_token_verification(client: AsyncClient) -> None:
    response = await client.get("/user/status", headers=_auth(email_verified=False))
    assert response.json() == {"verified": False}

    response = await client.get("/user/status", headers=_auth(email_verified=True))
    assert response.json() == {"verified": True}

    # A later token claiming unverified never downgrades the stored flag.
    response = await client.get("/user/status", headers=_auth(email_verified=False))
    assert response.json() == {"verified": True}


@pytest.mark.asyncio
async def test_profile_sync_uses_posted_claim(client: AsyncClient) -> None:
    response = await client.post(
        "/user/profile",
        headers=_auth(),
        json={
            "sub": "auth0|profile-user",
            "email": "khabib@example.com",
            "name": "Khabib Nurmagomedov",
            "email_verified": True,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["auth0_id"] == "auth0|profile-user"
    assert body["username"] == "khabib_nurmagomedov"
    assert body["email_verified"] is True


@pytest.mark.asyncio
async def test_profile_sync_without_email_is_bad_request(client: AsyncClient) -> None:
    response = await client.post(
        "/user/profile", headers=_auth(), json={"sub": "auth0|no-email"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_profile_body_validation_errors_are_structured(client: AsyncClient) -> None:
    response = await client.post("/user/profile", headers=_auth(), json={"email": "x@y.z"})

    assert response.status_code == 422
    body = response.json()
    assert body["error_type"] == "validation_error"
    assert body["path"] == "/user/profile"
    assert body["errors"][0]["field"] == "sub"
    assert body["request_id"]
