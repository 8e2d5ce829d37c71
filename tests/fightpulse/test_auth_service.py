from __future__ import annotations

import time

import pytest

from fightpulse.errors import MissingRequiredClaim
from fightpulse.services.auth_service import ClaimVerifier, InvalidToken
from fightpulse.settings import AppSettings, DEFAULT_CLAIMS_NAMESPACE
from tests.fightpulse.tokens import TEST_ISSUER, build_verifier, make_token


def test_verify_maps_namespaced_claims() -> None:
    token = make_token(
        "auth0|42",
        email="fan@example.com",
        name="Fight Fan",
        picture="https://cdn.example.com/fan.png",
        email_verified=True,
        iat=1_735_732_800,
    )

    claim = build_verifier().verify(token)

    assert claim.sub == "auth0|42"
    assert claim.email == "fan@example.com"
    assert claim.name == "Fight Fan"
    assert claim.picture == "https://cdn.example.com/fan.png"
    assert claim.email_verified is True
    assert claim.login_time is not None
    assert int(claim.login_time.timestamp()) == 1_735_732_800


def test_missing_email_claim_is_rejected() -> None:
    with pytest.raises(MissingRequiredClaim):
        build_verifier().verify(make_token(email=None))


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        make_token(secret="some-other-secret"),
        make_token(aud="https://someone-else.test"),
        make_token(iss="https://evil.test/"),
        make_token(exp=int(time.time()) - 60),
    ],
)
def test_invalid_tokens_are_rejected(token: str) -> None:
    with pytest.raises(InvalidToken):
        build_verifier().verify(token)


def test_unconfigured_verifier_rejects_everything() -> None:
    verifier = ClaimVerifier(
        key=None, algorithms=["HS256"], namespace=DEFAULT_CLAIMS_NAMESPACE
    )
    with pytest.raises(InvalidToken):
        verifier.verify(make_token())


def test_from_settings_uses_auth_configuration() -> None:
    settings = AppSettings(
        AUTH_JWT_KEY="fightpulse-test-secret",
        AUTH_ALGORITHMS="HS256",
        AUTH_AUDIENCE="https://api.fightpulse.test",
        AUTH_ISSUER_URL=TEST_ISSUER,
    )
    claim = ClaimVerifier.from_settings(settings).verify(make_token("auth0|7"))
    assert claim.sub == "auth0|7"
