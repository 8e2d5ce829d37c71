"""Bearer-token verification for the identity provider's access tokens."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from jose import JWTError, jwt

from fightpulse.errors import MissingRequiredClaim
from fightpulse.schemas.user import IdentityClaim
from fightpulse.settings import AppSettings


class InvalidToken(Exception):
    """The bearer token is malformed, expired, or fails signature checks."""


class ClaimVerifier:
    """Decode access tokens and map their namespaced claims to :class:`IdentityClaim`.

    Profile attributes are published by the identity provider under a custom
    namespace (``<namespace>/email``, ``<namespace>/picture`` ...); the
    subject and issued-at time use the registered JWT claims.
    """

    def __init__(
        self,
        *,
        key: str | None,
        algorithms: list[str],
        audience: str | None = None,
        issuer: str | None = None,
        namespace: str,
    ) -> None:
        self._key = key
        self._algorithms = algorithms
        self._audience = audience
        self._issuer = issuer
        self._namespace = namespace.rstrip("/")

    @classmethod
    def from_settings(cls, settings: AppSettings) -> ClaimVerifier:
        return cls(
            key=settings.auth_jwt_key,
            algorithms=settings.auth_algorithms,
            audience=settings.auth_audience,
            issuer=settings.auth_issuer_url,
            namespace=settings.auth_claims_namespace,
        )

    def decode(self, token: str) -> dict[str, Any]:
        if not self._key:
            raise InvalidToken("Bearer token verification is not configured")
        try:
            return jwt.decode(
                token,
                self._key,
                algorithms=self._algorithms,
                audience=self._audience,
                issuer=self._issuer,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError as exc:
            raise InvalidToken(f"Invalid bearer token: {exc}") from exc

    def verify(self, token: str) -> IdentityClaim:
        """Return the identity claim carried by ``token``.

        Raises:
            InvalidToken: when decoding fails or the subject is absent.
            MissingRequiredClaim: when the namespaced email claim is absent.
        """

        payload = self.decode(token)
        return self.claim_from_payload(payload)

    def claim_from_payload(self, payload: dict[str, Any]) -> IdentityClaim:
        subject = payload.get("sub")
        if not subject:
            raise InvalidToken("Bearer token has no subject")

        email = payload.get(f"{self._namespace}/email")
        if not email:
            raise MissingRequiredClaim("email")

        issued_at = payload.get("iat")
        login_time = (
            datetime.fromtimestamp(issued_at, tz=timezone.utc)
            if isinstance(issued_at, (int, float))
            else None
        )
        return IdentityClaim(
            sub=subject,
            email=email,
            name=payload.get(f"{self._namespace}/name"),
            picture=payload.get(f"{self._namespace}/picture"),
            email_verified=payload.get(f"{self._namespace}/email_verified"),
            login_time=login_time,
        )


__all__ = ["ClaimVerifier", "InvalidToken"]
