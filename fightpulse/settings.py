"""Centralized configuration management for the FightPulse backend."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so scripts importing this module see the same values as the API.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/app.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CLAIMS_NAMESPACE = "https://fightpulse-api.com"
DEFAULT_AUTH_ALGORITHMS = "RS256"


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the database and CORS knobs, the settings carry everything the
    bearer-token verifier needs: issuer, audience, verification key, accepted
    algorithms and the namespace under which the identity provider publishes
    custom claims such as ``email``.
    """

    _explicit_cors_allow_origins: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:  # noqa: D401
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_cors_allow_origins = (
            "cors_allow_origins_raw" in normalized_keys
            or "cors_allow_origins" in normalized_keys
        )
        cors_env = os.getenv("CORS_ALLOW_ORIGINS")
        if cors_env is not None and cors_env.strip():
            self._explicit_cors_allow_origins = True

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "Full SQLAlchemy-compatible database URL. Postgres URLs supplied in"
            " sync format (postgres:// or postgresql://) are coerced into the"
            " async psycopg driver string at runtime."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Force SQLite usage regardless of DATABASE_URL.",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of additional CORS origins.",
    )
    cors_allow_origin_regex: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGIN_REGEX",
        description="Optional regular expression evaluated by the CORS middleware.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    auth_issuer_url: str | None = Field(
        default=None,
        alias="AUTH_ISSUER_URL",
        description="Expected ``iss`` claim of incoming access tokens.",
    )
    auth_audience: str | None = Field(
        default=None,
        alias="AUTH_AUDIENCE",
        description="Expected ``aud`` claim of incoming access tokens.",
    )
    auth_jwt_key: str | None = Field(
        default=None,
        alias="AUTH_JWT_KEY",
        description=(
            "Key used to verify access token signatures: a PEM public key for"
            " RS256 or the shared secret for HS256."
        ),
    )
    auth_algorithms_raw: str = Field(
        default=DEFAULT_AUTH_ALGORITHMS,
        alias="AUTH_ALGORITHMS",
        description="Comma-separated list of accepted signing algorithms.",
    )
    auth_claims_namespace: str = Field(
        default=DEFAULT_CLAIMS_NAMESPACE,
        alias="AUTH_CLAIMS_NAMESPACE",
        description="Prefix of the custom claims carrying email, name and picture.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX) or url.startswith("sqlite+aiosqlite"):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL connection string or SQLite fallback, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def auth_algorithms(self) -> list[str]:
        return [
            algorithm.strip()
            for algorithm in self.auth_algorithms_raw.split(",")
            if algorithm.strip()
        ]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self.database_url and not self.use_sqlite:
            warnings.append(
                "DATABASE_URL is not set - falling back to the local SQLite database"
            )

        if not self.auth_jwt_key:
            warnings.append(
                "AUTH_JWT_KEY is not set - every authenticated route will answer 401"
            )

        if not self._explicit_cors_allow_origins and not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only "
                "(may cause CORS issues in production)"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_CLAIMS_NAMESPACE",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
]
