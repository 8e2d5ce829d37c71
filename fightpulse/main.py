import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import (
    DatabaseError,
    DBAPIError,
    IntegrityError,
    OperationalError,
)
from sqlalchemy.exc import (
    TimeoutError as SQLAlchemyTimeoutError,
)

from fightpulse.db.connection import dispose_engine
from fightpulse.db.connection import (
    get_database_type as _connection_get_database_type,
)
from fightpulse.db.connection import (
    get_database_url as _connection_get_database_url,
)
from fightpulse.errors import FightPulseError
from fightpulse.settings import get_settings

from .api import follows, ingestion, users
from .schemas.error import ErrorType
from .utils.error_responses import (
    ERROR_KIND_STATUS,
    error_json_response,
    validation_details,
)
from .utils.request_context import (
    REQUEST_ID_HEADER,
    get_request_id,
    new_request_id,
    set_request_id,
)

# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=get_settings().log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_environment() -> None:
    """Log warnings for optional configuration that is missing."""

    warnings = get_settings().optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning("  • %s", warning)
        logger.warning("=" * 60)


def _sanitize_database_url(url: str) -> str:
    """Hide the password component of a database URL for logging."""
    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)
    if "@" not in rest:
        return url

    auth, host_db = rest.split("@", 1)
    user = auth.split(":", 1)[0]
    if ":" in auth:
        return f"{scheme}://{user}:***@{host_db}"
    return f"{scheme}://{user}@{host_db}"


def get_database_type() -> str:
    return _connection_get_database_type()


def get_database_url() -> str:
    return _connection_get_database_url()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log a database preflight summary on startup and release the pool on shutdown."""
    validate_environment()

    db_type = get_database_type()
    logger.info("=" * 60)
    logger.info("FightPulse API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info("Database Type: %s", db_type.upper())
    logger.info("Database URL: %s", _sanitize_database_url(get_database_url()))
    if db_type == "postgresql":
        logger.info("PostgreSQL mode - ensure migrations are applied (alembic upgrade head)")
    else:
        logger.info("SQLite mode - create tables with scripts/init_db.py")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down FightPulse API")
    await dispose_engine()


app = FastAPI(
    title="FightPulse API",
    version="0.1.0",
    description="Fight-event ingestion, user identity sync and fighter follows.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend(f"http://{host}:{port}" for port in (3000, 5173))
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


allow_origins = _combine_origins(_default_origins(), get_settings().cors_allow_origins)
cors_origin_regex = get_settings().cors_allow_origin_regex or None

logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))
if cors_origin_regex:
    logger.info("Configured CORS allow_origin_regex: %s", cors_origin_regex)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_origin_regex=cors_origin_regex,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach a request id to the context and echo it in the response headers."""
    request_id = new_request_id(request.headers.get(REQUEST_ID_HEADER))
    set_request_id(request_id)
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = validation_details(exc.errors())
    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )
    return error_json_response(
        error_type=ErrorType.VALIDATION_ERROR,
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=request.url.path,
        errors=errors,
    )


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    errors = validation_details(exc.errors())
    logger.warning(
        "Pydantic validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )
    return error_json_response(
        error_type=ErrorType.VALIDATION_ERROR,
        message="Data validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=request.url.path,
        errors=errors,
    )


@app.exception_handler(FightPulseError)
async def domain_exception_handler(request: Request, exc: FightPulseError):
    status_code, error_type = ERROR_KIND_STATUS[exc.kind]
    logger.warning(
        "%s for request %s to %s: %s",
        exc.kind.value,
        get_request_id(),
        request.url.path,
        exc,
    )
    return error_json_response(
        error_type=error_type,
        message=exc.message,
        detail=exc.kind.value,
        status_code=status_code,
        path=request.url.path,
    )


@app.exception_handler(OperationalError)
@app.exception_handler(DBAPIError)
async def database_connection_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Database connection error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )
    return error_json_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Database connection failed",
        detail="Unable to connect to the database. Please try again later.",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        path=request.url.path,
        retry_after=5,
    )


@app.exception_handler(SQLAlchemyTimeoutError)
async def database_timeout_exception_handler(
    request: Request, exc: SQLAlchemyTimeoutError
):
    logger.error(
        "Database timeout error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )
    return error_json_response(
        error_type=ErrorType.TIMEOUT_ERROR,
        message="Database query timeout",
        detail="The database query took too long to complete. Please try again.",
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        path=request.url.path,
        retry_after=3,
    )


@app.exception_handler(IntegrityError)
async def database_integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.error(
        "Database integrity error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )
    return error_json_response(
        error_type=ErrorType.CONFLICT,
        message="Data integrity constraint violation",
        detail="The operation would violate a database constraint.",
        status_code=status.HTTP_409_CONFLICT,
        path=request.url.path,
    )


@app.exception_handler(DatabaseError)
async def database_generic_exception_handler(request: Request, exc: DatabaseError):
    logger.error(
        "Database error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )
    return error_json_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Database operation failed",
        detail="An error occurred while accessing the database. Please try again.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=request.url.path,
        retry_after=3,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )
    return error_json_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=request.url.path,
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(ingestion.router, prefix="/ingestion", tags=["ingestion"])
app.include_router(follows.router, prefix="/follows", tags=["follows"])
app.include_router(users.router, prefix="/user", tags=["user"])
