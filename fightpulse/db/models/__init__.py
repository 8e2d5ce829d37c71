from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    validates,
)

DEFAULT_PROMOTION = "UFC"


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class FightResult(str, Enum):
    """Outcome of a bout from the fighter A/B perspective."""

    FIGHTER_A_WIN = "fighter_a_win"
    FIGHTER_B_WIN = "fighter_b_win"
    DRAW = "draw"
    NO_CONTEST = "nc"
    UNKNOWN = "unknown"


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    auth0_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        doc="Identity-provider subject identifier (the ``sub`` claim).",
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_pic: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    email_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Once true the flag is never downgraded by a later sync.",
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    follows: Mapped[list[Follow]] = relationship(
        "Follow", back_populates="user", cascade="all, delete-orphan"
    )


class Fighter(Base):
    __tablename__ = "fighters"
    # Lookups are best-effort first-match; two fighters may share a name.
    __table_args__ = (Index("ix_fighters_first_last", "first_name", "last_name"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    weight_class: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        doc="Latest division reported by a completed-event payload.",
    )
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    draws: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    no_contests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @validates("wins", "losses", "draws", "no_contests")
    def validate_counter(self, key: str, value: int | None) -> int:
        """Record counters are never negative; missing values collapse to zero."""
        if value is None:
            return 0
        if value < 0:
            raise ValueError(f"Invalid {key} count {value}; counters must be >= 0")
        return value


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (Index("ix_events_name_date", "name", "date"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        doc="Location exactly as scraped (e.g., 'Las Vegas, Nevada, USA').",
    )
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    venue: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    promotion: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_PROMOTION
    )
    is_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    event_url: Mapped[str | None] = mapped_column(
        String(1024), nullable=True, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    fights: Mapped[list[Fight]] = relationship(
        "Fight", back_populates="event", cascade="all, delete-orphan"
    )


class Fight(Base):
    __tablename__ = "fights"
    __table_args__ = (
        UniqueConstraint(
            "event_id",
            "fighter_a_id",
            "fighter_b_id",
            name="uq_fights_event_fighter_pair",
        ),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    fighter_a_id: Mapped[str] = mapped_column(
        ForeignKey("fighters.id"), nullable=False, index=True
    )
    fighter_b_id: Mapped[str] = mapped_column(
        ForeignKey("fighters.id"), nullable=False, index=True
    )
    weight_class: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_main_event: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_title_fight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    result: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FightResult.UNKNOWN.value
    )
    round: Mapped[int | None] = mapped_column(Integer, nullable=True)
    method: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    event: Mapped[Event] = relationship("Event", back_populates="fights")
    fighter_a: Mapped[Fighter] = relationship("Fighter", foreign_keys=[fighter_a_id])
    fighter_b: Mapped[Fighter] = relationship("Fighter", foreign_keys=[fighter_b_id])

    @validates("result")
    def validate_result(self, key: str, value: str | FightResult) -> str:
        """Validate that the result is one of the known outcomes."""
        try:
            return FightResult(value).value
        except ValueError as exc:
            allowed = ", ".join(result.value for result in FightResult)
            raise ValueError(
                f"Invalid fight result '{value}'. Must be one of: {allowed}"
            ) from exc


class Follow(Base):
    """Association row linking a user to a fighter they follow."""

    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("user_id", "fighter_id", name="uq_follows_user_fighter"),
        Index("ix_follows_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    fighter_id: Mapped[str] = mapped_column(
        ForeignKey("fighters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="follows")
    fighter: Mapped[Fighter] = relationship("Fighter")


__all__ = [
    "Base",
    "DEFAULT_PROMOTION",
    "Event",
    "Fight",
    "FightResult",
    "Fighter",
    "Follow",
    "User",
    "utcnow",
]
