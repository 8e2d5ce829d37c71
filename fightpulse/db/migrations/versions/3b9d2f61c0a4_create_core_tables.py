"""create_core_tables

Revision ID: 3b9d2f61c0a4
Revises:
Create Date: 2025-11-04 18:12:40.214337

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9d2f61c0a4"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("auth0_id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("profile_pic", sa.String(length=1024), nullable=True),
        sa.Column("email_verified", sa.Boolean(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_auth0_id"), "users", ["auth0_id"], unique=True)

    op.create_table(
        "fighters",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("nickname", sa.String(length=255), nullable=True),
        sa.Column("weight_class", sa.String(length=50), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column("draws", sa.Integer(), nullable=False),
        sa.Column("no_contests", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_fighters_first_last", "fighters", ["first_name", "last_name"])
    op.create_index(op.f("ix_fighters_weight_class"), "fighters", ["weight_class"])

    op.create_table(
        "events",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("venue", sa.String(length=255), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("promotion", sa.String(length=50), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("event_url", sa.String(length=1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_url"),
    )
    op.create_index("ix_events_name_date", "events", ["name", "date"])
    op.create_index(op.f("ix_events_date"), "events", ["date"])
    op.create_index(op.f("ix_events_country"), "events", ["country"])
    op.create_index(op.f("ix_events_is_completed"), "events", ["is_completed"])

    op.create_table(
        "fights",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("fighter_a_id", sa.String(), nullable=False),
        sa.Column("fighter_b_id", sa.String(), nullable=False),
        sa.Column("weight_class", sa.String(length=50), nullable=True),
        sa.Column("is_main_event", sa.Boolean(), nullable=False),
        sa.Column("is_title_fight", sa.Boolean(), nullable=False),
        sa.Column("result", sa.String(length=20), nullable=False),
        sa.Column("round", sa.Integer(), nullable=True),
        sa.Column("method", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["fighter_a_id"], ["fighters.id"]),
        sa.ForeignKeyConstraint(["fighter_b_id"], ["fighters.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "event_id",
            "fighter_a_id",
            "fighter_b_id",
            name="uq_fights_event_fighter_pair",
        ),
    )
    op.create_index(op.f("ix_fights_event_id"), "fights", ["event_id"])
    op.create_index(op.f("ix_fights_fighter_a_id"), "fights", ["fighter_a_id"])
    op.create_index(op.f("ix_fights_fighter_b_id"), "fights", ["fighter_b_id"])

    op.create_table(
        "follows",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("fighter_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["fighter_id"], ["fighters.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "fighter_id", name="uq_follows_user_fighter"),
    )
    op.create_index(op.f("ix_follows_user_id"), "follows", ["user_id"])
    op.create_index(op.f("ix_follows_fighter_id"), "follows", ["fighter_id"])
    op.create_index("ix_follows_user_created", "follows", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_follows_user_created", table_name="follows")
    op.drop_index(op.f("ix_follows_fighter_id"), table_name="follows")
    op.drop_index(op.f("ix_follows_user_id"), table_name="follows")
    op.drop_table("follows")

    op.drop_index(op.f("ix_fights_fighter_b_id"), table_name="fights")
    op.drop_index(op.f("ix_fights_fighter_a_id"), table_name="fights")
    op.drop_index(op.f("ix_fights_event_id"), table_name="fights")
    op.drop_table("fights")

    op.drop_index(op.f("ix_events_is_completed"), table_name="events")
    op.drop_index(op.f("ix_events_country"), table_name="events")
    op.drop_index(op.f("ix_events_date"), table_name="events")
    op.drop_index("ix_events_name_date", table_name="events")
    op.drop_table("events")

    op.drop_index(op.f("ix_fighters_weight_class"), table_name="fighters")
    op.drop_index("ix_fighters_first_last", table_name="fighters")
    op.drop_table("fighters")

    op.drop_index(op.f("ix_users_auth0_id"), table_name="users")
    op.drop_table("users")
