"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates the events, registrations and favorites tables. The uniqueness
rules live here as indexes: one live registration per (user_id, event_id)
via a partial unique index, one favorite per (user_id, item_type, item_id).
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVE_ONLY = sa.text("status != 'cancelled'")


def upgrade() -> None:
    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("start_time_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("category", sa.String(20), nullable=False, server_default="service"),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column("requires_rsvp", sa.Boolean, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_start_time_utc", "events", ["start_time_utc"])

    # --- registrations ---
    op.create_table(
        "registrations",
        sa.Column("registration_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="confirmed"),
        sa.Column("guest_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("guest_names", sa.JSON, nullable=True),
        sa.Column("dietary_restrictions", sa.Text, nullable=True),
        sa.Column("special_requests", sa.Text, nullable=True),
        sa.Column("checked_in", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("guest_count >= 1", name="ck_registrations_guest_count_positive"),
    )
    op.create_index(
        "uq_registrations_active_user_event",
        "registrations",
        ["user_id", "event_id"],
        unique=True,
        sqlite_where=_ACTIVE_ONLY,
        postgresql_where=_ACTIVE_ONLY,
    )
    op.create_index("ix_registrations_event_status", "registrations", ["event_id", "status"])
    op.create_index("ix_registrations_user_id", "registrations", ["user_id"])

    # --- favorites ---
    op.create_table(
        "favorites",
        sa.Column("favorite_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("item_type", sa.String(20), nullable=False),
        sa.Column("item_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "item_type", "item_id", name="uq_favorites_user_item"),
    )
    op.create_index("ix_favorites_item", "favorites", ["item_type", "item_id"])


def downgrade() -> None:
    op.drop_index("ix_favorites_item", table_name="favorites")
    op.drop_table("favorites")
    op.drop_index("ix_registrations_user_id", table_name="registrations")
    op.drop_index("ix_registrations_event_status", table_name="registrations")
    op.drop_index("uq_registrations_active_user_event", table_name="registrations")
    op.drop_table("registrations")
    op.drop_index("ix_events_start_time_utc", table_name="events")
    op.drop_table("events")
