"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the GatherPress RSVP service:
users, leadership_roles, events, gatherpress_rsvps.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_login", sa.String(60), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- leadership_roles ---
    op.create_table(
        "leadership_roles",
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.user_id"), primary_key=True),
        sa.Column("role", sa.String(100), nullable=False),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("post_type", sa.String(20), nullable=False, server_default="gatherpress_event"),
        sa.Column("max_guest_limit", sa.Integer, nullable=False, server_default="0"),
        sa.Column("enable_anonymous_rsvp", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- gatherpress_rsvps ---
    op.create_table(
        "gatherpress_rsvps",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer, nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="no_status"),
        sa.Column("guests", sa.Integer, nullable=False, server_default="0"),
        sa.Column("anonymous", sa.Boolean, nullable=False, server_default="0"),
        sa.UniqueConstraint("event_id", "user_id", name="uq_rsvp_event_user"),
    )
    op.create_index("ix_gatherpress_rsvps_event_id", "gatherpress_rsvps", ["event_id"])
    op.create_index("ix_gatherpress_rsvps_user_id", "gatherpress_rsvps", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_gatherpress_rsvps_user_id", table_name="gatherpress_rsvps")
    op.drop_index("ix_gatherpress_rsvps_event_id", table_name="gatherpress_rsvps")
    op.drop_table("gatherpress_rsvps")
    op.drop_table("events")
    op.drop_table("leadership_roles")
    op.drop_table("users")
