"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the event registration service:
events, participants, event_mutations.
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
    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.Uuid, primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("event_date", sa.Date, nullable=False),
        sa.Column("event_time", sa.Time, nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("organiser", sa.String(255), nullable=False),
        sa.Column("participant_limit", sa.Integer, nullable=False),
        sa.Column(
            "catalog_status",
            sa.Enum("confirmed", "waitlist", name="catalogstatus"),
            nullable=False,
            server_default="confirmed",
        ),
        sa.Column("confirmed_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("waitlist_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("participant_limit > 0", name="check_participant_limit_positive"),
        sa.CheckConstraint("confirmed_count >= 0", name="check_confirmed_count_non_negative"),
        sa.CheckConstraint("waitlist_count >= 0", name="check_waitlist_count_non_negative"),
        sa.CheckConstraint("confirmed_count <= participant_limit", name="check_confirmed_lte_limit"),
    )

    # --- participants ---
    op.create_table(
        "participants",
        sa.Column("participant_id", sa.Uuid, primary_key=True),
        sa.Column("event_id", sa.Uuid, sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column(
            "status",
            sa.Enum("confirmed", "waitlist", name="registrationstatus"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("event_id", "email", name="uq_participant_event_email"),
    )
    op.create_index("ix_participants_event_id", "participants", ["event_id"])
    op.create_index("ix_participants_email", "participants", ["email"])

    # --- event_mutations ---
    op.create_table(
        "event_mutations",
        sa.Column("mutation_id", sa.Uuid, primary_key=True),
        sa.Column("event_id", sa.Uuid, sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("actor", sa.String(320), nullable=False),
        sa.Column(
            "action_type",
            sa.Enum("create", "update", "delete", "register", "status_change", name="actiontype"),
            nullable=False,
        ),
        sa.Column("before_snapshot", sa.JSON, nullable=True),
        sa.Column("after_snapshot", sa.JSON, nullable=False),
        sa.Column("idempotency_key", sa.String(255), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_event_mutations_event_id", "event_mutations", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_event_mutations_event_id", table_name="event_mutations")
    op.drop_table("event_mutations")
    op.drop_index("ix_participants_email", table_name="participants")
    op.drop_index("ix_participants_event_id", table_name="participants")
    op.drop_table("participants")
    op.drop_table("events")
    sa.Enum(name="actiontype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="registrationstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="catalogstatus").drop(op.get_bind(), checkfirst=True)
