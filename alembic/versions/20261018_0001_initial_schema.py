"""Initial schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


lesson_type_enum = sa.Enum("VOICE", "GUITAR", "BASS", "DRUMS", name="lesson_type_enum", native_enum=False)
entity_type_enum = sa.Enum(
    "lesson",
    "lesson_quote",
    "objective",
    "teacher_lesson_hourly_rate",
    name="entity_type_enum",
    native_enum=False,
)
outbox_status_enum = sa.Enum("pending", "processed", "failed", name="outbox_status_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "teacher_profiles",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("display_name", sa.String(length=128), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("experience_years", sa.Integer(), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
    )

    op.create_table(
        "teacher_lesson_hourly_rates",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("lesson_type", lesson_type_enum, nullable=False),
        sa.Column("rate_in_cents", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["teacher_id"],
            ["teacher_profiles.id"],
            name="fk_teacher_lesson_hourly_rates_teacher_id_teacher_profiles",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("teacher_id", "lesson_type", name="uq_teacher_lesson_hourly_rates_teacher_type"),
    )
    op.create_index(
        "ix_teacher_lesson_hourly_rates_teacher_id",
        "teacher_lesson_hourly_rates",
        ["teacher_id"],
        unique=False,
    )

    op.create_table(
        "lesson_requests",
        _id_col(),
        _created_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("lesson_type", lesson_type_enum, nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("address_id", postgresql.UUID(as_uuid=True), nullable=False),
    )
    op.create_index("ix_lesson_requests_student_id", "lesson_requests", ["student_id"], unique=False)

    op.create_table(
        "lesson_quotes",
        _id_col(),
        _created_col(),
        sa.Column("lesson_request_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("hourly_rate_in_cents", sa.Integer(), nullable=False),
        sa.Column("cost_in_cents", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["lesson_request_id"],
            ["lesson_requests.id"],
            name="fk_lesson_quotes_lesson_request_id_lesson_requests",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["teacher_id"],
            ["teacher_profiles.id"],
            name="fk_lesson_quotes_teacher_id_teacher_profiles",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("lesson_request_id", "teacher_id", name="uq_lesson_quotes_request_teacher"),
    )
    op.create_index("ix_lesson_quotes_lesson_request_id", "lesson_quotes", ["lesson_request_id"], unique=False)
    op.create_index("ix_lesson_quotes_teacher_id", "lesson_quotes", ["teacher_id"], unique=False)
    op.create_index("ix_lesson_quotes_expires_at", "lesson_quotes", ["expires_at"], unique=False)

    op.create_table(
        "lessons",
        _id_col(),
        _created_col(),
        sa.Column("quote_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["quote_id"],
            ["lesson_quotes.id"],
            name="fk_lessons_quote_id_lesson_quotes",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_lessons_quote_id", "lessons", ["quote_id"], unique=True)

    op.create_table(
        "objectives",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("lesson_type", lesson_type_enum, nullable=True),
    )
    op.create_index("ix_objectives_student_id", "objectives", ["student_id"], unique=False)

    op.create_table(
        "status_records",
        _id_col(),
        _created_col(),
        sa.Column("entity_type", entity_type_enum, nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("transition_applied", sa.String(length=32), nullable=True),
        sa.Column("context", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.UniqueConstraint("entity_type", "entity_id", "sequence", name="uq_status_records_entity_sequence"),
    )
    op.create_index("ix_status_records_entity", "status_records", ["entity_type", "entity_id"], unique=False)

    op.create_table(
        "outbox_events",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("aggregate_type", sa.String(length=128), nullable=False),
        sa.Column("aggregate_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", outbox_status_enum, nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("retries", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
    )
    op.create_index("ix_outbox_events_aggregate_type", "outbox_events", ["aggregate_type"], unique=False)
    op.create_index("ix_outbox_events_aggregate_id", "outbox_events", ["aggregate_id"], unique=False)
    op.create_index("ix_outbox_events_event_type", "outbox_events", ["event_type"], unique=False)
    op.create_index("ix_outbox_events_status", "outbox_events", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_outbox_events_status", table_name="outbox_events")
    op.drop_index("ix_outbox_events_event_type", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_id", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_type", table_name="outbox_events")
    op.drop_table("outbox_events")

    op.drop_index("ix_status_records_entity", table_name="status_records")
    op.drop_table("status_records")

    op.drop_index("ix_objectives_student_id", table_name="objectives")
    op.drop_table("objectives")

    op.drop_index("ix_lessons_quote_id", table_name="lessons")
    op.drop_table("lessons")

    op.drop_index("ix_lesson_quotes_expires_at", table_name="lesson_quotes")
    op.drop_index("ix_lesson_quotes_teacher_id", table_name="lesson_quotes")
    op.drop_index("ix_lesson_quotes_lesson_request_id", table_name="lesson_quotes")
    op.drop_table("lesson_quotes")

    op.drop_index("ix_lesson_requests_student_id", table_name="lesson_requests")
    op.drop_table("lesson_requests")

    op.drop_index("ix_teacher_lesson_hourly_rates_teacher_id", table_name="teacher_lesson_hourly_rates")
    op.drop_table("teacher_lesson_hourly_rates")

    op.drop_table("teacher_profiles")
