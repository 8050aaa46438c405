"""Lifecycle ledger ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Enum as SAEnum, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, ImmutableModelMixin
from app.core.enums import EntityTypeEnum


class StatusRecord(ImmutableModelMixin, Base):
    """Immutable fact that an entity held a status as of ``created_at``."""

    __tablename__ = "status_records"
    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", "sequence", name="uq_status_records_entity_sequence"),
        Index("ix_status_records_entity", "entity_type", "entity_id"),
    )

    entity_type: Mapped[EntityTypeEnum] = mapped_column(
        SAEnum(EntityTypeEnum, name="entity_type_enum", native_enum=False),
        nullable=False,
    )
    entity_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    transition_applied: Mapped[str | None] = mapped_column(String(32), nullable=True)
    context: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
