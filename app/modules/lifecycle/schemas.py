"""Lifecycle ledger schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import EntityTypeEnum


class TransitionRequest(BaseModel):
    """Apply a named transition to an entity."""

    transition: str = Field(min_length=1, max_length=32)
    context: dict | None = None


class StatusRecordRead(BaseModel):
    """Status record response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    entity_type: EntityTypeEnum
    entity_id: UUID
    sequence: int
    status: str
    transition_applied: str | None
    context: dict | None
    created_at: datetime


class CurrentStatusRead(BaseModel):
    """Current status with the transitions it allows."""

    entity_type: EntityTypeEnum
    entity_id: UUID
    status: str
    valid_transitions: list[str]
