"""Lesson request schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import LessonTypeEnum


class LessonRequestCreate(BaseModel):
    """Create lesson request."""

    student_id: UUID
    lesson_type: LessonTypeEnum
    start_time: datetime
    duration_minutes: int = Field(gt=0, le=480)
    address_id: UUID


class LessonRequestRead(BaseModel):
    """Lesson request response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    lesson_type: LessonTypeEnum
    start_time: datetime
    duration_minutes: int
    address_id: UUID
    created_at: datetime
