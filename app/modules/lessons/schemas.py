"""Lessons schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import LessonStatusEnum, LessonTransitionEnum


class LessonTransitionRequest(BaseModel):
    """Apply a lifecycle transition to a lesson."""

    transition: LessonTransitionEnum
    context: dict | None = None


class LessonRead(BaseModel):
    """Lesson response schema with its ledger status."""

    id: UUID
    quote_id: UUID
    status: LessonStatusEnum
    created_at: datetime

    @classmethod
    def from_lesson(cls, lesson, status: str) -> "LessonRead":
        return cls(id=lesson.id, quote_id=lesson.quote_id, status=status, created_at=lesson.created_at)
