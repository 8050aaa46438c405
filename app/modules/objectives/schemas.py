"""Objectives schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import LessonTypeEnum, ObjectiveStatusEnum, ObjectiveTransitionEnum


class ObjectiveCreate(BaseModel):
    """Create objective request."""

    student_id: UUID
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    lesson_type: LessonTypeEnum | None = None


class ObjectiveTransitionRequest(BaseModel):
    """Apply a lifecycle transition to an objective."""

    transition: ObjectiveTransitionEnum
    context: dict | None = None


class ObjectiveRead(BaseModel):
    """Objective response schema with its ledger status."""

    id: UUID
    student_id: UUID
    title: str
    description: str
    lesson_type: LessonTypeEnum | None
    status: ObjectiveStatusEnum
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_objective(cls, objective, status: str) -> "ObjectiveRead":
        return cls(
            id=objective.id,
            student_id=objective.student_id,
            title=objective.title,
            description=objective.description,
            lesson_type=objective.lesson_type,
            status=status,
            created_at=objective.created_at,
            updated_at=objective.updated_at,
        )
