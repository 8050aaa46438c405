"""Teachers schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import HourlyRateStatusEnum, HourlyRateTransitionEnum, LessonTypeEnum


class TeacherProfileCreate(BaseModel):
    """Create teacher profile request."""

    display_name: str = Field(min_length=2, max_length=128)
    bio: str = Field(default="", max_length=5000)
    experience_years: int = Field(default=0, ge=0, le=80)


class TeacherProfileUpdate(BaseModel):
    """Update teacher profile request."""

    display_name: str | None = Field(default=None, min_length=2, max_length=128)
    bio: str | None = Field(default=None, max_length=5000)
    experience_years: int | None = Field(default=None, ge=0, le=80)
    is_approved: bool | None = None


class TeacherProfileRead(BaseModel):
    """Teacher profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    display_name: str
    bio: str
    experience_years: int
    is_approved: bool
    created_at: datetime
    updated_at: datetime


class HourlyRateCreate(BaseModel):
    """Create hourly rate request."""

    lesson_type: LessonTypeEnum
    rate_in_cents: int = Field(gt=0)


class HourlyRateTransitionRequest(BaseModel):
    """Activate or deactivate an hourly rate."""

    transition: HourlyRateTransitionEnum
    context: dict | None = None


class HourlyRateRead(BaseModel):
    """Hourly rate response schema with its ledger status."""

    id: UUID
    teacher_id: UUID
    lesson_type: LessonTypeEnum
    rate_in_cents: int
    status: HourlyRateStatusEnum
    created_at: datetime

    @classmethod
    def from_rate(cls, rate, status: str) -> "HourlyRateRead":
        return cls(
            id=rate.id,
            teacher_id=rate.teacher_id,
            lesson_type=rate.lesson_type,
            rate_in_cents=rate.rate_in_cents,
            status=status,
            created_at=rate.created_at,
        )


class TeacherCandidateRead(BaseModel):
    """Teacher able to quote, with active hourly rates by lesson type."""

    model_config = ConfigDict(from_attributes=True)

    teacher_id: UUID
    hourly_rate_in_cents_by_type: dict[LessonTypeEnum, int]
