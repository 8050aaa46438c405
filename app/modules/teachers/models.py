"""Teachers ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin
from app.core.enums import LessonTypeEnum


class TeacherProfile(BaseModelMixin, Base):
    """Teacher profile offering lessons on the platform."""

    __tablename__ = "teacher_profiles"

    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    experience_years: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    hourly_rates: Mapped[list["TeacherLessonHourlyRate"]] = relationship(
        back_populates="teacher",
        cascade="all, delete-orphan",
    )


class TeacherLessonHourlyRate(BaseModelMixin, Base):
    """Hourly rate a teacher charges for one lesson type; status lives in the ledger."""

    __tablename__ = "teacher_lesson_hourly_rates"
    __table_args__ = (
        UniqueConstraint("teacher_id", "lesson_type", name="uq_teacher_lesson_hourly_rates_teacher_type"),
    )

    teacher_id: Mapped[UUID] = mapped_column(
        ForeignKey("teacher_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lesson_type: Mapped[LessonTypeEnum] = mapped_column(
        SAEnum(LessonTypeEnum, name="lesson_type_enum", native_enum=False),
        nullable=False,
    )
    rate_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    teacher: Mapped[TeacherProfile] = relationship(back_populates="hourly_rates")
