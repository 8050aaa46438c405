"""Lesson quote ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, ImmutableModelMixin


class LessonQuote(ImmutableModelMixin, Base):
    """Priced offer from one teacher for one lesson request."""

    __tablename__ = "lesson_quotes"
    __table_args__ = (
        UniqueConstraint("lesson_request_id", "teacher_id", name="uq_lesson_quotes_request_teacher"),
    )

    lesson_request_id: Mapped[UUID] = mapped_column(
        ForeignKey("lesson_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    teacher_id: Mapped[UUID] = mapped_column(
        ForeignKey("teacher_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hourly_rate_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
