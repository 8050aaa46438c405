"""Lessons ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, ImmutableModelMixin


class Lesson(ImmutableModelMixin, Base):
    """Lesson booked from an accepted quote; its status lives in the ledger."""

    __tablename__ = "lessons"

    quote_id: Mapped[UUID] = mapped_column(
        ForeignKey("lesson_quotes.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
