"""Student objective ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Enum as SAEnum, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import LessonTypeEnum


class Objective(BaseModelMixin, Base):
    """Learning goal a student tracks across lessons."""

    __tablename__ = "objectives"

    student_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    lesson_type: Mapped[LessonTypeEnum | None] = mapped_column(
        SAEnum(LessonTypeEnum, name="lesson_type_enum", native_enum=False),
        nullable=True,
    )
