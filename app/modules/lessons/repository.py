"""Lessons repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from app.modules.lessons.models import Lesson
from app.modules.quotes.models import LessonQuote


class LessonsRepository:
    """DB operations for lessons domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def savepoint(self) -> AsyncSessionTransaction:
        """Open a nested transaction; a failure inside leaves the outer one usable."""
        return self.session.begin_nested()

    async def create_lesson(self, quote_id: UUID) -> Lesson:
        lesson = Lesson(quote_id=quote_id)
        self.session.add(lesson)
        await self.session.flush()
        return lesson

    async def get_lesson_by_id(self, lesson_id: UUID) -> Lesson | None:
        stmt = select(Lesson).where(Lesson.id == lesson_id)
        return await self.session.scalar(stmt)

    async def get_lesson_by_quote_id(self, quote_id: UUID) -> Lesson | None:
        stmt = select(Lesson).where(Lesson.quote_id == quote_id)
        return await self.session.scalar(stmt)

    async def list_lessons_for_teacher(self, teacher_id: UUID) -> list[Lesson]:
        """Lessons booked from quotes the teacher issued, oldest first."""
        stmt = (
            select(Lesson)
            .join(LessonQuote, LessonQuote.id == Lesson.quote_id)
            .where(LessonQuote.teacher_id == teacher_id)
            .order_by(Lesson.created_at.asc())
        )
        return list((await self.session.scalars(stmt)).all())
