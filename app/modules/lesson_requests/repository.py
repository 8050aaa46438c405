"""Lesson request repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import LessonTypeEnum
from app.modules.lesson_requests.models import LessonRequest


class LessonRequestsRepository:
    """DB operations for lesson requests."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_lesson_request(
        self,
        student_id: UUID,
        lesson_type: LessonTypeEnum,
        start_time: datetime,
        duration_minutes: int,
        address_id: UUID,
    ) -> LessonRequest:
        lesson_request = LessonRequest(
            student_id=student_id,
            lesson_type=lesson_type,
            start_time=start_time,
            duration_minutes=duration_minutes,
            address_id=address_id,
        )
        self.session.add(lesson_request)
        await self.session.flush()
        return lesson_request

    async def get_lesson_request_by_id(self, lesson_request_id: UUID) -> LessonRequest | None:
        stmt = select(LessonRequest).where(LessonRequest.id == lesson_request_id)
        return await self.session.scalar(stmt)

    async def get_lesson_request_for_update(self, lesson_request_id: UUID) -> LessonRequest | None:
        """Load a request and row-lock it until the transaction ends."""
        stmt = select(LessonRequest).where(LessonRequest.id == lesson_request_id).with_for_update()
        return await self.session.scalar(stmt)

    async def list_lesson_requests_for_student(self, student_id: UUID) -> list[LessonRequest]:
        stmt = (
            select(LessonRequest)
            .where(LessonRequest.student_id == student_id)
            .order_by(LessonRequest.start_time.asc())
        )
        return list((await self.session.scalars(stmt)).all())
