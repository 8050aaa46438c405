"""Lesson request business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.modules.lesson_requests.models import LessonRequest
from app.modules.lesson_requests.repository import LessonRequestsRepository
from app.modules.lesson_requests.schemas import LessonRequestCreate
from app.shared.exceptions import BusinessRuleException, EntityNotFoundException
from app.shared.utils import ensure_utc, utc_now


class LessonRequestsService:
    """Lesson request domain service."""

    def __init__(self, repository: LessonRequestsRepository) -> None:
        self.repository = repository

    async def create_lesson_request(self, payload: LessonRequestCreate) -> LessonRequest:
        """Create an immutable lesson request."""
        start_time = ensure_utc(payload.start_time)
        if start_time <= utc_now():
            raise BusinessRuleException("Cannot request a lesson in the past")

        return await self.repository.create_lesson_request(
            student_id=payload.student_id,
            lesson_type=payload.lesson_type,
            start_time=start_time,
            duration_minutes=payload.duration_minutes,
            address_id=payload.address_id,
        )

    async def get_lesson_request(self, lesson_request_id: UUID) -> LessonRequest:
        lesson_request = await self.repository.get_lesson_request_by_id(lesson_request_id)
        if lesson_request is None:
            raise EntityNotFoundException("Lesson request not found")
        return lesson_request

    async def list_for_student(self, student_id: UUID) -> list[LessonRequest]:
        return await self.repository.list_lesson_requests_for_student(student_id)


async def get_lesson_requests_service(
    session: AsyncSession = Depends(get_db_session),
) -> LessonRequestsService:
    """Dependency provider for lesson requests service."""
    return LessonRequestsService(LessonRequestsRepository(session))
