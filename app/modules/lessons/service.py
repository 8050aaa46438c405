"""Lessons business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import EntityTypeEnum, LessonTransitionEnum
from app.modules.lessons.models import Lesson
from app.modules.lessons.repository import LessonsRepository
from app.modules.lifecycle.repository import StatusRecordRepository
from app.modules.lifecycle.service import LifecycleLedger
from app.shared.exceptions import EntityNotFoundException

logger = logging.getLogger(__name__)


class LessonsService:
    """Lessons domain service."""

    def __init__(self, repository: LessonsRepository, ledger: LifecycleLedger) -> None:
        self.repository = repository
        self.ledger = ledger

    async def _require_lesson(self, lesson_id: UUID) -> Lesson:
        lesson = await self.repository.get_lesson_by_id(lesson_id)
        if lesson is None:
            raise EntityNotFoundException("Lesson not found")
        return lesson

    async def get_lesson(self, lesson_id: UUID) -> tuple[Lesson, str]:
        """Return a lesson with its current status."""
        lesson = await self._require_lesson(lesson_id)
        status = await self.ledger.current_status(EntityTypeEnum.LESSON, lesson.id)
        return lesson, status

    async def get_lesson_for_quote(self, quote_id: UUID) -> tuple[Lesson, str]:
        """Return the lesson booked from an accepted quote."""
        lesson = await self.repository.get_lesson_by_quote_id(quote_id)
        if lesson is None:
            raise EntityNotFoundException("No lesson booked for quote")
        status = await self.ledger.current_status(EntityTypeEnum.LESSON, lesson.id)
        return lesson, status

    async def list_lessons_for_teacher(self, teacher_id: UUID) -> list[tuple[Lesson, str]]:
        lessons = await self.repository.list_lessons_for_teacher(teacher_id)
        statuses = await self.ledger.current_statuses(EntityTypeEnum.LESSON, [lesson.id for lesson in lessons])
        return [(lesson, statuses[lesson.id]) for lesson in lessons if lesson.id in statuses]

    async def transition_lesson(
        self,
        lesson_id: UUID,
        transition: LessonTransitionEnum,
        context: dict | None = None,
    ) -> tuple[Lesson, str]:
        """Move a lesson through its lifecycle."""
        lesson = await self._require_lesson(lesson_id)
        record = await self.ledger.lifecycle_for(EntityTypeEnum.LESSON, lesson.id).record_transition(
            transition,
            context,
        )
        logger.info("Lesson %s moved to %s via %s", lesson.id, record.status, transition)
        return lesson, record.status


async def get_lessons_service(session: AsyncSession = Depends(get_db_session)) -> LessonsService:
    """Dependency provider for lessons service."""
    return LessonsService(LessonsRepository(session), LifecycleLedger(StatusRecordRepository(session)))
