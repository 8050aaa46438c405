"""Lessons API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.modules.lessons.schemas import LessonRead, LessonTransitionRequest
from app.modules.lessons.service import LessonsService, get_lessons_service

router = APIRouter(prefix="/lessons", tags=["lessons"])


@router.get("", response_model=list[LessonRead])
async def list_lessons(
    teacher_id: UUID,
    service: LessonsService = Depends(get_lessons_service),
) -> list[LessonRead]:
    """List lessons booked with a teacher."""
    items = await service.list_lessons_for_teacher(teacher_id)
    return [LessonRead.from_lesson(lesson, lesson_status) for lesson, lesson_status in items]


@router.get("/{lesson_id}", response_model=LessonRead)
async def get_lesson(
    lesson_id: UUID,
    service: LessonsService = Depends(get_lessons_service),
) -> LessonRead:
    """Get lesson with its current status."""
    lesson, status = await service.get_lesson(lesson_id)
    return LessonRead.from_lesson(lesson, status)


@router.post("/{lesson_id}/transitions", response_model=LessonRead)
async def transition_lesson(
    lesson_id: UUID,
    payload: LessonTransitionRequest,
    service: LessonsService = Depends(get_lessons_service),
) -> LessonRead:
    """Accept, reject, complete or void a lesson."""
    lesson, status = await service.transition_lesson(lesson_id, payload.transition, payload.context)
    return LessonRead.from_lesson(lesson, status)
