"""Teachers API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.config import get_settings
from app.core.enums import LessonTypeEnum
from app.modules.teachers.directory import SqlTeacherDirectory
from app.modules.teachers.schemas import (
    HourlyRateCreate,
    HourlyRateRead,
    HourlyRateTransitionRequest,
    TeacherCandidateRead,
    TeacherProfileCreate,
    TeacherProfileRead,
    TeacherProfileUpdate,
)
from app.modules.teachers.service import TeachersService, get_teacher_directory, get_teachers_service
from app.shared.pagination import Page, build_page, get_pagination_params

settings = get_settings()
router = APIRouter(prefix="/teachers", tags=["teachers"])


@router.post("/profiles", response_model=TeacherProfileRead, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: TeacherProfileCreate,
    service: TeachersService = Depends(get_teachers_service),
) -> TeacherProfileRead:
    """Create teacher profile."""
    profile = await service.create_profile(payload)
    return TeacherProfileRead.model_validate(profile)


@router.patch("/profiles/{profile_id}", response_model=TeacherProfileRead)
async def update_profile(
    profile_id: UUID,
    payload: TeacherProfileUpdate,
    service: TeachersService = Depends(get_teachers_service),
) -> TeacherProfileRead:
    """Update teacher profile."""
    profile = await service.update_profile(profile_id, payload)
    return TeacherProfileRead.model_validate(profile)


@router.get("/profiles", response_model=Page[TeacherProfileRead])
async def list_profiles(
    pagination=Depends(get_pagination_params),
    service: TeachersService = Depends(get_teachers_service),
) -> Page[TeacherProfileRead]:
    """List teacher profiles."""
    items, total = await service.list_profiles(pagination.limit, pagination.offset)
    serialized = [TeacherProfileRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/available", response_model=list[TeacherCandidateRead])
async def list_available_teachers(
    lesson_type: LessonTypeEnum,
    limit: int = Query(default=settings.teacher_directory_limit, ge=1, le=100),
    directory: SqlTeacherDirectory = Depends(get_teacher_directory),
) -> list[TeacherCandidateRead]:
    """List teachers able to quote a lesson type."""
    candidates = await directory.find_available(lesson_type, limit)
    return [
        TeacherCandidateRead(
            teacher_id=candidate.teacher_id,
            hourly_rate_in_cents_by_type=dict(candidate.hourly_rate_in_cents_by_type),
        )
        for candidate in candidates
    ]


@router.post(
    "/profiles/{teacher_id}/rates",
    response_model=HourlyRateRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_rate(
    teacher_id: UUID,
    payload: HourlyRateCreate,
    service: TeachersService = Depends(get_teachers_service),
) -> HourlyRateRead:
    """Create hourly rate for a lesson type."""
    rate, rate_status = await service.create_rate(teacher_id, payload)
    return HourlyRateRead.from_rate(rate, rate_status)


@router.get("/profiles/{teacher_id}/rates", response_model=list[HourlyRateRead])
async def list_rates(
    teacher_id: UUID,
    service: TeachersService = Depends(get_teachers_service),
) -> list[HourlyRateRead]:
    """List hourly rates of a teacher."""
    items = await service.list_rates(teacher_id)
    return [HourlyRateRead.from_rate(rate, rate_status) for rate, rate_status in items]


@router.post("/profiles/{teacher_id}/rates/{rate_id}/transitions", response_model=HourlyRateRead)
async def transition_rate(
    teacher_id: UUID,
    rate_id: UUID,
    payload: HourlyRateTransitionRequest,
    service: TeachersService = Depends(get_teachers_service),
) -> HourlyRateRead:
    """Activate or deactivate hourly rate."""
    rate, rate_status = await service.transition_rate(teacher_id, rate_id, payload.transition, payload.context)
    return HourlyRateRead.from_rate(rate, rate_status)
