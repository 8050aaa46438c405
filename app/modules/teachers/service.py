"""Teachers business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import EntityTypeEnum, HourlyRateTransitionEnum
from app.modules.lifecycle.repository import StatusRecordRepository
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.teachers.directory import SqlTeacherDirectory
from app.modules.teachers.models import TeacherLessonHourlyRate, TeacherProfile
from app.modules.teachers.repository import TeachersRepository
from app.modules.teachers.schemas import HourlyRateCreate, TeacherProfileCreate, TeacherProfileUpdate
from app.shared.exceptions import ConflictException, EntityNotFoundException

logger = logging.getLogger(__name__)


class TeachersService:
    """Teachers domain service: profiles and hourly rate lifecycles."""

    def __init__(self, repository: TeachersRepository, ledger: LifecycleLedger) -> None:
        self.repository = repository
        self.ledger = ledger

    async def create_profile(self, payload: TeacherProfileCreate) -> TeacherProfile:
        """Create teacher profile."""
        return await self.repository.create_profile(
            display_name=payload.display_name,
            bio=payload.bio,
            experience_years=payload.experience_years,
        )

    async def update_profile(self, profile_id: UUID, payload: TeacherProfileUpdate) -> TeacherProfile:
        """Update teacher profile."""
        profile = await self.repository.get_profile_by_id(profile_id)
        if profile is None:
            raise EntityNotFoundException("Teacher profile not found")
        return await self.repository.update_profile(profile, **payload.model_dump(exclude_none=True))

    async def list_profiles(self, limit: int, offset: int) -> tuple[list[TeacherProfile], int]:
        """List teacher profiles."""
        return await self.repository.list_profiles(limit=limit, offset=offset)

    async def create_rate(
        self,
        teacher_id: UUID,
        payload: HourlyRateCreate,
    ) -> tuple[TeacherLessonHourlyRate, str]:
        """Create a rate for a lesson type and start it ACTIVE."""
        profile = await self.repository.get_profile_by_id(teacher_id)
        if profile is None:
            raise EntityNotFoundException("Teacher profile not found")

        existing = await self.repository.get_rate_for_type(teacher_id, payload.lesson_type)
        if existing is not None:
            status = await self.ledger.current_status(EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE, existing.id)
            raise ConflictException(
                f"Teacher already has a {status} rate for {payload.lesson_type}",
            )

        rate = await self.repository.create_rate(
            teacher_id=teacher_id,
            lesson_type=payload.lesson_type,
            rate_in_cents=payload.rate_in_cents,
        )
        record = await self.ledger.register_initial_status(EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE, rate.id)
        logger.info("Created %s rate %s for teacher %s", payload.lesson_type, rate.id, teacher_id)
        return rate, record.status

    async def list_rates(self, teacher_id: UUID) -> list[tuple[TeacherLessonHourlyRate, str]]:
        """List a teacher's rates with their current statuses."""
        rates = await self.repository.list_rates_for_teacher(teacher_id)
        statuses = await self.ledger.current_statuses(
            EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE,
            [rate.id for rate in rates],
        )
        return [(rate, statuses[rate.id]) for rate in rates if rate.id in statuses]

    async def transition_rate(
        self,
        teacher_id: UUID,
        rate_id: UUID,
        transition: HourlyRateTransitionEnum,
        context: dict | None = None,
    ) -> tuple[TeacherLessonHourlyRate, str]:
        """Activate or deactivate one of the teacher's rates."""
        rate = await self.repository.get_rate_by_id(rate_id)
        if rate is None or rate.teacher_id != teacher_id:
            raise EntityNotFoundException("Hourly rate not found for teacher")

        lifecycle = self.ledger.lifecycle_for(EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE, rate.id)
        record = await lifecycle.record_transition(transition, context)
        return rate, record.status


async def get_teachers_service(session: AsyncSession = Depends(get_db_session)) -> TeachersService:
    """Dependency provider for teachers service."""
    return TeachersService(TeachersRepository(session), LifecycleLedger(StatusRecordRepository(session)))


async def get_teacher_directory(session: AsyncSession = Depends(get_db_session)) -> SqlTeacherDirectory:
    """Dependency provider for the SQL teacher directory."""
    return SqlTeacherDirectory(TeachersRepository(session), LifecycleLedger(StatusRecordRepository(session)))
