"""Teachers repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import EntityTypeEnum, HourlyRateStatusEnum, LessonTypeEnum
from app.modules.lifecycle.models import StatusRecord
from app.modules.teachers.models import TeacherLessonHourlyRate, TeacherProfile


class TeachersRepository:
    """DB operations for teachers domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_profile(
        self,
        display_name: str,
        bio: str,
        experience_years: int,
    ) -> TeacherProfile:
        profile = TeacherProfile(
            display_name=display_name,
            bio=bio,
            experience_years=experience_years,
        )
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def get_profile_by_id(self, profile_id: UUID) -> TeacherProfile | None:
        stmt = select(TeacherProfile).where(TeacherProfile.id == profile_id)
        return await self.session.scalar(stmt)

    async def list_profiles(self, limit: int, offset: int) -> tuple[list[TeacherProfile], int]:
        base_stmt: Select[tuple[TeacherProfile]] = select(TeacherProfile)
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(TeacherProfile.created_at.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return items, total

    async def update_profile(self, profile: TeacherProfile, **changes) -> TeacherProfile:
        for key, value in changes.items():
            if value is not None:
                setattr(profile, key, value)
        await self.session.flush()
        return profile

    async def list_approved_teachers_offering(
        self,
        lesson_type: LessonTypeEnum,
        limit: int,
    ) -> list[TeacherProfile]:
        """Approved teachers whose ``lesson_type`` rate is currently ACTIVE, rates preloaded."""
        latest_status = (
            select(StatusRecord.status)
            .where(
                StatusRecord.entity_type == EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE,
                StatusRecord.entity_id == TeacherLessonHourlyRate.id,
            )
            .order_by(StatusRecord.created_at.desc(), StatusRecord.sequence.desc())
            .limit(1)
            .correlate(TeacherLessonHourlyRate)
            .scalar_subquery()
        )
        offers_type = (
            select(TeacherLessonHourlyRate.teacher_id)
            .where(
                TeacherLessonHourlyRate.lesson_type == lesson_type,
                latest_status == HourlyRateStatusEnum.ACTIVE.value,
            )
            .scalar_subquery()
        )
        stmt = (
            select(TeacherProfile)
            .options(selectinload(TeacherProfile.hourly_rates))
            .where(TeacherProfile.is_approved.is_(True), TeacherProfile.id.in_(offers_type))
            .order_by(TeacherProfile.experience_years.desc(), TeacherProfile.created_at.asc())
            .limit(limit)
        )
        return list((await self.session.scalars(stmt)).all())

    async def create_rate(
        self,
        teacher_id: UUID,
        lesson_type: LessonTypeEnum,
        rate_in_cents: int,
    ) -> TeacherLessonHourlyRate:
        rate = TeacherLessonHourlyRate(
            teacher_id=teacher_id,
            lesson_type=lesson_type,
            rate_in_cents=rate_in_cents,
        )
        self.session.add(rate)
        await self.session.flush()
        return rate

    async def get_rate_by_id(self, rate_id: UUID) -> TeacherLessonHourlyRate | None:
        stmt = select(TeacherLessonHourlyRate).where(TeacherLessonHourlyRate.id == rate_id)
        return await self.session.scalar(stmt)

    async def get_rate_for_type(
        self,
        teacher_id: UUID,
        lesson_type: LessonTypeEnum,
    ) -> TeacherLessonHourlyRate | None:
        stmt = select(TeacherLessonHourlyRate).where(
            TeacherLessonHourlyRate.teacher_id == teacher_id,
            TeacherLessonHourlyRate.lesson_type == lesson_type,
        )
        return await self.session.scalar(stmt)

    async def list_rates_for_teacher(self, teacher_id: UUID) -> list[TeacherLessonHourlyRate]:
        stmt = (
            select(TeacherLessonHourlyRate)
            .where(TeacherLessonHourlyRate.teacher_id == teacher_id)
            .order_by(TeacherLessonHourlyRate.lesson_type.asc())
        )
        return list((await self.session.scalars(stmt)).all())
