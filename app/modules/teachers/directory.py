"""Teacher directory consulted by the quote broker."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from app.core.enums import EntityTypeEnum, HourlyRateStatusEnum, LessonTypeEnum
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.teachers.repository import TeachersRepository


@dataclass(frozen=True, slots=True)
class TeacherCandidate:
    teacher_id: UUID
    hourly_rate_in_cents_by_type: Mapping[LessonTypeEnum, int] = field(default_factory=dict)


class TeacherDirectory(Protocol):
    """Source of teachers able to quote a lesson type."""

    async def find_available(self, lesson_type: LessonTypeEnum, limit: int) -> Sequence[TeacherCandidate]:
        """Return up to ``limit`` candidates with their active rates by type."""


class SqlTeacherDirectory:
    """Directory backed by teacher profiles; only ACTIVE rates are offered."""

    def __init__(self, teachers_repository: TeachersRepository, ledger: LifecycleLedger) -> None:
        self.teachers_repository = teachers_repository
        self.ledger = ledger

    async def find_available(self, lesson_type: LessonTypeEnum, limit: int) -> list[TeacherCandidate]:
        teachers = await self.teachers_repository.list_approved_teachers_offering(lesson_type, limit)
        rate_ids = [rate.id for teacher in teachers for rate in teacher.hourly_rates]
        statuses = await self.ledger.current_statuses(EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE, rate_ids)

        candidates: list[TeacherCandidate] = []
        for teacher in teachers:
            active_rates = {
                rate.lesson_type: rate.rate_in_cents
                for rate in teacher.hourly_rates
                if statuses.get(rate.id) == HourlyRateStatusEnum.ACTIVE
            }
            candidates.append(TeacherCandidate(teacher_id=teacher.id, hourly_rate_in_cents_by_type=active_rates))
        return candidates
