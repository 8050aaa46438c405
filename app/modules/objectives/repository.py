"""Objectives repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import LessonTypeEnum
from app.modules.objectives.models import Objective


class ObjectivesRepository:
    """DB operations for student objectives."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_objective(
        self,
        student_id: UUID,
        title: str,
        description: str,
        lesson_type: LessonTypeEnum | None,
    ) -> Objective:
        objective = Objective(
            student_id=student_id,
            title=title,
            description=description,
            lesson_type=lesson_type,
        )
        self.session.add(objective)
        await self.session.flush()
        return objective

    async def get_objective_by_id(self, objective_id: UUID) -> Objective | None:
        stmt = select(Objective).where(Objective.id == objective_id)
        return await self.session.scalar(stmt)

    async def list_objectives_for_student(self, student_id: UUID) -> list[Objective]:
        stmt = (
            select(Objective)
            .where(Objective.student_id == student_id)
            .order_by(Objective.created_at.asc())
        )
        return list((await self.session.scalars(stmt)).all())
