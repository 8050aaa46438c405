"""Objectives business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import EntityTypeEnum, ObjectiveTransitionEnum
from app.modules.lifecycle.repository import StatusRecordRepository
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.objectives.models import Objective
from app.modules.objectives.repository import ObjectivesRepository
from app.modules.objectives.schemas import ObjectiveCreate
from app.shared.exceptions import EntityNotFoundException


class ObjectivesService:
    """Student objectives domain service."""

    def __init__(self, repository: ObjectivesRepository, ledger: LifecycleLedger) -> None:
        self.repository = repository
        self.ledger = ledger

    async def create_objective(self, payload: ObjectiveCreate) -> tuple[Objective, str]:
        objective = await self.repository.create_objective(
            student_id=payload.student_id,
            title=payload.title,
            description=payload.description,
            lesson_type=payload.lesson_type,
        )
        record = await self.ledger.register_initial_status(EntityTypeEnum.OBJECTIVE, objective.id)
        return objective, record.status

    async def get_objective(self, objective_id: UUID) -> tuple[Objective, str]:
        objective = await self.repository.get_objective_by_id(objective_id)
        if objective is None:
            raise EntityNotFoundException("Objective not found")
        status = await self.ledger.current_status(EntityTypeEnum.OBJECTIVE, objective.id)
        return objective, status

    async def list_objectives(self, student_id: UUID) -> list[tuple[Objective, str]]:
        objectives = await self.repository.list_objectives_for_student(student_id)
        statuses = await self.ledger.current_statuses(
            EntityTypeEnum.OBJECTIVE,
            [objective.id for objective in objectives],
        )
        return [(objective, statuses[objective.id]) for objective in objectives if objective.id in statuses]

    async def transition_objective(
        self,
        objective_id: UUID,
        transition: ObjectiveTransitionEnum,
        context: dict | None = None,
    ) -> tuple[Objective, str]:
        """Start, complete or abandon an objective."""
        objective = await self.repository.get_objective_by_id(objective_id)
        if objective is None:
            raise EntityNotFoundException("Objective not found")
        lifecycle = self.ledger.lifecycle_for(EntityTypeEnum.OBJECTIVE, objective.id)
        record = await lifecycle.record_transition(transition, context)
        return objective, record.status


async def get_objectives_service(session: AsyncSession = Depends(get_db_session)) -> ObjectivesService:
    """Dependency provider for objectives service."""
    return ObjectivesService(ObjectivesRepository(session), LifecycleLedger(StatusRecordRepository(session)))
