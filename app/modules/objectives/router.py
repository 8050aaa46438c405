"""Objectives API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.objectives.schemas import ObjectiveCreate, ObjectiveRead, ObjectiveTransitionRequest
from app.modules.objectives.service import ObjectivesService, get_objectives_service

router = APIRouter(prefix="/objectives", tags=["objectives"])


@router.post("", response_model=ObjectiveRead, status_code=status.HTTP_201_CREATED)
async def create_objective(
    payload: ObjectiveCreate,
    service: ObjectivesService = Depends(get_objectives_service),
) -> ObjectiveRead:
    """Create objective."""
    objective, objective_status = await service.create_objective(payload)
    return ObjectiveRead.from_objective(objective, objective_status)


@router.get("", response_model=list[ObjectiveRead])
async def list_objectives(
    student_id: UUID,
    service: ObjectivesService = Depends(get_objectives_service),
) -> list[ObjectiveRead]:
    """List objectives of a student."""
    items = await service.list_objectives(student_id)
    return [ObjectiveRead.from_objective(objective, objective_status) for objective, objective_status in items]


@router.get("/{objective_id}", response_model=ObjectiveRead)
async def get_objective(
    objective_id: UUID,
    service: ObjectivesService = Depends(get_objectives_service),
) -> ObjectiveRead:
    """Get objective with its current status."""
    objective, objective_status = await service.get_objective(objective_id)
    return ObjectiveRead.from_objective(objective, objective_status)


@router.post("/{objective_id}/transitions", response_model=ObjectiveRead)
async def transition_objective(
    objective_id: UUID,
    payload: ObjectiveTransitionRequest,
    service: ObjectivesService = Depends(get_objectives_service),
) -> ObjectiveRead:
    """Start, complete or abandon objective."""
    objective, objective_status = await service.transition_objective(
        objective_id,
        payload.transition,
        payload.context,
    )
    return ObjectiveRead.from_objective(objective, objective_status)
