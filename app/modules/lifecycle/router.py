"""Lifecycle ledger API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.enums import EntityTypeEnum
from app.modules.lifecycle.schemas import CurrentStatusRead, StatusRecordRead, TransitionRequest
from app.modules.lifecycle.service import LifecycleLedger, get_lifecycle_ledger
from app.shared.exceptions import BusinessRuleException

router = APIRouter(prefix="/lifecycle", tags=["lifecycle"])


@router.get("/{entity_type}/{entity_id}/status", response_model=CurrentStatusRead)
async def get_current_status(
    entity_type: EntityTypeEnum,
    entity_id: UUID,
    ledger: LifecycleLedger = Depends(get_lifecycle_ledger),
) -> CurrentStatusRead:
    """Return current status of an entity."""
    status = await ledger.current_status(entity_type, entity_id)
    return CurrentStatusRead(
        entity_type=entity_type,
        entity_id=entity_id,
        status=status,
        valid_transitions=list(ledger.table_for(entity_type).valid_transitions(status)),
    )


@router.get("/{entity_type}/{entity_id}/history", response_model=list[StatusRecordRead])
async def get_status_history(
    entity_type: EntityTypeEnum,
    entity_id: UUID,
    ledger: LifecycleLedger = Depends(get_lifecycle_ledger),
) -> list[StatusRecordRead]:
    """Return status history, oldest first."""
    records = await ledger.history(entity_type, entity_id)
    return [StatusRecordRead.model_validate(record) for record in records]


@router.post("/{entity_type}/{entity_id}/transitions", response_model=StatusRecordRead)
async def record_transition(
    entity_type: EntityTypeEnum,
    entity_id: UUID,
    payload: TransitionRequest,
    ledger: LifecycleLedger = Depends(get_lifecycle_ledger),
) -> StatusRecordRead:
    """Apply a transition to an entity."""
    if entity_type == EntityTypeEnum.LESSON_QUOTE:
        raise BusinessRuleException("Lesson quote decisions go through the quotes endpoints")
    record = await ledger.record_transition(entity_type, entity_id, payload.transition, payload.context)
    return StatusRecordRead.model_validate(record)
