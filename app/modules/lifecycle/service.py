"""Lifecycle ledger: append-only status history validated by transition tables."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import EntityTypeEnum
from app.core.metrics import STATUS_TRANSITIONS_TOTAL
from app.modules.lifecycle.models import StatusRecord
from app.modules.lifecycle.repository import StatusRecordRepository
from app.modules.lifecycle.transitions import TRANSITION_TABLES, TransitionTable
from app.shared.exceptions import (
    ConcurrentConflictException,
    ConflictException,
    EntityNotFoundException,
    InvalidTransitionException,
)
from app.shared.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)

CORRECTION_TRANSITION = "CORRECTION"


class HasLifecycle(Protocol):
    """Capability shared by every entity whose status lives in the ledger."""

    async def current_status(self) -> str:
        """Return the entity's current status."""

    async def record_transition(self, transition: str, context: dict | None = None) -> StatusRecord:
        """Apply a transition and return the appended record."""


@dataclass(slots=True)
class EntityLifecycle:
    """Ledger view bound to a single entity."""

    ledger: LifecycleLedger
    entity_type: EntityTypeEnum
    entity_id: UUID

    async def current_status(self) -> str:
        return await self.ledger.current_status(self.entity_type, self.entity_id)

    async def record_transition(self, transition: str, context: dict | None = None) -> StatusRecord:
        return await self.ledger.record_transition(self.entity_type, self.entity_id, transition, context)

    async def history(self) -> list[StatusRecord]:
        return await self.ledger.history(self.entity_type, self.entity_id)


class LifecycleLedger:
    """Owns status records for all entity types.

    The ledger reasons about one entity at a time. Multi-entity workflows
    (quote acceptance, for instance) provide their own critical sections and
    rely on the per-entity sequence constraint to detect concurrent appends.
    """

    def __init__(
        self,
        repository: StatusRecordRepository,
        tables: Mapping[EntityTypeEnum, TransitionTable] = TRANSITION_TABLES,
    ) -> None:
        self.repository = repository
        self.tables = tables

    def table_for(self, entity_type: EntityTypeEnum) -> TransitionTable:
        return self.tables[EntityTypeEnum(entity_type)]

    def lifecycle_for(self, entity_type: EntityTypeEnum, entity_id: UUID) -> EntityLifecycle:
        """Bind the ledger to one entity."""
        return EntityLifecycle(ledger=self, entity_type=EntityTypeEnum(entity_type), entity_id=entity_id)

    async def current_status(self, entity_type: EntityTypeEnum, entity_id: UUID) -> str:
        """Return the status of the most recent record for an entity."""
        record = await self.repository.get_latest_record(entity_type, entity_id)
        if record is None:
            raise EntityNotFoundException(f"No status history for {entity_type} {entity_id}")
        return record.status

    async def current_statuses(
        self,
        entity_type: EntityTypeEnum,
        entity_ids: Sequence[UUID],
    ) -> dict[UUID, str]:
        """Resolve current statuses for many entities; ids without history are omitted."""
        latest = await self.repository.list_latest_records(entity_type, list(entity_ids))
        return {entity_id: record.status for entity_id, record in latest.items()}

    async def history(self, entity_type: EntityTypeEnum, entity_id: UUID) -> list[StatusRecord]:
        """Return status records oldest first."""
        return await self.repository.list_records(entity_type, entity_id)

    async def register_initial_status(
        self,
        entity_type: EntityTypeEnum,
        entity_id: UUID,
        context: dict | None = None,
    ) -> StatusRecord:
        """Start an entity's history with its table's initial status."""
        table = self.table_for(entity_type)
        latest = await self.repository.get_latest_record(entity_type, entity_id)
        if latest is not None:
            raise ConflictException(f"{entity_type} {entity_id} already has a status history")
        return await self._append(entity_type, entity_id, table.initial_status, None, context, latest)

    async def record_transition(
        self,
        entity_type: EntityTypeEnum,
        entity_id: UUID,
        transition: str,
        context: dict | None = None,
    ) -> StatusRecord:
        """Validate ``transition`` against the current status and append the result."""
        table = self.table_for(entity_type)
        latest = await self.repository.get_latest_record(entity_type, entity_id)
        if latest is None:
            raise EntityNotFoundException(f"No status history for {entity_type} {entity_id}")

        target = table.resulting_status(latest.status, transition)
        if target is None:
            raise InvalidTransitionException(
                f"Cannot apply {transition} to {entity_type} {entity_id} in status {latest.status}",
            )
        return await self._append(entity_type, entity_id, target, str(transition), context, latest)

    async def record_correction(
        self,
        entity_type: EntityTypeEnum,
        entity_id: UUID,
        status: str,
        context: dict | None = None,
    ) -> StatusRecord:
        """Append a compensating record that restores ``status`` outside the table."""
        table = self.table_for(entity_type)
        if str(status) not in table.statuses:
            raise InvalidTransitionException(f"{status} is not a {entity_type} status")
        latest = await self.repository.get_latest_record(entity_type, entity_id)
        if latest is None:
            raise EntityNotFoundException(f"No status history for {entity_type} {entity_id}")

        logger.warning(
            "Correcting %s %s from %s back to %s",
            entity_type,
            entity_id,
            latest.status,
            status,
        )
        return await self._append(entity_type, entity_id, str(status), CORRECTION_TRANSITION, context, latest)

    async def _append(
        self,
        entity_type: EntityTypeEnum,
        entity_id: UUID,
        status: str,
        transition: str | None,
        context: dict | None,
        latest: StatusRecord | None,
    ) -> StatusRecord:
        created_at = utc_now()
        sequence = 1
        if latest is not None:
            # Keep created_at monotonic per entity so the newest record stays current.
            created_at = max(created_at, ensure_utc(latest.created_at))
            sequence = await self.repository.get_max_sequence(entity_type, entity_id) + 1

        try:
            record = await self.repository.append_record(
                entity_type=entity_type,
                entity_id=entity_id,
                sequence=sequence,
                status=str(status),
                transition_applied=transition,
                context=context,
                created_at=created_at,
            )
        except IntegrityError as exc:
            raise ConcurrentConflictException(
                f"Concurrent status change detected for {entity_type} {entity_id}",
            ) from exc

        STATUS_TRANSITIONS_TOTAL.labels(
            entity_type=str(entity_type),
            transition=transition or "INITIAL",
        ).inc()
        logger.debug("Recorded %s %s -> %s (%s)", entity_type, entity_id, status, transition)
        return record


async def get_lifecycle_ledger(session: AsyncSession = Depends(get_db_session)) -> LifecycleLedger:
    """Dependency provider for the lifecycle ledger."""
    return LifecycleLedger(StatusRecordRepository(session))
