"""Lifecycle ledger repository layer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import EntityTypeEnum
from app.modules.lifecycle.models import StatusRecord


class StatusRecordRepository:
    """Append-only DB operations for status records."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append_record(
        self,
        entity_type: EntityTypeEnum,
        entity_id: UUID,
        sequence: int,
        status: str,
        transition_applied: str | None,
        context: dict | None,
        created_at: datetime,
    ) -> StatusRecord:
        record = StatusRecord(
            entity_type=entity_type,
            entity_id=entity_id,
            sequence=sequence,
            status=status,
            transition_applied=transition_applied,
            context=context,
            created_at=created_at,
        )
        # A savepoint keeps the outer transaction usable when the sequence is taken.
        async with self.session.begin_nested():
            self.session.add(record)
            await self.session.flush()
        return record

    async def list_records(self, entity_type: EntityTypeEnum, entity_id: UUID) -> list[StatusRecord]:
        stmt = (
            select(StatusRecord)
            .where(StatusRecord.entity_type == entity_type, StatusRecord.entity_id == entity_id)
            .order_by(StatusRecord.created_at.asc(), StatusRecord.sequence.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def get_latest_record(self, entity_type: EntityTypeEnum, entity_id: UUID) -> StatusRecord | None:
        stmt = (
            select(StatusRecord)
            .where(StatusRecord.entity_type == entity_type, StatusRecord.entity_id == entity_id)
            .order_by(StatusRecord.created_at.desc(), StatusRecord.sequence.desc())
            .limit(1)
        )
        return await self.session.scalar(stmt)

    async def get_max_sequence(self, entity_type: EntityTypeEnum, entity_id: UUID) -> int:
        stmt = (
            select(StatusRecord.sequence)
            .where(StatusRecord.entity_type == entity_type, StatusRecord.entity_id == entity_id)
            .order_by(StatusRecord.sequence.desc())
            .limit(1)
        )
        return int((await self.session.scalar(stmt)) or 0)

    async def list_latest_records(
        self,
        entity_type: EntityTypeEnum,
        entity_ids: Sequence[UUID],
    ) -> dict[UUID, StatusRecord]:
        if not entity_ids:
            return {}
        stmt = (
            select(StatusRecord)
            .where(StatusRecord.entity_type == entity_type, StatusRecord.entity_id.in_(entity_ids))
            .order_by(StatusRecord.created_at.asc(), StatusRecord.sequence.asc())
        )
        latest: dict[UUID, StatusRecord] = {}
        for record in (await self.session.scalars(stmt)).all():
            latest[record.entity_id] = record
        return latest
