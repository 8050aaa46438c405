"""Lesson quote repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from app.core.enums import EntityTypeEnum, LessonQuoteStatusEnum
from app.modules.lifecycle.models import StatusRecord
from app.modules.quotes.models import LessonQuote


class QuotesRepository:
    """DB operations for lesson quotes."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def savepoint(self) -> AsyncSessionTransaction:
        """Open a nested transaction around a batch of quote writes."""
        return self.session.begin_nested()

    async def create_quote(
        self,
        lesson_request_id: UUID,
        teacher_id: UUID,
        hourly_rate_in_cents: int,
        cost_in_cents: int,
        created_at: datetime,
        expires_at: datetime,
    ) -> LessonQuote:
        quote = LessonQuote(
            lesson_request_id=lesson_request_id,
            teacher_id=teacher_id,
            hourly_rate_in_cents=hourly_rate_in_cents,
            cost_in_cents=cost_in_cents,
            created_at=created_at,
            expires_at=expires_at,
        )
        async with self.session.begin_nested():
            self.session.add(quote)
            await self.session.flush()
        return quote

    async def get_quote_by_id(self, quote_id: UUID) -> LessonQuote | None:
        stmt = select(LessonQuote).where(LessonQuote.id == quote_id)
        return await self.session.scalar(stmt)

    async def list_quotes_for_request(self, lesson_request_id: UUID) -> list[LessonQuote]:
        stmt = (
            select(LessonQuote)
            .where(LessonQuote.lesson_request_id == lesson_request_id)
            .order_by(LessonQuote.cost_in_cents.asc(), LessonQuote.created_at.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_expired_candidates(self, now: datetime, limit: int) -> list[LessonQuote]:
        """Quotes past their expiry whose latest ledger status is still CREATED."""
        latest_status = (
            select(StatusRecord.status)
            .where(
                StatusRecord.entity_type == EntityTypeEnum.LESSON_QUOTE,
                StatusRecord.entity_id == LessonQuote.id,
            )
            .order_by(StatusRecord.created_at.desc(), StatusRecord.sequence.desc())
            .limit(1)
            .correlate(LessonQuote)
            .scalar_subquery()
        )
        stmt = (
            select(LessonQuote)
            .where(LessonQuote.expires_at <= now, latest_status == LessonQuoteStatusEnum.CREATED.value)
            .order_by(LessonQuote.expires_at.asc())
            .limit(limit)
        )
        return list((await self.session.scalars(stmt)).all())
