"""Lesson quote schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import LessonQuoteStatusEnum
from app.modules.lessons.schemas import LessonRead


class QuoteDecisionRequest(BaseModel):
    """Optional context stored with an accept or reject decision."""

    context: dict | None = None


class QuoteRead(BaseModel):
    """Lesson quote response schema with its ledger status."""

    id: UUID
    lesson_request_id: UUID
    teacher_id: UUID
    hourly_rate_in_cents: int
    cost_in_cents: int
    status: LessonQuoteStatusEnum
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_quote(cls, quote, status: str) -> "QuoteRead":
        return cls(
            id=quote.id,
            lesson_request_id=quote.lesson_request_id,
            teacher_id=quote.teacher_id,
            hourly_rate_in_cents=quote.hourly_rate_in_cents,
            cost_in_cents=quote.cost_in_cents,
            status=status,
            created_at=quote.created_at,
            expires_at=quote.expires_at,
        )


class QuoteAcceptanceRead(BaseModel):
    """Outcome of accepting a quote."""

    lesson: LessonRead
    accepted_quote: QuoteRead
    expired_quote_ids: list[UUID]


class StaleQuotesExpiredRead(BaseModel):
    """Outcome of the stale quote sweep."""

    expired_count: int
