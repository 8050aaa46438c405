"""Lesson quotes API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.modules.lessons.schemas import LessonRead
from app.modules.lessons.service import LessonsService, get_lessons_service
from app.modules.quotes.acceptance import QuoteAcceptanceCoordinator
from app.modules.quotes.schemas import (
    QuoteAcceptanceRead,
    QuoteDecisionRequest,
    QuoteRead,
    StaleQuotesExpiredRead,
)
from app.modules.quotes.service import (
    QuotesService,
    get_quote_acceptance_coordinator,
    get_quotes_service,
)

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/expire-stale", response_model=StaleQuotesExpiredRead)
async def expire_stale_quotes(
    service: QuotesService = Depends(get_quotes_service),
) -> StaleQuotesExpiredRead:
    """Expire open quotes whose expiry time has passed."""
    expired_count = await service.expire_stale_quotes()
    return StaleQuotesExpiredRead(expired_count=expired_count)


@router.get("/{quote_id}", response_model=QuoteRead)
async def get_quote(
    quote_id: UUID,
    service: QuotesService = Depends(get_quotes_service),
) -> QuoteRead:
    """Get quote with its current status."""
    quote, status = await service.get_quote(quote_id)
    return QuoteRead.from_quote(quote, status)


@router.get("/{quote_id}/lesson", response_model=LessonRead)
async def get_quote_lesson(
    quote_id: UUID,
    lessons_service: LessonsService = Depends(get_lessons_service),
) -> LessonRead:
    """Get the lesson booked from an accepted quote."""
    lesson, lesson_status = await lessons_service.get_lesson_for_quote(quote_id)
    return LessonRead.from_lesson(lesson, lesson_status)


@router.post("/{quote_id}/accept", response_model=QuoteAcceptanceRead)
async def accept_quote(
    quote_id: UUID,
    payload: QuoteDecisionRequest | None = None,
    coordinator: QuoteAcceptanceCoordinator = Depends(get_quote_acceptance_coordinator),
    service: QuotesService = Depends(get_quotes_service),
) -> QuoteAcceptanceRead:
    """Accept quote, expire its competitors and book the lesson."""
    context = payload.context if payload is not None else None
    result = await coordinator.accept_quote(quote_id, context)
    _, quote_status = await service.get_quote(result.accepted_quote.id)
    return QuoteAcceptanceRead(
        lesson=LessonRead.from_lesson(result.lesson, result.lesson_status),
        accepted_quote=QuoteRead.from_quote(result.accepted_quote, quote_status),
        expired_quote_ids=result.expired_quote_ids,
    )


@router.post("/{quote_id}/reject", response_model=QuoteRead)
async def reject_quote(
    quote_id: UUID,
    payload: QuoteDecisionRequest | None = None,
    service: QuotesService = Depends(get_quotes_service),
) -> QuoteRead:
    """Reject an open quote."""
    context = payload.context if payload is not None else None
    quote, status = await service.reject_quote(quote_id, context)
    return QuoteRead.from_quote(quote, status)
