"""Lesson requests API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.lesson_requests.schemas import LessonRequestCreate, LessonRequestRead
from app.modules.lesson_requests.service import LessonRequestsService, get_lesson_requests_service
from app.modules.quotes.broker import QuoteBroker
from app.modules.quotes.schemas import QuoteRead
from app.modules.quotes.service import QuotesService, get_quote_broker, get_quotes_service

router = APIRouter(prefix="/lesson-requests", tags=["lesson-requests"])


@router.post("", response_model=LessonRequestRead, status_code=status.HTTP_201_CREATED)
async def create_lesson_request(
    payload: LessonRequestCreate,
    service: LessonRequestsService = Depends(get_lesson_requests_service),
) -> LessonRequestRead:
    """Create lesson request."""
    lesson_request = await service.create_lesson_request(payload)
    return LessonRequestRead.model_validate(lesson_request)


@router.get("", response_model=list[LessonRequestRead])
async def list_lesson_requests(
    student_id: UUID,
    service: LessonRequestsService = Depends(get_lesson_requests_service),
) -> list[LessonRequestRead]:
    """List lesson requests of a student."""
    items = await service.list_for_student(student_id)
    return [LessonRequestRead.model_validate(item) for item in items]


@router.get("/{lesson_request_id}", response_model=LessonRequestRead)
async def get_lesson_request(
    lesson_request_id: UUID,
    service: LessonRequestsService = Depends(get_lesson_requests_service),
) -> LessonRequestRead:
    """Get lesson request."""
    lesson_request = await service.get_lesson_request(lesson_request_id)
    return LessonRequestRead.model_validate(lesson_request)


@router.post(
    "/{lesson_request_id}/quotes",
    response_model=list[QuoteRead],
    status_code=status.HTTP_201_CREATED,
)
async def generate_quotes(
    lesson_request_id: UUID,
    broker: QuoteBroker = Depends(get_quote_broker),
    service: QuotesService = Depends(get_quotes_service),
) -> list[QuoteRead]:
    """Generate competing quotes; repeated calls return the existing ones."""
    quotes = await broker.generate_quotes(lesson_request_id)
    items = await service.with_statuses(quotes)
    return [QuoteRead.from_quote(quote, quote_status) for quote, quote_status in items]


@router.get("/{lesson_request_id}/quotes", response_model=list[QuoteRead])
async def list_quotes(
    lesson_request_id: UUID,
    service: QuotesService = Depends(get_quotes_service),
) -> list[QuoteRead]:
    """List quotes of a lesson request with their statuses."""
    items = await service.list_quotes(lesson_request_id)
    return [QuoteRead.from_quote(quote, quote_status) for quote, quote_status in items]
