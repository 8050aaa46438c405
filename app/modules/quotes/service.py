"""Lesson quote business logic layer."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from datetime import timedelta
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import EntityTypeEnum, LessonQuoteStatusEnum, LessonQuoteTransitionEnum
from app.core.locks import KeyedLockRegistry, lesson_request_locks
from app.modules.lesson_requests.repository import LessonRequestsRepository
from app.modules.lessons.repository import LessonsRepository
from app.modules.lifecycle.repository import StatusRecordRepository
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.outbox.repository import OutboxRepository
from app.modules.quotes.acceptance import QuoteAcceptanceCoordinator
from app.modules.quotes.broker import QuoteBroker
from app.modules.quotes.models import LessonQuote
from app.modules.quotes.repository import QuotesRepository
from app.modules.teachers.directory import SqlTeacherDirectory
from app.modules.teachers.repository import TeachersRepository
from app.shared.exceptions import (
    AlreadyResolvedException,
    ConcurrentConflictException,
    EntityNotFoundException,
    InvalidTransitionException,
)
from app.shared.utils import utc_now

logger = logging.getLogger(__name__)


class QuotesService:
    """Quote reads, rejection and the stale quote sweep."""

    def __init__(
        self,
        quotes_repository: QuotesRepository,
        lesson_requests_repository: LessonRequestsRepository,
        ledger: LifecycleLedger,
        outbox_repository: OutboxRepository,
        *,
        locks: KeyedLockRegistry = lesson_request_locks,
        expiry_batch_size: int = 100,
    ) -> None:
        self.quotes_repository = quotes_repository
        self.lesson_requests_repository = lesson_requests_repository
        self.ledger = ledger
        self.outbox_repository = outbox_repository
        self.locks = locks
        self.expiry_batch_size = expiry_batch_size

    async def with_statuses(self, quotes: Sequence[LessonQuote]) -> list[tuple[LessonQuote, str]]:
        """Pair quotes with their current ledger statuses."""
        statuses = await self.ledger.current_statuses(
            EntityTypeEnum.LESSON_QUOTE,
            [quote.id for quote in quotes],
        )
        return [(quote, statuses[quote.id]) for quote in quotes if quote.id in statuses]

    async def get_quote(self, quote_id: UUID) -> tuple[LessonQuote, str]:
        quote = await self.quotes_repository.get_quote_by_id(quote_id)
        if quote is None:
            raise EntityNotFoundException("Lesson quote not found")
        status = await self.ledger.current_status(EntityTypeEnum.LESSON_QUOTE, quote.id)
        return quote, status

    async def list_quotes(self, lesson_request_id: UUID) -> list[tuple[LessonQuote, str]]:
        """List a request's quotes, cheapest first."""
        lesson_request = await self.lesson_requests_repository.get_lesson_request_by_id(lesson_request_id)
        if lesson_request is None:
            raise EntityNotFoundException("Lesson request not found")
        quotes = await self.quotes_repository.list_quotes_for_request(lesson_request_id)
        return await self.with_statuses(quotes)

    async def reject_quote(self, quote_id: UUID, context: dict | None = None) -> tuple[LessonQuote, str]:
        """Decline an open quote."""
        quote = await self.quotes_repository.get_quote_by_id(quote_id)
        if quote is None:
            raise EntityNotFoundException("Lesson quote not found")

        async with self.locks.hold(quote.lesson_request_id):
            await self.lesson_requests_repository.get_lesson_request_for_update(quote.lesson_request_id)
            status = await self.ledger.current_status(EntityTypeEnum.LESSON_QUOTE, quote.id)
            if status != LessonQuoteStatusEnum.CREATED:
                raise AlreadyResolvedException(f"Lesson quote {quote.id} is already {status}")

            record = await self.ledger.record_transition(
                EntityTypeEnum.LESSON_QUOTE,
                quote.id,
                LessonQuoteTransitionEnum.REJECT,
                context,
            )
            await self.outbox_repository.create_outbox_event(
                aggregate_type=EntityTypeEnum.LESSON_QUOTE,
                aggregate_id=quote.id,
                event_type="lesson_quote.rejected",
                payload={"quote_id": str(quote.id), "lesson_request_id": str(quote.lesson_request_id)},
            )

        logger.info("Rejected quote %s", quote.id)
        return quote, record.status

    async def expire_stale_quotes(self) -> int:
        """Expire open quotes whose expiry time has passed; return how many were expired."""
        now = utc_now()
        candidates = await self.quotes_repository.list_expired_candidates(now, self.expiry_batch_size)

        by_request: dict[UUID, list[LessonQuote]] = defaultdict(list)
        for quote in candidates:
            by_request[quote.lesson_request_id].append(quote)

        expired_count = 0
        for lesson_request_id, quotes in by_request.items():
            async with self.locks.hold(lesson_request_id):
                await self.lesson_requests_repository.get_lesson_request_for_update(lesson_request_id)
                statuses = await self.ledger.current_statuses(
                    EntityTypeEnum.LESSON_QUOTE,
                    [quote.id for quote in quotes],
                )
                for quote in quotes:
                    if statuses.get(quote.id) != LessonQuoteStatusEnum.CREATED:
                        continue
                    try:
                        await self.ledger.record_transition(
                            EntityTypeEnum.LESSON_QUOTE,
                            quote.id,
                            LessonQuoteTransitionEnum.EXPIRE,
                            {"reason": "ttl_elapsed"},
                        )
                    except (InvalidTransitionException, ConcurrentConflictException) as exc:
                        logger.warning("Could not expire stale quote %s: %s", quote.id, exc.message)
                        continue
                    await self.outbox_repository.create_outbox_event(
                        aggregate_type=EntityTypeEnum.LESSON_QUOTE,
                        aggregate_id=quote.id,
                        event_type="lesson_quote.expired",
                        payload={"quote_id": str(quote.id), "reason": "ttl_elapsed"},
                    )
                    expired_count += 1

        if expired_count:
            logger.info("Expired %d stale quotes", expired_count)
        return expired_count


def _ledger(session: AsyncSession) -> LifecycleLedger:
    return LifecycleLedger(StatusRecordRepository(session))


async def get_quotes_service(session: AsyncSession = Depends(get_db_session)) -> QuotesService:
    """Dependency provider for quotes service."""
    settings = get_settings()
    return QuotesService(
        QuotesRepository(session),
        LessonRequestsRepository(session),
        _ledger(session),
        OutboxRepository(session),
        expiry_batch_size=settings.quote_expiry_batch_size,
    )


async def get_quote_broker(session: AsyncSession = Depends(get_db_session)) -> QuoteBroker:
    """Dependency provider for the quote broker."""
    settings = get_settings()
    ledger = _ledger(session)
    return QuoteBroker(
        LessonRequestsRepository(session),
        QuotesRepository(session),
        SqlTeacherDirectory(TeachersRepository(session), ledger),
        ledger,
        OutboxRepository(session),
        quote_ttl=timedelta(hours=settings.quote_ttl_hours),
        directory_limit=settings.teacher_directory_limit,
    )


async def get_quote_acceptance_coordinator(
    session: AsyncSession = Depends(get_db_session),
) -> QuoteAcceptanceCoordinator:
    """Dependency provider for the quote acceptance coordinator."""
    return QuoteAcceptanceCoordinator(
        QuotesRepository(session),
        LessonRequestsRepository(session),
        LessonsRepository(session),
        _ledger(session),
        OutboxRepository(session),
    )
