"""Quote acceptance: settle every competing quote and book exactly one lesson."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from app.core.enums import (
    EntityTypeEnum,
    LessonQuoteStatusEnum,
    LessonQuoteTransitionEnum,
)
from app.core.locks import KeyedLockRegistry, lesson_request_locks
from app.core.metrics import QUOTE_ACCEPTANCES_TOTAL
from app.modules.lesson_requests.repository import LessonRequestsRepository
from app.modules.lessons.models import Lesson
from app.modules.lessons.repository import LessonsRepository
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.outbox.repository import OutboxRepository
from app.modules.quotes.models import LessonQuote
from app.modules.quotes.repository import QuotesRepository
from app.shared.exceptions import (
    AlreadyResolvedException,
    AppException,
    ConcurrentConflictException,
    ConflictException,
    EntityNotFoundException,
    InvalidTransitionException,
    PersistenceFailureException,
    QuoteExpiredException,
)
from app.shared.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QuoteAcceptanceResult:
    lesson: Lesson
    lesson_status: str
    accepted_quote: LessonQuote
    expired_quote_ids: list[UUID] = field(default_factory=list)


class QuoteAcceptanceCoordinator:
    """Accept one quote of a lesson request.

    Within the request's critical section the chosen quote is accepted, every
    open sibling is expired and the lesson is booked. If booking fails the
    quote is restored to CREATED with a correction record and the caller gets
    a persistence failure; expired siblings stay expired.
    """

    def __init__(
        self,
        quotes_repository: QuotesRepository,
        lesson_requests_repository: LessonRequestsRepository,
        lessons_repository: LessonsRepository,
        ledger: LifecycleLedger,
        outbox_repository: OutboxRepository,
        *,
        locks: KeyedLockRegistry = lesson_request_locks,
    ) -> None:
        self.quotes_repository = quotes_repository
        self.lesson_requests_repository = lesson_requests_repository
        self.lessons_repository = lessons_repository
        self.ledger = ledger
        self.outbox_repository = outbox_repository
        self.locks = locks

    async def accept_quote(self, quote_id: UUID, context: dict | None = None) -> QuoteAcceptanceResult:
        """Accept ``quote_id``, retrying once when a concurrent writer interferes."""
        try:
            try:
                result = await self._accept_once(quote_id, context)
            except ConcurrentConflictException:
                logger.warning("Concurrent change while accepting quote %s, retrying", quote_id)
                result = await self._accept_once(quote_id, context)
        except AppException as exc:
            QUOTE_ACCEPTANCES_TOTAL.labels(outcome=exc.code).inc()
            raise

        QUOTE_ACCEPTANCES_TOTAL.labels(outcome="accepted").inc()
        return result

    async def _accept_once(self, quote_id: UUID, context: dict | None) -> QuoteAcceptanceResult:
        quote = await self.quotes_repository.get_quote_by_id(quote_id)
        if quote is None:
            raise EntityNotFoundException("Lesson quote not found")

        async with self.locks.hold(quote.lesson_request_id):
            lesson_request = await self.lesson_requests_repository.get_lesson_request_for_update(
                quote.lesson_request_id,
            )
            if lesson_request is None:
                raise EntityNotFoundException("Lesson request not found")

            if utc_now() > ensure_utc(quote.expires_at):
                raise QuoteExpiredException(f"Lesson quote {quote.id} expired at {quote.expires_at.isoformat()}")

            status = await self.ledger.current_status(EntityTypeEnum.LESSON_QUOTE, quote.id)
            if status != LessonQuoteStatusEnum.CREATED:
                raise AlreadyResolvedException(f"Lesson quote {quote.id} is already {status}")

            siblings = [
                sibling
                for sibling in await self.quotes_repository.list_quotes_for_request(quote.lesson_request_id)
                if sibling.id != quote.id
            ]
            sibling_statuses = await self.ledger.current_statuses(
                EntityTypeEnum.LESSON_QUOTE,
                [sibling.id for sibling in siblings],
            )
            if any(value == LessonQuoteStatusEnum.ACCEPTED for value in sibling_statuses.values()):
                raise AlreadyResolvedException("Another quote for this lesson request was already accepted")

            await self.ledger.lifecycle_for(EntityTypeEnum.LESSON_QUOTE, quote.id).record_transition(
                LessonQuoteTransitionEnum.ACCEPT,
                context,
            )
            expired_quote_ids = await self._expire_siblings(quote, siblings, sibling_statuses)
            lesson, lesson_status = await self._book_lesson(quote, expired_quote_ids)

            await self.outbox_repository.create_outbox_event(
                aggregate_type=EntityTypeEnum.LESSON_QUOTE,
                aggregate_id=quote.id,
                event_type="lesson_quote.accepted",
                payload={
                    "quote_id": str(quote.id),
                    "lesson_request_id": str(quote.lesson_request_id),
                    "teacher_id": str(quote.teacher_id),
                    "lesson_id": str(lesson.id),
                    "expired_quote_ids": [str(item) for item in expired_quote_ids],
                },
            )

        logger.info(
            "Accepted quote %s for lesson request %s, expired %d siblings",
            quote.id,
            quote.lesson_request_id,
            len(expired_quote_ids),
        )
        return QuoteAcceptanceResult(
            lesson=lesson,
            lesson_status=lesson_status,
            accepted_quote=quote,
            expired_quote_ids=expired_quote_ids,
        )

    async def _expire_siblings(
        self,
        accepted: LessonQuote,
        siblings: list[LessonQuote],
        sibling_statuses: dict[UUID, str],
    ) -> list[UUID]:
        table = self.ledger.table_for(EntityTypeEnum.LESSON_QUOTE)
        expired: list[UUID] = []
        for sibling in siblings:
            status = sibling_statuses.get(sibling.id)
            if status is None or table.is_terminal(status):
                continue
            try:
                await self.ledger.record_transition(
                    EntityTypeEnum.LESSON_QUOTE,
                    sibling.id,
                    LessonQuoteTransitionEnum.EXPIRE,
                    {"reason": "sibling_accepted", "accepted_quote_id": str(accepted.id)},
                )
            except (EntityNotFoundException, InvalidTransitionException, ConcurrentConflictException) as exc:
                logger.warning("Could not expire sibling quote %s: %s", sibling.id, exc.message)
                continue

            expired.append(sibling.id)
            await self.outbox_repository.create_outbox_event(
                aggregate_type=EntityTypeEnum.LESSON_QUOTE,
                aggregate_id=sibling.id,
                event_type="lesson_quote.expired",
                payload={"quote_id": str(sibling.id), "reason": "sibling_accepted"},
            )
        return expired

    async def _book_lesson(self, quote: LessonQuote, expired_quote_ids: list[UUID]) -> tuple[Lesson, str]:
        try:
            async with self.lessons_repository.savepoint():
                lesson = await self.lessons_repository.create_lesson(quote.id)
                record = await self.ledger.register_initial_status(
                    EntityTypeEnum.LESSON,
                    lesson.id,
                    {"quote_id": str(quote.id)},
                )
        except (SQLAlchemyError, ConflictException, PersistenceFailureException) as exc:
            logger.error("Lesson booking failed for quote %s, restoring it: %s", quote.id, exc)
            await self.ledger.record_correction(
                EntityTypeEnum.LESSON_QUOTE,
                quote.id,
                LessonQuoteStatusEnum.CREATED,
                {"reason": "lesson_creation_failed"},
            )
            await self.outbox_repository.create_outbox_event(
                aggregate_type=EntityTypeEnum.LESSON_QUOTE,
                aggregate_id=quote.id,
                event_type="lesson_quote.acceptance_reverted",
                payload={
                    "quote_id": str(quote.id),
                    "expired_quote_ids": [str(item) for item in expired_quote_ids],
                },
            )
            raise PersistenceFailureException(
                f"Lesson could not be booked for quote {quote.id}; the quote is open again",
            ) from exc

        await self.outbox_repository.create_outbox_event(
            aggregate_type=EntityTypeEnum.LESSON,
            aggregate_id=lesson.id,
            event_type="lesson.created",
            payload={"lesson_id": str(lesson.id), "quote_id": str(quote.id)},
        )
        return lesson, record.status
