"""Quote broker: turns a lesson request into competing teacher quotes."""

from __future__ import annotations

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from app.core.enums import EntityTypeEnum
from app.core.locks import KeyedLockRegistry, lesson_request_locks
from app.core.metrics import QUOTES_GENERATED_TOTAL
from app.modules.lesson_requests.models import LessonRequest
from app.modules.lesson_requests.repository import LessonRequestsRepository
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.outbox.repository import OutboxRepository
from app.modules.quotes.models import LessonQuote
from app.modules.quotes.repository import QuotesRepository
from app.modules.teachers.directory import TeacherCandidate, TeacherDirectory
from app.shared.exceptions import (
    ConcurrentConflictException,
    EntityNotFoundException,
    NoAvailableTeachersException,
)
from app.shared.utils import prorated_cost_in_cents, utc_now

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_TTL = timedelta(hours=24)
DEFAULT_DIRECTORY_LIMIT = 5


class QuoteBroker:
    """Generate quotes for a lesson request exactly once.

    Generation runs inside the request's critical section: the in-process
    keyed lock plus a row lock on the lesson request. A second call for the
    same request returns the quotes produced by the first.
    """

    def __init__(
        self,
        lesson_requests_repository: LessonRequestsRepository,
        quotes_repository: QuotesRepository,
        directory: TeacherDirectory,
        ledger: LifecycleLedger,
        outbox_repository: OutboxRepository,
        *,
        locks: KeyedLockRegistry = lesson_request_locks,
        quote_ttl: timedelta = DEFAULT_QUOTE_TTL,
        directory_limit: int = DEFAULT_DIRECTORY_LIMIT,
    ) -> None:
        self.lesson_requests_repository = lesson_requests_repository
        self.quotes_repository = quotes_repository
        self.directory = directory
        self.ledger = ledger
        self.outbox_repository = outbox_repository
        self.locks = locks
        self.quote_ttl = quote_ttl
        self.directory_limit = directory_limit

    async def generate_quotes(self, lesson_request_id: UUID) -> list[LessonQuote]:
        """Return the request's quotes, creating them on first call."""
        try:
            return await self._generate_once(lesson_request_id)
        except ConcurrentConflictException:
            logger.warning("Concurrent quote generation for lesson request %s, retrying", lesson_request_id)
            return await self._generate_once(lesson_request_id)

    async def _generate_once(self, lesson_request_id: UUID) -> list[LessonQuote]:
        async with self.locks.hold(lesson_request_id):
            lesson_request = await self.lesson_requests_repository.get_lesson_request_for_update(lesson_request_id)
            if lesson_request is None:
                raise EntityNotFoundException("Lesson request not found")

            existing = await self.quotes_repository.list_quotes_for_request(lesson_request_id)
            if existing:
                logger.info("Lesson request %s already has %d quotes", lesson_request_id, len(existing))
                return existing

            candidates = await self.directory.find_available(lesson_request.lesson_type, self.directory_limit)
            priced = self._price_candidates(lesson_request, candidates)
            if not priced:
                raise NoAvailableTeachersException(
                    f"No teacher offers {lesson_request.lesson_type} lessons right now",
                )

            try:
                async with self.quotes_repository.savepoint():
                    quotes = await self._create_quotes(lesson_request, priced)
            except IntegrityError as exc:
                raise ConcurrentConflictException(
                    f"Quotes for lesson request {lesson_request_id} were created concurrently",
                ) from exc

        QUOTES_GENERATED_TOTAL.inc(len(quotes))
        logger.info("Generated %d quotes for lesson request %s", len(quotes), lesson_request_id)
        return quotes

    def _price_candidates(
        self,
        lesson_request: LessonRequest,
        candidates: list[TeacherCandidate],
    ) -> list[tuple[UUID, int, int]]:
        """Return ``(teacher_id, hourly_rate, cost)`` per distinct quotable teacher."""
        priced: list[tuple[UUID, int, int]] = []
        seen: set[UUID] = set()
        for candidate in candidates:
            if candidate.teacher_id in seen:
                continue
            seen.add(candidate.teacher_id)

            hourly_rate = candidate.hourly_rate_in_cents_by_type.get(lesson_request.lesson_type)
            if hourly_rate is None:
                logger.info(
                    "Skipping teacher %s: no %s rate",
                    candidate.teacher_id,
                    lesson_request.lesson_type,
                )
                continue
            cost = prorated_cost_in_cents(hourly_rate, lesson_request.duration_minutes)
            priced.append((candidate.teacher_id, hourly_rate, cost))
        return priced

    async def _create_quotes(
        self,
        lesson_request: LessonRequest,
        priced: list[tuple[UUID, int, int]],
    ) -> list[LessonQuote]:
        now = utc_now()
        expires_at = now + self.quote_ttl
        quotes: list[LessonQuote] = []
        for teacher_id, hourly_rate, cost in priced:
            quote = await self.quotes_repository.create_quote(
                lesson_request_id=lesson_request.id,
                teacher_id=teacher_id,
                hourly_rate_in_cents=hourly_rate,
                cost_in_cents=cost,
                created_at=now,
                expires_at=expires_at,
            )
            await self.ledger.register_initial_status(EntityTypeEnum.LESSON_QUOTE, quote.id)
            quotes.append(quote)

        await self.outbox_repository.create_outbox_event(
            aggregate_type="lesson_request",
            aggregate_id=lesson_request.id,
            event_type="lesson_quotes.generated",
            payload={
                "lesson_request_id": str(lesson_request.id),
                "quote_ids": [str(quote.id) for quote in quotes],
            },
        )
        return quotes
