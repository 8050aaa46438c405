from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from prometheus_client import REGISTRY

import app.modules.quotes.acceptance as acceptance_module
from app.core.enums import EntityTypeEnum, LessonTypeEnum
from app.modules.lifecycle.service import CORRECTION_TRANSITION
from app.modules.teachers.directory import TeacherCandidate
from app.shared.exceptions import (
    AlreadyResolvedException,
    EntityNotFoundException,
    PersistenceFailureException,
    QuoteExpiredException,
)
from tests.fakes import QuoteWorld


async def _world_with_quotes(count: int = 2) -> tuple[QuoteWorld, list]:
    world = QuoteWorld()
    world.directory.candidates = [
        TeacherCandidate(teacher_id=uuid4(), hourly_rate_in_cents_by_type={LessonTypeEnum.GUITAR: 5000 + 1000 * step})
        for step in range(count)
    ]
    lesson_request = world.lesson_requests.add(LessonTypeEnum.GUITAR, duration_minutes=60)
    quotes = await world.broker().generate_quotes(lesson_request.id)
    world.outbox.events.clear()
    return world, quotes


def _acceptances(outcome: str) -> float:
    return REGISTRY.get_sample_value("lessonbroker_quote_acceptances_total", {"outcome": outcome}) or 0.0


@pytest.mark.asyncio
async def test_accepting_a_quote_books_lesson_and_expires_competitor() -> None:
    world, (q1, q2) = await _world_with_quotes()

    result = await world.coordinator().accept_quote(q1.id)

    assert result.lesson.quote_id == q1.id
    assert result.lesson_status == "REQUESTED"
    assert result.accepted_quote.id == q1.id
    assert result.expired_quote_ids == [q2.id]
    assert await world.quote_status(q1.id) == "ACCEPTED"
    assert await world.quote_status(q2.id) == "EXPIRED"
    assert await world.ledger.current_status(EntityTypeEnum.LESSON, result.lesson.id) == "REQUESTED"
    assert len(world.lessons.lessons) == 1


@pytest.mark.asyncio
async def test_accepting_the_expired_competitor_afterwards_is_already_resolved() -> None:
    world, (q1, q2) = await _world_with_quotes()
    coordinator = world.coordinator()
    await coordinator.accept_quote(q1.id)

    with pytest.raises(AlreadyResolvedException):
        await coordinator.accept_quote(q2.id)

    assert len(world.lessons.lessons) == 1


@pytest.mark.asyncio
async def test_accepting_the_same_quote_twice_is_already_resolved() -> None:
    world, (q1, _) = await _world_with_quotes()
    coordinator = world.coordinator()
    await coordinator.accept_quote(q1.id)

    with pytest.raises(AlreadyResolvedException):
        await coordinator.accept_quote(q1.id)


@pytest.mark.asyncio
async def test_expired_quote_is_refused_without_side_effects() -> None:
    world, (q1, q2) = await _world_with_quotes()
    world.quotes.quotes[q1.id].expires_at = datetime.now(UTC) - timedelta(minutes=1)
    records_before = len(world.status_records.records)

    with pytest.raises(QuoteExpiredException):
        await world.coordinator().accept_quote(q1.id)

    assert world.lessons.lessons == {}
    assert len(world.status_records.records) == records_before
    assert await world.quote_status(q1.id) == "CREATED"
    assert await world.quote_status(q2.id) == "CREATED"
    assert world.outbox.events == []


@pytest.mark.asyncio
async def test_quote_can_be_accepted_at_exact_expiry_instant(monkeypatch: pytest.MonkeyPatch) -> None:
    world, (q1, _) = await _world_with_quotes()
    monkeypatch.setattr(acceptance_module, "utc_now", lambda: q1.expires_at)

    result = await world.coordinator().accept_quote(q1.id)

    assert result.accepted_quote.id == q1.id


@pytest.mark.asyncio
async def test_rejected_quote_cannot_be_accepted() -> None:
    world, (q1, _) = await _world_with_quotes()
    await world.service().reject_quote(q1.id)

    with pytest.raises(AlreadyResolvedException):
        await world.coordinator().accept_quote(q1.id)


@pytest.mark.asyncio
async def test_unknown_quote_raises_not_found() -> None:
    world, _ = await _world_with_quotes()

    with pytest.raises(EntityNotFoundException):
        await world.coordinator().accept_quote(uuid4())


@pytest.mark.asyncio
async def test_terminal_siblings_are_left_alone() -> None:
    world, (q1, q2, q3) = await _world_with_quotes(3)
    await world.service().reject_quote(q3.id)

    result = await world.coordinator().accept_quote(q1.id)

    assert result.expired_quote_ids == [q2.id]
    assert await world.quote_status(q3.id) == "REJECTED"


@pytest.mark.asyncio
async def test_failed_lesson_booking_restores_quote_and_keeps_siblings_expired() -> None:
    world, (q1, q2) = await _world_with_quotes()
    world.lessons.fail_creates = 1

    with pytest.raises(PersistenceFailureException) as exc:
        await world.coordinator().accept_quote(q1.id)

    assert exc.value.commit_session is True
    assert world.lessons.lessons == {}
    assert await world.quote_status(q1.id) == "CREATED"
    assert await world.quote_status(q2.id) == "EXPIRED"
    history = await world.ledger.history(EntityTypeEnum.LESSON_QUOTE, q1.id)
    assert [record.status for record in history] == ["CREATED", "ACCEPTED", "CREATED"]
    assert history[-1].transition_applied == CORRECTION_TRANSITION
    assert "lesson_quote.acceptance_reverted" in world.outbox.event_types()
    assert "lesson_quote.accepted" not in world.outbox.event_types()


@pytest.mark.asyncio
async def test_conflicting_lesson_history_restores_quote_and_reports_persistence_failure() -> None:
    world, (q1, q2) = await _world_with_quotes()
    world.lessons.after_create = lambda lesson: world.status_records.conflict_on(lesson.id, "REQUESTED", times=1)
    failures_before = _acceptances("persistence_failure")

    with pytest.raises(PersistenceFailureException):
        await world.coordinator().accept_quote(q1.id)

    assert _acceptances("persistence_failure") == failures_before + 1
    assert await world.quote_status(q1.id) == "CREATED"
    assert await world.quote_status(q2.id) == "EXPIRED"
    history = await world.ledger.history(EntityTypeEnum.LESSON_QUOTE, q1.id)
    assert history[-1].transition_applied == CORRECTION_TRANSITION
    assert "lesson_quote.acceptance_reverted" in world.outbox.event_types()


@pytest.mark.asyncio
async def test_restored_quote_can_be_accepted_again() -> None:
    world, (q1, _) = await _world_with_quotes()
    world.lessons.fail_creates = 1
    coordinator = world.coordinator()
    with pytest.raises(PersistenceFailureException):
        await coordinator.accept_quote(q1.id)

    result = await coordinator.accept_quote(q1.id)

    assert result.lesson.quote_id == q1.id
    assert result.expired_quote_ids == []


@pytest.mark.asyncio
async def test_sibling_that_cannot_be_expired_is_skipped() -> None:
    world, (q1, q2) = await _world_with_quotes()
    world.status_records.conflict_on(q2.id, "EXPIRED", times=3)

    result = await world.coordinator().accept_quote(q1.id)

    assert result.expired_quote_ids == []
    assert await world.quote_status(q1.id) == "ACCEPTED"
    assert await world.quote_status(q2.id) == "CREATED"
    assert len(world.lessons.lessons) == 1


@pytest.mark.asyncio
async def test_concurrent_append_on_accept_is_retried_once() -> None:
    world, (q1, q2) = await _world_with_quotes()
    world.status_records.conflict_on(q1.id, "ACCEPTED", times=1)

    result = await world.coordinator().accept_quote(q1.id)

    assert result.accepted_quote.id == q1.id
    assert await world.quote_status(q1.id) == "ACCEPTED"
    assert await world.quote_status(q2.id) == "EXPIRED"


@pytest.mark.asyncio
async def test_racing_acceptances_of_competing_quotes_book_exactly_one_lesson() -> None:
    world, quotes = await _world_with_quotes(3)
    coordinator = world.coordinator()

    outcomes = await asyncio.gather(
        *(coordinator.accept_quote(quote.id) for quote in quotes),
        return_exceptions=True,
    )

    winners = [outcome for outcome in outcomes if not isinstance(outcome, BaseException)]
    losers = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
    assert len(winners) == 1
    assert all(isinstance(outcome, AlreadyResolvedException) for outcome in losers)
    statuses = [await world.quote_status(quote.id) for quote in quotes]
    assert statuses.count("ACCEPTED") == 1
    assert statuses.count("EXPIRED") == 2
    assert len(world.lessons.lessons) == 1
    assert len(world.locks) == 0


@pytest.mark.asyncio
async def test_racing_acceptances_of_the_same_quote_book_one_lesson() -> None:
    world, (q1, _) = await _world_with_quotes()
    coordinator = world.coordinator()

    outcomes = await asyncio.gather(
        coordinator.accept_quote(q1.id),
        coordinator.accept_quote(q1.id),
        return_exceptions=True,
    )

    assert sum(not isinstance(outcome, BaseException) for outcome in outcomes) == 1
    assert len(world.lessons.lessons) == 1


@pytest.mark.asyncio
async def test_acceptance_emits_events_and_outcome_metrics() -> None:
    world, (q1, q2) = await _world_with_quotes()
    coordinator = world.coordinator()
    accepted_before = _acceptances("accepted")
    resolved_before = _acceptances("quote_already_resolved")

    result = await coordinator.accept_quote(q1.id)
    with pytest.raises(AlreadyResolvedException):
        await coordinator.accept_quote(q2.id)

    assert _acceptances("accepted") == accepted_before + 1
    assert _acceptances("quote_already_resolved") == resolved_before + 1
    assert world.outbox.event_types() == ["lesson_quote.expired", "lesson.created", "lesson_quote.accepted"]
    accepted_event = world.outbox.events[-1]
    assert accepted_event.payload["lesson_id"] == str(result.lesson.id)
    assert accepted_event.payload["expired_quote_ids"] == [str(q2.id)]
