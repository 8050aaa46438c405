from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

import app.modules.quotes.service as quotes_service_module
from app.core.enums import LessonTypeEnum
from app.modules.teachers.directory import TeacherCandidate
from app.shared.exceptions import AlreadyResolvedException, EntityNotFoundException
from tests.fakes import QuoteWorld


async def _world_with_quotes(count: int = 2) -> tuple[QuoteWorld, list]:
    world = QuoteWorld()
    world.directory.candidates = [
        TeacherCandidate(teacher_id=uuid4(), hourly_rate_in_cents_by_type={LessonTypeEnum.GUITAR: 4000 + 500 * step})
        for step in range(count)
    ]
    lesson_request = world.lesson_requests.add()
    quotes = await world.broker().generate_quotes(lesson_request.id)
    world.outbox.events.clear()
    return world, quotes


@pytest.mark.asyncio
async def test_list_quotes_pairs_each_quote_with_its_status() -> None:
    world, (q1, q2) = await _world_with_quotes()
    await world.service().reject_quote(q2.id)

    items = await world.service().list_quotes(q1.lesson_request_id)

    assert [(quote.id, status) for quote, status in items] == [(q1.id, "CREATED"), (q2.id, "REJECTED")]


@pytest.mark.asyncio
async def test_list_quotes_for_unknown_request_raises_not_found() -> None:
    world = QuoteWorld()

    with pytest.raises(EntityNotFoundException):
        await world.service().list_quotes(uuid4())


@pytest.mark.asyncio
async def test_reject_records_context_and_outbox_event() -> None:
    world, (q1, _) = await _world_with_quotes()

    quote, status = await world.service().reject_quote(q1.id, {"reason": "too expensive"})

    assert quote.id == q1.id
    assert status == "REJECTED"
    history = await world.ledger.history("lesson_quote", q1.id)
    assert history[-1].context == {"reason": "too expensive"}
    assert world.outbox.event_types() == ["lesson_quote.rejected"]


@pytest.mark.asyncio
async def test_reject_of_resolved_quote_is_already_resolved() -> None:
    world, (q1, q2) = await _world_with_quotes()
    await world.coordinator().accept_quote(q1.id)

    with pytest.raises(AlreadyResolvedException):
        await world.service().reject_quote(q1.id)
    with pytest.raises(AlreadyResolvedException):
        await world.service().reject_quote(q2.id)


@pytest.mark.asyncio
async def test_reject_of_unknown_quote_raises_not_found() -> None:
    world = QuoteWorld()

    with pytest.raises(EntityNotFoundException):
        await world.service().reject_quote(uuid4())


@pytest.mark.asyncio
async def test_stale_sweep_expires_only_open_quotes_past_expiry(monkeypatch: pytest.MonkeyPatch) -> None:
    world, (q1, q2, q3) = await _world_with_quotes(3)
    await world.service().reject_quote(q3.id)
    world.outbox.events.clear()
    later = q1.expires_at + timedelta(seconds=1)
    world.quotes.quotes[q2.id].expires_at = later + timedelta(hours=1)
    monkeypatch.setattr(quotes_service_module, "utc_now", lambda: later)

    expired_count = await world.service().expire_stale_quotes()

    assert expired_count == 1
    assert await world.quote_status(q1.id) == "EXPIRED"
    assert await world.quote_status(q2.id) == "CREATED"
    assert await world.quote_status(q3.id) == "REJECTED"
    assert world.outbox.event_types() == ["lesson_quote.expired"]


@pytest.mark.asyncio
async def test_stale_sweep_treats_expiry_instant_as_stale(monkeypatch: pytest.MonkeyPatch) -> None:
    world, (q1,) = await _world_with_quotes(1)
    monkeypatch.setattr(quotes_service_module, "utc_now", lambda: q1.expires_at)

    assert await world.service().expire_stale_quotes() == 1
    assert await world.quote_status(q1.id) == "EXPIRED"


@pytest.mark.asyncio
async def test_stale_sweep_is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    world, (q1, _) = await _world_with_quotes()
    monkeypatch.setattr(quotes_service_module, "utc_now", lambda: q1.expires_at + timedelta(days=1))
    service = world.service()

    assert await service.expire_stale_quotes() == 2
    assert await service.expire_stale_quotes() == 0


@pytest.mark.asyncio
async def test_stale_sweep_respects_batch_size(monkeypatch: pytest.MonkeyPatch) -> None:
    world, (q1, _, _) = await _world_with_quotes(3)
    monkeypatch.setattr(quotes_service_module, "utc_now", lambda: q1.expires_at + timedelta(days=1))

    assert await world.service(expiry_batch_size=2).expire_stale_quotes() == 2


@pytest.mark.asyncio
async def test_stale_sweep_skips_quote_on_concurrent_change(monkeypatch: pytest.MonkeyPatch) -> None:
    world, (q1, q2) = await _world_with_quotes()
    world.status_records.conflict_on(q1.id, "EXPIRED")
    monkeypatch.setattr(quotes_service_module, "utc_now", lambda: q1.expires_at + timedelta(days=1))

    assert await world.service().expire_stale_quotes() == 1
    assert await world.quote_status(q1.id) == "CREATED"
    assert await world.quote_status(q2.id) == "EXPIRED"
