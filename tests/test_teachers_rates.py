from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from app.core.enums import EntityTypeEnum, HourlyRateTransitionEnum, LessonTypeEnum
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.teachers.directory import SqlTeacherDirectory
from app.modules.teachers.schemas import HourlyRateCreate, TeacherProfileCreate, TeacherProfileUpdate
from app.modules.teachers.service import TeachersService
from app.shared.exceptions import ConflictException, EntityNotFoundException, InvalidTransitionException
from tests.fakes import FakeStatusRecordRepository, QuoteWorld


@dataclass
class FakeRate:
    id: UUID
    teacher_id: UUID
    lesson_type: LessonTypeEnum
    rate_in_cents: int
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class FakeProfile:
    id: UUID
    display_name: str
    bio: str
    experience_years: int
    is_approved: bool = False
    hourly_rates: list[FakeRate] = field(default_factory=list)


class FakeTeachersRepository:
    def __init__(self, status_records: FakeStatusRecordRepository) -> None:
        self.profiles: dict[UUID, FakeProfile] = {}
        self.status_records = status_records

    async def create_profile(self, display_name: str, bio: str, experience_years: int) -> FakeProfile:
        profile = FakeProfile(id=uuid4(), display_name=display_name, bio=bio, experience_years=experience_years)
        self.profiles[profile.id] = profile
        return profile

    async def get_profile_by_id(self, profile_id: UUID) -> FakeProfile | None:
        return self.profiles.get(profile_id)

    async def list_profiles(self, limit: int, offset: int) -> tuple[list[FakeProfile], int]:
        items = list(self.profiles.values())
        return items[offset : offset + limit], len(items)

    async def update_profile(self, profile: FakeProfile, **changes) -> FakeProfile:
        for key, value in changes.items():
            if value is not None:
                setattr(profile, key, value)
        return profile

    async def list_approved_teachers_offering(self, lesson_type: LessonTypeEnum, limit: int) -> list[FakeProfile]:
        offering = []
        for profile in self.profiles.values():
            if not profile.is_approved:
                continue
            for rate in profile.hourly_rates:
                latest = await self.status_records.get_latest_record(EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE, rate.id)
                if rate.lesson_type == lesson_type and latest is not None and latest.status == "ACTIVE":
                    offering.append(profile)
                    break
        offering.sort(key=lambda profile: profile.experience_years, reverse=True)
        return offering[:limit]

    async def create_rate(self, teacher_id: UUID, lesson_type: LessonTypeEnum, rate_in_cents: int) -> FakeRate:
        rate = FakeRate(id=uuid4(), teacher_id=teacher_id, lesson_type=lesson_type, rate_in_cents=rate_in_cents)
        self.profiles[teacher_id].hourly_rates.append(rate)
        return rate

    async def get_rate_by_id(self, rate_id: UUID) -> FakeRate | None:
        for profile in self.profiles.values():
            for rate in profile.hourly_rates:
                if rate.id == rate_id:
                    return rate
        return None

    async def get_rate_for_type(self, teacher_id: UUID, lesson_type: LessonTypeEnum) -> FakeRate | None:
        for rate in self.profiles[teacher_id].hourly_rates:
            if rate.lesson_type == lesson_type:
                return rate
        return None

    async def list_rates_for_teacher(self, teacher_id: UUID) -> list[FakeRate]:
        profile = self.profiles.get(teacher_id)
        return list(profile.hourly_rates) if profile else []


def _service() -> tuple[TeachersService, FakeTeachersRepository, LifecycleLedger]:
    status_records = FakeStatusRecordRepository()
    repository = FakeTeachersRepository(status_records)
    ledger = LifecycleLedger(status_records)
    return TeachersService(repository, ledger), repository, ledger


async def _approved_teacher(service: TeachersService, name: str, experience_years: int = 5) -> FakeProfile:
    profile = await service.create_profile(TeacherProfileCreate(display_name=name, experience_years=experience_years))
    return await service.update_profile(profile.id, TeacherProfileUpdate(is_approved=True))


@pytest.mark.asyncio
async def test_new_rate_starts_active() -> None:
    service, _, ledger = _service()
    teacher = await _approved_teacher(service, "Ada")

    rate, status = await service.create_rate(
        teacher.id,
        HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=5000),
    )

    assert status == "ACTIVE"
    assert await ledger.current_status(EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE, rate.id) == "ACTIVE"


@pytest.mark.asyncio
async def test_second_rate_for_same_type_is_conflict() -> None:
    service, _, _ = _service()
    teacher = await _approved_teacher(service, "Ada")
    payload = HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=5000)
    await service.create_rate(teacher.id, payload)

    with pytest.raises(ConflictException):
        await service.create_rate(teacher.id, payload)


@pytest.mark.asyncio
async def test_rate_for_unknown_teacher_is_not_found() -> None:
    service, _, _ = _service()

    with pytest.raises(EntityNotFoundException):
        await service.create_rate(uuid4(), HourlyRateCreate(lesson_type=LessonTypeEnum.VOICE, rate_in_cents=100))


@pytest.mark.asyncio
async def test_rate_toggles_and_rejects_repeated_deactivation() -> None:
    service, _, _ = _service()
    teacher = await _approved_teacher(service, "Ada")
    rate, _ = await service.create_rate(
        teacher.id,
        HourlyRateCreate(lesson_type=LessonTypeEnum.BASS, rate_in_cents=4000),
    )

    _, status = await service.transition_rate(teacher.id, rate.id, HourlyRateTransitionEnum.DEACTIVATE)
    assert status == "INACTIVE"
    with pytest.raises(InvalidTransitionException):
        await service.transition_rate(teacher.id, rate.id, HourlyRateTransitionEnum.DEACTIVATE)
    _, status = await service.transition_rate(teacher.id, rate.id, HourlyRateTransitionEnum.ACTIVATE)
    assert status == "ACTIVE"


@pytest.mark.asyncio
async def test_rate_of_another_teacher_is_not_found() -> None:
    service, _, _ = _service()
    owner = await _approved_teacher(service, "Ada")
    other = await _approved_teacher(service, "Grace")
    rate, _ = await service.create_rate(owner.id, HourlyRateCreate(lesson_type=LessonTypeEnum.DRUMS, rate_in_cents=3000))

    with pytest.raises(EntityNotFoundException):
        await service.transition_rate(other.id, rate.id, HourlyRateTransitionEnum.DEACTIVATE)


@pytest.mark.asyncio
async def test_list_rates_reports_current_statuses() -> None:
    service, _, _ = _service()
    teacher = await _approved_teacher(service, "Ada")
    guitar, _ = await service.create_rate(teacher.id, HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=5000))
    voice, _ = await service.create_rate(teacher.id, HourlyRateCreate(lesson_type=LessonTypeEnum.VOICE, rate_in_cents=5500))
    await service.transition_rate(teacher.id, voice.id, HourlyRateTransitionEnum.DEACTIVATE)

    statuses = {rate.id: status for rate, status in await service.list_rates(teacher.id)}

    assert statuses == {guitar.id: "ACTIVE", voice.id: "INACTIVE"}


@pytest.mark.asyncio
async def test_directory_offers_only_active_rates_of_approved_teachers() -> None:
    service, repository, ledger = _service()
    active = await _approved_teacher(service, "Ada", experience_years=10)
    paused = await _approved_teacher(service, "Grace", experience_years=7)
    unapproved = await service.create_profile(TeacherProfileCreate(display_name="Linus"))
    await service.create_rate(active.id, HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=5000))
    paused_rate, _ = await service.create_rate(
        paused.id,
        HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=6000),
    )
    await service.create_rate(unapproved.id, HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=1000))
    await service.transition_rate(paused.id, paused_rate.id, HourlyRateTransitionEnum.DEACTIVATE)
    directory = SqlTeacherDirectory(repository, ledger)

    candidates = await directory.find_available(LessonTypeEnum.GUITAR, limit=5)

    by_teacher = {candidate.teacher_id: candidate.hourly_rate_in_cents_by_type for candidate in candidates}
    assert by_teacher == {active.id: {LessonTypeEnum.GUITAR: 5000}}


@pytest.mark.asyncio
async def test_candidate_lists_only_its_active_lesson_types() -> None:
    service, repository, ledger = _service()
    teacher = await _approved_teacher(service, "Ada")
    await service.create_rate(teacher.id, HourlyRateCreate(lesson_type=LessonTypeEnum.VOICE, rate_in_cents=4500))
    guitar, _ = await service.create_rate(
        teacher.id,
        HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=5000),
    )
    await service.transition_rate(teacher.id, guitar.id, HourlyRateTransitionEnum.DEACTIVATE)
    directory = SqlTeacherDirectory(repository, ledger)

    assert await directory.find_available(LessonTypeEnum.GUITAR, limit=5) == []
    (candidate,) = await directory.find_available(LessonTypeEnum.VOICE, limit=5)
    assert candidate.hourly_rate_in_cents_by_type == {LessonTypeEnum.VOICE: 4500}


@pytest.mark.asyncio
async def test_deactivated_senior_teachers_do_not_crowd_out_active_ones() -> None:
    world = QuoteWorld()
    repository = FakeTeachersRepository(world.status_records)
    service = TeachersService(repository, world.ledger)
    for index in range(5):
        senior = await _approved_teacher(service, f"Senior {index}", experience_years=20)
        rate, _ = await service.create_rate(
            senior.id,
            HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=9000),
        )
        await service.transition_rate(senior.id, rate.id, HourlyRateTransitionEnum.DEACTIVATE)
    junior = await _approved_teacher(service, "Junior", experience_years=1)
    await service.create_rate(junior.id, HourlyRateCreate(lesson_type=LessonTypeEnum.GUITAR, rate_in_cents=4000))
    world.directory = SqlTeacherDirectory(repository, world.ledger)
    lesson_request = world.lesson_requests.add(LessonTypeEnum.GUITAR, duration_minutes=60)

    quotes = await world.broker(directory_limit=5).generate_quotes(lesson_request.id)

    assert [(quote.teacher_id, quote.cost_in_cents) for quote in quotes] == [(junior.id, 4000)]
