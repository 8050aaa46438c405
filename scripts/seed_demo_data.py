"""Seed idempotent demo data for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine
from app.core.enums import LessonTypeEnum
from app.modules.lifecycle.repository import StatusRecordRepository
from app.modules.lifecycle.service import LifecycleLedger
from app.modules.teachers.models import TeacherProfile
from app.modules.teachers.repository import TeachersRepository
from app.modules.teachers.schemas import HourlyRateCreate, TeacherProfileCreate
from app.modules.teachers.service import TeachersService


@dataclass(frozen=True, slots=True)
class DemoTeacher:
    display_name: str
    experience_years: int
    rates: dict[LessonTypeEnum, int]


DEMO_TEACHERS = (
    DemoTeacher("Demo Guitar Teacher", 8, {LessonTypeEnum.GUITAR: 5000, LessonTypeEnum.BASS: 4500}),
    DemoTeacher("Demo Session Guitarist", 12, {LessonTypeEnum.GUITAR: 6000}),
    DemoTeacher("Demo Voice Coach", 5, {LessonTypeEnum.VOICE: 5500}),
    DemoTeacher("Demo Drummer", 3, {LessonTypeEnum.DRUMS: 4000}),
)


@dataclass(slots=True)
class SeedStats:
    teachers_created: int = 0
    rates_created: int = 0
    teacher_ids: list[str] = field(default_factory=list)


async def _ensure_teacher(
    session: AsyncSession,
    service: TeachersService,
    demo: DemoTeacher,
) -> tuple[TeacherProfile, bool]:
    profile = await session.scalar(
        select(TeacherProfile).where(TeacherProfile.display_name == demo.display_name),
    )
    created = False
    if profile is None:
        profile = await service.create_profile(
            TeacherProfileCreate(
                display_name=demo.display_name,
                bio="Teacher used for demo quote scenarios.",
                experience_years=demo.experience_years,
            ),
        )
        created = True
    profile.is_approved = True
    await session.flush()
    return profile, created


async def _ensure_rates(service: TeachersService, profile: TeacherProfile, demo: DemoTeacher) -> int:
    existing = {rate.lesson_type for rate, _ in await service.list_rates(profile.id)}
    created = 0
    for lesson_type, rate_in_cents in demo.rates.items():
        if lesson_type in existing:
            continue
        await service.create_rate(profile.id, HourlyRateCreate(lesson_type=lesson_type, rate_in_cents=rate_in_cents))
        created += 1
    return created


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()

    async with SessionLocal() as session:
        try:
            service = TeachersService(TeachersRepository(session), LifecycleLedger(StatusRecordRepository(session)))
            for demo in DEMO_TEACHERS:
                profile, created = await _ensure_teacher(session, service, demo)
                stats.teachers_created += int(created)
                stats.rates_created += await _ensure_rates(service, profile, demo)
                stats.teacher_ids.append(str(profile.id))

            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Seed idempotent demo data for LessonBroker (approved teachers with hourly rates).",
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    print("Demo seed completed.")
    print(f"- Teachers created: {stats.teachers_created}")
    print(f"- Hourly rates created: {stats.rates_created}")
    for teacher_id in stats.teacher_ids:
        print(f"- Teacher id: {teacher_id}")


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    try:
        stats = asyncio.run(_run_seed(allow_production=args.allow_production))
    except Exception as exc:
        print(f"Demo seed failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
