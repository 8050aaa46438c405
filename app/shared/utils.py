"""Shared utility functions."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal

MINUTES_PER_HOUR = 60


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize datetime to UTC timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def prorated_cost_in_cents(hourly_rate_in_cents: int, duration_minutes: int) -> int:
    """Price a lesson from an hourly rate, rounding half to even to the nearest cent."""
    exact = Decimal(hourly_rate_in_cents) * Decimal(duration_minutes) / Decimal(MINUTES_PER_HOUR)
    return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_EVEN))
