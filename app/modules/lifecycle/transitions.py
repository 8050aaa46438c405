"""Declarative status transition tables for every entity with a lifecycle."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from app.core.enums import (
    EntityTypeEnum,
    HourlyRateStatusEnum,
    HourlyRateTransitionEnum,
    LessonQuoteStatusEnum,
    LessonQuoteTransitionEnum,
    LessonStatusEnum,
    LessonTransitionEnum,
    ObjectiveStatusEnum,
    ObjectiveTransitionEnum,
)


@dataclass(frozen=True, slots=True)
class TransitionTable:
    """Legal ``(status, transition) -> status`` moves for one entity type."""

    entity_type: EntityTypeEnum
    initial_status: str
    rows: Mapping[str, Mapping[str, str]]

    def __post_init__(self) -> None:
        frozen = {
            str(status): MappingProxyType({str(name): str(target) for name, target in row.items()})
            for status, row in self.rows.items()
        }
        object.__setattr__(self, "rows", MappingProxyType(frozen))
        object.__setattr__(self, "initial_status", str(self.initial_status))

        statuses = set(self.rows)
        if self.initial_status not in statuses:
            raise ValueError(f"Initial status {self.initial_status!r} missing from {self.entity_type} table")
        for status, row in self.rows.items():
            for transition, target in row.items():
                if target not in statuses:
                    raise ValueError(
                        f"{self.entity_type}: {status} --{transition}--> {target} targets an undeclared status",
                    )

    @property
    def statuses(self) -> frozenset[str]:
        return frozenset(self.rows)

    def is_valid_transition(self, current: str, transition: str) -> bool:
        return str(transition) in self.rows.get(str(current), {})

    def resulting_status(self, current: str, transition: str) -> str | None:
        return self.rows.get(str(current), {}).get(str(transition))

    def valid_transitions(self, current: str) -> tuple[str, ...]:
        return tuple(self.rows.get(str(current), {}))

    def is_terminal(self, status: str) -> bool:
        return not self.rows.get(str(status))


LESSON_TRANSITIONS = TransitionTable(
    entity_type=EntityTypeEnum.LESSON,
    initial_status=LessonStatusEnum.REQUESTED,
    rows={
        LessonStatusEnum.REQUESTED: {
            LessonTransitionEnum.ACCEPT: LessonStatusEnum.ACCEPTED,
            LessonTransitionEnum.REJECT: LessonStatusEnum.REJECTED,
        },
        LessonStatusEnum.ACCEPTED: {
            LessonTransitionEnum.COMPLETE: LessonStatusEnum.COMPLETED,
            LessonTransitionEnum.VOID: LessonStatusEnum.VOIDED,
        },
        LessonStatusEnum.COMPLETED: {},
        LessonStatusEnum.REJECTED: {},
        LessonStatusEnum.VOIDED: {},
    },
)

LESSON_QUOTE_TRANSITIONS = TransitionTable(
    entity_type=EntityTypeEnum.LESSON_QUOTE,
    initial_status=LessonQuoteStatusEnum.CREATED,
    rows={
        LessonQuoteStatusEnum.CREATED: {
            LessonQuoteTransitionEnum.ACCEPT: LessonQuoteStatusEnum.ACCEPTED,
            LessonQuoteTransitionEnum.REJECT: LessonQuoteStatusEnum.REJECTED,
            LessonQuoteTransitionEnum.EXPIRE: LessonQuoteStatusEnum.EXPIRED,
        },
        LessonQuoteStatusEnum.ACCEPTED: {},
        LessonQuoteStatusEnum.REJECTED: {},
        LessonQuoteStatusEnum.EXPIRED: {},
    },
)

OBJECTIVE_TRANSITIONS = TransitionTable(
    entity_type=EntityTypeEnum.OBJECTIVE,
    initial_status=ObjectiveStatusEnum.CREATED,
    rows={
        ObjectiveStatusEnum.CREATED: {
            ObjectiveTransitionEnum.START: ObjectiveStatusEnum.IN_PROGRESS,
            ObjectiveTransitionEnum.COMPLETE: ObjectiveStatusEnum.ACHIEVED,
            ObjectiveTransitionEnum.ABANDON: ObjectiveStatusEnum.ABANDONED,
        },
        ObjectiveStatusEnum.IN_PROGRESS: {
            ObjectiveTransitionEnum.COMPLETE: ObjectiveStatusEnum.ACHIEVED,
            ObjectiveTransitionEnum.ABANDON: ObjectiveStatusEnum.ABANDONED,
        },
        # Abandoning an achieved objective retracts it.
        ObjectiveStatusEnum.ACHIEVED: {
            ObjectiveTransitionEnum.ABANDON: ObjectiveStatusEnum.ABANDONED,
        },
        ObjectiveStatusEnum.ABANDONED: {},
    },
)

HOURLY_RATE_TRANSITIONS = TransitionTable(
    entity_type=EntityTypeEnum.TEACHER_LESSON_HOURLY_RATE,
    initial_status=HourlyRateStatusEnum.ACTIVE,
    rows={
        HourlyRateStatusEnum.ACTIVE: {
            HourlyRateTransitionEnum.DEACTIVATE: HourlyRateStatusEnum.INACTIVE,
        },
        HourlyRateStatusEnum.INACTIVE: {
            HourlyRateTransitionEnum.ACTIVATE: HourlyRateStatusEnum.ACTIVE,
        },
    },
)

TRANSITION_TABLES: Mapping[EntityTypeEnum, TransitionTable] = MappingProxyType(
    {
        table.entity_type: table
        for table in (
            LESSON_TRANSITIONS,
            LESSON_QUOTE_TRANSITIONS,
            OBJECTIVE_TRANSITIONS,
            HOURLY_RATE_TRANSITIONS,
        )
    },
)


def get_transition_table(entity_type: EntityTypeEnum) -> TransitionTable:
    """Return the transition table registered for an entity type."""
    return TRANSITION_TABLES[EntityTypeEnum(entity_type)]


def is_valid_transition(entity_type: EntityTypeEnum, current: str, transition: str) -> bool:
    """Check whether ``transition`` is legal from ``current``."""
    return get_transition_table(entity_type).is_valid_transition(current, transition)


def resulting_status(entity_type: EntityTypeEnum, current: str, transition: str) -> str | None:
    """Return the status ``transition`` leads to, or None when it is illegal."""
    return get_transition_table(entity_type).resulting_status(current, transition)


def valid_transitions(entity_type: EntityTypeEnum, current: str) -> tuple[str, ...]:
    """List transitions available from ``current``."""
    return get_transition_table(entity_type).valid_transitions(current)
