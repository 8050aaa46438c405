"""Core enums used across modules."""

from enum import StrEnum


class LessonTypeEnum(StrEnum):
    """Lesson instrument types offered on the platform."""

    VOICE = "VOICE"
    GUITAR = "GUITAR"
    BASS = "BASS"
    DRUMS = "DRUMS"


class EntityTypeEnum(StrEnum):
    """Entity types whose status history is kept in the lifecycle ledger."""

    LESSON = "lesson"
    LESSON_QUOTE = "lesson_quote"
    OBJECTIVE = "objective"
    TEACHER_LESSON_HOURLY_RATE = "teacher_lesson_hourly_rate"


class LessonStatusEnum(StrEnum):
    """Lesson status."""

    REQUESTED = "REQUESTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    VOIDED = "VOIDED"


class LessonTransitionEnum(StrEnum):
    """Lesson status transitions."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    COMPLETE = "COMPLETE"
    VOID = "VOID"


class LessonQuoteStatusEnum(StrEnum):
    """Lesson quote status."""

    CREATED = "CREATED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class LessonQuoteTransitionEnum(StrEnum):
    """Lesson quote status transitions."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    EXPIRE = "EXPIRE"


class ObjectiveStatusEnum(StrEnum):
    """Student objective status."""

    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    ACHIEVED = "ACHIEVED"
    ABANDONED = "ABANDONED"


class ObjectiveTransitionEnum(StrEnum):
    """Student objective status transitions."""

    START = "START"
    COMPLETE = "COMPLETE"
    ABANDON = "ABANDON"


class HourlyRateStatusEnum(StrEnum):
    """Teacher hourly rate status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class HourlyRateTransitionEnum(StrEnum):
    """Teacher hourly rate status transitions."""

    ACTIVATE = "ACTIVATE"
    DEACTIVATE = "DEACTIVATE"


class OutboxStatusEnum(StrEnum):
    """Outbox event status for integration publishing."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
