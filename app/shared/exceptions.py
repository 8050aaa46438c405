"""Custom exception hierarchy and handlers."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    status_code = 400
    code = "app_error"
    default_message = "Application error"
    commit_session = False

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundException(AppException):
    """Raised when entity is not found."""

    status_code = 404
    code = "not_found"
    default_message = "Entity not found"


class ConflictException(AppException):
    """Raised when entity conflicts with current state."""

    status_code = 409
    code = "conflict"
    default_message = "Entity conflicts with current state"


class BusinessRuleException(AppException):
    """Raised when business rule validation fails."""

    status_code = 422
    code = "business_rule_violation"
    default_message = "Business rule violated"


class EntityNotFoundException(NotFoundException):
    """Raised when an entity or its status history does not exist."""

    code = "entity_not_found"
    default_message = "Entity not found"


class InvalidTransitionException(ConflictException):
    """Raised when a transition is not allowed from the current status."""

    code = "invalid_transition"
    default_message = "Transition is not allowed from the current status"


class QuoteExpiredException(AppException):
    """Raised when a quote is accepted after its expiration time."""

    status_code = 410
    code = "quote_expired"
    default_message = "Lesson quote has expired"


class AlreadyResolvedException(ConflictException):
    """Raised when a quote is no longer awaiting a decision."""

    code = "quote_already_resolved"
    default_message = "Lesson quote has already been resolved"


class NoAvailableTeachersException(BusinessRuleException):
    """Raised when no teacher can quote a lesson request."""

    code = "no_available_teachers"
    default_message = "No teachers are available for this lesson request"


class ConcurrentConflictException(ConflictException):
    """Raised when a concurrent writer won the race and the retry lost too."""

    code = "concurrent_conflict"
    default_message = "Concurrent update detected, please retry"


class PersistenceFailureException(AppException):
    """Raised when the storage layer fails; compensation is already recorded."""

    status_code = 503
    code = "persistence_failure"
    default_message = "Storage failure while saving changes"
    commit_session = True


async def app_exception_handler(_: Request, exc: AppException) -> JSONResponse:
    """Handle custom domain exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions in unified shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "http_error", "message": str(exc.detail)}},
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "internal_error", "message": "Internal server error"}},
    )


def register_exception_handlers(app) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
