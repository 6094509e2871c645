"""Shared error mapping for API v1 route modules."""

from __future__ import annotations

from fastapi import HTTPException, status

from app.core.exceptions import (
    ConversationClosedError,
    NotFoundError,
    PersistenceError,
    TurnInProgressError,
    ValidationError,
)
from app.orchestration.state_machine import InvalidTransitionError


def map_engine_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND, str(exc)
    if isinstance(exc, (ConversationClosedError, TurnInProgressError, InvalidTransitionError)):
        return status.HTTP_409_CONFLICT, str(exc)
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
    if isinstance(exc, PersistenceError):
        return status.HTTP_503_SERVICE_UNAVAILABLE, "Storage temporarily unavailable; retry the request."
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error."


def to_http_error(exc: Exception) -> HTTPException:
    code, detail = map_engine_error(exc)
    return HTTPException(status_code=code, detail=detail)


HANDLED_ERRORS = (
    NotFoundError,
    ConversationClosedError,
    TurnInProgressError,
    InvalidTransitionError,
    ValidationError,
    PersistenceError,
)
