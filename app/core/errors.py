"""
Custom exception hierarchy for the Compass API.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

The alignment engine itself never raises; these errors belong to the
HTTP/service shell around it.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from app.schemas.common import FieldError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class CompassException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class _NotFoundError(CompassException):
    http_status = status.HTTP_404_NOT_FOUND
    resource: str = "Record"

    def __init__(self, record_id: int | str):
        super().__init__(
            message=f"{self.resource} {record_id} not found.",
            details={"id": record_id},
        )


class PillarNotFoundError(_NotFoundError):
    code = "PILLAR_NOT_FOUND"
    resource = "Pillar"


class StandardNotFoundError(_NotFoundError):
    code = "STANDARD_NOT_FOUND"
    resource = "Standard"


class HabitNotFoundError(_NotFoundError):
    code = "HABIT_NOT_FOUND"
    resource = "Habit"


class GoalNotFoundError(_NotFoundError):
    code = "GOAL_NOT_FOUND"
    resource = "Goal"


class MilestoneNotFoundError(_NotFoundError):
    code = "MILESTONE_NOT_FOUND"
    resource = "Milestone"


class AlertNotFoundError(_NotFoundError):
    code = "ALERT_NOT_FOUND"
    resource = "Alert"


class HabitArchivedError(CompassException):
    http_status = status.HTTP_409_CONFLICT
    code = "HABIT_ARCHIVED"

    def __init__(self, habit_id: int):
        super().__init__(
            message=f"Habit {habit_id} is archived and cannot be logged.",
            details={"id": habit_id},
        )


class InvalidDateRangeError(CompassException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_DATE_RANGE"

    def __init__(self, from_date: date, to_date: date):
        super().__init__(
            message=f"Range start {from_date} is after range end {to_date}.",
            details={"from": str(from_date), "to": str(to_date)},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def compass_exception_handler(request: Request, exc: CompassException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append(FieldError(
            field=".".join(str(loc) for loc in error["loc"] if loc != "body"),
            message=error["msg"],
            type=error["type"],
        ).model_dump())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
