"""
Habits router.

POST /habits
GET  /habits
POST /habits/{habit_id}/archive
PUT  /habits/{habit_id}/logs/{day}
GET  /habits/{habit_id}/logs
GET  /habits/{habit_id}/streak
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.errors import InvalidDateRangeError
from app.db.base import get_db
from app.models.habit import Habit, HabitLog
from app.schemas.habit import (
    HabitCreate,
    HabitLogResponse,
    HabitLogUpsert,
    HabitResponse,
    HabitStreakResponse,
)
from app.services import habits

router = APIRouter(prefix="/habits", tags=["habits"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _ev(v) -> str:
    """Extract bare string value from a str-enum or plain str."""
    return v.value if hasattr(v, "value") else str(v)


def _habit_to_response(h: Habit) -> HabitResponse:
    return HabitResponse(
        id=h.id,
        title=h.title,
        pillar_id=h.pillar_id,
        target_days_per_week=h.target_days_per_week,
        frequency=_ev(h.frequency),
        description=h.description,
        color=h.color,
        archived_at=h.archived_at.isoformat() if h.archived_at else None,
    )


def _log_to_response(log: HabitLog) -> HabitLogResponse:
    return HabitLogResponse(
        id=log.id,
        habit_id=log.habit_id,
        date=str(log.date),
        completed=log.completed,
        note=log.note,
    )


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a habit",
    responses={404: {"description": "Pillar not found."}},
)
def create_habit(payload: HabitCreate, db: Session = Depends(get_db)):
    habit = habits.create_habit(
        db,
        title=payload.title,
        pillar_id=payload.pillar_id,
        target_days_per_week=payload.target_days_per_week,
        frequency=payload.frequency,
        description=payload.description,
        color=payload.color,
    )
    return _habit_to_response(habit)


@router.get(
    "",
    response_model=list[HabitResponse],
    summary="List habits",
)
def list_habits(
    include_archived: bool = Query(default=False, description="Include archived habits."),
    db: Session = Depends(get_db),
):
    return [_habit_to_response(h) for h in habits.list_habits(db, include_archived)]


@router.post(
    "/{habit_id}/archive",
    response_model=HabitResponse,
    summary="Archive a habit",
    responses={404: {"description": "Habit not found."}},
)
def archive_habit(habit_id: int, db: Session = Depends(get_db)):
    """Archived habits are excluded from alignment scoring. Idempotent."""
    return _habit_to_response(habits.archive_habit(db, habit_id))


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------

@router.put(
    "/{habit_id}/logs/{day}",
    response_model=HabitLogResponse,
    summary="Record (or overwrite) a day's completion",
    responses={
        404: {"description": "Habit not found."},
        409: {"description": "Habit is archived."},
    },
)
def upsert_log(
    habit_id: int,
    day: date,
    payload: HabitLogUpsert,
    db: Session = Depends(get_db),
):
    """At most one log per habit and day; a second PUT replaces the first."""
    log = habits.upsert_log(
        db, habit_id=habit_id, day=day, completed=payload.completed, note=payload.note,
    )
    return _log_to_response(log)


@router.get(
    "/{habit_id}/logs",
    response_model=list[HabitLogResponse],
    summary="List a habit's logs, oldest first",
    responses={404: {"description": "Habit not found."}},
)
def list_logs(
    habit_id: int,
    from_date: Optional[date] = Query(default=None, alias="from", examples=["2026-02-01"]),
    to_date: Optional[date] = Query(default=None, alias="to", examples=["2026-02-28"]),
    db: Session = Depends(get_db),
):
    if from_date and to_date and from_date > to_date:
        raise InvalidDateRangeError(from_date, to_date)
    rows = habits.list_logs(db, habit_id, from_date=from_date, to_date=to_date)
    return [_log_to_response(log) for log in rows]


@router.get(
    "/{habit_id}/streak",
    response_model=HabitStreakResponse,
    summary="Current streak, longest streak and 4-week completion rate",
    responses={404: {"description": "Habit not found."}},
)
def habit_streak(habit_id: int, db: Session = Depends(get_db)):
    s = habits.get_streak(db, habit_id)
    return HabitStreakResponse(
        habit_id=s.habit_id,
        current=s.current,
        longest=s.longest,
        weekly_rate=round(s.weekly_rate, 4),
    )
