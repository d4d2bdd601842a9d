"""
Habit service: habits, their daily logs, and streak stats.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import HabitArchivedError, HabitNotFoundError
from app.models.habit import Habit, HabitFrequency, HabitLog
from app.services import alignment_engine as engine
from app.services.identity import get_pillar
from app.services.streaks import calc_longest_streak, calc_streak, weekly_rate

logger = logging.getLogger(__name__)


@dataclass
class HabitStreak:
    habit_id: int
    current: int
    longest: int
    weekly_rate: float   # 0.0 – 1.0 over the last 4 weeks


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

def get_habit(db: Session, habit_id: int) -> Habit:
    habit = db.get(Habit, habit_id)
    if habit is None:
        raise HabitNotFoundError(habit_id)
    return habit


def list_habits(db: Session, include_archived: bool = False) -> list[Habit]:
    q = db.query(Habit)
    if not include_archived:
        q = q.filter(Habit.archived_at.is_(None))
    return q.order_by(Habit.id).all()


def create_habit(
    db: Session,
    title: str,
    target_days_per_week: int,
    pillar_id: Optional[int] = None,
    frequency: HabitFrequency = HabitFrequency.daily,
    description: str = "",
    color: str = "#888888",
) -> Habit:
    if pillar_id is not None:
        get_pillar(db, pillar_id)
    habit = Habit(
        title=title,
        pillar_id=pillar_id,
        target_days_per_week=target_days_per_week,
        frequency=frequency,
        description=description,
        color=color,
    )
    db.add(habit)
    db.commit()
    db.refresh(habit)
    logger.info("Created habit %s (%r) under pillar %s", habit.id, habit.title, pillar_id)
    return habit


def archive_habit(db: Session, habit_id: int) -> Habit:
    """Archive a habit; it stops counting towards alignment. Idempotent."""
    habit = get_habit(db, habit_id)
    if habit.archived_at is None:
        habit.archived_at = datetime.now(tz=timezone.utc)
        db.commit()
        db.refresh(habit)
        logger.info("Archived habit %s", habit_id)
    return habit


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------

def upsert_log(
    db: Session,
    habit_id: int,
    day: date,
    completed: bool = True,
    note: str = "",
) -> HabitLog:
    """Create or overwrite the single log of `habit_id` for `day`."""
    habit = get_habit(db, habit_id)
    if habit.archived_at is not None:
        raise HabitArchivedError(habit_id)

    log = (
        db.query(HabitLog)
        .filter(HabitLog.habit_id == habit_id, HabitLog.date == day)
        .first()
    )
    if log is None:
        log = HabitLog(habit_id=habit_id, date=day)
        db.add(log)
    log.completed = completed
    log.note = note
    db.commit()
    db.refresh(log)
    return log


def list_logs(
    db: Session,
    habit_id: int,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> list[HabitLog]:
    get_habit(db, habit_id)
    q = db.query(HabitLog).filter(HabitLog.habit_id == habit_id)
    if from_date is not None:
        q = q.filter(HabitLog.date >= from_date)
    if to_date is not None:
        q = q.filter(HabitLog.date <= to_date)
    return q.order_by(HabitLog.date).all()


def get_streak(db: Session, habit_id: int, today: Optional[date] = None) -> HabitStreak:
    habit = get_habit(db, habit_id)
    day = today or _today()
    logs = [
        engine.HabitLog(habit_id=row.habit_id, date=row.date, completed=row.completed)
        for row in db.query(HabitLog).filter(HabitLog.habit_id == habit_id).all()
    ]
    return HabitStreak(
        habit_id=habit_id,
        current=calc_streak(habit_id, logs, today=day),
        longest=calc_longest_streak(habit_id, logs),
        weekly_rate=weekly_rate(habit_id, habit.target_days_per_week, logs, today=day),
    )
