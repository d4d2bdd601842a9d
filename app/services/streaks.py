"""
Habit streak statistics, derived from habit logs only.

calc_streak(habit_id, logs, today)          -> int
calc_longest_streak(habit_id, logs)         -> int
weekly_rate(habit_id, target, logs, weeks)  -> float  (0.0 – 1.0)
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

from app.services.alignment_engine import HabitLog


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _completed_dates(habit_id: int, logs: Sequence[HabitLog]) -> set[date]:
    return {log.date for log in logs if log.habit_id == habit_id and log.completed}


def calc_streak(
    habit_id: int,
    logs: Sequence[HabitLog],
    today: Optional[date] = None,
) -> int:
    """
    Consecutive completed days counted backwards from today.
    An unfinished today does not break the streak if yesterday was done.
    """
    done = _completed_dates(habit_id, logs)
    current = today or _today()

    if current not in done:
        current -= timedelta(days=1)
        if current not in done:
            return 0

    streak = 0
    while current in done:
        streak += 1
        current -= timedelta(days=1)
    return streak


def calc_longest_streak(habit_id: int, logs: Sequence[HabitLog]) -> int:
    dates = sorted(_completed_dates(habit_id, logs))
    if not dates:
        return 0

    longest = current = 1
    for prev, curr in zip(dates, dates[1:]):
        if (curr - prev).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def weekly_rate(
    habit_id: int,
    target_days_per_week: int,
    logs: Sequence[HabitLog],
    weeks: int = 4,
    today: Optional[date] = None,
) -> float:
    """Completion rate over the last `weeks` weeks, capped at 1.0."""
    expected = target_days_per_week * weeks
    if expected <= 0:
        return 0.0
    cutoff = (today or _today()) - timedelta(days=weeks * 7)
    completed = sum(
        1 for log in logs
        if log.habit_id == habit_id and log.completed and log.date >= cutoff
    )
    return min(1.0, completed / expected)
