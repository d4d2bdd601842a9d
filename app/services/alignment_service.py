"""
Alignment service — loads records, runs the alignment engine, and stores
trend baselines.

Trend baseline
--------------
For a scoring window [from, to], the baseline of each pillar is its most
recent PerformanceSnapshot whose period ended before `from`. Snapshots
are written by `save_snapshots` (POST /alignment/snapshots), typically once
per 28-day window, so the default window is compared against the previous
one (days 29–56 ago).

Public API
----------
resolve_range(from_date, to_date, today)      -> DateRange
get_alignments(db, date_range, today)         -> AlignmentReport
latest_snapshots(db, before)                  -> list[PerformanceSnapshot]
save_snapshots(db, date_range, today)         -> list[PerformanceSnapshot]
list_snapshots(db, pillar_id, limit)          -> list[PerformanceSnapshot]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.errors import InvalidDateRangeError
from app.models.habit import Habit, HabitLog
from app.models.performance_snapshot import PerformanceSnapshot
from app.models.pillar import Pillar, Standard
from app.services import alignment_engine as engine
from app.services.identity import get_pillar, list_pillars

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class AlignmentReport:
    date_range: engine.DateRange
    overall_score: int
    alignments: list[engine.PillarAlignment]


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


# ---------------------------------------------------------------------------
# Date range resolution (HTTP boundary)
# ---------------------------------------------------------------------------

def resolve_range(
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    today: Optional[date] = None,
) -> engine.DateRange:
    """
    Fill in a partial range. Missing `to` is today, missing `from` is 27
    days before `to`. An inverted range is rejected here; the engine itself
    would silently score it as 0.
    """
    end = to_date or today or _today()
    start = from_date or end - timedelta(days=engine.WINDOW_DAYS - 1)
    if start > end:
        raise InvalidDateRangeError(start, end)
    return engine.DateRange(start, end)


# ---------------------------------------------------------------------------
# ORM -> engine records
# ---------------------------------------------------------------------------

def _to_engine_pillar(p: Pillar) -> engine.Pillar:
    return engine.Pillar(id=p.id, name=p.name, color=p.color)


def _to_engine_standard(s: Standard) -> engine.Standard:
    return engine.Standard(
        id=s.id, pillar_id=s.pillar_id, target=s.target, unit=s.unit, label=s.label,
    )


def _to_engine_habit(h: Habit) -> engine.Habit:
    return engine.Habit(
        id=h.id,
        pillar_id=h.pillar_id,
        target_days_per_week=h.target_days_per_week,
        archived=h.archived_at is not None,
        title=h.title,
    )


def _to_engine_log(log: HabitLog) -> engine.HabitLog:
    return engine.HabitLog(habit_id=log.habit_id, date=log.date, completed=log.completed)


def _to_engine_snapshot(s: PerformanceSnapshot) -> engine.PerformanceSnapshot:
    return engine.PerformanceSnapshot(pillar_id=s.pillar_id, score=s.score)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def latest_snapshots(db: Session, before: date) -> list[PerformanceSnapshot]:
    """Most recent snapshot per pillar among those whose period ended before `before`."""
    rows = (
        db.query(PerformanceSnapshot)
        .filter(PerformanceSnapshot.period_end < before)
        .order_by(PerformanceSnapshot.period_end.desc(), PerformanceSnapshot.id.desc())
        .all()
    )
    seen: set[int] = set()
    latest = []
    for row in rows:
        if row.pillar_id in seen:
            continue
        seen.add(row.pillar_id)
        latest.append(row)
    return latest


def load_inputs(
    db: Session,
    date_range: engine.DateRange,
    today: date,
) -> engine.ComputeAlignmentsInput:
    """Read everything the engine needs for one scoring call. Reflections are
    left out; scoring does not read them."""
    logs = (
        db.query(HabitLog)
        .filter(or_(
            HabitLog.date.between(date_range.from_date, date_range.to_date),
            HabitLog.date == today,
        ))
        .all()
    )
    return engine.ComputeAlignmentsInput(
        pillars=[_to_engine_pillar(p) for p in list_pillars(db)],
        standards=[_to_engine_standard(s) for s in db.query(Standard).order_by(Standard.id)],
        habits=[_to_engine_habit(h) for h in db.query(Habit).order_by(Habit.id)],
        habit_logs=[_to_engine_log(log) for log in logs],
        previous_snapshots=[
            _to_engine_snapshot(s) for s in latest_snapshots(db, before=date_range.from_date)
        ],
        date_range=date_range,
    )


# ---------------------------------------------------------------------------
# Public — scoring
# ---------------------------------------------------------------------------

def get_alignments(
    db: Session,
    date_range: Optional[engine.DateRange] = None,
    today: Optional[date] = None,
) -> AlignmentReport:
    day = today or _today()
    window = date_range or engine.get_default_date_range(day)

    inputs = load_inputs(db, window, day)
    alignments = engine.compute_alignments(inputs, today=day)

    for a in alignments:
        logger.debug(
            "Pillar %s scored %s (%s, trend %s) over %s..%s",
            a.pillar_id, a.score, a.alignment_state, a.trend,
            window.from_date, window.to_date,
        )

    return AlignmentReport(
        date_range=window,
        overall_score=engine.overall_score(alignments),
        alignments=alignments,
    )


# ---------------------------------------------------------------------------
# Public — snapshots
# ---------------------------------------------------------------------------

def save_snapshots(
    db: Session,
    date_range: Optional[engine.DateRange] = None,
    today: Optional[date] = None,
) -> list[PerformanceSnapshot]:
    """
    Score the window and persist one snapshot per pillar
    (upsert by pillar_id + period_end).
    """
    report = get_alignments(db, date_range, today)
    window = report.date_range
    saved: list[PerformanceSnapshot] = []

    for a in report.alignments:
        row = (
            db.query(PerformanceSnapshot)
            .filter(
                PerformanceSnapshot.pillar_id == a.pillar_id,
                PerformanceSnapshot.period_end == window.to_date,
            )
            .first()
        )
        if row is None:
            row = PerformanceSnapshot(pillar_id=a.pillar_id, period_end=window.to_date)
            db.add(row)
        row.period_start = window.from_date
        row.score = a.score
        row.alignment_state = a.alignment_state
        row.trend = a.trend
        saved.append(row)

    db.commit()
    for row in saved:
        db.refresh(row)

    logger.info(
        "Saved %d snapshot(s) for %s..%s", len(saved), window.from_date, window.to_date
    )
    return saved


def list_snapshots(
    db: Session,
    pillar_id: Optional[int] = None,
    limit: int = 100,
) -> list[PerformanceSnapshot]:
    """Stored snapshots, newest period first."""
    q = db.query(PerformanceSnapshot)
    if pillar_id is not None:
        get_pillar(db, pillar_id)
        q = q.filter(PerformanceSnapshot.pillar_id == pillar_id)
    return (
        q.order_by(PerformanceSnapshot.period_end.desc(), PerformanceSnapshot.pillar_id)
        .limit(limit)
        .all()
    )
