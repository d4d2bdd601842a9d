"""
Advisory Engine — alerts derived from the alignment report.

Rules (evaluated in this order every time POST /advisory/evaluate is called)
----------------------------------------------------------------------------
  1. PILLAR_DRIFT        previous snapshot − current score > 20     challenge
  2. STREAK_BROKEN       yesterday missed after a ≥ 7-day run        warning
  3. STANDARD_VIOLATION  standard score < 50 (target > 0)            challenge
  4. REGRESSING          pillar state is "regressing"                warning
  5. NO_REFLECTION       none ever, or latest ≥ 7 days ago           warning
  6. GOAL_STALE          active ≥ 90 days, no completed milestone    warning
  7. OVERALL_REGRESSION  mean score < mean previous snapshot − 10     challenge
  8. WEEKEND_DRIFT       Sunday PM mood > 2 below other PM moods     insight
  9. ALL_ALIGNED         ≥ 2 pillars, every score ≥ 80               opportunity

Idempotency
-----------
Every alert carries a deterministic id (e.g. "drift-3"). `sync_alerts`
inserts only ids that are not stored yet, so re-evaluating never
duplicates an alert and never resurrects a dismissed one.

Rule functions are pure; only `sync_alerts` and the query helpers touch
the database. db.commit() is called once per operation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.core.errors import AlertNotFoundError
from app.models.advisory_alert import AdvisoryAlert
from app.models import goal as goal_models
from app.models.goal import GoalStatus
from app.models.habit import Habit, HabitLog
from app.models.reflection import Reflection, ReflectionType
from app.services import alignment_engine as engine
from app.services.alignment_service import get_alignments, latest_snapshots

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class Severity:
    INSIGHT     = "insight"
    CHALLENGE   = "challenge"
    WARNING     = "warning"
    OPPORTUNITY = "opportunity"


_DRIFT_POINTS            = 20
_MIN_BROKEN_STREAK       = 7
_STANDARD_VIOLATION      = 50
_REFLECTION_LAPSE_DAYS   = 7
_OVERALL_REGRESSION      = 10
_ALIGNED_SCORE           = 80
_STALE_GOAL_DAYS         = 90
_MIN_PM_REFLECTIONS      = 4
_MIN_PER_GROUP           = 2       # Sunday and non-Sunday PM reflections each
_MOOD_GAP                = 2


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Alert:
    id: str
    severity: str
    pillar_id: Optional[int]
    title: str
    message: str
    action: Optional[str] = None


@dataclass(frozen=True)
class Goal:
    id: int
    pillar_id: Optional[int]
    title: str
    status: str
    created_on: date


@dataclass(frozen=True)
class Milestone:
    goal_id: int
    completed: bool


@dataclass(frozen=True)
class AdvisoryInput:
    alignments: Sequence[engine.PillarAlignment]
    habits: Sequence[engine.Habit]
    habit_logs: Sequence[engine.HabitLog]
    reflections: Sequence[engine.Reflection]
    previous_snapshots: Sequence[engine.PerformanceSnapshot]
    today: date
    goals: Sequence[Goal] = ()
    milestones: Sequence[Milestone] = ()


@dataclass
class SyncResult:
    """Summary of what an evaluation run stored."""
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)   # already stored


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _enum_value(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _rule_pillar_drift(data: AdvisoryInput) -> list[Alert]:
    alerts = []
    for a in data.alignments:
        prev = next((s for s in data.previous_snapshots if s.pillar_id == a.pillar_id), None)
        if prev is None:
            continue
        drop = prev.score - a.score
        if drop > _DRIFT_POINTS:
            alerts.append(Alert(
                id=f"drift-{a.pillar_id}",
                severity=Severity.CHALLENGE,
                pillar_id=a.pillar_id,
                title=f"{a.pillar_name}: Major Drift Detected",
                message=(
                    f"{a.pillar_name} fell from {prev.score:g} to {a.score} since the "
                    f"previous period, a {drop:g} point decline. What changed?"
                ),
                action="Review habits",
            ))
    return alerts


def _run_ending(done: set[date], last_day: date) -> int:
    run = 0
    day = last_day
    while day in done:
        run += 1
        day -= timedelta(days=1)
    return run


def _rule_streak_broken(data: AdvisoryInput) -> list[Alert]:
    alerts = []
    yesterday = data.today - timedelta(days=1)
    for habit in data.habits:
        if habit.archived:
            continue
        done = {
            log.date for log in data.habit_logs
            if log.habit_id == habit.id and log.completed
        }
        if yesterday in done:
            continue
        run = _run_ending(done, yesterday - timedelta(days=1))
        if run >= _MIN_BROKEN_STREAK:
            alerts.append(Alert(
                id=f"streak-broken-{habit.id}",
                severity=Severity.WARNING,
                pillar_id=habit.pillar_id,
                title=f"{habit.title}: {run}-Day Streak Broken",
                message=(
                    f'You had a {run}-day streak on "{habit.title}" and missed yesterday. '
                    "One miss is a slip; two is a pattern. Log it today."
                ),
                action="Log today",
            ))
    return alerts


def _rule_standard_violation(data: AdvisoryInput) -> list[Alert]:
    alerts = []
    for a in data.alignments:
        for sa in a.standards:
            if sa.score < _STANDARD_VIOLATION and sa.target > 0:
                name = sa.standard.label or sa.label
                alerts.append(Alert(
                    id=f"standard-viol-{sa.standard.id}",
                    severity=Severity.CHALLENGE,
                    pillar_id=a.pillar_id,
                    title=f"Standard Violation: {name}",
                    message=(
                        f'"{name}" is at {sa.score}% (observed {sa.label}). '
                        "Below 50% is no longer drift, it is avoidance."
                    ),
                ))
    return alerts


def _rule_regressing(data: AdvisoryInput) -> list[Alert]:
    return [
        Alert(
            id=f"regressing-{a.pillar_id}",
            severity=Severity.WARNING,
            pillar_id=a.pillar_id,
            title=f"{a.pillar_name}: Regressing",
            message=(
                f"{a.pillar_name} is at {a.score} and still falling. "
                "Pick one habit in this pillar and protect it this week."
            ),
            action="Review habits",
        )
        for a in data.alignments
        if a.alignment_state == engine.AlignmentState.REGRESSING
    ]


def _rule_no_reflection(data: AdvisoryInput) -> list[Alert]:
    if not data.reflections:
        return [Alert(
            id="no-reflection-ever",
            severity=Severity.WARNING,
            pillar_id=None,
            title="No Reflections Recorded",
            message="Start with a morning reflection to set the day's intentions.",
            action="Reflect now",
        )]

    latest = max(r.date for r in data.reflections)
    days_since = (data.today - latest).days
    if days_since >= _REFLECTION_LAPSE_DAYS:
        return [Alert(
            id="no-reflection-7d",
            severity=Severity.WARNING,
            pillar_id=None,
            title=f"No Reflection in {days_since} Days",
            message=(
                f"Your last reflection was {days_since} days ago. "
                "Advice gets less accurate without regular input."
            ),
            action="Reflect now",
        )]
    return []


def _rule_goal_stale(data: AdvisoryInput) -> list[Alert]:
    alerts = []
    for goal in data.goals:
        if goal.status != GoalStatus.active.value:
            continue
        age = (data.today - goal.created_on).days
        if age < _STALE_GOAL_DAYS:
            continue
        if any(m.completed for m in data.milestones if m.goal_id == goal.id):
            continue
        alerts.append(Alert(
            id=f"goal-stale-{goal.id}",
            severity=Severity.WARNING,
            pillar_id=goal.pillar_id,
            title=f"Stale Goal: {goal.title}",
            message=(
                f'"{goal.title}" has been active for {age} days with no milestone '
                "progress. Break it down or archive it."
            ),
            action="Review goal",
        ))
    return alerts


def _rule_overall_regression(data: AdvisoryInput) -> list[Alert]:
    if not data.alignments or not data.previous_snapshots:
        return []
    current_avg = sum(a.score for a in data.alignments) / len(data.alignments)
    prev_avg = (
        sum(s.score for s in data.previous_snapshots) / len(data.previous_snapshots)
    )
    if current_avg < prev_avg - _OVERALL_REGRESSION:
        return [Alert(
            id="overall-regression",
            severity=Severity.CHALLENGE,
            pillar_id=None,
            title="Overall Alignment Declining",
            message=(
                f"Your overall score dropped from {round(prev_avg)} to {round(current_avg)}. "
                "Several pillars are trending down at once; audit your commitments."
            ),
            action="Review all pillars",
        )]
    return []


def _rule_weekend_drift(data: AdvisoryInput) -> list[Alert]:
    pm = [
        r for r in data.reflections
        if r.type == ReflectionType.daily_pm.value and r.mood is not None
    ]
    if len(pm) < _MIN_PM_REFLECTIONS:
        return []

    sunday = [r.mood for r in pm if r.date.weekday() == 6]
    other = [r.mood for r in pm if r.date.weekday() != 6]
    if len(sunday) < _MIN_PER_GROUP or len(other) < _MIN_PER_GROUP:
        return []

    sunday_avg = sum(sunday) / len(sunday)
    other_avg = sum(other) / len(other)
    if other_avg - sunday_avg > _MOOD_GAP:
        return [Alert(
            id="weekend-drift",
            severity=Severity.INSIGHT,
            pillar_id=None,
            title="Pattern: Sunday Mood Drop",
            message=(
                f"Your average Sunday evening mood ({sunday_avg:.1f}) is well below "
                f"other days ({other_avg:.1f}). Check what the week ahead is costing you."
            ),
        )]
    return []


def _rule_all_aligned(data: AdvisoryInput) -> list[Alert]:
    if len(data.alignments) < 2:
        return []
    if all(a.score >= _ALIGNED_SCORE for a in data.alignments):
        return [Alert(
            id="all-aligned",
            severity=Severity.OPPORTUNITY,
            pillar_id=None,
            title="All Pillars Aligned: Raise the Bar",
            message=(
                "Every pillar is scoring 80% or more. Consider raising your "
                "standards or declaring a new pillar."
            ),
            action="Review standards",
        )]
    return []


_RULES = [
    _rule_pillar_drift,
    _rule_streak_broken,
    _rule_standard_violation,
    _rule_regressing,
    _rule_no_reflection,
    _rule_goal_stale,
    _rule_overall_regression,
    _rule_weekend_drift,
    _rule_all_aligned,
]


def compute_alerts(data: AdvisoryInput) -> list[Alert]:
    """Run every rule in order and concatenate their alerts."""
    alerts: list[Alert] = []
    for rule in _RULES:
        alerts.extend(rule(data))
    return alerts


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def sync_alerts(db: Session, alerts: Sequence[Alert]) -> SyncResult:
    """Insert alerts whose id is not stored yet. Existing rows are left untouched."""
    result = SyncResult()
    for alert in alerts:
        if db.get(AdvisoryAlert, alert.id) is not None or alert.id in result.created:
            result.skipped.append(alert.id)
            continue
        db.add(AdvisoryAlert(
            id=alert.id,
            severity=alert.severity,
            pillar_id=alert.pillar_id,
            title=alert.title,
            message=alert.message,
            action=alert.action,
        ))
        result.created.append(alert.id)

    if result.created:
        db.commit()
    return result


def evaluate_and_react(db: Session, today: Optional[date] = None) -> SyncResult:
    """Score the default window, run the rules and store any new alerts."""
    day = today or _today()
    report = get_alignments(db, today=day)

    habits = db.query(Habit).filter(Habit.archived_at.is_(None)).all()
    logs = (
        db.query(HabitLog)
        .filter(HabitLog.habit_id.in_([h.id for h in habits]))
        .all()
    ) if habits else []

    active_goals = (
        db.query(goal_models.Goal)
        .filter(goal_models.Goal.status == GoalStatus.active)
        .all()
    )
    milestones = (
        db.query(goal_models.Milestone)
        .filter(goal_models.Milestone.goal_id.in_([g.id for g in active_goals]))
        .all()
    ) if active_goals else []

    data = AdvisoryInput(
        alignments=report.alignments,
        habits=[
            engine.Habit(
                id=h.id,
                pillar_id=h.pillar_id,
                target_days_per_week=h.target_days_per_week,
                title=h.title,
            )
            for h in habits
        ],
        habit_logs=[
            engine.HabitLog(habit_id=log.habit_id, date=log.date, completed=log.completed)
            for log in logs
        ],
        reflections=[
            engine.Reflection(
                date=r.date,
                type=_enum_value(r.type),
                mood=r.mood,
                energy_level=r.energy_level,
            )
            for r in db.query(Reflection).all()
        ],
        previous_snapshots=[
            engine.PerformanceSnapshot(pillar_id=s.pillar_id, score=s.score)
            for s in latest_snapshots(db, before=report.date_range.from_date)
        ],
        today=day,
        goals=[
            Goal(
                id=g.id,
                pillar_id=g.pillar_id,
                title=g.title,
                status=_enum_value(g.status),
                created_on=g.created_at.date(),
            )
            for g in active_goals
        ],
        milestones=[
            Milestone(goal_id=m.goal_id, completed=m.completed) for m in milestones
        ],
    )

    result = sync_alerts(db, compute_alerts(data))
    logger.info(
        "Advisory evaluation: %d created, %d already stored",
        len(result.created), len(result.skipped),
    )
    return result


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------

def list_alerts(db: Session, active_only: bool = False) -> list[AdvisoryAlert]:
    """Newest first."""
    q = db.query(AdvisoryAlert)
    if active_only:
        q = q.filter(AdvisoryAlert.dismissed_at.is_(None))
    return q.order_by(AdvisoryAlert.created_at.desc(), AdvisoryAlert.id).all()


def dismiss_alert(db: Session, alert_id: str) -> AdvisoryAlert:
    alert = db.get(AdvisoryAlert, alert_id)
    if alert is None:
        raise AlertNotFoundError(alert_id)
    if alert.dismissed_at is None:
        alert.dismissed_at = datetime.now(tz=timezone.utc)
        db.commit()
        db.refresh(alert)
    return alert


def clear_dismissed(db: Session) -> int:
    """Delete dismissed alerts; returns how many were removed."""
    removed = (
        db.query(AdvisoryAlert)
        .filter(AdvisoryAlert.dismissed_at.is_not(None))
        .delete(synchronize_session=False)
    )
    db.commit()
    return removed
