"""
Alignment engine — declared standards vs observed habit behaviour.

Pipeline
--------
  1. Date range      : trailing 28-day window (plus the window before it).
  2. Standard score  : completed habit logs / expected habit days, 0–100.
  3. Pillar score    : mean of its standard scores, or the pooled habit
                       completion rate when the pillar has no standards.
  4. Trend           : current score vs the pillar's previous snapshot.
  5. Alignment state : ordered decision table over (score, trend).

Everything here is pure: plain dataclasses in, plain dataclasses out.
No ORM, no Pydantic, no I/O. Empty inputs degrade to a score of 0 and
nothing in this module raises for data-shaped edge cases.

Public API
----------
get_default_date_range(today)                     -> DateRange
get_previous_date_range(today)                    -> DateRange
score_standard(standard, habits, logs, range)     -> StandardAlignment
compute_trend(score, snapshots, pillar_id)        -> Trend
classify_state(score, trend)                      -> AlignmentState
compute_alignments(inputs, today)                 -> list[PillarAlignment]
overall_score(alignments)                         -> int
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, Optional, Sequence


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

WINDOW_DAYS = 28
TREND_THRESHOLD = 5
SCORE_MIN = 0
SCORE_MAX = 100


class Trend:
    UP   = "up"
    DOWN = "down"
    FLAT = "flat"


class AlignmentState:
    ALIGNED    = "aligned"
    IMPROVING  = "improving"
    DRIFTING   = "drifting"
    REGRESSING = "regressing"
    AVOIDING   = "avoiding"


# ---------------------------------------------------------------------------
# Input records (plain dataclasses, already loaded by the caller)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Pillar:
    id: int
    name: str
    color: str


@dataclass(frozen=True)
class Standard:
    id: int
    pillar_id: int
    target: float
    unit: str
    label: str = ""


@dataclass(frozen=True)
class Habit:
    id: int
    pillar_id: Optional[int]
    target_days_per_week: int
    archived: bool = False
    title: str = ""


@dataclass(frozen=True)
class HabitLog:
    habit_id: int
    date: date
    completed: bool


@dataclass(frozen=True)
class Reflection:
    date: date
    type: str = "daily-pm"
    mood: Optional[int] = None
    energy_level: Optional[int] = None


@dataclass(frozen=True)
class PerformanceSnapshot:
    pillar_id: int
    score: float


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""
    from_date: date
    to_date: date

    @classmethod
    def from_iso(cls, from_date: str, to_date: str) -> "DateRange":
        return cls(date.fromisoformat(from_date), date.fromisoformat(to_date))

    def contains(self, day: date) -> bool:
        return self.from_date <= day <= self.to_date


@dataclass(frozen=True)
class ComputeAlignmentsInput:
    pillars: Sequence[Pillar]
    standards: Sequence[Standard]
    habits: Sequence[Habit]
    habit_logs: Sequence[HabitLog]
    date_range: DateRange
    reflections: Sequence[Reflection] = ()
    previous_snapshots: Sequence[PerformanceSnapshot] = ()


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StandardAlignment:
    standard: Standard
    observed: float     # completions per week per habit, 1 decimal
    target: float
    score: int          # 0–100
    label: str          # "observed / target unit"


@dataclass(frozen=True)
class PillarAlignment:
    pillar_id: int
    pillar_name: str
    pillar_color: str
    score: int          # 0–100
    alignment_state: str
    trend: str
    standards: list[StandardAlignment] = field(default_factory=list)
    habit_count: int = 0
    completed_habit_count: int = 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _round_half_up(value: float, places: int = 0) -> Decimal:
    exp = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)


def _clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return max(low, min(high, value))


def _to_score(rate: float) -> int:
    return int(_round_half_up(_clamp(rate * 100)))


def _fmt_number(value: float) -> str:
    """4.0 -> "4", 2.5 -> "2.5", 70000000.0 -> "70000000"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _monday(day: date) -> date:
    return day - timedelta(days=day.weekday())


# ---------------------------------------------------------------------------
# Date ranges
# ---------------------------------------------------------------------------

def get_default_date_range(today: Optional[date] = None) -> DateRange:
    """Trailing 28-day window ending today (inclusive)."""
    end = today or _today()
    return DateRange(end - timedelta(days=WINDOW_DAYS - 1), end)


def get_previous_date_range(today: Optional[date] = None) -> DateRange:
    """The 28 days immediately before the default window (days 29–56 ago)."""
    end = today or _today()
    return DateRange(
        end - timedelta(days=2 * WINDOW_DAYS - 1),
        end - timedelta(days=WINDOW_DAYS),
    )


def weeks_in_range(date_range: DateRange) -> int:
    """Monday-start calendar weeks touched by the range, never below 1."""
    span = (_monday(date_range.to_date) - _monday(date_range.from_date)).days // 7
    return max(1, span + 1)


# ---------------------------------------------------------------------------
# Habit completion totals
# ---------------------------------------------------------------------------

def _completed_in_range(
    habit_id: int, habit_logs: Iterable[HabitLog], date_range: DateRange
) -> int:
    return sum(
        1 for log in habit_logs
        if log.habit_id == habit_id and log.completed and date_range.contains(log.date)
    )


def _completion_totals(
    habits: Sequence[Habit],
    habit_logs: Sequence[HabitLog],
    date_range: DateRange,
    weeks: int,
) -> tuple[int, int]:
    """Return (total_completed, total_expected) pooled over all habits."""
    total_completed = 0
    total_expected = 0
    for habit in habits:
        total_completed += _completed_in_range(habit.id, habit_logs, date_range)
        total_expected += habit.target_days_per_week * weeks
    return total_completed, total_expected


def _pooled_score(total_completed: int, total_expected: int) -> int:
    if total_expected <= 0:
        return 0
    return _to_score(total_completed / total_expected)


# ---------------------------------------------------------------------------
# Standard scorer
# ---------------------------------------------------------------------------

def score_standard(
    standard: Standard,
    pillar_habits: Sequence[Habit],
    habit_logs: Sequence[HabitLog],
    date_range: DateRange,
) -> StandardAlignment:
    """
    Score one standard against every habit of its pillar.

    Every habit under a pillar contributes to every standard under that
    pillar. `score` is the pooled completed/expected ratio; `observed` is
    a display figure (completions per week per habit) and is not what
    drives the score.
    """
    target = _fmt_number(standard.target)
    if not pillar_habits:
        return StandardAlignment(
            standard=standard,
            observed=0.0,
            target=standard.target,
            score=0,
            label=f"0 / {target} {standard.unit}",
        )

    weeks = weeks_in_range(date_range)
    total_completed, total_expected = _completion_totals(
        pillar_habits, habit_logs, date_range, weeks
    )

    observed_per_week = total_completed / weeks / max(1, len(pillar_habits))
    observed = float(_round_half_up(observed_per_week, 1))

    return StandardAlignment(
        standard=standard,
        observed=observed,
        target=standard.target,
        score=_pooled_score(total_completed, total_expected),
        label=f"{observed:.1f} / {target} {standard.unit}",
    )


# ---------------------------------------------------------------------------
# Trend + state classifiers
# ---------------------------------------------------------------------------

def compute_trend(
    current_score: float,
    previous_snapshots: Sequence[PerformanceSnapshot],
    pillar_id: int,
) -> str:
    """Direction vs the first snapshot for this pillar; ±5 exactly is flat."""
    previous = next((s for s in previous_snapshots if s.pillar_id == pillar_id), None)
    if previous is None:
        return Trend.FLAT
    diff = current_score - previous.score
    if diff > TREND_THRESHOLD:
        return Trend.UP
    if diff < -TREND_THRESHOLD:
        return Trend.DOWN
    return Trend.FLAT


# First match wins. Order matters: a score >= 80 is aligned even when
# falling, and [40, 60) with an upward trend is still drifting.
_STATE_RULES: list[tuple[Callable[[float, str], bool], str]] = [
    (lambda score, trend: score >= 80, AlignmentState.ALIGNED),
    (lambda score, trend: score >= 60 and trend == Trend.UP, AlignmentState.IMPROVING),
    (lambda score, trend: score >= 40, AlignmentState.DRIFTING),
    (lambda score, trend: score < 40 and trend == Trend.DOWN, AlignmentState.REGRESSING),
]


def classify_state(score: float, trend: str) -> str:
    for predicate, state in _STATE_RULES:
        if predicate(score, trend):
            return state
    return AlignmentState.AVOIDING


# ---------------------------------------------------------------------------
# Pillar aggregator
# ---------------------------------------------------------------------------

def _pillar_score(
    standard_alignments: list[StandardAlignment],
    pillar_habits: Sequence[Habit],
    habit_logs: Sequence[HabitLog],
    date_range: DateRange,
) -> int:
    if standard_alignments:
        mean = sum(sa.score for sa in standard_alignments) / len(standard_alignments)
        return int(_round_half_up(mean))
    if pillar_habits:
        weeks = weeks_in_range(date_range)
        return _pooled_score(*_completion_totals(pillar_habits, habit_logs, date_range, weeks))
    return 0


def _completed_today(
    pillar_habits: Sequence[Habit], habit_logs: Sequence[HabitLog], today: date
) -> int:
    done = {log.habit_id for log in habit_logs if log.completed and log.date == today}
    return sum(1 for h in pillar_habits if h.id in done)


def compute_alignments(
    inputs: ComputeAlignmentsInput,
    today: Optional[date] = None,
) -> list[PillarAlignment]:
    """
    Score every pillar in input order.
    `today` only feeds `completed_habit_count`; defaults to the UTC date.
    """
    day = today or _today()
    results: list[PillarAlignment] = []

    for pillar in inputs.pillars:
        pillar_standards = [s for s in inputs.standards if s.pillar_id == pillar.id]
        pillar_habits = [
            h for h in inputs.habits if h.pillar_id == pillar.id and not h.archived
        ]

        standard_alignments = [
            score_standard(s, pillar_habits, inputs.habit_logs, inputs.date_range)
            for s in pillar_standards
        ]
        score = _pillar_score(
            standard_alignments, pillar_habits, inputs.habit_logs, inputs.date_range
        )
        trend = compute_trend(score, inputs.previous_snapshots, pillar.id)

        results.append(PillarAlignment(
            pillar_id=pillar.id,
            pillar_name=pillar.name,
            pillar_color=pillar.color,
            score=score,
            alignment_state=classify_state(score, trend),
            trend=trend,
            standards=standard_alignments,
            habit_count=len(pillar_habits),
            completed_habit_count=_completed_today(pillar_habits, inputs.habit_logs, day),
        ))

    return results


def overall_score(alignments: Sequence[PillarAlignment]) -> int:
    """Rounded mean of pillar scores; 0 when there are no pillars."""
    if not alignments:
        return 0
    return int(_round_half_up(sum(a.score for a in alignments) / len(alignments)))
