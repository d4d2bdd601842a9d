"""
Tests for the advisory engine.

Pure rule tests build AdvisoryInput by hand; persistence tests go through
the service layer and the /advisory endpoints.
"""
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from app.services import alignment_engine as engine
from app.services.advisory_engine import (
    AdvisoryInput,
    Alert,
    Goal,
    Milestone,
    Severity,
    compute_alerts,
    evaluate_and_react,
    list_alerts,
    sync_alerts,
)
from app.services.goals import add_milestone, create_goal, toggle_milestone
from app.services.habits import create_habit
from app.services.identity import create_pillar, create_standard, delete_pillar
from app.services.reflections import create_reflection
from app.models.reflection import ReflectionType

TODAY = date(2026, 2, 1)


def _alignment(pillar_id=1, score=70, state=engine.AlignmentState.DRIFTING,
               trend=engine.Trend.FLAT, standards=None) -> engine.PillarAlignment:
    return engine.PillarAlignment(
        pillar_id=pillar_id,
        pillar_name=f"Pillar {pillar_id}",
        pillar_color="#888888",
        score=score,
        alignment_state=state,
        trend=trend,
        standards=standards or [],
    )


def _input(**overrides) -> AdvisoryInput:
    fields = dict(
        alignments=[],
        habits=[],
        habit_logs=[],
        reflections=[engine.Reflection(date=TODAY)],
        previous_snapshots=[],
        today=TODAY,
    )
    fields.update(overrides)
    return AdvisoryInput(**fields)


def _ids(data: AdvisoryInput) -> list[str]:
    return [a.id for a in compute_alerts(data)]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

class TestRules:
    def test_quiet_when_nothing_to_say(self):
        assert _ids(_input(alignments=[_alignment()])) == []

    def test_pillar_drift(self):
        data = _input(
            alignments=[_alignment(score=50)],
            previous_snapshots=[engine.PerformanceSnapshot(pillar_id=1, score=75)],
        )
        alerts = compute_alerts(data)
        assert alerts[0].id == "drift-1"
        assert alerts[0].severity == Severity.CHALLENGE
        assert alerts[0].pillar_id == 1

    def test_drift_of_exactly_20_is_quiet(self):
        data = _input(
            alignments=[_alignment(score=50)],
            previous_snapshots=[engine.PerformanceSnapshot(pillar_id=1, score=70)],
        )
        assert "drift-1" not in _ids(data)

    def test_streak_broken(self):
        habit = engine.Habit(id=5, pillar_id=1, target_days_per_week=7, title="Gym")
        logs = [
            engine.HabitLog(habit_id=5, date=TODAY - timedelta(days=d), completed=True)
            for d in range(2, 9)    # seven days ending the day before yesterday
        ]
        alerts = compute_alerts(_input(habits=[habit], habit_logs=logs))
        assert [a.id for a in alerts] == ["streak-broken-5"]
        assert alerts[0].severity == Severity.WARNING
        assert "7-Day" in alerts[0].title

    def test_short_streak_is_quiet(self):
        habit = engine.Habit(id=5, pillar_id=1, target_days_per_week=7)
        logs = [
            engine.HabitLog(habit_id=5, date=TODAY - timedelta(days=d), completed=True)
            for d in range(2, 8)
        ]
        assert _ids(_input(habits=[habit], habit_logs=logs)) == []

    def test_streak_alive_yesterday_is_quiet(self):
        habit = engine.Habit(id=5, pillar_id=1, target_days_per_week=7)
        logs = [
            engine.HabitLog(habit_id=5, date=TODAY - timedelta(days=d), completed=True)
            for d in range(1, 10)
        ]
        assert _ids(_input(habits=[habit], habit_logs=logs)) == []

    def test_standard_violation(self):
        standard = engine.Standard(id=9, pillar_id=1, target=4, unit="x", label="Gym")
        sa = engine.StandardAlignment(
            standard=standard, observed=1.0, target=4, score=25, label="1.0 / 4 x",
        )
        alerts = compute_alerts(_input(alignments=[_alignment(standards=[sa])]))
        assert alerts[0].id == "standard-viol-9"
        assert "25%" in alerts[0].message

    def test_zero_target_standard_is_quiet(self):
        standard = engine.Standard(id=9, pillar_id=1, target=0, unit="x")
        sa = engine.StandardAlignment(
            standard=standard, observed=0, target=0, score=0, label="0 / 0 x",
        )
        assert _ids(_input(alignments=[_alignment(standards=[sa])])) == []

    def test_regressing(self):
        a = _alignment(score=30, state=engine.AlignmentState.REGRESSING, trend=engine.Trend.DOWN)
        assert _ids(_input(alignments=[a])) == ["regressing-1"]

    def test_no_reflection_ever(self):
        assert _ids(_input(reflections=[])) == ["no-reflection-ever"]

    def test_reflection_lapse(self):
        old = [engine.Reflection(date=TODAY - timedelta(days=7))]
        alerts = compute_alerts(_input(reflections=old))
        assert [a.id for a in alerts] == ["no-reflection-7d"]
        assert "7 Days" in alerts[0].title

    def test_recent_reflection_is_quiet(self):
        recent = [engine.Reflection(date=TODAY - timedelta(days=6))]
        assert _ids(_input(reflections=recent)) == []

    def test_overall_regression(self):
        data = _input(
            alignments=[_alignment(1, score=60), _alignment(2, score=60)],
            previous_snapshots=[
                engine.PerformanceSnapshot(pillar_id=1, score=75),
                engine.PerformanceSnapshot(pillar_id=2, score=75),
            ],
        )
        assert _ids(data) == ["overall-regression"]

    def test_all_aligned(self):
        aligned = engine.AlignmentState.ALIGNED
        data = _input(alignments=[
            _alignment(1, score=80, state=aligned),
            _alignment(2, score=95, state=aligned),
        ])
        alerts = compute_alerts(data)
        assert [a.id for a in alerts] == ["all-aligned"]
        assert alerts[0].severity == Severity.OPPORTUNITY

    def test_single_aligned_pillar_is_quiet(self):
        a = _alignment(score=100, state=engine.AlignmentState.ALIGNED)
        assert _ids(_input(alignments=[a])) == []

    def test_rule_order(self):
        a = _alignment(score=20, state=engine.AlignmentState.REGRESSING, trend=engine.Trend.DOWN)
        data = _input(
            alignments=[a, replace(a, pillar_id=2)],
            reflections=[],
            previous_snapshots=[
                engine.PerformanceSnapshot(pillar_id=1, score=90),
                engine.PerformanceSnapshot(pillar_id=2, score=90),
            ],
        )
        assert _ids(data) == [
            "drift-1", "drift-2",
            "regressing-1", "regressing-2",
            "no-reflection-ever",
            "overall-regression",
        ]

    def test_deterministic(self):
        data = _input(alignments=[_alignment(score=10)], reflections=[])
        assert compute_alerts(data) == compute_alerts(data)


class TestGoalStale:
    def _goal(self, age_days, status="active", goal_id=3):
        return Goal(
            id=goal_id,
            pillar_id=1,
            title="Marathon",
            status=status,
            created_on=TODAY - timedelta(days=age_days),
        )

    def test_old_goal_without_milestones(self):
        alerts = compute_alerts(_input(goals=[self._goal(90)]))
        assert [a.id for a in alerts] == ["goal-stale-3"]
        assert alerts[0].severity == Severity.WARNING
        assert alerts[0].pillar_id == 1
        assert "90 days" in alerts[0].message

    def test_89_days_is_quiet(self):
        assert _ids(_input(goals=[self._goal(89)])) == []

    def test_open_milestones_do_not_count_as_progress(self):
        data = _input(
            goals=[self._goal(120)],
            milestones=[Milestone(goal_id=3, completed=False)],
        )
        assert _ids(data) == ["goal-stale-3"]

    def test_completed_milestone_is_progress(self):
        data = _input(
            goals=[self._goal(120)],
            milestones=[
                Milestone(goal_id=3, completed=False),
                Milestone(goal_id=3, completed=True),
            ],
        )
        assert _ids(data) == []

    def test_other_goals_milestones_ignored(self):
        data = _input(
            goals=[self._goal(120)],
            milestones=[Milestone(goal_id=99, completed=True)],
        )
        assert _ids(data) == ["goal-stale-3"]

    def test_inactive_goal_is_quiet(self):
        assert _ids(_input(goals=[self._goal(200, status="paused")])) == []


class TestWeekendDrift:
    # TODAY (2026-02-01) and 2026-01-25 are Sundays
    _SUNDAYS = [date(2026, 1, 25), date(2026, 2, 1)]
    _WEEKDAYS = [date(2026, 1, 27), date(2026, 1, 28)]

    def _pm(self, day, mood, type="daily-pm"):
        return engine.Reflection(date=day, type=type, mood=mood)

    def _reflections(self, sunday_mood, other_mood):
        return (
            [self._pm(d, sunday_mood) for d in self._SUNDAYS]
            + [self._pm(d, other_mood) for d in self._WEEKDAYS]
        )

    def test_sunday_mood_drop(self):
        alerts = compute_alerts(_input(reflections=self._reflections(4, 7)))
        assert [a.id for a in alerts] == ["weekend-drift"]
        assert alerts[0].severity == Severity.INSIGHT
        assert alerts[0].pillar_id is None
        assert "(4.0)" in alerts[0].message
        assert "(7.0)" in alerts[0].message

    def test_gap_of_exactly_two_is_quiet(self):
        assert _ids(_input(reflections=self._reflections(5, 7))) == []

    def test_needs_four_pm_reflections(self):
        reflections = self._reflections(1, 9)[:3]
        assert "weekend-drift" not in _ids(_input(reflections=reflections))

    def test_needs_two_sundays(self):
        reflections = (
            [self._pm(self._SUNDAYS[1], 1)]
            + [self._pm(d, 9) for d in self._WEEKDAYS + [date(2026, 1, 29)]]
        )
        assert _ids(_input(reflections=reflections)) == []

    def test_needs_two_other_days(self):
        reflections = (
            [self._pm(d, 1) for d in self._SUNDAYS + [date(2026, 1, 18)]]
            + [self._pm(self._WEEKDAYS[0], 9)]
        )
        assert _ids(_input(reflections=reflections)) == []

    def test_only_pm_reflections_count(self):
        reflections = (
            [self._pm(d, 1, type="daily-am") for d in self._SUNDAYS]
            + [self._pm(d, 9) for d in self._WEEKDAYS]
        )
        assert _ids(_input(reflections=reflections)) == []

    def test_reflections_without_mood_are_skipped(self):
        reflections = self._reflections(4, 7) + [self._pm(date(2026, 1, 18), None)]
        assert _ids(_input(reflections=reflections)) == ["weekend-drift"]

    def test_position_after_overall_regression(self):
        data = _input(
            alignments=[_alignment(1, score=50), _alignment(2, score=50)],
            previous_snapshots=[
                engine.PerformanceSnapshot(pillar_id=1, score=65),
                engine.PerformanceSnapshot(pillar_id=2, score=65),
            ],
            reflections=self._reflections(2, 8),
        )
        assert _ids(data) == ["overall-regression", "weekend-drift"]


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class TestSync:
    def test_sync_is_idempotent(self, db):
        alerts = compute_alerts(_input(reflections=[]))
        first = sync_alerts(db, alerts)
        second = sync_alerts(db, alerts)
        assert first.created == ["no-reflection-ever"]
        assert second.created == []
        assert second.skipped == ["no-reflection-ever"]

    def test_evaluate_reads_the_database(self, db):
        pillar = create_pillar(db, name="Health", color="#4ade80")
        standard = create_standard(db, pillar.id, label="Gym", target=4, unit="x/week")
        create_habit(db, title="Gym", target_days_per_week=4, pillar_id=pillar.id)
        create_reflection(db, type=ReflectionType.daily_pm, day=TODAY)

        result = evaluate_and_react(db, today=TODAY)
        assert result.created == [f"standard-viol-{standard.id}"]

    def test_evaluate_flags_stale_goal(self, db):
        goal = create_goal(db, title="Marathon")
        goal.created_at = datetime(2025, 10, 1, tzinfo=timezone.utc)
        db.commit()
        create_reflection(db, type=ReflectionType.daily_pm, day=TODAY)

        result = evaluate_and_react(db, today=TODAY)
        assert result.created == [f"goal-stale-{goal.id}"]

    def test_evaluate_skips_goal_with_completed_milestone(self, db):
        goal = create_goal(db, title="Marathon")
        goal.created_at = datetime(2025, 10, 1, tzinfo=timezone.utc)
        db.commit()
        toggle_milestone(db, add_milestone(db, goal.id, "First 10k").id)
        create_reflection(db, type=ReflectionType.daily_pm, day=TODAY)

        assert evaluate_and_react(db, today=TODAY).created == []

    def test_evaluate_reads_reflection_moods(self, db):
        for day, mood in [
            (date(2026, 1, 25), 3), (date(2026, 2, 1), 3),
            (date(2026, 1, 27), 8), (date(2026, 1, 28), 8),
        ]:
            create_reflection(db, type=ReflectionType.daily_pm, day=day, mood=mood)

        assert evaluate_and_react(db, today=TODAY).created == ["weekend-drift"]

    def test_deleting_pillar_removes_its_alerts(self, db):
        pillar = create_pillar(db, name="Health", color="#4ade80")
        alerts = [
            Alert(id=f"drift-{pillar.id}", severity=Severity.CHALLENGE,
                  pillar_id=pillar.id, title="t", message="m"),
            Alert(id="no-reflection-ever", severity=Severity.WARNING,
                  pillar_id=None, title="t", message="m"),
        ]
        sync_alerts(db, alerts)

        delete_pillar(db, pillar.id)
        assert [a.id for a in list_alerts(db)] == ["no-reflection-ever"]


class TestAdvisoryEndpoints:
    def test_evaluate_and_list(self, client):
        r = client.post("/advisory/evaluate")
        assert r.status_code == 200
        assert r.json() == {"created": ["no-reflection-ever"], "skipped": []}

        listed = client.get("/advisory/alerts").json()
        assert listed["total"] == 1
        alert = listed["items"][0]
        assert alert["id"] == "no-reflection-ever"
        assert alert["severity"] == "warning"
        assert alert["dismissed_at"] is None

    def test_reevaluate_does_not_duplicate(self, client):
        client.post("/advisory/evaluate")
        r = client.post("/advisory/evaluate")
        assert r.json() == {"created": [], "skipped": ["no-reflection-ever"]}
        assert client.get("/advisory/alerts").json()["total"] == 1

    def test_dismissed_alert_stays_dismissed(self, client):
        client.post("/advisory/evaluate")
        r = client.post("/advisory/alerts/no-reflection-ever/dismiss")
        assert r.status_code == 200
        assert r.json()["dismissed_at"] is not None

        client.post("/advisory/evaluate")
        assert client.get("/advisory/alerts", params={"active_only": True}).json()["total"] == 0
        assert client.get("/advisory/alerts").json()["total"] == 1

    def test_clear_dismissed_allows_recreation(self, client):
        client.post("/advisory/evaluate")
        client.post("/advisory/alerts/no-reflection-ever/dismiss")

        r = client.delete("/advisory/alerts/dismissed")
        assert r.json() == {"removed": 1}
        assert client.post("/advisory/evaluate").json()["created"] == ["no-reflection-ever"]

    def test_dismiss_missing_alert(self, client):
        r = client.post("/advisory/alerts/nope/dismiss")
        assert r.status_code == 404
        assert r.json()["code"] == "ALERT_NOT_FOUND"
