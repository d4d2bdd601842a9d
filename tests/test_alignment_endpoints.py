"""
Integration tests for /alignment and /alignment/snapshots.

All windows are explicit and Monday-aligned:
  previous  2025-12-08 .. 2026-01-04
  current   2026-01-05 .. 2026-02-01
"""
from datetime import date, datetime, timedelta, timezone

import pytest

CURRENT = {"from": "2026-01-05", "to": "2026-02-01"}
PREVIOUS = {"from": "2025-12-08", "to": "2026-01-04"}


@pytest.fixture()
def health(client) -> dict:
    """Health pillar with a 4/week standard and a 4/week habit."""
    pillar = client.post("/pillars", json={"name": "Health", "color": "#4ade80"}).json()
    standard = client.post(f"/pillars/{pillar['id']}/standards", json={
        "label": "4 workouts", "target": 4, "unit": "workouts/week",
    }).json()
    habit = client.post("/habits", json={
        "title": "Gym", "pillar_id": pillar["id"], "target_days_per_week": 4,
    }).json()
    return {"pillar": pillar, "standard": standard, "habit": habit}


def _log_days(client, habit_id: int, start: date, count: int) -> None:
    for i in range(count):
        day = start + timedelta(days=i)
        r = client.put(f"/habits/{habit_id}/logs/{day}", json={"completed": True})
        assert r.status_code == 200


class TestAlignmentReport:
    def test_no_pillars(self, client):
        r = client.get("/alignment", params=CURRENT)
        assert r.status_code == 200
        body = r.json()
        assert body["from"] == "2026-01-05"
        assert body["to"] == "2026-02-01"
        assert body["overall_score"] == 0
        assert body["pillars"] == []

    def test_default_window_is_trailing_28_days(self, client):
        today = datetime.now(tz=timezone.utc).date()
        body = client.get("/alignment").json()
        assert body["to"] == str(today)
        assert body["from"] == str(today - timedelta(days=27))

    def test_only_to_given(self, client):
        body = client.get("/alignment", params={"to": "2026-02-01"}).json()
        assert body["from"] == "2026-01-05"

    def test_full_alignment(self, client, health):
        _log_days(client, health["habit"]["id"], date(2026, 1, 5), 16)
        body = client.get("/alignment", params=CURRENT).json()

        pillar = body["pillars"][0]
        assert pillar["pillar_id"] == health["pillar"]["id"]
        assert pillar["pillar_name"] == "Health"
        assert pillar["pillar_color"] == "#4ade80"
        assert pillar["score"] == 100
        assert pillar["alignment_state"] == "aligned"
        assert pillar["trend"] == "flat"
        assert pillar["habit_count"] == 1

        standard = pillar["standards"][0]
        assert standard["standard_id"] == health["standard"]["id"]
        assert standard["standard_label"] == "4 workouts"
        assert standard["score"] == 100
        assert standard["observed"] == 4.0
        assert standard["label"] == "4.0 / 4 workouts/week"
        assert body["overall_score"] == 100

    def test_empty_pillar_is_avoiding(self, client):
        client.post("/pillars", json={"name": "Family"})
        pillar = client.get("/alignment", params=CURRENT).json()["pillars"][0]
        assert pillar["score"] == 0
        assert pillar["trend"] == "flat"
        assert pillar["alignment_state"] == "avoiding"
        assert pillar["standards"] == []

    def test_archived_habit_no_longer_counts(self, client, health):
        _log_days(client, health["habit"]["id"], date(2026, 1, 5), 16)
        client.post(f"/habits/{health['habit']['id']}/archive")
        pillar = client.get("/alignment", params=CURRENT).json()["pillars"][0]
        assert pillar["score"] == 0
        assert pillar["habit_count"] == 0

    def test_completed_today(self, client, health):
        today = datetime.now(tz=timezone.utc).date()
        client.put(f"/habits/{health['habit']['id']}/logs/{today}", json={})
        pillar = client.get("/alignment", params=CURRENT).json()["pillars"][0]
        assert pillar["completed_habit_count"] == 1

    def test_inverted_range_rejected(self, client):
        r = client.get("/alignment", params={"from": "2026-02-01", "to": "2026-01-05"})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "INVALID_DATE_RANGE"
        assert body["details"] == {"from": "2026-02-01", "to": "2026-01-05"}

    def test_malformed_date_rejected(self, client):
        r = client.get("/alignment", params={"from": "yesterday"})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestSnapshots:
    def test_create_snapshots(self, client, health):
        r = client.post("/alignment/snapshots", params=PREVIOUS)
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 1
        snap = body["items"][0]
        assert snap["pillar_id"] == health["pillar"]["id"]
        assert snap["period_start"] == "2025-12-08"
        assert snap["period_end"] == "2026-01-04"
        assert snap["score"] == 0
        assert snap["alignment_state"] == "avoiding"

    def test_snapshot_upserts_per_period(self, client, health):
        client.post("/alignment/snapshots", params=PREVIOUS)
        _log_days(client, health["habit"]["id"], date(2025, 12, 8), 8)
        client.post("/alignment/snapshots", params=PREVIOUS)

        items = client.get("/alignment/snapshots").json()["items"]
        assert len(items) == 1
        assert items[0]["score"] == 50

    def test_trend_uses_previous_snapshot(self, client, health):
        client.post("/alignment/snapshots", params=PREVIOUS)     # baseline 0
        _log_days(client, health["habit"]["id"], date(2026, 1, 5), 11)

        pillar = client.get("/alignment", params=CURRENT).json()["pillars"][0]
        assert pillar["score"] == 69
        assert pillar["trend"] == "up"
        assert pillar["alignment_state"] == "improving"

    def test_snapshot_inside_window_is_not_a_baseline(self, client, health):
        client.post("/alignment/snapshots", params=CURRENT)
        _log_days(client, health["habit"]["id"], date(2026, 1, 5), 16)
        pillar = client.get("/alignment", params=CURRENT).json()["pillars"][0]
        assert pillar["trend"] == "flat"

    def test_list_filtered_by_pillar(self, client, health):
        other = client.post("/pillars", json={"name": "Work"}).json()
        client.post("/alignment/snapshots", params=PREVIOUS)
        client.post("/alignment/snapshots", params=CURRENT)

        all_items = client.get("/alignment/snapshots").json()
        assert all_items["total"] == 4
        assert all_items["items"][0]["period_end"] == "2026-02-01"

        mine = client.get("/alignment/snapshots", params={"pillar_id": other["id"]}).json()
        assert mine["total"] == 2
        assert {s["pillar_id"] for s in mine["items"]} == {other["id"]}

    def test_list_for_missing_pillar(self, client):
        r = client.get("/alignment/snapshots", params={"pillar_id": 9999})
        assert r.status_code == 404

    def test_deleting_pillar_removes_snapshots(self, client, health):
        client.post("/alignment/snapshots", params=PREVIOUS)
        client.delete(f"/pillars/{health['pillar']['id']}")
        assert client.get("/alignment/snapshots").json()["total"] == 0


class TestLoadInputs:
    def test_reflections_are_not_read(self, db, health):
        from app.models.reflection import ReflectionType
        from app.services.alignment_engine import DateRange
        from app.services.alignment_service import load_inputs
        from app.services.reflections import create_reflection

        create_reflection(db, ReflectionType.daily_pm, date(2026, 1, 20), mood=6)
        inputs = load_inputs(db, DateRange(date(2026, 1, 5), date(2026, 2, 1)), date(2026, 2, 1))

        assert inputs.reflections == ()
        assert [p.id for p in inputs.pillars] == [health["pillar"]["id"]]
