"""
Integration tests for /goals and /milestones.
"""
import pytest


@pytest.fixture()
def pillar(client) -> dict:
    return client.post("/pillars", json={"name": "Health", "color": "#4ade80"}).json()


def _goal(client, title="Run a marathon", **extra) -> dict:
    r = client.post("/goals", json={"title": title, **extra})
    assert r.status_code == 201
    return r.json()


class TestGoals:
    def test_create_goal(self, client, pillar):
        body = _goal(client, pillar_id=pillar["id"], target_date="2026-10-01")
        assert body["id"] > 0
        assert body["pillar_id"] == pillar["id"]
        assert body["status"] == "active"
        assert body["target_date"] == "2026-10-01"
        assert body["created_at"]

    def test_goal_for_missing_pillar(self, client):
        r = client.post("/goals", json={"title": "x", "pillar_id": 9999})
        assert r.status_code == 404
        assert r.json()["code"] == "PILLAR_NOT_FOUND"

    def test_unknown_status_rejected(self, client):
        r = client.post("/goals", json={"title": "x", "status": "someday"})
        assert r.status_code == 422

    def test_list_filters(self, client, pillar):
        _goal(client, "A", pillar_id=pillar["id"])
        _goal(client, "B", status="paused")
        _goal(client, "C", pillar_id=pillar["id"], status="paused")

        titles = lambda params: [g["title"] for g in client.get("/goals", params=params).json()]
        assert titles({}) == ["A", "B", "C"]
        assert titles({"pillar_id": pillar["id"]}) == ["A", "C"]
        assert titles({"status": "paused"}) == ["B", "C"]
        assert titles({"pillar_id": pillar["id"], "status": "active"}) == ["A"]

    def test_get_missing_goal(self, client):
        r = client.get("/goals/9999")
        assert r.status_code == 404
        assert r.json()["code"] == "GOAL_NOT_FOUND"

    def test_patch_goal(self, client):
        g = _goal(client)
        r = client.patch(f"/goals/{g['id']}", json={"status": "completed"})
        assert r.status_code == 200
        assert r.json()["status"] == "completed"
        assert r.json()["title"] == "Run a marathon"

    def test_delete_goal_removes_milestones(self, client):
        g = _goal(client)
        m = client.post(f"/goals/{g['id']}/milestones", json={"title": "10k"}).json()

        assert client.delete(f"/goals/{g['id']}").status_code == 204
        assert client.get(f"/goals/{g['id']}").status_code == 404
        assert client.post(f"/milestones/{m['id']}/toggle").status_code == 404

    def test_deleting_pillar_unassigns_goals(self, client, pillar):
        g = _goal(client, pillar_id=pillar["id"])
        client.delete(f"/pillars/{pillar['id']}")
        assert client.get(f"/goals/{g['id']}").json()["pillar_id"] is None


class TestMilestones:
    def test_add_and_list(self, client):
        g = _goal(client)
        r = client.post(f"/goals/{g['id']}/milestones", json={"title": "10k"})
        assert r.status_code == 201
        assert r.json()["completed"] is False
        assert r.json()["completed_at"] is None

        listed = client.get(f"/goals/{g['id']}/milestones").json()
        assert [m["title"] for m in listed] == ["10k"]

    def test_milestone_for_missing_goal(self, client):
        r = client.post("/goals/9999/milestones", json={"title": "x"})
        assert r.status_code == 404

    def test_toggle_sets_and_clears_completed_at(self, client):
        g = _goal(client)
        m = client.post(f"/goals/{g['id']}/milestones", json={"title": "10k"}).json()

        done = client.post(f"/milestones/{m['id']}/toggle").json()
        assert done["completed"] is True
        assert done["completed_at"] is not None

        undone = client.post(f"/milestones/{m['id']}/toggle").json()
        assert undone["completed"] is False
        assert undone["completed_at"] is None

    def test_delete_milestone(self, client):
        g = _goal(client)
        m = client.post(f"/goals/{g['id']}/milestones", json={"title": "10k"}).json()
        assert client.delete(f"/milestones/{m['id']}").status_code == 204
        assert client.get(f"/goals/{g['id']}/milestones").json() == []

    def test_toggle_missing_milestone(self, client):
        r = client.post("/milestones/9999/toggle")
        assert r.status_code == 404
        assert r.json()["code"] == "MILESTONE_NOT_FOUND"
