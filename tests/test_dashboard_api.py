"""
Tests for the HTTP API.

Tests:
- response envelope
- error type to status code mapping
- completion time, group and sequence endpoints
"""

import pytest
from fastapi.testclient import TestClient

from config import SequencerConfig
from dashboard.app import create_app
from database.manager import InMemoryStore
from services import ServiceManager, set_service_manager

HABITS = [
    {"id": "habit-1", "name": "Review tomorrow's calendar", "type": "boolean"},
    {"id": "habit-2", "name": "Close laptop", "type": "boolean"},
    {"id": "habit-3", "name": "Put phone on charger", "type": "boolean"},
]


@pytest.fixture
def services():
    config = SequencerConfig(ensure_directories=False)
    manager = ServiceManager().initialize_services(config, store=InMemoryStore())
    yield manager
    set_service_manager(None)


@pytest.fixture
def client(services):
    with TestClient(create_app(service_manager=services)) as test_client:
        yield test_client


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["collections"] == {"completion_times": 0, "habit_groups": 0}


class TestCompletionTimes:

    def test_track_and_read(self, client):
        response = client.post("/api/completion-times/", json={"habit_id": "habit-1", "time_to_complete": 45000})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["quick_win_score"] == pytest.approx(0.9)

        record = client.get("/api/completion-times/habit-1").json()["data"]
        assert record["completion_count"] == 1

    def test_unknown_habit_has_null_data(self, client):
        response = client.get("/api/completion-times/missing")

        assert response.status_code == 200
        assert response.json()["data"] is None

    def test_negative_time(self, client):
        response = client.post("/api/completion-times/", json={"habit_id": "habit-1", "time_to_complete": -5})

        assert response.status_code == 422
        assert response.json()["detail"]["error_type"] == "validation_error"

    def test_update_record(self, client):
        response = client.put("/api/completion-times/habit-1",
                              json={"average_completion_time": 60000, "completion_count": 4})

        assert response.status_code == 200
        assert response.json()["data"]["quick_win_score"] == pytest.approx(0.8)
        assert len(client.get("/api/completion-times/").json()["data"]) == 1


class TestGroups:

    def create(self, client, name, habit_ids, group_type="manual"):
        return client.post("/api/groups/", json={"name": name, "habit_ids": habit_ids, "group_type": group_type})

    def test_create_and_list(self, client):
        response = self.create(client, "Evening", ["habit-1"], "temporal")

        assert response.status_code == 201
        group = response.json()["data"]
        assert group["group_type"] == "temporal"

        groups = client.get("/api/groups/").json()["data"]
        assert [g["id"] for g in groups] == [group["id"]]

    def test_conflict(self, client):
        self.create(client, "G", ["habit-1"], "contextual")
        response = self.create(client, "G2", ["habit-1"], "temporal")

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["error_type"] == "conflict_error"
        assert '"G"' in detail["error"]

    def test_empty_group_rejected(self, client):
        response = self.create(client, "G", [])

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "Group must contain at least one habit"

    def test_not_found(self, client):
        assert client.get("/api/groups/missing").status_code == 404
        assert client.delete("/api/groups/missing").status_code == 404

    def test_update_and_delete(self, client):
        group_id = self.create(client, "G", ["habit-1"]).json()["data"]["id"]

        response = client.put(f"/api/groups/{group_id}",
                              json={"name": "Renamed", "habit_ids": ["habit-1", "habit-2"], "group_type": "manual"})
        assert response.status_code == 200
        assert response.json()["data"]["habit_ids"] == ["habit-1", "habit-2"]

        assert client.delete(f"/api/groups/{group_id}").status_code == 200
        assert client.get("/api/groups/").json()["data"] == []

    def test_membership(self, client):
        group_id = self.create(client, "G", ["habit-1"]).json()["data"]["id"]

        added = client.post(f"/api/groups/{group_id}/habits", json={"habit_id": "habit-2"})
        assert added.json()["data"]["habit_ids"] == ["habit-1", "habit-2"]

        removed = client.delete(f"/api/groups/{group_id}/habits/habit-1")
        assert removed.json()["data"]["habit_ids"] == ["habit-2"]

        missing = client.delete(f"/api/groups/{group_id}/habits/habit-9")
        assert missing.status_code == 404

    def test_suggestions(self, client):
        self.create(client, "Screen time", ["habit-2"], "contextual")
        response = client.post("/api/groups/suggestions",
                               json={"id": "habit-3", "name": "Put phone on charger", "type": "boolean"})

        suggestions = response.json()["data"]
        assert len(suggestions) == 1
        assert suggestions[0]["group"]["name"] == "Screen time"
        assert suggestions[0]["confidence"] > 0.3

    def test_auto_group(self, client):
        response = client.post("/api/groups/auto", json={"habits": HABITS, "persist": True})

        groups = response.json()["data"]["groups"]
        assert [group["name"] for group in groups] == ["Digital Shutdown"]
        assert len(client.get("/api/groups/").json()["data"]) == 1

    def test_duplicate_habit_ids_rejected(self, client):
        response = client.post("/api/groups/auto", json={"habits": HABITS + HABITS[:1]})
        assert response.status_code == 422


class TestSequence:

    @pytest.fixture(autouse=True)
    def history(self, services):
        services.time_tracking.record_completion_time("habit-1", 200_000)
        services.time_tracking.record_completion_time("habit-3", 10_000)

    def test_generate(self, client):
        response = client.post("/api/sequence/", json={"habits": HABITS})

        assert response.status_code == 200
        sequence = response.json()["data"]
        assert [item["habit_id"] for item in sequence] == ["habit-3", "habit-2", "habit-1"]
        assert [item["position"] for item in sequence] == [0, 1, 2]

    def test_generate_with_preferences(self, client):
        response = client.post("/api/sequence/", json={
            "habits": HABITS,
            "preferences": {"manual_order": ["habit-1"], "override_algorithm": True},
        })

        sequence = response.json()["data"]
        assert sequence[0]["habit_id"] == "habit-1"
        assert sequence[0]["reasoning"].startswith("Manual override - ")

    def test_momentum(self, client):
        sequence = client.post("/api/sequence/momentum", json={"habits": HABITS}).json()["data"]
        assert sequence[0]["reasoning"].startswith("momentum_builder - ")

    def test_validate(self, client):
        sequence = client.post("/api/sequence/", json={"habits": HABITS}).json()["data"]

        ok = client.post("/api/sequence/validate", json={"habits": HABITS, "sequence": sequence})
        assert ok.status_code == 200
        assert ok.json()["data"] is True

        broken = client.post("/api/sequence/validate", json={"habits": HABITS, "sequence": sequence[:2]})
        assert broken.status_code == 422
        assert broken.json()["detail"] == {
            "error": "Missing habits in sequence: habit-1",
            "error_type": "invalid_sequence_error",
        }

    def test_recommendations(self, client):
        sequence = [
            {"habit_id": "habit-1", "position": 0, "momentum_score": 0.2},
            {"habit_id": "habit-3", "position": 1, "momentum_score": 0.9},
        ]
        recommendations = client.post("/api/sequence/recommendations", json={"sequence": sequence}).json()["data"]

        assert recommendations[0]["type"] == "reorder"
        assert recommendations[0]["action"] == {"move_habit": "habit-3", "to_position": 0}
