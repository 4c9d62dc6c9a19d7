"""
Tests for the match REST API and WebSocket.

Sessions live in the process-wide session manager, so each test creates
its own and deletes what it made.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from hoops.api.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def session_id(client):
    """A fresh seeded session, deleted afterwards."""
    response = client.post("/api/v1/match/sessions", json={"seed": 5, "quarter_minutes": 2})
    assert response.status_code == 201
    sid = response.json()["session_id"]
    yield sid
    client.delete(f"/api/v1/match/sessions/{sid}")


class TestAppBasics:
    """Root and health endpoints."""

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Hoops API"

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert "active_matches" in data


class TestSessions:
    """Create, read, list, delete."""

    def test_create_defaults(self, client, session_id):
        data = client.get(f"/api/v1/match/sessions/{session_id}").json()
        assert data["home"]["name"] == "Lakers"
        assert data["away"]["name"] == "Celtics"
        assert data["difficulty"] == "pro"
        assert data["quarter_minutes"] == 2
        assert not data["is_running"]
        assert data["state"]["game_clock"] == 120
        assert data["state"]["score"] == {"home": 0, "away": 0}

    def test_create_with_teams(self, client):
        response = client.post("/api/v1/match/sessions", json={
            "home": {"name": "Bulls", "color1": "#CE1141", "color2": "#000000", "rating": 88},
            "away": {"name": "Jazz"},
            "difficulty": "legendary",
            "autopilot": True,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["home"]["name"] == "Bulls"
        assert data["home"]["rating"] == 88
        assert data["away"]["name"] == "Jazz"
        assert data["difficulty"] == "legendary"
        assert data["autopilot"]
        client.delete(f"/api/v1/match/sessions/{data['session_id']}")

    def test_create_without_body(self, client):
        response = client.post("/api/v1/match/sessions")
        assert response.status_code == 201
        client.delete(f"/api/v1/match/sessions/{response.json()['session_id']}")

    @pytest.mark.parametrize("body", [
        {"home": {"name": "Bulls", "rating": 150}},
        {"home": {"name": "Bulls", "color1": "red"}},
        {"difficulty": "impossible"},
        {"quarter_minutes": 0},
        {"tick_rate": 500},
    ])
    def test_create_rejects_bad_input(self, client, body):
        assert client.post("/api/v1/match/sessions", json=body).status_code == 422

    def test_list_contains_session(self, client, session_id):
        assert session_id in client.get("/api/v1/match/sessions").json()

    def test_delete(self, client):
        sid = client.post("/api/v1/match/sessions", json={}).json()["session_id"]
        assert client.delete(f"/api/v1/match/sessions/{sid}").status_code == 204
        assert client.get(f"/api/v1/match/sessions/{sid}").status_code == 404
        assert client.delete(f"/api/v1/match/sessions/{sid}").status_code == 404

    def test_malformed_id(self, client):
        assert client.get("/api/v1/match/sessions/not-a-uuid").status_code == 400

    def test_unknown_id(self, client):
        assert client.get(f"/api/v1/match/sessions/{uuid.uuid4()}").status_code == 404


class TestMatchControl:
    """Headless simulation, commands, reset and the log."""

    def test_simulate(self, client, session_id):
        response = client.post(f"/api/v1/match/sessions/{session_id}/simulate", json={"seconds": 10})
        assert response.status_code == 200
        state = response.json()["state"]
        assert state["game_clock"] == 110
        assert state["tick"] == 600

    def test_simulate_rejects_bad_seconds(self, client, session_id):
        response = client.post(f"/api/v1/match/sessions/{session_id}/simulate", json={"seconds": 0})
        assert response.status_code == 422

    def test_command_before_start_is_not_accepted(self, client, session_id):
        response = client.post(f"/api/v1/match/sessions/{session_id}/command", json={"command": "pump_fake"})
        assert response.status_code == 200
        assert response.json() == {"command": "pump_fake", "accepted": False}

    def test_move_command_after_start(self, client, session_id):
        client.post(f"/api/v1/match/sessions/{session_id}/simulate", json={"seconds": 1})
        response = client.post(
            f"/api/v1/match/sessions/{session_id}/command",
            json={"command": "move", "dx": 1.0, "dy": 0.0, "sprint": True},
        )
        assert response.json()["accepted"]

    @pytest.mark.parametrize("body", [
        {"command": "teleport"},
        {"command": "move", "dx": 3.0},
        {"command": "shoot_release", "power": 1.5},
        {"command": "shoot_release", "aim": {"y": 300.0}},
        {"command": "shoot_release", "aim": {"x": "rim", "y": 300.0}},
    ])
    def test_command_validation(self, client, session_id, body):
        response = client.post(f"/api/v1/match/sessions/{session_id}/command", json=body)
        assert response.status_code == 422

    def test_reset(self, client, session_id):
        client.post(f"/api/v1/match/sessions/{session_id}/simulate", json={"seconds": 30})
        data = client.post(f"/api/v1/match/sessions/{session_id}/reset").json()
        assert data["state"]["tick"] == 0
        assert data["state"]["score"] == {"home": 0, "away": 0}
        assert not data["state"]["active"]

    def test_log(self, client, session_id):
        client.post(f"/api/v1/match/sessions/{session_id}/simulate", json={"seconds": 60})
        data = client.get(f"/api/v1/match/sessions/{session_id}/log").json()
        assert data["session_id"] == session_id
        assert data["entries"][0]["event_type"] == "MATCH_START"
        state = client.get(f"/api/v1/match/sessions/{session_id}").json()["state"]
        home_points = sum(p["points"] for p in data["scoring_plays"] if p["side"] == "home")
        assert home_points == state["score"]["home"]

    def test_difficulties(self, client):
        data = client.get("/api/v1/match/difficulties").json()
        assert [d["key"] for d in data] == ["rookie", "pro", "allstar", "legendary"]
        assert data[0]["decision_latency_ms"] == 1000


class TestMatchWebSocket:
    """Message handling on the live channel."""

    def test_state_sync_on_connect(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            message = ws.receive_json()
            assert message["type"] == "state_sync"
            assert message["payload"]["quarter"] == 1

    def test_sync_on_request(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "sync"})
            assert ws.receive_json()["type"] == "state_sync"

    def test_step(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "step", "ticks": 30})
            message = ws.receive_json()
            assert message["type"] == "tick"
            assert message["payload"]["state"]["tick"] == 30
            types = [e["type"] for e in message["payload"]["events"]]
            assert "match_start" in types

    def test_invalid_step(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "step", "ticks": 0})
            assert ws.receive_json()["code"] == "INVALID_STEP"

    def test_command(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "step", "ticks": 1})
            ws.receive_json()
            ws.send_json({"type": "command", "payload": {"command": "move", "dx": -1.0}})
            message = ws.receive_json()
            assert message["type"] == "command_result"
            assert message["payload"] == {"command": "move", "accepted": True}

    def test_invalid_command(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "command", "payload": {"command": "fly"}})
            assert ws.receive_json()["code"] == "INVALID_COMMAND"

    def test_command_with_partial_aim(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "command", "payload": {"command": "shoot_release", "aim": {"y": 300.0}}})
            assert ws.receive_json()["code"] == "INVALID_COMMAND"
            ws.send_json({"type": "sync"})
            assert ws.receive_json()["type"] == "state_sync"

    def test_unknown_message(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "dance"})
            assert ws.receive_json()["code"] == "UNKNOWN_MESSAGE"

    def test_invalid_json(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_text("{not json")
            assert ws.receive_json()["code"] == "INVALID_JSON"

    def test_reset_sends_sync(self, client, session_id):
        with client.websocket_connect(f"/match/ws/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "step", "ticks": 10})
            ws.receive_json()
            ws.send_json({"type": "reset"})
            message = ws.receive_json()
            assert message["type"] == "state_sync"
            assert message["payload"]["tick"] == 0

    def test_invalid_session_id(self, client):
        with client.websocket_connect("/match/ws/not-a-uuid") as ws:
            assert ws.receive_json()["code"] == "INVALID_SESSION_ID"

    def test_unknown_session(self, client):
        with client.websocket_connect(f"/match/ws/{uuid.uuid4()}") as ws:
            assert ws.receive_json()["code"] == "SESSION_NOT_FOUND"
