"""
Placement API Tests

Uses TestClient to test FastAPI endpoints directly.
"""

import pytest
from fastapi.testclient import TestClient

from api.server import app

NEW_REQUIRER = {"name": "new event", "req": ["eq"], "consumes": [], "duration": 1.0}
NEW_CONSUMER = {"name": "new event", "req": [], "consumes": ["eq"], "duration": 1.0}


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestPeriods:
    def test_periods_for_balance(self, client, layout_dict):
        response = client.post("/api/placement/periods", json={"layout": layout_dict, "balance": "eq"})
        assert response.status_code == 200
        assert response.json() == {
            "balance": "eq",
            "periods": [{"start": 1.0, "end": 2.5, "eventName": "cast windlance"}],
        }

    def test_periods_empty(self, client, layout_dict):
        response = client.post("/api/placement/periods", json={"layout": layout_dict, "balance": "bal"})
        assert response.json()["periods"] == []


class TestCheck:
    def test_blocked_inside_consumption(self, client, layout_dict):
        body = {"layout": layout_dict, "event": NEW_REQUIRER, "time": 1.5, "balance": "eq"}
        response = client.post("/api/placement/check", json=body)
        assert response.status_code == 200
        assert response.json() == {"valid": False, "balances": ["eq"]}

    def test_allowed_at_consumption_end(self, client, layout_dict):
        body = {"layout": layout_dict, "event": NEW_REQUIRER, "time": 2.5, "balance": "eq"}
        assert client.post("/api/placement/check", json=body).json()["valid"] is True

    def test_joint_check_without_balance(self, client, layout_dict):
        event = {"name": "combo", "req": ["eq", "pill"]}
        body = {"layout": layout_dict, "event": event, "time": 2.2}
        data = client.post("/api/placement/check", json=body).json()
        assert data == {"valid": False, "balances": ["eq", "pill"]}

    def test_negative_duration_rejected(self, client, layout_dict):
        event = dict(NEW_CONSUMER, duration=-1)
        body = {"layout": layout_dict, "event": event, "time": 0}
        assert client.post("/api/placement/check", json=body).status_code == 422


class TestFind:
    def test_find_after_consumption(self, client, layout_dict):
        layout_dict["eventValues"]["cast windlance"] = 0.5
        body = {"layout": layout_dict, "event": NEW_CONSUMER, "balance": "eq", "minTime": 1.0}
        response = client.post("/api/placement/find", json=body)
        assert response.status_code == 200
        assert response.json() == {"time": 2.0}

    def test_find_null_when_too_long(self, client, layout_dict):
        event = dict(NEW_CONSUMER, duration=6.0)
        body = {"layout": layout_dict, "event": event, "balance": "eq"}
        assert client.post("/api/placement/find", json=body).json() == {"time": None}

    def test_find_joint(self, client, layout_dict):
        body = {"layout": layout_dict, "event": NEW_CONSUMER}
        assert client.post("/api/placement/find", json=body).json() == {"time": 0.0}

    def test_find_inverted_range(self, client, layout_dict):
        body = {"layout": layout_dict, "event": NEW_CONSUMER, "minTime": 4, "maxTime": 2}
        assert client.post("/api/placement/find", json=body).status_code == 400


class TestResolve:
    def test_resolve_settles_behind(self, client, layout_dict):
        layout_dict["events"].append({"name": "test event", "req": ["eq"], "duration": 1.0})
        layout_dict["eventValues"]["cast windlance"] = 0.5
        body = {"layout": layout_dict, "eventName": "test event", "time": 1.0, "balance": "eq"}
        response = client.post("/api/placement/resolve", json=body)
        assert response.status_code == 200
        assert response.json() == {
            "eventName": "test event",
            "requested": 1.0,
            "time": 0.49,
            "moved": True,
        }

    def test_resolve_valid_time_unchanged(self, client, layout_dict):
        body = {"layout": layout_dict, "eventName": "cast windlance", "time": 3.0}
        data = client.post("/api/placement/resolve", json=body).json()
        assert data["time"] == 3.0
        assert data["moved"] is False

    def test_resolve_unknown_event(self, client, layout_dict):
        body = {"layout": layout_dict, "eventName": "nope", "time": 1.0}
        assert client.post("/api/placement/resolve", json=body).status_code == 404


class TestValidate:
    def test_clean_layout(self, client, layout_dict):
        response = client.post("/api/placement/validate", json={"layout": layout_dict})
        assert response.json() == {"valid": True, "conflicts": []}

    def test_conflicting_layout(self, client, layout_dict):
        layout_dict["events"].append({"name": "other", "req": ["eq"]})
        layout_dict["eventValues"]["other"] = 1.5
        data = client.post("/api/placement/validate", json={"layout": layout_dict}).json()
        assert data["valid"] is False
        assert "other conflicts on eq at time 1.5" in data["conflicts"]

    def test_malformed_layout(self, client):
        body = {"layout": {"events": [{"req": ["eq"]}]}}
        assert client.post("/api/placement/validate", json=body).status_code == 422
