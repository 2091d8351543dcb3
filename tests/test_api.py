"""
HTTP surface tests against a container with fake backend and source.
"""
import pytest
from fastapi.testclient import TestClient

from conftest import FakeApi, wait_for

from app.api_client import ApiError
from app.main import app


@pytest.fixture
def client(container):
    return TestClient(app)


class TestTeams:

    def test_lists_all_teams(self, client):
        data = client.get("/api/teams").json()
        assert data["total"] == 24
        assert {"id": 31, "name": "Morocco"} in data["teams"]


class TestFavoriteTeam:

    def test_no_favorite_yet(self, client):
        assert client.get("/api/favorite-team").status_code == 404

    def test_unknown_team_rejected(self, client):
        response = client.put("/api/favorite-team", json={"team_id": 999999})
        assert response.status_code == 404

    def test_unregistered_device_conflict_keeps_local_choice(self, client):
        response = client.put("/api/favorite-team", json={"team_id": 1530})
        assert response.status_code == 409

        favorite = client.get("/api/favorite-team").json()
        assert favorite["team_id"] == 1530
        assert favorite["team_name"] == "Cameroon"

    def test_register_then_sync(self, client, fake_api):
        registered = client.post("/api/devices/token", json={"token": "ABCDEF"})
        assert registered.status_code == 200
        assert registered.json()["device_uuid"] == "device-uuid-123"

        response = client.put("/api/favorite-team", json={"team_id": 13})
        assert response.status_code == 200
        body = response.json()
        assert body["synced"] is True
        assert body["subscriptions_updated"] == 2
        assert fake_api.calls[-1] == ("update_favorite_team", "device-uuid-123", 13)

    def test_backend_down_is_bad_gateway(self, client, container):
        container.favorites.set_device_uuid("device-uuid-123")
        container.favorites._api = FakeApi(error=ApiError("down"))

        response = client.put("/api/favorite-team", json={"team_id": 13})
        assert response.status_code == 502


class TestDevices:

    def test_rejected_registration_is_conflict(self, client, container):
        container.favorites._api = FakeApi(register_response={"success": False, "message": "bad token"})

        response = client.post("/api/devices/token", json={"token": "00ff"})
        assert response.status_code == 409
        assert "bad token" in response.json()["detail"]


class TestSettings:

    def test_onboarding_round_trip(self, client):
        assert client.get("/api/settings").json()["has_completed_onboarding"] is False

        body = client.post("/api/settings/onboarding", json={"completed": True}).json()
        assert body["has_completed_onboarding"] is True
        assert body["app_version"] == "2.0"


class TestLiveAndBackground:

    def test_live_status(self, client):
        body = client.get("/api/live/status").json()
        assert body == {"has_live_matches": False, "is_streaming": False, "last_error": None}

    def test_background_unregistered_before_launch(self, client):
        body = client.get("/api/background/status").json()
        assert body["registered"] is False
        assert client.post("/api/background/run").status_code == 409

    def test_launch_registers_and_schedules(self, container):
        with TestClient(app) as client:
            body = client.get("/api/background/status").json()
            identifier = body["identifier"]

            assert body["registered"] is True
            assert body["host"]["launch_finished"] is True
            assert identifier in body["host"]["pending"]

            assert client.post("/api/background/run").status_code == 202
            assert wait_for(
                lambda: client.get("/api/background/status").json()["host"]["stats"]["completed_success"] == 1
            )
            # The handler rescheduled itself
            assert identifier in client.get("/api/background/status").json()["host"]["pending"]

            assert client.get("/api/settings").json()["last_launch_version"] == "2.0"


class TestFavoriteAfterRegistration:

    def test_saved_favorite_syncs_when_device_registers(self, client, fake_api):
        assert client.put("/api/favorite-team", json={"team_id": 1530}).status_code == 409
        assert client.get("/api/favorite-team").json()["last_synced"] is None

        assert client.post("/api/devices/token", json={"token": "ABCDEF"}).status_code == 200

        assert fake_api.calls[-1] == ("update_favorite_team", "device-uuid-123", 1530)
        favorite = client.get("/api/favorite-team").json()
        assert favorite["team_id"] == 1530
        assert favorite["last_synced"] is not None
