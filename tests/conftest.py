"""
Shared fixtures and fakes for the test suite.
"""
import threading
import time
from typing import Callable, List, Optional

import pytest

from app.api_client import ApiError
from app.container import AppContainer, set_container
from app.db import open_memory_store
from app.live_match.models import LiveMatchUpdate
from config.settings import Settings


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    """Poll until predicate() is true or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class FakeApi:
    """Stands in for app.api_client in favorite/device flows."""

    def __init__(
        self,
        register_response: Optional[dict] = None,
        favorite_response: Optional[dict] = None,
        error: Optional[Exception] = None,
    ):
        self.register_response = register_response or {
            "success": True, "device_uuid": "device-uuid-123", "message": "",
        }
        self.favorite_response = favorite_response or {
            "success": True, "subscriptions_updated": 2, "message": "ok",
        }
        self.error = error
        self.calls: List[tuple] = []

    def register_device(self, **kwargs):
        self.calls.append(("register_device", kwargs))
        if self.error:
            raise self.error
        return self.register_response

    def update_favorite_team(self, device_uuid, favorite_team_id):
        self.calls.append(("update_favorite_team", device_uuid, favorite_team_id))
        if self.error:
            raise self.error
        return self.favorite_response


class FakeSource:
    """
    In-memory live match source.

    Each connect pops the next queued error (if any) and raises it;
    otherwise delivers ``updates`` and then either returns or blocks
    until stopped.
    """

    def __init__(
        self,
        live_fixture_ids: Optional[List[int]] = None,
        updates: Optional[List[LiveMatchUpdate]] = None,
        errors: Optional[List[Exception]] = None,
        block: bool = True,
    ):
        self.live_fixture_ids = live_fixture_ids or []
        self.updates = updates or []
        self.errors = list(errors or [])
        self.block = block
        self.connects = 0
        self.connected = threading.Event()

    def get_live_fixture_ids(self) -> List[int]:
        return list(self.live_fixture_ids)

    def stream_updates(self, on_update, stop_event: threading.Event) -> None:
        self.connects += 1
        if self.errors:
            raise self.errors.pop(0)
        self.connected.set()
        for update in self.updates:
            on_update(update)
        if self.block:
            stop_event.wait(5.0)


def make_update(fixture_id: int = 1001, event_type: str = "goal") -> LiveMatchUpdate:
    return LiveMatchUpdate.from_dict({
        "fixture_id": fixture_id,
        "event_type": event_type,
        "fixture": {
            "status_short": "2H",
            "elapsed": 67,
            "home_team": "Morocco",
            "away_team": "Senegal",
            "home_goals": 1,
            "away_goals": 0,
        },
        "recent_events": [
            {"minute": 67, "event_type": "Goal", "detail": "Normal Goal",
             "team_id": 31, "team_name": "Morocco", "player_name": "A. Hakimi"},
        ],
    })


@pytest.fixture
def memory_store():
    store = open_memory_store()
    yield store
    store.close()


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        store_directory=tmp_path / "store",
        background_work_seconds=0.05,
        host_execution_window_seconds=2.0,
        host_poll_seconds=0.05,
        stream_status_check_seconds=60.0,
        stream_reconnect_delay_seconds=0.01,
        app_version="2.0",
    )


@pytest.fixture
def container(test_settings, fake_source, fake_api):
    container = AppContainer(test_settings, source=fake_source, api=fake_api)
    set_container(container)
    yield container
    container.shutdown()
    set_container(None)


@pytest.fixture
def api_error():
    return ApiError("backend down")
