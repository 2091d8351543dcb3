"""
Tests for the tournament API client with requests patched out.
"""
import json
import threading

import pytest
import requests

from app import api_client
from app.api_client import ApiError
from app.live_match import RESTLiveMatchSource


class FakeResponse:
    def __init__(self, payload=None, lines=None, status=200):
        self.payload = payload
        self.lines = lines or []
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload

    def iter_lines(self, decode_unicode=False):
        yield from self.lines

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class TestLiveFixtures:

    def test_returns_fixtures(self, monkeypatch):
        monkeypatch.setattr(
            api_client.requests, "get",
            lambda *a, **kw: FakeResponse({"fixtures": [{"fixture_id": 1}, {"fixture_id": 2}]}),
        )
        assert api_client.get_live_fixtures() == [{"fixture_id": 1}, {"fixture_id": 2}]

    def test_connection_errors_are_retried_then_wrapped(self, monkeypatch):
        attempts = []

        def failing_get(*args, **kwargs):
            attempts.append(1)
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(api_client.requests, "get", failing_get)

        with pytest.raises(ApiError):
            api_client.get_live_fixtures()
        assert len(attempts) == 3

    def test_http_errors_are_not_retried(self, monkeypatch):
        attempts = []

        def server_error(*args, **kwargs):
            attempts.append(1)
            return FakeResponse(status=500)

        monkeypatch.setattr(api_client.requests, "get", server_error)

        with pytest.raises(ApiError):
            api_client.get_live_fixtures()
        assert len(attempts) == 1


class TestStream:

    def test_delivers_lines_and_skips_keepalives(self, monkeypatch):
        lines = [json.dumps({"fixture_id": 1}), "", json.dumps({"fixture_id": 2})]
        monkeypatch.setattr(api_client.requests, "get", lambda *a, **kw: FakeResponse(lines=lines))
        received = []

        api_client.stream_live_matches(received.append)

        assert received == [{"fixture_id": 1}, {"fixture_id": 2}]

    def test_stops_when_signalled(self, monkeypatch):
        lines = [json.dumps({"fixture_id": n}) for n in range(5)]
        monkeypatch.setattr(api_client.requests, "get", lambda *a, **kw: FakeResponse(lines=lines))
        stop = threading.Event()
        received = []

        def on_update(update):
            received.append(update)
            stop.set()

        api_client.stream_live_matches(on_update, stop_event=stop)

        assert received == [{"fixture_id": 0}]

    def test_malformed_line_raises(self, monkeypatch):
        monkeypatch.setattr(api_client.requests, "get", lambda *a, **kw: FakeResponse(lines=["{oops"]))

        with pytest.raises(ApiError):
            api_client.stream_live_matches(lambda update: None)

    def test_rest_source_converts_updates(self, monkeypatch):
        lines = [json.dumps({
            "fixture_id": 9,
            "event_type": "goal",
            "fixture": {"status_short": "1H", "home_team": "Mali", "away_team": "Zambia",
                        "home_goals": 1, "away_goals": 0, "elapsed": 12},
        })]
        monkeypatch.setattr(api_client.requests, "get", lambda *a, **kw: FakeResponse(lines=lines))
        received = []

        RESTLiveMatchSource(league_id=6).stream_updates(received.append, threading.Event())

        assert received[0].fixture_id == 9
        assert received[0].home_team == "Mali"
        assert received[0].is_live


class TestDevices:

    def test_register_device_posts_payload(self, monkeypatch):
        captured = {}

        def fake_post(url, json=None, timeout=None):
            captured["url"] = url
            captured["json"] = json
            return FakeResponse({"success": True, "device_uuid": "u-1", "message": ""})

        monkeypatch.setattr(api_client.requests, "post", fake_post)

        response = api_client.register_device("user", "token", "device", "1.0", "18.2")

        assert response["device_uuid"] == "u-1"
        assert captured["url"].endswith("/devices/register")
        assert captured["json"]["device_token"] == "token"

    def test_update_favorite_team_wraps_errors(self, monkeypatch):
        def fake_post(*args, **kwargs):
            raise requests.Timeout("slow")

        monkeypatch.setattr(api_client.requests, "post", fake_post)

        with pytest.raises(ApiError):
            api_client.update_favorite_team("u-1", 31)
