"""
API client for the AFCON 2025 tournament backend.

Live fixture reads are retried on transient network failures; device
registration and favorite-team updates are one-shot calls. The live
updates stream is newline-delimited JSON, one update per line.
"""
import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config.settings import settings

logger = logging.getLogger("api_client")

LEAGUE_ID = settings.league_id

# Seconds without a line (data or keepalive) before the stream is dropped
STREAM_READ_TIMEOUT = 90.0


class ApiError(Exception):
    """The backend could not be reached or returned an unusable response."""


def _url(path: str) -> str:
    return f"{settings.afcon_api_base_url.rstrip('/')}/{path.lstrip('/')}"


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, max=4),
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    reraise=True,
)
def _get_json(path: str, params: Dict[str, Any]) -> Dict[str, Any]:
    response = requests.get(_url(path), params=params, timeout=settings.afcon_api_timeout)
    response.raise_for_status()
    return response.json()


def _post_json(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        response = requests.post(_url(path), json=payload, timeout=settings.afcon_api_timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        raise ApiError(f"POST {path} failed: {e}") from e
    except ValueError as e:
        raise ApiError(f"POST {path} returned invalid JSON") from e


# ===== FIXTURES =====

def get_live_fixtures(league_id: int = LEAGUE_ID) -> List[Dict[str, Any]]:
    """Fixtures currently in play for the league."""
    try:
        data = _get_json("fixtures/live", {"league": league_id})
    except requests.RequestException as e:
        raise ApiError(f"Failed to fetch live fixtures: {e}") from e
    except ValueError as e:
        raise ApiError("Live fixtures response was not valid JSON") from e
    return data.get("fixtures", [])


def stream_live_matches(
    on_update: Callable[[Dict[str, Any]], None],
    stop_event: Optional[threading.Event] = None,
    league_id: int = LEAGUE_ID,
) -> None:
    """
    Consume the live updates stream until it ends or ``stop_event`` is set.

    Blank lines are keepalives. Raises ApiError on connection failure or
    a malformed line.
    """
    try:
        with requests.get(
            _url("live/stream"),
            params={"league": league_id},
            stream=True,
            timeout=(settings.afcon_api_timeout, STREAM_READ_TIMEOUT),
        ) as response:
            response.raise_for_status()
            for line in response.iter_lines(decode_unicode=True):
                if stop_event is not None and stop_event.is_set():
                    return
                if not line:
                    continue
                on_update(json.loads(line))
    except requests.RequestException as e:
        raise ApiError(f"Live stream failed: {e}") from e
    except ValueError as e:
        raise ApiError(f"Malformed live stream message: {e}") from e


# ===== DEVICES =====

def register_device(
    user_id: str,
    device_token: str,
    device_id: str,
    app_version: str,
    os_version: str,
) -> Dict[str, Any]:
    """
    Register this device for push and Live Activity delivery.

    Returns the backend response: ``success``, ``device_uuid``, ``message``.
    """
    return _post_json("devices/register", {
        "user_id": user_id,
        "device_token": device_token,
        "device_id": device_id,
        "app_version": app_version,
        "os_version": os_version,
        "platform": "ios",
    })


def update_favorite_team(device_uuid: str, favorite_team_id: int) -> Dict[str, Any]:
    """
    Point the device's subscriptions at a new favorite team.

    Returns the backend response: ``success``, ``subscriptions_updated``,
    ``message``.
    """
    return _post_json(f"devices/{device_uuid}/favorite-team", {
        "favorite_team_id": favorite_team_id,
    })
