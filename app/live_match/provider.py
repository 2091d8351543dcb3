"""
Live match source interface and REST implementation.

The source pattern lets the stream service run against the HTTP backend
in production and against an in-memory fake in tests.
"""
from typing import Protocol, Optional, Callable, List
import threading
import logging

from app import api_client

from .models import LiveMatchUpdate

logger = logging.getLogger("live_match.provider")


class LiveMatchSource(Protocol):
    """
    Interface for live match data sources.

    Implementations:
    - RESTLiveMatchSource: HTTP backend via api_client
    """

    def get_live_fixture_ids(self) -> List[int]:
        """IDs of fixtures currently in play."""
        ...

    def stream_updates(
        self,
        on_update: Callable[[LiveMatchUpdate], None],
        stop_event: threading.Event,
    ) -> None:
        """
        Block, delivering updates until the stream ends or ``stop_event``
        is set. Raises on connection failure.
        """
        ...


class RESTLiveMatchSource:
    """Live source backed by the tournament HTTP API."""

    def __init__(self, league_id: Optional[int] = None):
        self._api = api_client
        self._league_id = league_id if league_id is not None else api_client.LEAGUE_ID

    def get_live_fixture_ids(self) -> List[int]:
        fixtures = self._api.get_live_fixtures(league_id=self._league_id)
        return [f["fixture_id"] for f in fixtures if f.get("fixture_id") is not None]

    def stream_updates(
        self,
        on_update: Callable[[LiveMatchUpdate], None],
        stop_event: threading.Event,
    ) -> None:
        def forward(raw: dict) -> None:
            update = LiveMatchUpdate.from_dict(raw)
            logger.debug(f"Live update for fixture {update.fixture_id}: {update.event_type}")
            on_update(update)

        self._api.stream_live_matches(forward, stop_event=stop_event, league_id=self._league_id)


# Singleton factory
_source: Optional[LiveMatchSource] = None


def get_live_match_source() -> LiveMatchSource:
    """Get the shared live match source."""
    global _source
    if _source is None:
        _source = RESTLiveMatchSource()
    return _source
