"""
Live Match module.

Provides the live updates stream, the live-matches flag the background
scheduler reads, and the source abstraction over the tournament backend.
"""
from .models import (
    LiveMatchUpdate,
    MatchEvent,
    LIVE_STATUSES,
)
from .provider import (
    LiveMatchSource,
    RESTLiveMatchSource,
    get_live_match_source,
)
from .stream import LiveMatchStreamService

__all__ = [
    # Models
    "LiveMatchUpdate",
    "MatchEvent",
    "LIVE_STATUSES",
    # Source
    "LiveMatchSource",
    "RESTLiveMatchSource",
    "get_live_match_source",
    # Stream
    "LiveMatchStreamService",
]
