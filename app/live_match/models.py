"""
Data models for live match updates.

A LiveMatchUpdate is one message from the backend's live stream: the
fixture it concerns, what kind of change it carries, the current score
and status, and the most recent events.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from app.utils.helpers import safe_int, safe_lower, safe_str

# Fixture status codes that mean the ball is (or is about to be) in play
LIVE_STATUSES = {"1H", "HT", "2H", "ET", "BT", "P", "LIVE", "INT"}


@dataclass
class MatchEvent:
    """A single match event (goal, card, substitution, etc.)."""
    minute: int
    extra_time: Optional[int]
    event_type: str
    detail: str  # "Normal Goal", "Yellow Card", "Substitution 1", etc.
    team_id: int
    team_name: str
    player_name: str
    assist_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchEvent":
        extra = data.get("extra_time")
        return cls(
            minute=safe_int(data.get("minute")),
            extra_time=safe_int(extra) if extra is not None else None,
            event_type=safe_str(data.get("event_type")),
            detail=safe_str(data.get("detail")),
            team_id=safe_int(data.get("team_id")),
            team_name=safe_str(data.get("team_name")),
            player_name=safe_str(data.get("player_name")),
            assist_name=data.get("assist_name"),
        )

    @property
    def time_display(self) -> str:
        """Format time as '45+2' or '67'."""
        if self.extra_time:
            return f"{self.minute}+{self.extra_time}"
        return str(self.minute)

    @property
    def is_goal(self) -> bool:
        return safe_lower(self.event_type) == "goal"


@dataclass
class LiveMatchUpdate:
    """One message from the live updates stream."""
    fixture_id: int
    event_type: str  # "goal", "card", "status_change", "time_update", ...
    status_short: str  # "1H", "HT", "FT", ...
    elapsed: Optional[int]
    home_team: str
    away_team: str
    home_goals: int
    away_goals: int
    recent_events: List[MatchEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LiveMatchUpdate":
        fixture = data.get("fixture") or {}
        elapsed = fixture.get("elapsed")
        return cls(
            fixture_id=safe_int(data.get("fixture_id")),
            event_type=safe_str(data.get("event_type")),
            status_short=safe_str(fixture.get("status_short")),
            elapsed=safe_int(elapsed) if elapsed is not None else None,
            home_team=safe_str(fixture.get("home_team")),
            away_team=safe_str(fixture.get("away_team")),
            home_goals=safe_int(fixture.get("home_goals")),
            away_goals=safe_int(fixture.get("away_goals")),
            recent_events=[MatchEvent.from_dict(e) for e in data.get("recent_events") or []],
        )

    @property
    def is_live(self) -> bool:
        return self.status_short.upper() in LIVE_STATUSES

    @property
    def score_display(self) -> str:
        """Format score as 'X - Y'."""
        return f"{self.home_goals} - {self.away_goals}"
