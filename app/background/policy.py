"""Reschedule interval policy for background refresh."""
from datetime import datetime, timedelta
from typing import Protocol

DEFAULT_REFRESH_INTERVAL = timedelta(minutes=15)


class RefreshPolicy(Protocol):
    """Decides the earliest begin time of the next refresh window."""

    def next_earliest_begin(self, now: datetime) -> datetime:
        ...


class FixedIntervalPolicy:
    """Always ask for the next window a fixed interval from now."""

    def __init__(self, interval: timedelta = DEFAULT_REFRESH_INTERVAL):
        if interval <= timedelta(0):
            raise ValueError("Refresh interval must be positive")
        self.interval = interval

    def next_earliest_begin(self, now: datetime) -> datetime:
        return now + self.interval
