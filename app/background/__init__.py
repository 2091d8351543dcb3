"""
Background live-update refresh.

Schedules host-granted execution windows that keep the live-match stream
moving while the app is in the background.
"""
from .models import (
    InvocationState,
    ScheduledRefreshRequest,
    RefreshOutcome,
    SchedulingError,
    SchedulingSubmissionError,
    DuplicateRegistrationError,
    WorkExpired,
)
from .host import (
    BackgroundTask,
    HostScheduler,
    InProcessHostScheduler,
)
from .policy import FixedIntervalPolicy, RefreshPolicy
from .scheduler import (
    BackgroundLiveUpdateScheduler,
    LiveMatchOracle,
    RefreshInvocation,
)

__all__ = [
    # Models
    "InvocationState",
    "ScheduledRefreshRequest",
    "RefreshOutcome",
    "SchedulingError",
    "SchedulingSubmissionError",
    "DuplicateRegistrationError",
    "WorkExpired",
    # Host
    "BackgroundTask",
    "HostScheduler",
    "InProcessHostScheduler",
    # Policy
    "FixedIntervalPolicy",
    "RefreshPolicy",
    # Scheduler
    "BackgroundLiveUpdateScheduler",
    "LiveMatchOracle",
    "RefreshInvocation",
]
