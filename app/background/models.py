"""
Data types and errors for background live-update refresh.

These mirror what the host task scheduler hands back and forth with the
app: a request for a future execution window, and the single outcome
reported at the end of each window.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class InvocationState(Enum):
    """Lifecycle of one handler invocation."""
    INVOKED = "invoked"
    RESCHEDULED = "rescheduled"
    DOING_WORK = "doing_work"
    SKIPPING = "skipping"
    REPORTED = "reported"


@dataclass(frozen=True)
class ScheduledRefreshRequest:
    """Ask the host for a window no earlier than ``earliest_begin``."""
    identifier: str
    earliest_begin: datetime


@dataclass(frozen=True)
class RefreshOutcome:
    """Completed(success) - reported once per invocation."""
    success: bool

    @classmethod
    def completed(cls, success: bool) -> "RefreshOutcome":
        return cls(success=success)


class SchedulingError(Exception):
    """The host scheduler rejected a request."""


class SchedulingSubmissionError(SchedulingError):
    """A refresh request could not be submitted (quota, unknown identifier)."""


class DuplicateRegistrationError(SchedulingError):
    """A handler is already registered for this identifier."""


class WorkExpired(Exception):
    """The host revoked the execution window before work finished."""
