"""
Background live-update scheduler.

Keeps the live-match stream advancing in short host-granted windows while
the app is not in the foreground. Each invocation:

1. hooks the task's expiration callback,
2. submits the next refresh request (always, and before anything else,
   so a killed process still gets another window),
3. asks the oracle whether any match is live,
4. skips straight to a successful report when nothing is live, or holds
   the stream open for a short bounded unit of work,
5. reports completion exactly once. Expiration cancels the work unit
   cooperatively and reports failure.
"""
import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Protocol

from .host import BackgroundTask, HostScheduler, utc_now
from .models import (
    InvocationState,
    RefreshOutcome,
    ScheduledRefreshRequest,
    SchedulingError,
    WorkExpired,
)
from .policy import FixedIntervalPolicy, RefreshPolicy

logger = logging.getLogger("background.scheduler")

DEFAULT_IDENTIFIER = "com.afcon2025.liveupdates.refresh"
DEFAULT_WORK_SECONDS = 1.0


class LiveMatchOracle(Protocol):
    """Read-only view of whether any match is currently live."""

    def has_live_matches(self) -> bool:
        ...


class RefreshInvocation:
    """
    State for a single handler invocation.

    ``report`` is idempotent: the first call wins and is forwarded to the
    task handle, later calls are dropped. ``expire`` may run on the host's
    thread while the handler is still working.
    """

    def __init__(self, task: BackgroundTask):
        self.task = task
        self.state = InvocationState.INVOKED
        self.outcome: Optional[RefreshOutcome] = None
        self.cancel_event = threading.Event()
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def advance(self, state: InvocationState) -> None:
        with self._lock:
            if self.outcome is None:
                self.state = state

    def expire(self) -> None:
        logger.warning(f"Refresh window for {self.task.identifier} revoked, cancelling work")
        self.cancel_event.set()
        self.report(False)

    def report(self, success: bool) -> bool:
        with self._lock:
            if self.outcome is not None:
                return False
            self.outcome = RefreshOutcome.completed(success)
            self.state = InvocationState.REPORTED
        self.task.set_task_completed(success)
        return True


class BackgroundLiveUpdateScheduler:
    """Registers with the host and runs the refresh protocol per window."""

    def __init__(
        self,
        host: HostScheduler,
        oracle: LiveMatchOracle,
        identifier: str = DEFAULT_IDENTIFIER,
        policy: Optional[RefreshPolicy] = None,
        work_seconds: float = DEFAULT_WORK_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._host = host
        self._oracle = oracle
        self.identifier = identifier
        self._policy = policy or FixedIntervalPolicy()
        self._work_seconds = work_seconds
        self._clock = clock
        self._registered = False

    @property
    def registered(self) -> bool:
        return self._registered

    def register(self) -> bool:
        """
        Register the refresh handler with the host.

        Must run before the host finishes launching. Failure disables
        background refresh for this process but never raises.
        """
        try:
            self._host.register(self.identifier, self.handle)
        except SchedulingError as e:
            logger.error(
                f"Could not register background refresh '{self.identifier}': {e}. "
                f"Background live updates will not run this session."
            )
            self._registered = False
            return False
        self._registered = True
        return True

    def schedule_next(self) -> bool:
        """Submit the next refresh request. Returns False if the host refused it."""
        request = ScheduledRefreshRequest(
            identifier=self.identifier,
            earliest_begin=self._policy.next_earliest_begin(self._clock()),
        )
        try:
            self._host.submit(request)
        except SchedulingError as e:
            logger.warning(f"Could not schedule background refresh: {e}")
            return False
        logger.debug(f"Next background refresh no earlier than {request.earliest_begin.isoformat()}")
        return True

    def handle(self, task: BackgroundTask) -> RefreshOutcome:
        """Run one invocation. Always reports to ``task`` exactly once."""
        invocation = RefreshInvocation(task)
        task.expiration_handler = invocation.expire

        try:
            self.schedule_next()
            invocation.advance(InvocationState.RESCHEDULED)
            if invocation.cancelled:
                raise WorkExpired()

            if not self._oracle.has_live_matches():
                invocation.advance(InvocationState.SKIPPING)
                logger.debug("No live matches, skipping background refresh")
                invocation.report(True)
            else:
                invocation.advance(InvocationState.DOING_WORK)
                logger.info("Live matches in progress, keeping stream open")
                self._do_work(invocation.cancel_event)
                invocation.report(True)
        except WorkExpired:
            logger.info("Background refresh cancelled before completion")
            invocation.report(False)
        except Exception:
            logger.exception("Background refresh failed")
            invocation.report(False)

        return invocation.outcome

    def _do_work(self, cancel_event: threading.Event) -> None:
        if cancel_event.is_set():
            raise WorkExpired()
        if cancel_event.wait(self._work_seconds):
            raise WorkExpired()
