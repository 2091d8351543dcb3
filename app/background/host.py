"""
Host task scheduler interface and an in-process implementation.

The host owns *when* background code runs. The app registers a handler
per identifier at launch, submits requests for future windows, and the
host later calls the handler with a task handle. The handle carries an
expiration callback slot and a one-shot completion report.

InProcessHostScheduler plays the host role for a plain Python process:
a runner thread launches due requests on worker threads and revokes each
window after ``execution_window_seconds``.
"""
import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, Optional, Protocol

from .models import (
    DuplicateRegistrationError,
    ScheduledRefreshRequest,
    SchedulingError,
    SchedulingSubmissionError,
)

logger = logging.getLogger("background.host")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BackgroundTask:
    """
    Handle passed to a registered handler for one execution window.

    The handler sets ``expiration_handler`` to be told when the window is
    revoked, and must call ``set_task_completed`` exactly once.
    """

    def __init__(
        self,
        identifier: str,
        on_complete: Callable[["BackgroundTask", bool], None],
    ):
        self.identifier = identifier
        self.started_at = utc_now()
        self.reported = False
        self.expired = False
        self._expiration_handler: Optional[Callable[[], None]] = None
        self._expiration_lock = threading.Lock()
        self._on_complete = on_complete

    @property
    def expiration_handler(self) -> Optional[Callable[[], None]]:
        return self._expiration_handler

    @expiration_handler.setter
    def expiration_handler(self, handler: Optional[Callable[[], None]]) -> None:
        # A window revoked before the handler was installed fires it on install
        with self._expiration_lock:
            self._expiration_handler = handler
            fire = self.expired and handler is not None
        if fire:
            handler()

    def set_task_completed(self, success: bool) -> None:
        self._on_complete(self, success)

    def fire_expiration(self) -> None:
        with self._expiration_lock:
            self.expired = True
            handler = self._expiration_handler
        if handler is not None:
            handler()


TaskHandler = Callable[[BackgroundTask], None]


class HostScheduler(Protocol):
    """What the app needs from the host's background task service."""

    def register(self, identifier: str, handler: TaskHandler) -> None:
        """
        Register the launch handler for an identifier.

        Raises:
            DuplicateRegistrationError: identifier already registered
            SchedulingError: launch has already finished
        """
        ...

    def submit(self, request: ScheduledRefreshRequest) -> None:
        """
        Submit (or replace) the pending request for ``request.identifier``.

        Raises:
            SchedulingSubmissionError: the host refused the request
        """
        ...


class InProcessHostScheduler:
    """Thread-based host scheduler with replace-on-resubmit semantics."""

    def __init__(
        self,
        execution_window_seconds: float = 30.0,
        max_pending_requests: int = 10,
        poll_seconds: float = 1.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._window_seconds = execution_window_seconds
        self._max_pending = max_pending_requests
        self._poll_seconds = poll_seconds
        self._clock = clock

        self._handlers: Dict[str, TaskHandler] = {}
        self._pending: Dict[str, ScheduledRefreshRequest] = {}
        self._running: Dict[str, BackgroundTask] = {}
        self._timers: Dict[int, threading.Timer] = {}
        self._lock = threading.RLock()
        self._launch_finished = False

        self._stop_event = threading.Event()
        self._runner: Optional[threading.Thread] = None

        self._reports: Deque[Dict[str, Any]] = deque(maxlen=50)
        self._stats = {
            "launches": 0,
            "completed_success": 0,
            "completed_failure": 0,
            "expirations": 0,
            "duplicate_reports": 0,
            "missing_reports": 0,
        }

    # ===== REGISTRATION =====

    def register(self, identifier: str, handler: TaskHandler) -> None:
        with self._lock:
            if self._launch_finished:
                raise SchedulingError(
                    f"Cannot register '{identifier}' after launch has finished"
                )
            if identifier in self._handlers:
                raise DuplicateRegistrationError(
                    f"A handler is already registered for '{identifier}'"
                )
            self._handlers[identifier] = handler
        logger.info(f"Registered background task handler: {identifier}")

    def finish_launching(self) -> None:
        """Close the registration window."""
        with self._lock:
            self._launch_finished = True

    @property
    def launch_finished(self) -> bool:
        return self._launch_finished

    def is_registered(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._handlers

    # ===== REQUESTS =====

    def submit(self, request: ScheduledRefreshRequest) -> None:
        with self._lock:
            if request.identifier not in self._handlers:
                raise SchedulingSubmissionError(
                    f"No handler registered for '{request.identifier}'"
                )
            replacing = request.identifier in self._pending
            if not replacing and len(self._pending) >= self._max_pending:
                raise SchedulingSubmissionError(
                    f"Too many pending requests ({self._max_pending})"
                )
            self._pending[request.identifier] = request
        logger.debug(
            f"{'Replaced' if replacing else 'Accepted'} request for "
            f"{request.identifier} (earliest {request.earliest_begin.isoformat()})"
        )

    def cancel(self, identifier: str) -> None:
        with self._lock:
            self._pending.pop(identifier, None)

    def pending_request(self, identifier: str) -> Optional[ScheduledRefreshRequest]:
        with self._lock:
            return self._pending.get(identifier)

    # ===== LAUNCHING =====

    def run_due(self, now: Optional[datetime] = None) -> int:
        """Launch every pending request whose earliest begin has passed."""
        now = now or self._clock()
        with self._lock:
            due = [
                identifier
                for identifier, request in self._pending.items()
                if request.earliest_begin <= now and identifier not in self._running
            ]
        launched = 0
        for identifier in due:
            try:
                self.launch(identifier)
                launched += 1
            except SchedulingError as e:
                logger.debug(f"Skipped launch of {identifier}: {e}")
        return launched

    def launch(self, identifier: str) -> BackgroundTask:
        """
        Launch the handler for ``identifier`` now.

        Consumes the pending request, if any. Only one window per
        identifier runs at a time.
        """
        with self._lock:
            handler = self._handlers.get(identifier)
            if handler is None:
                raise SchedulingError(f"No handler registered for '{identifier}'")
            if identifier in self._running:
                raise SchedulingError(f"'{identifier}' is already running")

            self._pending.pop(identifier, None)
            task = BackgroundTask(identifier, self._on_task_completed)
            self._running[identifier] = task
            self._stats["launches"] += 1

            timer = threading.Timer(self._window_seconds, self._end_window, args=(task,))
            timer.daemon = True
            self._timers[id(task)] = timer

        logger.info(f"Launching background task {identifier}")
        timer.start()
        worker = threading.Thread(
            target=self._run_handler,
            args=(handler, task),
            name=f"bgtask-{identifier}",
            daemon=True,
        )
        worker.start()
        return task

    def expire(self, identifier: str) -> bool:
        """Revoke the running window for ``identifier``. Returns False if idle."""
        with self._lock:
            task = self._running.get(identifier)
        if task is None:
            return False
        self._revoke(task)
        return True

    def _run_handler(self, handler: TaskHandler, task: BackgroundTask) -> None:
        try:
            handler(task)
        except Exception:
            logger.exception(f"Background handler for {task.identifier} raised")

    def _end_window(self, task: BackgroundTask) -> None:
        if task.reported:
            return
        self._revoke(task)
        with self._lock:
            if not task.reported:
                self._stats["missing_reports"] += 1
                self._running.pop(task.identifier, None)
                self._timers.pop(id(task), None)
                logger.error(
                    f"Background task {task.identifier} did not report completion "
                    f"before its window closed"
                )

    def _revoke(self, task: BackgroundTask) -> None:
        with self._lock:
            if task.reported:
                return
            self._stats["expirations"] += 1
        logger.warning(f"Execution window for {task.identifier} expired")
        try:
            task.fire_expiration()
        except Exception:
            logger.exception(f"Expiration handler for {task.identifier} raised")

    def _on_task_completed(self, task: BackgroundTask, success: bool) -> None:
        with self._lock:
            if task.reported:
                self._stats["duplicate_reports"] += 1
                logger.warning(
                    f"Background task {task.identifier} reported completion more than once"
                )
                return
            task.reported = True
            self._stats["completed_success" if success else "completed_failure"] += 1
            self._reports.append({
                "identifier": task.identifier,
                "success": success,
                "started_at": task.started_at.isoformat(),
                "reported_at": self._clock().isoformat(),
            })
            if self._running.get(task.identifier) is task:
                del self._running[task.identifier]
            timer = self._timers.pop(id(task), None)
        if timer is not None:
            timer.cancel()
        logger.info(f"Background task {task.identifier} completed (success={success})")

    # ===== RUNNER =====

    def start(self) -> None:
        """Start the runner thread that launches due requests."""
        if self._runner is not None and self._runner.is_alive():
            return
        self._stop_event.clear()
        self._runner = threading.Thread(
            target=self._run_loop, name="bgtask-host", daemon=True
        )
        self._runner.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._runner is not None:
            self._runner.join(timeout=timeout)
            self._runner = None
        with self._lock:
            timers = list(self._timers.values())
        for timer in timers:
            timer.cancel()

    def _run_loop(self) -> None:
        while not self._stop_event.wait(self._poll_seconds):
            try:
                self.run_due()
            except Exception:
                logger.exception("Host scheduler loop failed")

    # ===== DIAGNOSTICS =====

    def snapshot(self) -> Dict[str, Any]:
        """Diagnostics for the status endpoint."""
        with self._lock:
            return {
                "launch_finished": self._launch_finished,
                "registered": sorted(self._handlers),
                "pending": {
                    identifier: request.earliest_begin.isoformat()
                    for identifier, request in self._pending.items()
                },
                "running": sorted(self._running),
                "stats": dict(self._stats),
                "recent_reports": list(self._reports),
            }
