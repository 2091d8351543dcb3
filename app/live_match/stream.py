"""
Process-wide live match streaming.

Keeps one live updates stream open while any match is live, reconnecting
after errors, and polls a status check so the stream starts by itself when
a match kicks off. Its ``has_live_matches()`` is the oracle the background
scheduler reads.
"""
import logging
import threading
from typing import Any, Callable, Dict, Optional

from .models import LiveMatchUpdate
from .provider import LiveMatchSource

logger = logging.getLogger("live_match.stream")

DEFAULT_RECONNECT_DELAY = 5.0
DEFAULT_STATUS_CHECK_INTERVAL = 30.0


class LiveMatchStreamService:
    """
    Owns the live stream thread and the live-matches flag.

    Callbacks:
    - on_match_update: receives every LiveMatchUpdate
    - on_live_started: called when matches go live and streaming starts
      (used to request a background refresh window)
    - status_check: returns True when matches are live
    """

    def __init__(
        self,
        source: LiveMatchSource,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        status_check_interval: float = DEFAULT_STATUS_CHECK_INTERVAL,
        status_check: Optional[Callable[[], bool]] = None,
    ):
        self._source = source
        self._reconnect_delay = reconnect_delay
        self._status_check_interval = status_check_interval
        self.status_check = status_check
        self.on_match_update: Optional[Callable[[LiveMatchUpdate], None]] = None
        self.on_live_started: Optional[Callable[[], Any]] = None

        self._has_live_matches = False
        self.last_error: Optional[str] = None

        self._lock = threading.Lock()
        self._stream_thread: Optional[threading.Thread] = None
        self._stream_stop = threading.Event()
        self._checks_stop = threading.Event()
        self._checks_thread: Optional[threading.Thread] = None

    def has_live_matches(self) -> bool:
        return self._has_live_matches

    @property
    def is_streaming(self) -> bool:
        with self._lock:
            thread = self._stream_thread
            return thread is not None and thread.is_alive() and not self._stream_stop.is_set()

    # ===== START / STOP =====

    def start_streaming(self, has_live_matches: bool) -> bool:
        """Start the stream if matches are live and it isn't already running."""
        self._has_live_matches = has_live_matches

        if self.is_streaming:
            logger.debug("Live stream already active, skipping")
            return False

        if not has_live_matches:
            logger.info("No live matches, stream will start when matches go live")
            return False

        logger.info("Starting live updates stream")
        self.last_error = None
        with self._lock:
            self._stream_stop = threading.Event()
            self._stream_thread = threading.Thread(
                target=self._stream_with_reconnection,
                args=(self._stream_stop,),
                name="live-stream",
                daemon=True,
            )
            self._stream_thread.start()
        return True

    def stop_streaming(self, timeout: Optional[float] = None) -> None:
        """Signal the stream to stop; optionally wait for the thread to exit."""
        logger.info("Stopping live updates stream")
        with self._lock:
            self._stream_stop.set()
            thread = self._stream_thread
        if timeout is not None and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def update_live_matches_status(self, has_live_matches: bool) -> None:
        """Call when the number of live matches changes."""
        was_streaming = self.is_streaming
        self._has_live_matches = has_live_matches

        if has_live_matches and not was_streaming:
            if self.start_streaming(True) and self.on_live_started is not None:
                try:
                    self.on_live_started()
                except Exception:
                    logger.exception("on_live_started callback failed")
        elif not has_live_matches and was_streaming:
            logger.info("No more live matches, stopping stream")
            self.stop_streaming()

    # ===== STATUS CHECKS =====

    def check_for_live_matches(self) -> None:
        """Ask the status check whether matches are live and react."""
        if self.status_check is None:
            return
        try:
            has_live = bool(self.status_check())
        except Exception as e:
            logger.warning(f"Live status check failed: {e}")
            return

        streaming = self.is_streaming
        if has_live and not streaming:
            logger.info("Status check: live matches detected, starting stream")
            self.update_live_matches_status(True)
        elif not has_live and streaming:
            logger.info("Status check: no live matches, stopping stream")
            self.update_live_matches_status(False)
        else:
            self._has_live_matches = has_live

    def start_status_checks(self) -> None:
        if self._checks_thread is not None and self._checks_thread.is_alive():
            return
        self._checks_stop.clear()
        self._checks_thread = threading.Thread(
            target=self._run_status_checks, name="live-status-check", daemon=True
        )
        self._checks_thread.start()

    def stop_status_checks(self, timeout: float = 5.0) -> None:
        self._checks_stop.set()
        if self._checks_thread is not None:
            self._checks_thread.join(timeout=timeout)
            self._checks_thread = None

    def shutdown(self) -> None:
        self.stop_status_checks()
        self.stop_streaming(timeout=5.0)

    def _run_status_checks(self) -> None:
        self.check_for_live_matches()
        while not self._checks_stop.wait(self._status_check_interval):
            self.check_for_live_matches()

    # ===== STREAM LOOP =====

    def _stream_with_reconnection(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set() and self._has_live_matches:
            try:
                logger.info("Connecting to live updates stream")
                self._source.stream_updates(self._dispatch, stop_event)
                logger.info("Stream ended normally")
                break
            except Exception as e:
                logger.error(f"Stream error: {e}")
                self.last_error = str(e)

                if stop_event.is_set() or not self._has_live_matches:
                    logger.info("Not reconnecting (stopped or no live matches)")
                    break

                logger.info(f"Waiting {self._reconnect_delay}s before reconnecting")
                if stop_event.wait(self._reconnect_delay):
                    break
                logger.info("Attempting to reconnect")

        with self._lock:
            if self._stream_thread is threading.current_thread():
                self._stream_thread = None

    def _dispatch(self, update: LiveMatchUpdate) -> None:
        callback = self.on_match_update
        if callback is None:
            return
        try:
            callback(update)
        except Exception:
            logger.exception(f"Update handler failed for fixture {update.fixture_id}")

    def status(self) -> Dict[str, Any]:
        return {
            "has_live_matches": self._has_live_matches,
            "is_streaming": self.is_streaming,
            "last_error": self.last_error,
        }
