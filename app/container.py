"""
Application wiring.

Builds the store, live stream, host scheduler, background scheduler and
device/favorite services from settings, and runs the launch sequence:
the background handler is registered before the host is told launch has
finished.
"""
import logging
from datetime import timedelta
from typing import Any, Optional

from app.background import (
    BackgroundLiveUpdateScheduler,
    FixedIntervalPolicy,
    InProcessHostScheduler,
)
from app.db import Store, open_store
from app.favorites import FavoriteTeamSyncService
from app.live_match import LiveMatchSource, LiveMatchStreamService, get_live_match_source
from app.notifications import NotificationService
from app.settings_store import AppSettingsStore
from config.settings import Settings, settings as default_settings

logger = logging.getLogger("container")


class AppContainer:
    """Holds the process-wide services."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[Store] = None,
        source: Optional[LiveMatchSource] = None,
        api: Any = None,
    ):
        self.settings = settings
        self.store = store or open_store(settings.store_directory, settings.store_filename)
        self.app_settings = AppSettingsStore(self.store.session_factory, settings.app_version)

        self.source = source or get_live_match_source()
        self.stream = LiveMatchStreamService(
            self.source,
            reconnect_delay=settings.stream_reconnect_delay_seconds,
            status_check_interval=settings.stream_status_check_seconds,
            status_check=lambda: bool(self.source.get_live_fixture_ids()),
        )

        self.host = InProcessHostScheduler(
            execution_window_seconds=settings.host_execution_window_seconds,
            max_pending_requests=settings.host_max_pending_requests,
            poll_seconds=settings.host_poll_seconds,
        )
        self.background = BackgroundLiveUpdateScheduler(
            host=self.host,
            oracle=self.stream,
            identifier=settings.background_refresh_identifier,
            policy=FixedIntervalPolicy(
                timedelta(minutes=settings.background_refresh_interval_minutes)
            ),
            work_seconds=settings.background_work_seconds,
        )
        self.stream.on_live_started = self.background.schedule_next

        self.favorites = FavoriteTeamSyncService(self.store.session_factory, api=api)
        self.notifications = NotificationService(self.favorites, self.app_settings)
        self._launched = False

    @property
    def launched(self) -> bool:
        return self._launched

    def launch(self) -> None:
        """Run the launch sequence once."""
        if self._launched:
            return

        if self.background.register():
            self.background.schedule_next()
        self.host.finish_launching()

        if self.app_settings.is_first_launch_ever:
            logger.info("First launch")
        elif self.app_settings.was_app_updated:
            logger.info(
                f"App updated from {self.app_settings.last_launch_version} "
                f"to {self.settings.app_version}"
            )
        self.app_settings.update_last_launch_version()

        self.host.start()
        self.stream.start_status_checks()
        self._launched = True
        logger.info("Launch finished")

    def shutdown(self) -> None:
        self.stream.shutdown()
        self.host.stop()
        self.store.close()
        self._launched = False


_container: Optional[AppContainer] = None


def get_container() -> AppContainer:
    """Get the shared container, building it on first use."""
    global _container
    if _container is None:
        _container = AppContainer(default_settings)
    return _container


def set_container(container: Optional[AppContainer]) -> None:
    """Replace the shared container (tests)."""
    global _container
    _container = container
