"""
Push token handling.

Receives the push token (raw bytes from the platform or an already
encoded hex string), remembers it, and registers the device with the
backend so favorite-team subscriptions can be attached to it.
"""
import logging
import platform
from typing import Optional, Union

from app.favorites import FavoriteTeamSyncService
from app.settings_store import AppSettingsStore
from app.utils.helpers import format_device_token

logger = logging.getLogger("notifications")


class NotificationService:
    """Tracks the push token and drives device registration."""

    def __init__(self, sync_service: FavoriteTeamSyncService, app_settings: AppSettingsStore):
        self._sync = sync_service
        self._app_settings = app_settings
        self.device_token: Optional[str] = None
        self.last_registration_error: Optional[str] = None

    def set_device_token(
        self,
        token: Union[bytes, str],
        user_id: Optional[str] = None,
        os_version: Optional[str] = None,
    ) -> str:
        """
        Store the push token and register the device.

        Returns the device UUID assigned by the backend. Registration errors
        propagate after being recorded.
        """
        token_string = format_device_token(token) if isinstance(token, bytes) else token.lower()
        self.device_token = token_string
        logger.info(f"Device token: {token_string}")

        device_id = self._app_settings.device_id()
        try:
            device_uuid = self._sync.register_device(
                user_id=user_id or f"user-{device_id}",
                device_token=token_string,
                device_id=device_id,
                app_version=self._app_settings.current_version,
                os_version=os_version or platform.release(),
            )
        except Exception as e:
            self.handle_registration_error(e)
            raise
        self.last_registration_error = None
        self._sync.sync_pending_favorite()
        return device_uuid

    def handle_registration_error(self, error: Exception) -> None:
        self.last_registration_error = str(error)
        logger.error(f"Push notification registration failed: {error}")
