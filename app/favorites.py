"""
Favorite team sync and device registration.

The backend creates Live Activities and push subscriptions for the
favorite team's matches; it needs a registered device UUID to attach them
to. The favorite is always saved locally first, then pushed to the
backend when the device is registered.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from app import api_client, crud
from app.api_client import ApiError

logger = logging.getLogger("favorites")

DEVICE_UUID_KEY = "device_uuid"


class FavoriteTeamSyncError(Exception):
    """Base class for favorite team sync failures."""


class DeviceNotRegisteredError(FavoriteTeamSyncError):
    def __init__(self):
        super().__init__("Device not registered. Please restart the app.")


class RegistrationFailedError(FavoriteTeamSyncError):
    def __init__(self, message: str):
        super().__init__(f"Registration failed: {message}")


@dataclass
class FavoriteSyncResult:
    """Outcome of pushing the favorite team to the backend."""
    team_id: int
    team_name: Optional[str]
    synced: bool
    subscriptions_updated: int = 0
    message: str = ""


class FavoriteTeamSyncService:
    """Keeps the local favorite team and the backend subscription in step."""

    def __init__(self, session_factory: Callable[[], Session], api: Any = None):
        self._session_factory = session_factory
        self._api = api if api is not None else api_client
        self._device_uuid: Optional[str] = None

    # ===== DEVICE =====

    def set_device_uuid(self, device_uuid: str) -> None:
        self._device_uuid = device_uuid
        with self._session_factory() as db:
            crud.set_setting(db, DEVICE_UUID_KEY, device_uuid)

    def get_device_uuid(self) -> Optional[str]:
        if self._device_uuid:
            return self._device_uuid
        with self._session_factory() as db:
            self._device_uuid = crud.get_setting(db, DEVICE_UUID_KEY)
        return self._device_uuid

    def register_device(
        self,
        user_id: str,
        device_token: str,
        device_id: str,
        app_version: str,
        os_version: str,
    ) -> str:
        """
        Register the device and store its UUID.

        Call on first launch and whenever the push token changes.

        Raises:
            RegistrationFailedError: backend answered with success=false
            ApiError: backend unreachable
        """
        logger.info("Registering device")
        response = self._api.register_device(
            user_id=user_id,
            device_token=device_token,
            device_id=device_id,
            app_version=app_version,
            os_version=os_version,
        )
        if not response.get("success"):
            raise RegistrationFailedError(response.get("message") or "unknown error")

        device_uuid = response.get("device_uuid")
        if not device_uuid:
            raise RegistrationFailedError("no device UUID in response")
        logger.info(f"Device registered: {device_uuid}")
        self.set_device_uuid(device_uuid)
        return device_uuid

    # ===== FAVORITE TEAM =====

    def get_favorite_team(self) -> Optional[Dict[str, Any]]:
        with self._session_factory() as db:
            favorite = crud.get_favorite_team(db)
            if favorite is None:
                return None
            return {
                "team_id": favorite.team_id,
                "team_name": favorite.team_name,
                "last_synced": favorite.last_synced.isoformat() if favorite.last_synced else None,
            }

    def update_favorite_team(self, team_id: int, team_name: Optional[str] = None) -> FavoriteSyncResult:
        """
        Save the favorite team and sync it to the backend.

        Raises:
            DeviceNotRegisteredError: saved locally, but there is no device
                UUID to sync against
            ApiError: backend unreachable
        """
        with self._session_factory() as db:
            crud.set_favorite_team(db, team_id, team_name)

        device_uuid = self.get_device_uuid()
        if not device_uuid:
            raise DeviceNotRegisteredError()

        label = team_name or f"Team {team_id}"
        logger.info(f"Syncing favorite team to server: {label}")
        response = self._api.update_favorite_team(device_uuid, team_id)

        if not response.get("success"):
            message = response.get("message") or ""
            logger.error(f"Failed to sync favorite team: {message}")
            return FavoriteSyncResult(team_id, team_name, synced=False, message=message)

        updated = int(response.get("subscriptions_updated") or 0)
        with self._session_factory() as db:
            crud.mark_favorite_synced(db, datetime.utcnow())
        logger.info(f"Favorite team synced, {updated} subscription(s) updated")
        return FavoriteSyncResult(
            team_id,
            team_name,
            synced=True,
            subscriptions_updated=updated,
            message=response.get("message") or "",
        )

    def sync_pending_favorite(self) -> Optional[FavoriteSyncResult]:
        """
        Push a favorite that was saved but never synced.

        Called right after device registration. Backend failures are logged
        and the favorite stays pending; registration is not undone.
        """
        with self._session_factory() as db:
            favorite = crud.get_favorite_team(db)
            if favorite is None or favorite.last_synced is not None:
                return None
            team_id, team_name = favorite.team_id, favorite.team_name

        try:
            return self.update_favorite_team(team_id, team_name)
        except (ApiError, FavoriteTeamSyncError) as e:
            logger.error(f"Could not sync saved favorite team {team_id}: {e}")
            return None
