"""App-wide preferences kept in the local store."""
import uuid
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app import crud

ONBOARDING_KEY = "has_completed_onboarding"
LAST_LAUNCH_VERSION_KEY = "last_launch_version"
DEVICE_ID_KEY = "device_id"


class AppSettingsStore:
    """Onboarding state, launch version tracking and the local device id."""

    def __init__(self, session_factory: Callable[[], Session], current_version: str):
        self._session_factory = session_factory
        self.current_version = current_version

    def _get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            return crud.get_setting(db, key)

    def _set(self, key: str, value: Optional[str]) -> None:
        with self._session_factory() as db:
            crud.set_setting(db, key, value)

    # Onboarding

    @property
    def has_completed_onboarding(self) -> bool:
        return self._get(ONBOARDING_KEY) == "1"

    def complete_onboarding(self) -> None:
        self._set(ONBOARDING_KEY, "1")

    def reset_onboarding(self) -> None:
        self._set(ONBOARDING_KEY, "0")

    # Launch version

    @property
    def last_launch_version(self) -> Optional[str]:
        return self._get(LAST_LAUNCH_VERSION_KEY)

    @property
    def is_first_launch_ever(self) -> bool:
        return self.last_launch_version is None

    @property
    def was_app_updated(self) -> bool:
        last = self.last_launch_version
        if last is None:
            return False
        return last != self.current_version

    def update_last_launch_version(self) -> None:
        self._set(LAST_LAUNCH_VERSION_KEY, self.current_version)

    # Device

    def device_id(self) -> str:
        """Stable per-install identifier, created on first use."""
        existing = self._get(DEVICE_ID_KEY)
        if existing:
            return existing
        new_id = str(uuid.uuid4())
        self._set(DEVICE_ID_KEY, new_id)
        return new_id
