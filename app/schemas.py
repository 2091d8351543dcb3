"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel
from typing import Optional, List, Dict, Any


# ===== TEAM SCHEMAS =====

class Team(BaseModel):
    """Tournament team"""
    id: int
    name: str


class TeamsList(BaseModel):
    teams: List[Team]
    total: int


# ===== FAVORITE TEAM SCHEMAS =====

class FavoriteTeamUpdate(BaseModel):
    """Request to change the favorite team"""
    team_id: int
    team_name: Optional[str] = None


class FavoriteTeam(BaseModel):
    team_id: int
    team_name: Optional[str] = None
    last_synced: Optional[str] = None


class FavoriteTeamSync(BaseModel):
    """Result of syncing the favorite team to the backend"""
    team_id: int
    team_name: Optional[str] = None
    synced: bool
    subscriptions_updated: int = 0
    message: str = ""


# ===== DEVICE SCHEMAS =====

class DeviceTokenRegistration(BaseModel):
    """Push token reported by the platform, hex encoded"""
    token: str
    user_id: Optional[str] = None
    os_version: Optional[str] = None


class DeviceRegistered(BaseModel):
    device_uuid: str


# ===== STATUS SCHEMAS =====

class LiveStatus(BaseModel):
    has_live_matches: bool
    is_streaming: bool
    last_error: Optional[str] = None


class BackgroundStatus(BaseModel):
    identifier: str
    registered: bool
    host: Dict[str, Any]


class AppSettingsView(BaseModel):
    app_version: str
    has_completed_onboarding: bool
    last_launch_version: Optional[str] = None
    was_app_updated: bool


class OnboardingUpdate(BaseModel):
    completed: bool = True
