"""
AFCON 2025 Live - Main FastAPI Application
Background live updates, favorite team sync and device registration
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, HTTPException

from app import schemas
from app.api_client import ApiError
from app.background import SchedulingError
from app.container import AppContainer, get_container
from app.favorites import DeviceNotRegisteredError, RegistrationFailedError
from app.teams import AFCON_TEAMS, get_team_name
from config.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("main")

# Version tracking
APP_VERSION = settings.app_version
APP_NAME = "AFCON 2025 Live"


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = get_container()
    container.launch()
    try:
        yield
    finally:
        container.shutdown()


app = FastAPI(
    title=APP_NAME,
    description="Live AFCON 2025 updates, favorite team sync and background refresh",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "full": f"{APP_NAME} {APP_VERSION}",
    }


# ===== LIVE / BACKGROUND =====

@app.get("/api/live/status", response_model=schemas.LiveStatus)
def live_status(container: AppContainer = Depends(get_container)):
    return container.stream.status()


@app.get("/api/background/status", response_model=schemas.BackgroundStatus)
def background_status(container: AppContainer = Depends(get_container)):
    return {
        "identifier": container.background.identifier,
        "registered": container.background.registered,
        "host": container.host.snapshot(),
    }


@app.post("/api/background/run", status_code=202)
def run_background_refresh(container: AppContainer = Depends(get_container)):
    """Launch the refresh task now instead of waiting for its window."""
    try:
        container.host.launch(container.background.identifier)
    except SchedulingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"launched": container.background.identifier}


# ===== TEAMS / FAVORITE =====

@app.get("/api/teams", response_model=schemas.TeamsList)
def list_teams():
    teams = [
        {"id": team_id, "name": name}
        for team_id, name in sorted(AFCON_TEAMS.items(), key=lambda item: item[1])
    ]
    return {"teams": teams, "total": len(teams)}


@app.get("/api/favorite-team", response_model=schemas.FavoriteTeam)
def get_favorite_team(container: AppContainer = Depends(get_container)):
    favorite = container.favorites.get_favorite_team()
    if favorite is None:
        raise HTTPException(status_code=404, detail="No favorite team set")
    return favorite


@app.put("/api/favorite-team", response_model=schemas.FavoriteTeamSync)
def update_favorite_team(
    update: schemas.FavoriteTeamUpdate,
    container: AppContainer = Depends(get_container),
):
    known_name = get_team_name(update.team_id)
    if known_name is None:
        raise HTTPException(status_code=404, detail=f"Unknown team {update.team_id}")

    try:
        result = container.favorites.update_favorite_team(
            update.team_id, update.team_name or known_name
        )
    except DeviceNotRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ApiError as e:
        logger.warning(f"Favorite team sync failed: {e}")
        raise HTTPException(status_code=502, detail="Tournament backend unavailable")
    return asdict(result)


# ===== DEVICES =====

@app.post("/api/devices/token", response_model=schemas.DeviceRegistered)
def register_device_token(
    registration: schemas.DeviceTokenRegistration,
    container: AppContainer = Depends(get_container),
):
    try:
        device_uuid = container.notifications.set_device_token(
            registration.token,
            user_id=registration.user_id,
            os_version=registration.os_version,
        )
    except RegistrationFailedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ApiError:
        raise HTTPException(status_code=502, detail="Tournament backend unavailable")
    return {"device_uuid": device_uuid}


# ===== SETTINGS =====

def _settings_view(container: AppContainer) -> dict:
    store = container.app_settings
    return {
        "app_version": store.current_version,
        "has_completed_onboarding": store.has_completed_onboarding,
        "last_launch_version": store.last_launch_version,
        "was_app_updated": store.was_app_updated,
    }


@app.get("/api/settings", response_model=schemas.AppSettingsView)
def get_app_settings(container: AppContainer = Depends(get_container)):
    return _settings_view(container)


@app.post("/api/settings/onboarding", response_model=schemas.AppSettingsView)
def set_onboarding(
    update: schemas.OnboardingUpdate,
    container: AppContainer = Depends(get_container),
):
    if update.completed:
        container.app_settings.complete_onboarding()
    else:
        container.app_settings.reset_onboarding()
    return _settings_view(container)
