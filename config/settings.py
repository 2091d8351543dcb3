"""Configuration management using pydantic-settings."""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Tournament backend
    afcon_api_base_url: str = "http://localhost:8080"
    afcon_api_timeout: float = 10.0

    # AFCON league ID (API-Football numbering)
    league_id: int = 6

    # Background live-update refresh
    background_refresh_identifier: str = "com.afcon2025.liveupdates.refresh"
    background_refresh_interval_minutes: int = 15
    background_work_seconds: float = 1.0

    # In-process host scheduler
    host_execution_window_seconds: float = 30.0
    host_max_pending_requests: int = 10
    host_poll_seconds: float = 1.0

    # Live stream
    stream_status_check_seconds: float = 30.0
    stream_reconnect_delay_seconds: float = 5.0

    # Local store
    store_directory: Path = Path("./data/AFCON2025")
    store_filename: str = "afcon2025.store"

    app_version: str = "1.0"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
