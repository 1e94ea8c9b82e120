"""Configuration settings for the Coach Running engine."""

from pathlib import Path
from functools import lru_cache
from typing import Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/coach_running/config.py
PACKAGE_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COACH_",
        env_file=str(PACKAGE_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Strava
    strava_base_url: str = "https://www.strava.com/api/v3"
    strava_timeout_seconds: float = 30.0
    activity_fetch_timeout_seconds: float = 30.0

    # Activity types that count as a done running session
    running_activity_types: List[str] = ["Run", "TrailRun", "VirtualRun"]

    # Running-equivalent aerobic load per minute of cross-training.
    # Types absent from this table (strength, yoga...) contribute nothing.
    cross_training_coefficients: Dict[str, float] = {
        "Ride": 0.5,
        "VirtualRide": 0.5,
        "EBikeRide": 0.25,
        "Swim": 0.6,
        "Rowing": 0.6,
        "Elliptical": 0.7,
        "NordicSki": 0.7,
        "InlineSkate": 0.5,
        "Hike": 0.4,
        "Walk": 0.3,
    }

    # Planned session types that are not running sessions
    non_running_session_types: List[str] = ["Renforcement"]

    # Cross-training credit toward missed running sessions
    cross_training_minutes_per_session: float = 45.0
    cross_training_credit_ratio: float = 0.5

    # Equivalent minutes that temper a REDUCE/RECOVERY verdict by one level
    cross_training_override_minutes: float = 60.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
