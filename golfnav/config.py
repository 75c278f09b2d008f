"""Configuration helpers for engine thresholds and storage locations."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _Settings(BaseSettings):
    tee_radius_m: float = Field(default=30.0, gt=0, alias="GOLFNAV_TEE_RADIUS_M")
    green_radius_m: float = Field(default=20.0, gt=0, alias="GOLFNAV_GREEN_RADIUS_M")
    fairway_half_width_m: float = Field(
        default=30.0, gt=0, alias="GOLFNAV_FAIRWAY_HALF_WIDTH_M"
    )
    hazard_radius_m: float = Field(default=10.0, gt=0, alias="GOLFNAV_HAZARD_RADIUS_M")
    course_radius_m: float = Field(default=2000.0, gt=0, alias="GOLFNAV_COURSE_RADIUS_M")
    # 10 yards
    min_shot_distance_m: float = Field(
        default=9.144, gt=0, alias="GOLFNAV_MIN_SHOT_DISTANCE_M"
    )

    course_cache_ttl_s: float = Field(
        default=3600.0, gt=0, alias="GOLFNAV_COURSE_CACHE_TTL_S"
    )
    course_cache_size: int = Field(default=128, ge=1, alias="GOLFNAV_COURSE_CACHE_SIZE")

    round_state_cap: int = Field(default=10_000, ge=1, alias="GOLFNAV_ROUND_STATE_CAP")
    round_state_idle_s: float = Field(
        default=21_600.0, gt=0, alias="GOLFNAV_ROUND_STATE_IDLE_S"
    )

    persist_retries: int = Field(default=3, ge=1, alias="GOLFNAV_PERSIST_RETRIES")
    persist_backoff_s: float = Field(
        default=0.05, ge=0, alias="GOLFNAV_PERSIST_BACKOFF_S"
    )

    locations_dir: str = Field(default="data/locations", alias="GOLFNAV_LOCATIONS_DIR")
    courses_dir: str | None = Field(default=None, alias="GOLFNAV_COURSES_DIR")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> _Settings:
    """Return cached application settings."""

    return _Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings (primarily for tests)."""

    get_settings.cache_clear()


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


__all__ = ["get_settings", "reset_settings_cache", "env_bool"]
