"""Configuration settings for run-insights."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Analytics settings loaded from environment variables.

    Every value can be overridden with a ``RUN_INSIGHTS_`` prefixed variable,
    e.g. ``RUN_INSIGHTS_MAX_INSIGHTS=5``. List values are given as JSON.
    """

    # Insight engine
    min_sample_size: int = 3
    min_confidence: float = 0.6
    max_insights: int = 7  # 7 +/- 2
    include_achievements: bool = True
    athlete_age: int = 35  # Used for the 220 - age max HR estimate

    # Milestone bands (tunable)
    distance_milestones_km: List[float] = [100, 250, 500, 1000, 2000]
    run_count_milestones: List[int] = [10, 25, 50, 100, 200]

    # Goal progress
    pace_distance_tolerance: float = 0.10
    on_track_tolerance: float = 0.9
    projection_cap_factor: float = 2.0

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RUN_INSIGHTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
