"""Shared fixtures for run-insights tests."""

from datetime import datetime, timedelta

import pytest

from run_insights.config import get_settings
from run_insights.models.activity import ActivityRecord, WeatherSnapshot
from run_insights.models.insights import InsightConfig
from run_insights.services.goal_progress import reset_goal_progress_calculator
from run_insights.services.insight_engine import reset_insight_engine


def build_record(
    start: datetime,
    distance: float = 5000,
    pace: float = 330,
    moving_time: float = None,
    heartrate: float = None,
    temperature: float = None,
    elevation: float = None,
    record_id: str = None,
) -> ActivityRecord:
    """Build a record from a distance (m) and pace (sec/km)."""
    if moving_time is None:
        moving_time = distance / 1000 * pace
    return ActivityRecord(
        id=record_id,
        distance=distance,
        moving_time=moving_time,
        elapsed_time=moving_time,
        start_date_local=start,
        average_heartrate=heartrate,
        total_elevation_gain=elevation,
        weather=WeatherSnapshot(temperature=temperature) if temperature is not None else None,
    )


@pytest.fixture
def make_record():
    """Factory for activity records."""
    return build_record


@pytest.fixture
def make_series():
    """Factory for a run every ``spacing_days`` starting at ``start``."""
    def _series(count, start=datetime(2024, 1, 1, 7, 0), spacing_days=2, **kwargs):
        return [
            build_record(start + timedelta(days=i * spacing_days), **kwargs)
            for i in range(count)
        ]
    return _series


@pytest.fixture
def default_config():
    """Engine configuration with built-in defaults."""
    return InsightConfig()


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Fresh settings and services for every test."""
    get_settings.cache_clear()
    reset_goal_progress_calculator()
    reset_insight_engine()
    yield
    get_settings.cache_clear()
    reset_goal_progress_calculator()
    reset_insight_engine()
