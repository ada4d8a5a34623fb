"""Activity record models.

Records are owned by the ingestion side of the product; the analytics only
ever read them, so the models are frozen.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.dates import to_local_naive


class WeatherSnapshot(BaseModel):
    """Weather conditions at the start of a run."""

    model_config = ConfigDict(frozen=True)

    temperature: Optional[float] = None  # Celsius
    humidity: Optional[float] = None  # Percent
    wind_speed: Optional[float] = None  # m/s
    condition: Optional[str] = None


class ActivityRecord(BaseModel):
    """One completed run as delivered by the sync layer."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    distance: float  # meters
    moving_time: float  # seconds
    elapsed_time: Optional[float] = None  # seconds
    start_date_local: datetime
    average_heartrate: Optional[float] = None
    total_elevation_gain: Optional[float] = None  # meters
    weather: Optional[WeatherSnapshot] = None
    location: Optional[str] = None

    @field_validator("start_date_local")
    @classmethod
    def strip_timezone(cls, v: datetime) -> datetime:
        """Keep the local wall-clock time, ignoring any UTC offset tag."""
        return to_local_naive(v)

    @property
    def distance_km(self) -> float:
        return self.distance / 1000

    @property
    def pace_per_km(self) -> Optional[float]:
        """Pace in seconds per kilometer, None when undefined."""
        if self.distance <= 0 or self.moving_time <= 0:
            return None
        return self.moving_time / (self.distance / 1000)

    @property
    def speed_kmh(self) -> Optional[float]:
        """Average moving speed in km/h, None when undefined."""
        if self.distance <= 0 or self.moving_time <= 0:
            return None
        return (self.distance / 1000) / (self.moving_time / 3600)

    @property
    def temperature(self) -> Optional[float]:
        return self.weather.temperature if self.weather else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")


class RejectedRecord(BaseModel):
    """A record dropped by the quality filter, with the reasons why."""

    model_config = ConfigDict(frozen=True)

    record: ActivityRecord
    reasons: List[str] = Field(default_factory=list)
    pace: Optional[float] = None  # sec/km


class FilterReasons(BaseModel):
    """Per-reason rejection counts."""

    distance_outliers: int = 0
    time_invalid: int = 0
    pace_outliers: int = 0
    speed_outliers: int = 0
    elevation_outliers: int = 0


class FilterStats(BaseModel):
    """Diagnostic summary of a quality filter pass."""

    total: int = 0
    valid: int = 0
    filtered: int = 0
    filter_reasons: FilterReasons = Field(default_factory=FilterReasons)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
