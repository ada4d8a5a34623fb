"""Insight models for the actionable insights engine.

Provides data models for:
- Insights (finding / interpretation / recommendation triples)
- Prioritization scores
- Engine configuration and post-hoc filter criteria
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import Settings


class InsightCategory(str, Enum):
    """Insight categories."""
    PERFORMANCE = "performance"
    CONSISTENCY = "consistency"
    HEALTH = "health"
    TRAINING = "training"
    ACHIEVEMENT = "achievement"


class InsightPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DataQuality(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"


class Timeframe(str, Enum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short-term"
    LONG_TERM = "long-term"


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


# ==============================================================================
# Insight Models
# ==============================================================================

class InsightData(BaseModel):
    """Raw numbers behind an insight."""

    model_config = ConfigDict(frozen=True)

    current: Optional[float] = None
    previous: Optional[float] = None
    target: Optional[float] = None
    trend: Optional[Trend] = None
    unit: str = ""


class Insight(BaseModel):
    """A scored, human-readable finding about recent training."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    category: InsightCategory
    priority: InsightPriority

    finding: str  # What the data shows
    interpretation: str  # What it means
    recommendation: str  # What to do about it

    confidence: float = Field(ge=0.0, le=1.0)
    sample_size: int = 0
    data_quality: DataQuality = DataQuality.MEDIUM

    actionable: bool = True
    difficulty: Difficulty = Difficulty.EASY
    timeframe: Timeframe = Timeframe.SHORT_TERM

    data: InsightData = Field(default_factory=InsightData)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")


class PrioritizationScore(BaseModel):
    """Breakdown of how an insight was ranked. All components are 0-1."""

    model_config = ConfigDict(frozen=True)

    impact_score: float  # Potential performance improvement
    confidence_score: float  # Data reliability
    actionability_score: float  # How easily the runner can act on it
    urgency_score: float  # How time-sensitive it is
    total_score: float  # Weighted combination


# ==============================================================================
# Configuration and Filtering
# ==============================================================================

class InsightConfig(BaseModel):
    """Configuration for insight generation."""

    min_sample_size: int = 3
    min_confidence: float = 0.6
    max_insights: int = 7
    include_achievements: bool = True
    athlete_age: int = 35
    distance_milestones_km: List[float] = Field(
        default_factory=lambda: [100, 250, 500, 1000, 2000]
    )
    run_count_milestones: List[int] = Field(
        default_factory=lambda: [10, 25, 50, 100, 200]
    )

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "InsightConfig":
        """Build a config from application settings; explicit overrides win."""
        values: Dict[str, Any] = {
            "min_sample_size": settings.min_sample_size,
            "min_confidence": settings.min_confidence,
            "max_insights": settings.max_insights,
            "include_achievements": settings.include_achievements,
            "athlete_age": settings.athlete_age,
            "distance_milestones_km": list(settings.distance_milestones_km),
            "run_count_milestones": list(settings.run_count_milestones),
        }
        values.update(overrides)
        return cls(**values)


class InsightFilter(BaseModel):
    """Criteria for narrowing an already ranked insight list."""

    categories: List[InsightCategory] = Field(default_factory=list)
    priorities: List[InsightPriority] = Field(default_factory=list)
    min_confidence: Optional[float] = None
    only_actionable: bool = False
    timeframes: List[Timeframe] = Field(default_factory=list)
    difficulties: List[Difficulty] = Field(default_factory=list)
