"""Goal models.

A goal is a tagged variant keyed by ``type``. Each variant carries only the
fields that make sense for it (race distance for pace goals, timeframe for
run-count goals) and the calculator dispatches on the tag.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from ..utils.dates import to_local_naive


class GoalType(str, Enum):
    """Supported goal types."""
    DISTANCE_TOTAL = "distance-total"
    PACE_FOR_RACE_DISTANCE = "pace-for-race-distance"
    RUN_COUNT = "run-count"


class GoalPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    FAILED = "failed"


class GoalCategory(str, Enum):
    ANNUAL = "annual"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    RACE_SPECIFIC = "race_specific"


class GoalTimeframe(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class _GoalBase(BaseModel):
    """Fields shared by every goal variant."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    target_value: float
    target_date: datetime
    created_at: datetime
    priority: GoalPriority = GoalPriority.MEDIUM
    status: GoalStatus = GoalStatus.ACTIVE
    category: Optional[GoalCategory] = None

    @field_validator("target_date", "created_at")
    @classmethod
    def strip_timezone(cls, v: datetime) -> datetime:
        """Goal dates are local wall-clock times, like activity start times."""
        return to_local_naive(v)

    @property
    def display_title(self) -> str:
        return self.title or self.id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")


class DistanceGoal(_GoalBase):
    """Total distance to cover before the target date (e.g. 1000 km in a year)."""

    type: Literal["distance-total"] = "distance-total"
    unit: str = "meters"


class PaceGoal(_GoalBase):
    """Target time for a race distance (e.g. 5K under 25 minutes)."""

    type: Literal["pace-for-race-distance"] = "pace-for-race-distance"
    unit: str = "seconds"
    race_distance: Optional[float] = None  # meters


class RunCountGoal(_GoalBase):
    """Number of runs to complete before the target date."""

    type: Literal["run-count"] = "run-count"
    unit: str = "runs"
    timeframe: Optional[GoalTimeframe] = None


Goal = Annotated[
    Union[DistanceGoal, PaceGoal, RunCountGoal],
    Field(discriminator="type"),
]

_goal_adapter: TypeAdapter = TypeAdapter(Goal)


def parse_goal(data: Dict[str, Any]) -> Union[DistanceGoal, PaceGoal, RunCountGoal]:
    """Build the goal variant matching ``data["type"]``.

    Raises:
        pydantic.ValidationError: If the payload is malformed or the type unknown
    """
    return _goal_adapter.validate_python(data)


class GoalMilestone(BaseModel):
    """A checkpoint on the way to a goal."""

    model_config = ConfigDict(frozen=True)

    title: str
    fraction: float  # 0.25, 0.5, ...
    target_value: float
    target_date: datetime
    is_completed: bool = False


class GoalProgress(BaseModel):
    """Progress toward a goal, recomputed on every call."""

    model_config = ConfigDict(frozen=True)

    goal_id: str
    current_value: float = 0.0
    progress_percentage: float = 0.0
    expected_progress: float = 0.0
    is_on_track: bool = False
    projected_completion: datetime
    days_remaining: int = 0
    milestones: List[GoalMilestone] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")


class GoalValidationResult(BaseModel):
    """Outcome of advisory goal validation."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
