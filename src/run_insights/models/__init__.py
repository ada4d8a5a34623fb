"""Data models for run-insights."""

from .activity import (
    ActivityRecord,
    FilterReasons,
    FilterStats,
    RejectedRecord,
    WeatherSnapshot,
)
from .goals import (
    DistanceGoal,
    Goal,
    GoalCategory,
    GoalMilestone,
    GoalPriority,
    GoalProgress,
    GoalStatus,
    GoalTimeframe,
    GoalType,
    GoalValidationResult,
    PaceGoal,
    RunCountGoal,
    parse_goal,
)
from .insights import (
    DataQuality,
    Difficulty,
    Insight,
    InsightCategory,
    InsightConfig,
    InsightData,
    InsightFilter,
    InsightPriority,
    PrioritizationScore,
    Timeframe,
    Trend,
)

__all__ = [
    # Activity
    "ActivityRecord",
    "WeatherSnapshot",
    "FilterReasons",
    "FilterStats",
    "RejectedRecord",
    # Goals
    "Goal",
    "GoalType",
    "GoalPriority",
    "GoalStatus",
    "GoalCategory",
    "GoalTimeframe",
    "DistanceGoal",
    "PaceGoal",
    "RunCountGoal",
    "GoalMilestone",
    "GoalProgress",
    "GoalValidationResult",
    "parse_goal",
    # Insights
    "Insight",
    "InsightCategory",
    "InsightPriority",
    "InsightData",
    "InsightConfig",
    "InsightFilter",
    "PrioritizationScore",
    "DataQuality",
    "Difficulty",
    "Timeframe",
    "Trend",
]
