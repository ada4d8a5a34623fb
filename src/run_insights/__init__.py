"""
run-insights: running analytics core.

Quality-filters activity records, tracks goal progress and surfaces a short
ranked list of actionable training insights.
"""

from .config import Settings, get_settings
from .exceptions import (
    ErrorCode,
    GoalPreconditionError,
    NotFoundError,
    RunInsightsError,
    TemplateNotFoundError,
    UnsupportedGoalTypeError,
    ValidationError,
)
from .models import (
    ActivityRecord,
    DistanceGoal,
    FilterStats,
    Goal,
    GoalProgress,
    GoalType,
    Insight,
    InsightCategory,
    InsightConfig,
    InsightFilter,
    PaceGoal,
    RunCountGoal,
    parse_goal,
)
from .services import (
    GoalProgressCalculator,
    InsightEngine,
    calculate_progress,
    generate_insights,
    validate_goal,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "ErrorCode",
    "RunInsightsError",
    "ValidationError",
    "GoalPreconditionError",
    "UnsupportedGoalTypeError",
    "NotFoundError",
    "TemplateNotFoundError",
    "ActivityRecord",
    "FilterStats",
    "Goal",
    "GoalType",
    "DistanceGoal",
    "PaceGoal",
    "RunCountGoal",
    "GoalProgress",
    "parse_goal",
    "Insight",
    "InsightCategory",
    "InsightConfig",
    "InsightFilter",
    "GoalProgressCalculator",
    "InsightEngine",
    "calculate_progress",
    "validate_goal",
    "generate_insights",
]
