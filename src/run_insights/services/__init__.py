"""Services for goal progress and insight generation."""

from .goal_progress import (
    GoalProgressCalculator,
    calculate_progress,
    format_goal_progress,
    get_goal_progress_calculator,
    reset_goal_progress_calculator,
    validate_goal,
)
from .insight_engine import (
    InsightEngine,
    generate_insights,
    get_insight_categories,
    get_insight_engine,
    reset_insight_engine,
)

__all__ = [
    "GoalProgressCalculator",
    "calculate_progress",
    "validate_goal",
    "format_goal_progress",
    "get_goal_progress_calculator",
    "reset_goal_progress_calculator",
    "InsightEngine",
    "generate_insights",
    "get_insight_categories",
    "get_insight_engine",
    "reset_insight_engine",
]
