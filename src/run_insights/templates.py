"""
Goal templates.

Pre-defined popular running goals that can be turned into goal definitions
with a single call.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

from .exceptions import TemplateNotFoundError
from .models.goals import (
    DistanceGoal,
    GoalCategory,
    GoalPriority,
    GoalType,
    PaceGoal,
    RunCountGoal,
)
from .models.insights import Difficulty


class GoalTemplate(BaseModel):
    """A ready-made goal definition."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: GoalType
    title: str
    description: str
    target_value: float
    unit: str
    timeframe: GoalCategory
    priority: GoalPriority
    difficulty: Difficulty
    estimated_time_commitment: str  # e.g. "3-4 hours/week"
    race_distance: Optional[float] = None  # meters, pace goals only


DISTANCE_TEMPLATES: List[GoalTemplate] = [
    GoalTemplate(
        id="distance-500km-annual",
        type=GoalType.DISTANCE_TOTAL,
        title="500km this year",
        description="A great starting goal for new runners - 500km throughout the year",
        target_value=500_000,
        unit="meters",
        timeframe=GoalCategory.ANNUAL,
        priority=GoalPriority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time_commitment="2-3 hours/week",
    ),
    GoalTemplate(
        id="distance-1000km-annual",
        type=GoalType.DISTANCE_TOTAL,
        title="1000km this year",
        description="Run 1000 kilometers throughout the year - a classic annual distance goal",
        target_value=1_000_000,
        unit="meters",
        timeframe=GoalCategory.ANNUAL,
        priority=GoalPriority.MEDIUM,
        difficulty=Difficulty.MODERATE,
        estimated_time_commitment="4-5 hours/week",
    ),
    GoalTemplate(
        id="distance-2500km-annual",
        type=GoalType.DISTANCE_TOTAL,
        title="2500km this year",
        description="Challenge yourself with 2500 kilometers in a year - for serious runners",
        target_value=2_500_000,
        unit="meters",
        timeframe=GoalCategory.ANNUAL,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.CHALLENGING,
        estimated_time_commitment="8-10 hours/week",
    ),
    GoalTemplate(
        id="distance-100km-monthly",
        type=GoalType.DISTANCE_TOTAL,
        title="100km this month",
        description="Run 100 kilometers in a single month",
        target_value=100_000,
        unit="meters",
        timeframe=GoalCategory.MONTHLY,
        priority=GoalPriority.MEDIUM,
        difficulty=Difficulty.MODERATE,
        estimated_time_commitment="4-5 hours/week",
    ),
    GoalTemplate(
        id="distance-200km-monthly",
        type=GoalType.DISTANCE_TOTAL,
        title="200km this month",
        description="Challenge yourself with 200km in one month",
        target_value=200_000,
        unit="meters",
        timeframe=GoalCategory.MONTHLY,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.CHALLENGING,
        estimated_time_commitment="8-10 hours/week",
    ),
]

PACE_TEMPLATES: List[GoalTemplate] = [
    GoalTemplate(
        id="pace-5k-30min",
        type=GoalType.PACE_FOR_RACE_DISTANCE,
        title="5K under 30 minutes",
        description="Break the 30-minute barrier for a 5K race - a popular milestone",
        target_value=1800,
        unit="seconds",
        timeframe=GoalCategory.RACE_SPECIFIC,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.EASY,
        estimated_time_commitment="3-4 hours/week",
        race_distance=5000,
    ),
    GoalTemplate(
        id="pace-5k-25min",
        type=GoalType.PACE_FOR_RACE_DISTANCE,
        title="5K under 25 minutes",
        description="Achieve a sub-25 minute 5K - a solid intermediate goal",
        target_value=1500,
        unit="seconds",
        timeframe=GoalCategory.RACE_SPECIFIC,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.MODERATE,
        estimated_time_commitment="4-5 hours/week",
        race_distance=5000,
    ),
    GoalTemplate(
        id="pace-5k-20min",
        type=GoalType.PACE_FOR_RACE_DISTANCE,
        title="5K under 20 minutes",
        description="Elite level 5K time - sub-20 minutes is a serious achievement",
        target_value=1200,
        unit="seconds",
        timeframe=GoalCategory.RACE_SPECIFIC,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.CHALLENGING,
        estimated_time_commitment="6-8 hours/week",
        race_distance=5000,
    ),
    GoalTemplate(
        id="pace-10k-60min",
        type=GoalType.PACE_FOR_RACE_DISTANCE,
        title="10K under 60 minutes",
        description="Complete a 10K in under an hour",
        target_value=3600,
        unit="seconds",
        timeframe=GoalCategory.RACE_SPECIFIC,
        priority=GoalPriority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time_commitment="3-4 hours/week",
        race_distance=10000,
    ),
    GoalTemplate(
        id="pace-10k-50min",
        type=GoalType.PACE_FOR_RACE_DISTANCE,
        title="10K under 50 minutes",
        description="A strong 10K time for dedicated recreational runners",
        target_value=3000,
        unit="seconds",
        timeframe=GoalCategory.RACE_SPECIFIC,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.MODERATE,
        estimated_time_commitment="4-6 hours/week",
        race_distance=10000,
    ),
    GoalTemplate(
        id="pace-half-2hours",
        type=GoalType.PACE_FOR_RACE_DISTANCE,
        title="Half marathon under 2 hours",
        description="The classic sub-2 half marathon",
        target_value=7200,
        unit="seconds",
        timeframe=GoalCategory.RACE_SPECIFIC,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.MODERATE,
        estimated_time_commitment="5-6 hours/week",
        race_distance=21097,
    ),
    GoalTemplate(
        id="pace-marathon-4hours",
        type=GoalType.PACE_FOR_RACE_DISTANCE,
        title="Marathon under 4 hours",
        description="Break 4 hours in the marathon",
        target_value=14400,
        unit="seconds",
        timeframe=GoalCategory.RACE_SPECIFIC,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.CHALLENGING,
        estimated_time_commitment="6-8 hours/week",
        race_distance=42195,
    ),
]

RUN_COUNT_TEMPLATES: List[GoalTemplate] = [
    GoalTemplate(
        id="runs-12-monthly",
        type=GoalType.RUN_COUNT,
        title="12 runs this month",
        description="Three runs a week for a month - builds a lasting habit",
        target_value=12,
        unit="runs",
        timeframe=GoalCategory.MONTHLY,
        priority=GoalPriority.MEDIUM,
        difficulty=Difficulty.EASY,
        estimated_time_commitment="2-3 hours/week",
    ),
    GoalTemplate(
        id="runs-100-annual",
        type=GoalType.RUN_COUNT,
        title="100 runs this year",
        description="Two runs a week, all year long",
        target_value=100,
        unit="runs",
        timeframe=GoalCategory.ANNUAL,
        priority=GoalPriority.MEDIUM,
        difficulty=Difficulty.MODERATE,
        estimated_time_commitment="2-3 hours/week",
    ),
    GoalTemplate(
        id="runs-200-annual",
        type=GoalType.RUN_COUNT,
        title="200 runs this year",
        description="Four runs a week for a year - serious consistency",
        target_value=200,
        unit="runs",
        timeframe=GoalCategory.ANNUAL,
        priority=GoalPriority.HIGH,
        difficulty=Difficulty.CHALLENGING,
        estimated_time_commitment="4-6 hours/week",
    ),
]

ALL_TEMPLATES: List[GoalTemplate] = DISTANCE_TEMPLATES + PACE_TEMPLATES + RUN_COUNT_TEMPLATES

POPULAR_TEMPLATE_IDS = [
    "distance-1000km-annual",
    "pace-5k-25min",
    "pace-10k-50min",
    "pace-half-2hours",
    "runs-100-annual",
]


def get_template(template_id: str) -> GoalTemplate:
    """Look up a template by id.

    Raises:
        TemplateNotFoundError: If no template has this id
    """
    for template in ALL_TEMPLATES:
        if template.id == template_id:
            return template
    raise TemplateNotFoundError(template_id)


def get_templates_by_type(goal_type: GoalType) -> List[GoalTemplate]:
    return [t for t in ALL_TEMPLATES if t.type == goal_type]


def get_templates_by_difficulty(difficulty: Difficulty) -> List[GoalTemplate]:
    return [t for t in ALL_TEMPLATES if t.difficulty == difficulty]


def get_popular_templates() -> List[GoalTemplate]:
    return [get_template(template_id) for template_id in POPULAR_TEMPLATE_IDS]


def template_to_goal(
    template: GoalTemplate,
    goal_id: str,
    target_date: datetime,
    created_at: Optional[datetime] = None,
) -> Union[DistanceGoal, PaceGoal, RunCountGoal]:
    """Instantiate a goal from a template."""
    common = dict(
        id=goal_id,
        title=template.title,
        description=template.description,
        target_value=template.target_value,
        unit=template.unit,
        target_date=target_date,
        created_at=created_at or datetime.now(),
        priority=template.priority,
        category=template.timeframe,
    )

    if template.type == GoalType.DISTANCE_TOTAL:
        return DistanceGoal(**common)
    if template.type == GoalType.PACE_FOR_RACE_DISTANCE:
        return PaceGoal(race_distance=template.race_distance, **common)
    return RunCountGoal(**common)
