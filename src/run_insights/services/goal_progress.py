"""
Goal progress service.

This service:
- Measures the current value of a goal from quality-filtered records
- Compares it against a linear schedule to decide whether the goal is on track
- Projects a completion date from the observed progress rate
- Produces coaching insights and recommendations as plain strings

Everything is recomputed from ``(goal, records, now)`` on each call; nothing
is cached or persisted.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple, Union

from ..analysis.quality import filter_by_timeframe, filter_for_pace_goal
from ..config import Settings, get_settings
from ..exceptions import GoalPreconditionError, UnsupportedGoalTypeError
from ..models.activity import ActivityRecord
from ..models.goals import (
    DistanceGoal,
    GoalMilestone,
    GoalProgress,
    GoalType,
    GoalValidationResult,
    PaceGoal,
    RunCountGoal,
)
from ..utils.dates import to_local_naive
from ..utils.formatting import format_time


logger = logging.getLogger(__name__)


AnyGoal = Union[DistanceGoal, PaceGoal, RunCountGoal]

SECONDS_PER_DAY = 86400
MILESTONE_FRACTIONS = (0.25, 0.5, 0.75, 1.0)

# Sanity bounds used by validate_goal
MAX_DISTANCE_TARGET_M = 100_000_000  # 100,000 km
MIN_PACE_TARGET_SEC = 600
MAX_RUN_COUNT_TARGET = 1000

EXPECTED_UNITS = {
    GoalType.DISTANCE_TOTAL.value: "meters",
    GoalType.PACE_FOR_RACE_DISTANCE.value: "seconds",
    GoalType.RUN_COUNT.value: "runs",
}


def _ceil_days(delta: timedelta) -> int:
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


class GoalProgressCalculator:
    """
    Calculates progress toward distance, pace and run-count goals.

    Pace goals are binary: a qualifying effort at or under the target time
    is 100%, anything else is 0%.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the calculator.

        Args:
            settings: Application settings (defaults to get_settings())
        """
        settings = settings or get_settings()
        self.pace_tolerance = settings.pace_distance_tolerance
        self.on_track_tolerance = settings.on_track_tolerance
        self.projection_cap_factor = settings.projection_cap_factor

    # =========================================================================
    # Progress
    # =========================================================================

    def calculate_progress(
        self,
        goal: AnyGoal,
        records: Sequence[ActivityRecord],
        now: Optional[datetime] = None,
    ) -> GoalProgress:
        """
        Calculate progress for any goal type.

        Args:
            goal: Goal definition
            records: All activity records (quality filtering happens here)
            now: Evaluation time (defaults to the current local time)

        Returns:
            GoalProgress for this evaluation

        Raises:
            GoalPreconditionError: If the goal cannot be evaluated
        """
        now = to_local_naive(now) or datetime.now()

        if goal.target_date <= goal.created_at:
            raise GoalPreconditionError(
                "Target date must be after creation date",
                goal_id=goal.id,
                field="target_date",
            )
        if goal.target_value <= 0:
            raise GoalPreconditionError(
                "Target value must be greater than 0",
                goal_id=goal.id,
                field="target_value",
            )

        total_days = _ceil_days(goal.target_date - goal.created_at)
        days_remaining = _ceil_days(goal.target_date - now)
        days_elapsed = max(0, total_days - days_remaining)

        current_value = self._current_value(goal, records)
        progress = self._progress_percentage(goal, current_value)

        expected = (days_elapsed / total_days) * 100 if days_elapsed > 0 else 0.0
        is_on_track = progress >= expected * self.on_track_tolerance or progress >= 100

        insights = self._generate_insights(
            goal, current_value, progress, is_on_track, days_remaining, now
        )
        recommendations = self._generate_recommendations(
            goal, current_value, progress, is_on_track, days_remaining
        )
        projected = self._project_completion(goal, progress, days_elapsed, now)

        logger.debug(
            "Goal %s: value=%.1f progress=%.1f%% expected=%.1f%% on_track=%s",
            goal.id, current_value, progress, expected, is_on_track,
        )

        return GoalProgress(
            goal_id=goal.id,
            current_value=current_value,
            progress_percentage=progress,
            expected_progress=expected,
            is_on_track=is_on_track,
            projected_completion=projected,
            days_remaining=max(0, days_remaining),
            milestones=self._build_milestones(goal, current_value, progress),
            insights=insights,
            recommendations=recommendations,
        )

    def _current_value(self, goal: AnyGoal, records: Sequence[ActivityRecord]) -> float:
        if goal.type == GoalType.DISTANCE_TOTAL:
            window = filter_by_timeframe(records, goal.created_at, goal.target_date)
            return float(sum(r.distance for r in window))

        if goal.type == GoalType.RUN_COUNT:
            window = filter_by_timeframe(records, goal.created_at, goal.target_date)
            return float(len(window))

        if goal.type == GoalType.PACE_FOR_RACE_DISTANCE:
            if not goal.race_distance:
                raise GoalPreconditionError(
                    "Pace goal must have a race distance specified",
                    goal_id=goal.id,
                    field="race_distance",
                )
            comparable = filter_for_pace_goal(records, goal.race_distance, self.pace_tolerance)
            if not comparable:
                return 0.0
            return float(min(r.moving_time for r in comparable))

        raise UnsupportedGoalTypeError(goal.type)

    @staticmethod
    def _progress_percentage(goal: AnyGoal, current_value: float) -> float:
        if goal.type == GoalType.PACE_FOR_RACE_DISTANCE:
            # No partial credit for a race time
            return 100.0 if 0 < current_value <= goal.target_value else 0.0
        return max(0.0, min(100.0, (current_value / goal.target_value) * 100))

    def _project_completion(
        self,
        goal: AnyGoal,
        progress: float,
        days_elapsed: int,
        now: datetime,
    ) -> datetime:
        if progress >= 100:
            return now

        if progress == 0 or days_elapsed == 0:
            return goal.target_date

        rate = progress / days_elapsed  # percent per day
        days_to_complete = (100 - progress) / max(0.1, rate)
        projected = now + timedelta(days=days_to_complete)

        # Early rates are noisy, so never project past N x the planned duration
        planned = goal.target_date - goal.created_at
        latest = goal.created_at + planned * self.projection_cap_factor

        return min(projected, latest)

    @staticmethod
    def _build_milestones(
        goal: AnyGoal,
        current_value: float,
        progress: float,
    ) -> List[GoalMilestone]:
        span = goal.target_date - goal.created_at

        if goal.type == GoalType.PACE_FOR_RACE_DISTANCE:
            return [
                GoalMilestone(
                    title=f"Run {format_time(goal.target_value)}",
                    fraction=1.0,
                    target_value=goal.target_value,
                    target_date=goal.target_date,
                    is_completed=progress >= 100,
                )
            ]

        milestones = []
        for fraction in MILESTONE_FRACTIONS:
            target_value = goal.target_value * fraction
            milestones.append(
                GoalMilestone(
                    title=f"{fraction * 100:.0f}% of {goal.display_title}",
                    fraction=fraction,
                    target_value=target_value,
                    target_date=goal.created_at + span * fraction,
                    is_completed=current_value >= target_value,
                )
            )
        return milestones

    # =========================================================================
    # Coaching text
    # =========================================================================

    def _generate_insights(
        self,
        goal: AnyGoal,
        current_value: float,
        progress: float,
        is_on_track: bool,
        days_remaining: int,
        now: datetime,
    ) -> List[str]:
        insights = []
        title = goal.display_title

        if progress >= 100:
            insights.append(f"Congratulations! You've achieved your {title} goal!")
            if goal.type == GoalType.PACE_FOR_RACE_DISTANCE:
                insights.append(
                    f"Your best time: {format_time(current_value)} "
                    f"(target was {format_time(goal.target_value)})"
                )
        elif is_on_track:
            insights.append(
                f"You're on track to achieve your {title} goal with "
                f"{days_remaining} days remaining."
            )
            if progress > 50:
                insights.append(f"Great progress! You're {progress:.1f}% of the way there.")
        else:
            insights.append(
                f"You're behind schedule on your {title} goal. "
                f"{100 - progress:.0f}% remaining."
            )
            if days_remaining > 30:
                insights.append(
                    f"Don't worry, you still have {days_remaining} days to catch up!"
                )

        if 0 < progress < 100:
            days_since_start = max(1, _ceil_days(now - goal.created_at))
            rate = progress / days_since_start
            if rate > 0.5:
                insights.append(f"Strong momentum! You're making {rate:.1f}% progress per day.")
            elif rate > 0.1:
                insights.append(f"Steady progress at {rate:.1f}% per day.")

        return insights

    def _generate_recommendations(
        self,
        goal: AnyGoal,
        current_value: float,
        progress: float,
        is_on_track: bool,
        days_remaining: int,
    ) -> List[str]:
        if progress >= 100:
            return [
                "Consider setting a more ambitious goal to keep challenging yourself!"
            ]

        recommendations = []

        if not is_on_track and days_remaining > 0:
            recommendations.extend(
                self._catch_up_advice(goal, current_value, days_remaining)
            )
        elif is_on_track:
            recommendations.append(
                "Keep up your current training approach - you're doing great!"
            )
            recommendations.append(self._maintenance_advice(goal))

        if days_remaining < 30 and progress < 80:
            recommendations.append(
                "Less than 30 days left - consider adjusting your goal to be more realistic."
            )
        elif days_remaining < 7 and progress < 95:
            recommendations.append(
                "Final week push! Focus on consistency rather than intensity."
            )

        return recommendations

    @staticmethod
    def _catch_up_advice(
        goal: AnyGoal, current_value: float, days_remaining: int
    ) -> List[str]:
        advice = []

        if goal.type == GoalType.DISTANCE_TOTAL:
            daily_km = (goal.target_value - current_value) / 1000 / days_remaining
            if daily_km > 10:
                advice.append(
                    f"You need {daily_km:.1f}km per day - consider adjusting your goal timeline."
                )
            else:
                advice.append(f"Run {daily_km:.1f}km per day to get back on track.")
                if daily_km > 5:
                    advice.append(
                        "Try splitting into 2 shorter runs per day to make it manageable."
                    )

        elif goal.type == GoalType.RUN_COUNT:
            runs_per_week = (goal.target_value - current_value) / days_remaining * 7
            needed = math.ceil(runs_per_week)
            if runs_per_week > 7:
                advice.append(
                    f"You need {needed} runs per week - consider adjusting your goal."
                )
            else:
                advice.append(f"Aim for {needed} runs per week to stay on track.")
                if runs_per_week > 4:
                    advice.append(
                        "Include shorter, easier runs to maintain consistency without burnout."
                    )

        elif goal.type == GoalType.PACE_FOR_RACE_DISTANCE:
            current_best = (
                format_time(current_value) if current_value > 0 else "No qualifying runs yet"
            )
            advice.append(
                f"Current best: {current_best}, target: {format_time(goal.target_value)}"
            )
            advice.append("Include interval training: 4x800m at target pace with 2min rest.")
            advice.append("Add tempo runs at slightly slower than target pace to build endurance.")
            if current_value > goal.target_value * 1.2:
                advice.append("Focus on speed work - you need significant pace improvement.")

        return advice

    @staticmethod
    def _maintenance_advice(goal: AnyGoal) -> str:
        if goal.type == GoalType.DISTANCE_TOTAL:
            return (
                "Maintain your current weekly mileage and consider adding variety "
                "to your routes."
            )
        if goal.type == GoalType.RUN_COUNT:
            return "Great consistency! Consider gradually increasing your run distances."
        return "Continue your speed work and consider race simulation runs."

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_goal(
        self,
        goal: AnyGoal,
        now: Optional[datetime] = None,
    ) -> GoalValidationResult:
        """
        Check a goal definition for obvious problems.

        Advisory only: callers decide whether to block goal creation.

        Args:
            goal: Goal definition
            now: Reference time for the "in the future" check

        Returns:
            GoalValidationResult with all detected errors
        """
        now = to_local_naive(now) or datetime.now()
        errors = []

        if goal.target_value <= 0:
            errors.append("Target value must be greater than 0")

        if goal.target_date <= goal.created_at:
            errors.append("Target date must be after creation date")

        if goal.target_date <= now:
            errors.append("Target date must be in the future")

        expected_unit = EXPECTED_UNITS.get(goal.type)
        if expected_unit is None:
            errors.append(f"Unsupported goal type: {goal.type}")
        elif goal.unit != expected_unit:
            errors.append(f"{_type_label(goal.type)} goals must use {expected_unit} as unit")

        if goal.type == GoalType.DISTANCE_TOTAL:
            if goal.target_value > MAX_DISTANCE_TARGET_M:
                errors.append("Distance target seems unrealistic")

        elif goal.type == GoalType.PACE_FOR_RACE_DISTANCE:
            if not goal.race_distance:
                errors.append("Pace goals must specify race distance")
            if goal.target_value < MIN_PACE_TARGET_SEC:
                errors.append("Pace target seems unrealistic")

        elif goal.type == GoalType.RUN_COUNT:
            if goal.target_value > MAX_RUN_COUNT_TARGET:
                errors.append("Runs target seems unrealistic")

        return GoalValidationResult(is_valid=not errors, errors=errors)


def _type_label(goal_type: str) -> str:
    labels = {
        GoalType.DISTANCE_TOTAL.value: "Distance",
        GoalType.PACE_FOR_RACE_DISTANCE.value: "Pace",
        GoalType.RUN_COUNT.value: "Run count",
    }
    return labels.get(goal_type, str(goal_type))


def format_goal_progress(progress: GoalProgress) -> str:
    """Short progress label, e.g. '42.5% complete'."""
    return f"{progress.progress_percentage:.1f}% complete"


# ============================================================================
# Factory function for dependency injection
# ============================================================================

_goal_progress_calculator: Optional[GoalProgressCalculator] = None


def get_goal_progress_calculator() -> GoalProgressCalculator:
    """Get or create the goal progress calculator singleton."""
    global _goal_progress_calculator
    if _goal_progress_calculator is None:
        _goal_progress_calculator = GoalProgressCalculator()
    return _goal_progress_calculator


def reset_goal_progress_calculator() -> None:
    """Reset the calculator singleton (for testing)."""
    global _goal_progress_calculator
    _goal_progress_calculator = None


def calculate_progress(
    goal: AnyGoal,
    records: Sequence[ActivityRecord],
    now: Optional[datetime] = None,
) -> GoalProgress:
    """Calculate goal progress with the default calculator."""
    return get_goal_progress_calculator().calculate_progress(goal, records, now)


def validate_goal(goal: AnyGoal, now: Optional[datetime] = None) -> GoalValidationResult:
    """Validate a goal with the default calculator."""
    return get_goal_progress_calculator().validate_goal(goal, now)
