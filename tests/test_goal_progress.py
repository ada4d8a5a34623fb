"""Tests for the Goal Progress service."""

from datetime import datetime, timedelta, timezone

import pydantic
import pytest

from run_insights.config import Settings
from run_insights.exceptions import (
    ErrorCode,
    GoalPreconditionError,
    UnsupportedGoalTypeError,
)
from run_insights.models.activity import ActivityRecord
from run_insights.models.goals import (
    DistanceGoal,
    PaceGoal,
    RunCountGoal,
    parse_goal,
)
from run_insights.services.goal_progress import (
    GoalProgressCalculator,
    calculate_progress,
    format_goal_progress,
    get_goal_progress_calculator,
    reset_goal_progress_calculator,
    validate_goal,
)


# ============================================================================
# Fixtures
# ============================================================================

JAN_1 = datetime(2024, 1, 1)
JAN_END = datetime(2024, 1, 31, 23, 59, 59)


@pytest.fixture
def calculator():
    """Calculator with default settings."""
    return GoalProgressCalculator(Settings())


@pytest.fixture
def january_distance_goal():
    """100 km during January."""
    return DistanceGoal(
        id="jan-100k",
        title="100km in January",
        target_value=100_000,
        created_at=JAN_1,
        target_date=JAN_END,
    )


@pytest.fixture
def five_k_goal():
    """5K under 25 minutes by June."""
    return PaceGoal(
        id="5k-sub-25",
        title="5K under 25 minutes",
        target_value=1500,
        race_distance=5000,
        created_at=JAN_1,
        target_date=datetime(2024, 6, 1),
    )


@pytest.fixture
def half_of_january(make_record):
    """Ten 5 km runs in the first half of January (50 km)."""
    return [
        make_record(datetime(2024, 1, 2 + i, 7, 0), distance=5000)
        for i in range(10)
    ]


# ============================================================================
# Distance goals
# ============================================================================

class TestDistanceGoalProgress:
    """Tests for distance-total goals."""

    def test_halfway_on_day_sixteen_is_on_track(
        self, calculator, january_distance_goal, half_of_january
    ):
        """50 km of 100 km on Jan 16 is on track with ~48% expected."""
        progress = calculator.calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        )

        assert progress.current_value == 50_000
        assert progress.progress_percentage == pytest.approx(50)
        assert 45 <= progress.expected_progress <= 50
        assert progress.is_on_track is True
        assert progress.days_remaining == 16

    def test_on_track_messages(self, calculator, january_distance_goal, half_of_january):
        """On-track goals get encouragement and a momentum note."""
        progress = calculator.calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        )

        assert progress.insights[0] == (
            "You're on track to achieve your 100km in January goal with 16 days remaining."
        )
        assert any(line.startswith("Strong momentum!") for line in progress.insights)
        assert progress.recommendations[0].startswith("Keep up your current training approach")

    def test_projection_from_current_rate(
        self, calculator, january_distance_goal, half_of_january
    ):
        """Half done in 15 days projects completion 15 days later."""
        progress = calculator.calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        )

        expected = datetime(2024, 1, 31)
        assert abs(progress.projected_completion - expected) < timedelta(minutes=1)

    def test_milestones(self, calculator, january_distance_goal, half_of_january):
        """Quarter milestones are completed as distance accumulates."""
        progress = calculator.calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        )

        assert [m.fraction for m in progress.milestones] == [0.25, 0.5, 0.75, 1.0]
        assert [m.is_completed for m in progress.milestones] == [True, True, False, False]
        assert progress.milestones[-1].target_date == JAN_END

    def test_records_outside_window_ignored(
        self, calculator, january_distance_goal, make_record
    ):
        """Only runs between creation and target date count."""
        records = [
            make_record(datetime(2023, 12, 30), distance=20_000),
            make_record(datetime(2024, 1, 5), distance=10_000),
            make_record(datetime(2024, 2, 2), distance=20_000),
        ]
        progress = calculator.calculate_progress(
            january_distance_goal, records, now=datetime(2024, 1, 10)
        )
        assert progress.current_value == 10_000

    def test_dirty_records_ignored(self, calculator, january_distance_goal, make_record):
        """A 300 m record never counts toward a goal."""
        records = [make_record(datetime(2024, 1, 5), distance=300)]
        progress = calculator.calculate_progress(
            january_distance_goal, records, now=datetime(2024, 1, 10)
        )
        assert progress.current_value == 0

    def test_behind_schedule(self, calculator, january_distance_goal, make_record):
        """10 km by Jan 21 is behind and gets catch-up advice."""
        records = [make_record(datetime(2024, 1, 3), distance=10_000)]
        progress = calculator.calculate_progress(
            january_distance_goal, records, now=datetime(2024, 1, 21)
        )

        assert progress.is_on_track is False
        assert progress.insights[0] == (
            "You're behind schedule on your 100km in January goal. 90% remaining."
        )
        assert "Steady progress at 0.5% per day." in progress.insights
        assert progress.recommendations[0] == "Run 8.2km per day to get back on track."
        assert progress.recommendations[1].startswith("Try splitting into 2 shorter runs")

    def test_progress_capped_at_100(self, calculator, january_distance_goal, make_record):
        """Overshooting the target still reports 100%."""
        records = [
            make_record(datetime(2024, 1, 2 + i), distance=20_000) for i in range(8)
        ]
        now = datetime(2024, 1, 12)
        progress = calculator.calculate_progress(january_distance_goal, records, now=now)

        assert progress.progress_percentage == 100
        assert progress.is_on_track is True
        assert progress.projected_completion == now
        assert progress.insights[0].startswith("Congratulations!")
        assert progress.recommendations == [
            "Consider setting a more ambitious goal to keep challenging yourself!"
        ]

    def test_projection_is_capped(self, calculator, make_record):
        """Slow starts never project beyond twice the planned duration."""
        goal = DistanceGoal(
            id="ten-day",
            target_value=100_000,
            created_at=JAN_1,
            target_date=datetime(2024, 1, 11),
        )
        records = [make_record(datetime(2024, 1, 2), distance=1000)]
        progress = calculator.calculate_progress(goal, records, now=datetime(2024, 1, 11))

        assert progress.projected_completion == datetime(2024, 1, 21)

    def test_no_progress_projects_target_date(self, calculator, january_distance_goal):
        """With zero progress the projection falls back to the target date."""
        progress = calculator.calculate_progress(
            january_distance_goal, [], now=datetime(2024, 1, 10)
        )
        assert progress.projected_completion == JAN_END

    def test_creation_day_has_no_expected_progress(
        self, calculator, january_distance_goal
    ):
        """Nothing is expected before the first day has elapsed."""
        progress = calculator.calculate_progress(january_distance_goal, [], now=JAN_1)

        assert progress.expected_progress == 0
        assert progress.is_on_track is True

    def test_days_remaining_never_negative(self, calculator, january_distance_goal):
        """Past the target date, days remaining is zero."""
        progress = calculator.calculate_progress(
            january_distance_goal, [], now=datetime(2024, 3, 1)
        )
        assert progress.days_remaining == 0


# ============================================================================
# Pace goals
# ============================================================================

class TestPaceGoalProgress:
    """Tests for pace-for-race-distance goals."""

    def test_qualifying_effort_meets_target(self, calculator, five_k_goal, make_record):
        """5,100 m in 1,450 s meets a 1,500 s 5K target."""
        records = [
            make_record(datetime(2024, 2, 1), distance=5100, moving_time=1450),
            make_record(datetime(2024, 2, 3), distance=10_000, pace=280),
        ]
        now = datetime(2024, 2, 10)
        progress = calculator.calculate_progress(five_k_goal, records, now=now)

        assert progress.current_value == 1450
        assert progress.progress_percentage == 100
        assert progress.projected_completion == now
        assert progress.insights[1] == "Your best time: 24:10 (target was 25:00)"

    def test_slower_effort_is_zero_progress(self, calculator, five_k_goal, make_record):
        """Pace goals have no partial credit."""
        records = [make_record(datetime(2024, 2, 1), distance=5000, moving_time=1600)]
        progress = calculator.calculate_progress(
            five_k_goal, records, now=datetime(2024, 2, 10)
        )

        assert progress.current_value == 1600
        assert progress.progress_percentage == 0
        assert progress.milestones[0].is_completed is False

    def test_best_effort_is_minimum_time(self, calculator, five_k_goal, make_record):
        """The fastest comparable effort is the current value."""
        records = [
            make_record(datetime(2024, 2, 1), distance=5000, moving_time=1700),
            make_record(datetime(2024, 2, 8), distance=5000, moving_time=1550),
        ]
        progress = calculator.calculate_progress(
            five_k_goal, records, now=datetime(2024, 2, 10)
        )
        assert progress.current_value == 1550

    def test_no_qualifying_runs(self, calculator, five_k_goal, make_record):
        """Without comparable runs the current value is zero."""
        records = [make_record(datetime(2024, 2, 1), distance=10_000)]
        progress = calculator.calculate_progress(
            five_k_goal, records, now=datetime(2024, 2, 10)
        )

        assert progress.current_value == 0
        assert progress.progress_percentage == 0
        assert progress.projected_completion == five_k_goal.target_date
        assert "Current best: No qualifying runs yet, target: 25:00" in progress.recommendations

    def test_single_milestone(self, calculator, five_k_goal):
        """Pace goals have one checkpoint at the target date."""
        progress = calculator.calculate_progress(five_k_goal, [], now=datetime(2024, 2, 10))

        assert len(progress.milestones) == 1
        assert progress.milestones[0].target_date == five_k_goal.target_date

    def test_missing_race_distance_raises(self, calculator):
        """Pace goals need a race distance."""
        goal = PaceGoal(
            id="no-distance",
            target_value=1500,
            created_at=JAN_1,
            target_date=datetime(2024, 6, 1),
        )
        with pytest.raises(GoalPreconditionError) as exc_info:
            calculator.calculate_progress(goal, [], now=datetime(2024, 2, 1))

        assert exc_info.value.code == ErrorCode.GOAL_PRECONDITION_FAILED
        assert exc_info.value.details["field"] == "race_distance"


# ============================================================================
# Run count goals
# ============================================================================

class TestRunCountGoalProgress:
    """Tests for run-count goals."""

    def test_counts_runs_in_window(self, calculator, make_record):
        """Each valid run in the window counts once."""
        goal = RunCountGoal(
            id="runs-12",
            target_value=12,
            created_at=JAN_1,
            target_date=JAN_END,
        )
        records = [make_record(datetime(2024, 1, 2 + i * 2)) for i in range(6)]
        records.append(make_record(datetime(2024, 1, 20), distance=300))

        progress = calculator.calculate_progress(goal, records, now=datetime(2024, 1, 16))

        assert progress.current_value == 6
        assert progress.progress_percentage == pytest.approx(50)

    def test_catch_up_runs_per_week(self, calculator, make_record):
        """Behind-schedule advice is expressed in runs per week."""
        goal = RunCountGoal(
            id="runs-100",
            target_value=100,
            created_at=JAN_1,
            target_date=datetime(2024, 12, 31),
        )
        records = [make_record(datetime(2024, 1, 3))]

        progress = calculator.calculate_progress(goal, records, now=datetime(2024, 7, 1))

        assert progress.is_on_track is False
        assert progress.recommendations[0] == "Aim for 4 runs per week to stay on track."


# ============================================================================
# Common behaviour
# ============================================================================

class TestCalculateProgressContract:
    """Cross-cutting behaviour of calculate_progress."""

    def test_idempotent(self, calculator, january_distance_goal, half_of_january):
        """Same inputs give the same output."""
        now = datetime(2024, 1, 16)
        first = calculator.calculate_progress(january_distance_goal, half_of_january, now=now)
        second = calculator.calculate_progress(january_distance_goal, half_of_january, now=now)
        assert first == second

    def test_target_before_creation_raises(self, calculator):
        """A target date at or before creation cannot be evaluated."""
        goal = DistanceGoal(
            id="backwards",
            target_value=10_000,
            created_at=datetime(2024, 2, 1),
            target_date=JAN_1,
        )
        with pytest.raises(GoalPreconditionError):
            calculator.calculate_progress(goal, [], now=JAN_1)

    def test_unsupported_type_raises(self, calculator):
        """An unknown tag is rejected rather than silently ignored."""
        goal = DistanceGoal.model_construct(
            id="mystery",
            title="",
            type="mystery",
            target_value=10,
            created_at=JAN_1,
            target_date=JAN_END,
        )
        with pytest.raises(UnsupportedGoalTypeError):
            calculator.calculate_progress(goal, [], now=datetime(2024, 1, 10))

    def test_on_track_tolerance_from_settings(self, january_distance_goal, make_record):
        """A stricter tolerance changes the on-track verdict."""
        records = [make_record(datetime(2024, 1, 3), distance=10_000) for _ in range(4)]
        now = datetime(2024, 1, 16)  # 40% done, ~48% expected

        lenient = GoalProgressCalculator(Settings(on_track_tolerance=0.8))
        strict = GoalProgressCalculator(Settings(on_track_tolerance=1.0))

        assert lenient.calculate_progress(january_distance_goal, records, now).is_on_track
        assert not strict.calculate_progress(january_distance_goal, records, now).is_on_track

    def test_to_dict(self, calculator, january_distance_goal, half_of_january):
        """Progress serializes to plain JSON types."""
        data = calculator.calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        ).to_dict()

        assert data["goal_id"] == "jan-100k"
        assert isinstance(data["projected_completion"], str)
        assert len(data["milestones"]) == 4

    def test_format_goal_progress(self, calculator, january_distance_goal, half_of_january):
        """Progress label shows one decimal."""
        progress = calculator.calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        )
        assert format_goal_progress(progress) == "50.0% complete"

    @pytest.mark.parametrize("target", [0, -1, -50_000])
    def test_non_positive_target_raises(self, calculator, half_of_january, target):
        """Zero and negative targets cannot be measured against."""
        goal = DistanceGoal(
            id="empty", target_value=target, created_at=JAN_1, target_date=JAN_END
        )
        with pytest.raises(GoalPreconditionError) as exc_info:
            calculator.calculate_progress(goal, half_of_january, now=datetime(2024, 1, 16))

        assert exc_info.value.details["field"] == "target_value"

    def test_non_positive_run_count_raises(self, calculator):
        """The target check applies to every goal type."""
        goal = RunCountGoal(id="none", target_value=0, created_at=JAN_1, target_date=JAN_END)
        with pytest.raises(GoalPreconditionError):
            calculator.calculate_progress(goal, [], now=datetime(2024, 1, 16))

    @pytest.mark.parametrize("distances", [[], [1], [5000] * 10, [500_000] * 3])
    def test_progress_stays_within_bounds(self, calculator, january_distance_goal,
                                          make_record, distances):
        """Progress is a percentage from 0 to 100 whatever the volume."""
        records = [
            make_record(datetime(2024, 1, 2 + i, 7, 0), distance=d)
            for i, d in enumerate(distances)
        ]
        progress = calculator.calculate_progress(
            january_distance_goal, records, now=datetime(2024, 1, 16)
        )

        assert 0 <= progress.progress_percentage <= 100


# ============================================================================
# Timezone-tagged inputs
# ============================================================================

class TestTimezoneTaggedInputs:
    """Sync payloads whose local times carry a ``Z`` suffix."""

    @pytest.fixture
    def utc_tagged_records(self):
        """The same ten 5 km runs as half_of_january, tagged with ``Z``."""
        return [
            ActivityRecord.model_validate({
                "distance": 5000,
                "moving_time": 1650,
                "start_date_local": f"2024-01-{2 + i:02d}T07:00:00Z",
            })
            for i in range(10)
        ]

    def test_records_against_naive_goal(
        self, calculator, january_distance_goal, utc_tagged_records
    ):
        """Tagged records count toward a goal with untagged dates."""
        progress = calculator.calculate_progress(
            january_distance_goal, utc_tagged_records, now=datetime(2024, 1, 16)
        )
        assert progress.current_value == 50_000

    def test_tagged_now(self, calculator, january_distance_goal, half_of_january):
        """An offset-aware evaluation time is read as local wall-clock time."""
        aware = calculator.calculate_progress(
            january_distance_goal, half_of_january,
            now=datetime(2024, 1, 16, tzinfo=timezone.utc),
        )
        naive = calculator.calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        )
        assert aware == naive

    def test_tagged_goal_dates(self, calculator, utc_tagged_records):
        """Goal dates parsed from ``Z`` strings keep their wall-clock digits."""
        goal = parse_goal({
            "type": "distance-total",
            "id": "jan-100k",
            "target_value": 100_000,
            "created_at": "2024-01-01T00:00:00Z",
            "target_date": "2024-01-31T23:59:59Z",
        })
        assert goal.created_at == JAN_1
        assert goal.target_date.tzinfo is None

        progress = calculator.calculate_progress(
            goal, utc_tagged_records, now=datetime(2024, 1, 16)
        )
        assert progress.current_value == 50_000
        assert progress.days_remaining == 16

    def test_default_now_with_tagged_records(self, calculator, utc_tagged_records):
        """Evaluating against the wall clock works for tagged records."""
        goal = DistanceGoal(
            id="open",
            target_value=100_000,
            created_at=datetime(2023, 12, 1),
            target_date=datetime.now() + timedelta(days=30),
        )
        progress = calculator.calculate_progress(goal, utc_tagged_records)
        assert progress.current_value == 50_000

    def test_validate_goal_with_tagged_now(self, calculator, january_distance_goal):
        """Validation accepts an offset-aware clock."""
        result = calculator.validate_goal(
            january_distance_goal, now=datetime(2024, 1, 2, tzinfo=timezone.utc)
        )
        assert result.is_valid


# ============================================================================
# Validation
# ============================================================================

class TestValidateGoal:
    """Tests for validate_goal."""

    NOW = datetime(2024, 1, 2)

    def test_valid_goal(self, calculator, january_distance_goal):
        """A sensible goal passes."""
        result = calculator.validate_goal(january_distance_goal, now=self.NOW)
        assert result.is_valid
        assert result.errors == []

    def test_non_positive_target(self, calculator):
        """Targets must be positive."""
        goal = DistanceGoal(id="g", target_value=0, created_at=JAN_1, target_date=JAN_END)
        result = calculator.validate_goal(goal, now=self.NOW)

        assert not result.is_valid
        assert "Target value must be greater than 0" in result.errors

    def test_target_in_past(self, calculator, january_distance_goal):
        """Expired goals are flagged."""
        result = calculator.validate_goal(january_distance_goal, now=datetime(2024, 3, 1))
        assert "Target date must be in the future" in result.errors

    def test_wrong_unit(self, calculator):
        """Distance goals are expressed in meters."""
        goal = DistanceGoal(
            id="g", target_value=100, unit="km", created_at=JAN_1, target_date=JAN_END
        )
        result = calculator.validate_goal(goal, now=self.NOW)
        assert "Distance goals must use meters as unit" in result.errors

    def test_unrealistic_distance(self, calculator):
        """More than 100,000 km is rejected."""
        goal = DistanceGoal(
            id="g", target_value=200_000_000, created_at=JAN_1, target_date=JAN_END
        )
        result = calculator.validate_goal(goal, now=self.NOW)
        assert "Distance target seems unrealistic" in result.errors

    def test_pace_goal_checks(self, calculator):
        """Pace goals need a race distance and a plausible time."""
        goal = PaceGoal(id="g", target_value=300, created_at=JAN_1, target_date=JAN_END)
        result = calculator.validate_goal(goal, now=self.NOW)

        assert "Pace goals must specify race distance" in result.errors
        assert "Pace target seems unrealistic" in result.errors

    def test_unrealistic_run_count(self, calculator):
        """More than 1000 runs is rejected."""
        goal = RunCountGoal(id="g", target_value=2000, created_at=JAN_1, target_date=JAN_END)
        result = calculator.validate_goal(goal, now=self.NOW)
        assert result.errors == ["Runs target seems unrealistic"]

    def test_collects_all_errors(self, calculator):
        """Validation reports every problem at once."""
        goal = DistanceGoal(
            id="g", target_value=-5, created_at=JAN_END, target_date=JAN_1
        )
        result = calculator.validate_goal(goal, now=self.NOW)
        assert len(result.errors) == 3


# ============================================================================
# Parsing and singletons
# ============================================================================

class TestGoalParsing:
    """Tests for parse_goal."""

    def test_dispatches_on_type(self):
        """The type tag selects the variant."""
        goal = parse_goal({
            "type": "run-count",
            "id": "g",
            "target_value": 12,
            "created_at": "2024-01-01T00:00:00",
            "target_date": "2024-01-31T00:00:00",
            "timeframe": "monthly",
        })
        assert isinstance(goal, RunCountGoal)
        assert goal.unit == "runs"

    def test_unknown_type_rejected(self):
        """Unknown tags fail validation."""
        with pytest.raises(pydantic.ValidationError):
            parse_goal({
                "type": "elevation-total",
                "id": "g",
                "target_value": 1,
                "created_at": "2024-01-01T00:00:00",
                "target_date": "2024-01-31T00:00:00",
            })


class TestGoalProgressSingleton:
    """Tests for the calculator singleton."""

    def test_singleton_reused(self):
        """Repeated calls return the same instance."""
        assert get_goal_progress_calculator() is get_goal_progress_calculator()

    def test_reset(self):
        """Reset drops the cached instance."""
        first = get_goal_progress_calculator()
        reset_goal_progress_calculator()
        assert get_goal_progress_calculator() is not first

    def test_module_level_helpers(self, january_distance_goal, half_of_january):
        """Module functions delegate to the singleton."""
        progress = calculate_progress(
            january_distance_goal, half_of_january, now=datetime(2024, 1, 16)
        )
        assert progress.progress_percentage == pytest.approx(50)
        assert validate_goal(january_distance_goal, now=datetime(2024, 1, 2)).is_valid
