"""Pattern detectors for the insight engine.

Each detector is a pure function ``(records, context) -> Insight | None``
registered in ``DETECTORS``. Detectors receive quality-filtered records
sorted by start time and never see each other's output, so each one can be
tested in isolation against a synthetic record set.

Detectors:
- Pace trend (recent 10 runs vs the rest)
- Distance progression (recent 5 runs vs the rest)
- Weather sensitivity (cool vs warm pace)
- Weekly frequency (trailing 30 days)
- Weekday pattern (preferred running day)
- Training variety (distance coefficient of variation)
- Recovery pattern (back-to-back days)
- Heart-rate load (mean HR vs age-estimated max)
- Recent personal record (best pace in the last 30 days)
- Milestones (total distance / run count bands)
"""

import logging
import statistics
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..models.activity import ActivityRecord
from ..models.insights import (
    DataQuality,
    Difficulty,
    Insight,
    InsightCategory,
    InsightConfig,
    InsightData,
    InsightPriority,
    Timeframe,
    Trend,
)


logger = logging.getLogger(__name__)


DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

COOL_TEMPERATURE_C = 15
WARM_TEMPERATURE_C = 20
FREQUENCY_WINDOW_DAYS = 30
PR_WINDOW_DAYS = 30
DISTANCE_MILESTONE_WINDOW_KM = 50
RUN_MILESTONE_WINDOW = 10


@dataclass(frozen=True)
class DetectorContext:
    """Everything a detector may look at besides the records."""
    now: datetime
    config: InsightConfig


DetectorFn = Callable[[Sequence[ActivityRecord], DetectorContext], Optional[Insight]]


@dataclass(frozen=True)
class Detector:
    """A registered detector."""
    name: str
    fn: DetectorFn
    achievement: bool = False

    def run(
        self, records: Sequence[ActivityRecord], context: DetectorContext
    ) -> Optional[Insight]:
        return self.fn(records, context)


DETECTORS: List[Detector] = []


def register_detector(name: str, achievement: bool = False):
    """Decorator adding a detector function to the battery."""
    def decorator(fn: DetectorFn) -> DetectorFn:
        DETECTORS.append(Detector(name=name, fn=fn, achievement=achievement))
        return fn
    return decorator


# =============================================================================
# Helpers
# =============================================================================

def calculate_average_pace(records: Sequence[ActivityRecord]) -> Optional[float]:
    """Aggregate pace (total time over total distance) in sec/km."""
    if not records:
        return None

    total_time = sum(r.moving_time for r in records)
    total_distance = sum(r.distance for r in records)

    return total_time / (total_distance / 1000) if total_distance > 0 else None


def _days_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 86400


# =============================================================================
# Trends
# =============================================================================

@register_detector("pace_trend")
def detect_pace_trend(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Compare the aggregate pace of the last 10 runs with the earlier ones."""
    if len(records) < 5:
        return None

    recent = records[-10:]
    # With 10 runs or fewer the baseline is just the first run
    older = records[:max(1, len(records) - 10)]

    recent_pace = calculate_average_pace(recent)
    older_pace = calculate_average_pace(older)

    if not recent_pace or not older_pace:
        return None

    improvement = (older_pace - recent_pace) / older_pace
    if abs(improvement) < 0.03:
        return None

    confidence = min(0.9, 0.6 + abs(improvement))
    is_improving = improvement > 0
    change_pct = abs(improvement * 100)

    if change_pct > 10:
        priority = InsightPriority.HIGH
    elif change_pct > 5:
        priority = InsightPriority.MEDIUM
    else:
        priority = InsightPriority.LOW

    if len(records) >= 15:
        quality = DataQuality.HIGH
    elif len(records) >= 8:
        quality = DataQuality.MEDIUM
    else:
        quality = DataQuality.LOW

    if is_improving:
        interpretation = (
            "This indicates improving fitness and running efficiency. "
            "Your training is paying off!"
        )
        recommendation = (
            "Keep up the great work! Consider maintaining this pace while gradually "
            "increasing distance or adding variety to your training."
        )
    else:
        interpretation = (
            "This could indicate fatigue, overtraining, or the need for more recovery time."
        )
        recommendation = (
            "Consider if you need more recovery time, or if you're pushing too hard on "
            "easy runs. Focus on running most of your miles at an easy, conversational pace."
        )

    return Insight(
        id="pace_trend",
        title="Pace Improvement Detected" if is_improving else "Pace Decline Noticed",
        category=InsightCategory.PERFORMANCE,
        priority=priority,
        finding=(
            f"Your average pace has {'improved' if is_improving else 'slowed'} "
            f"by {change_pct:.1f}% in recent runs"
        ),
        interpretation=interpretation,
        recommendation=recommendation,
        confidence=confidence,
        sample_size=len(recent) + len(older),
        data_quality=quality,
        actionable=True,
        difficulty=Difficulty.EASY if is_improving else Difficulty.MODERATE,
        timeframe=Timeframe.SHORT_TERM if is_improving else Timeframe.IMMEDIATE,
        data=InsightData(
            current=recent_pace,
            previous=older_pace,
            trend=Trend.IMPROVING if is_improving else Trend.DECLINING,
            unit="sec/km",
        ),
    )


@register_detector("distance_progression")
def detect_distance_progression(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Compare the mean distance of the last 5 runs with the earlier ones."""
    if len(records) < 6:
        return None

    recent = records[-5:]
    older = records[:max(1, len(records) - 5)]

    recent_avg = statistics.mean(r.distance for r in recent)
    older_avg = statistics.mean(r.distance for r in older)

    increase = (recent_avg - older_avg) / older_avg
    if abs(increase) < 0.1:
        return None

    is_increasing = increase > 0
    change_pct = abs(increase * 100)

    # Rough weekly rate, assuming the history spans len/7 weeks
    weekly_increase = increase * 7 / (len(records) / 7)
    too_rapid = weekly_increase > 0.1

    if is_increasing and too_rapid:
        interpretation = "You're increasing distance rapidly, which raises injury risk."
        recommendation = (
            "Consider slowing your distance progression. The 10% rule suggests "
            "increasing weekly distance by no more than 10% each week."
        )
    elif is_increasing:
        interpretation = "Good progression in building endurance capacity."
        recommendation = (
            "Great progression! Continue building gradually while listening to your body."
        )
    else:
        interpretation = (
            "Reduced distance could indicate fatigue, injury prevention, or "
            "intentional recovery."
        )
        recommendation = (
            "If this is intentional recovery, that's smart. If not, consider if you "
            "need more motivation or if other factors are limiting your runs."
        )

    return Insight(
        id="distance_progression",
        title="Distance Progression Detected" if is_increasing else "Distance Reduction Noticed",
        category=InsightCategory.TRAINING,
        priority=InsightPriority.HIGH if too_rapid else InsightPriority.MEDIUM,
        finding=(
            f"Your average run distance has {'increased' if is_increasing else 'decreased'} "
            f"by {change_pct:.1f}%"
        ),
        interpretation=interpretation,
        recommendation=recommendation,
        confidence=0.8,
        sample_size=len(records),
        data_quality=DataQuality.HIGH if len(records) >= 10 else DataQuality.MEDIUM,
        actionable=True,
        difficulty=Difficulty.MODERATE if too_rapid else Difficulty.EASY,
        timeframe=Timeframe.SHORT_TERM,
        data=InsightData(
            current=recent_avg / 1000,
            previous=older_avg / 1000,
            trend=Trend.IMPROVING if is_increasing else Trend.DECLINING,
            unit="km",
        ),
    )


# =============================================================================
# Conditions
# =============================================================================

@register_detector("weather_performance")
def detect_weather_sensitivity(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Flag runs that are noticeably slower in warm weather than in cool weather."""
    with_weather = [r for r in records if r.temperature is not None]
    if len(with_weather) < 10:
        return None

    cool = [r for r in with_weather if r.temperature < COOL_TEMPERATURE_C]
    warm = [r for r in with_weather if r.temperature >= WARM_TEMPERATURE_C]

    if len(cool) < 3 or len(warm) < 3:
        return None

    cool_pace = calculate_average_pace(cool)
    warm_pace = calculate_average_pace(warm)

    if not cool_pace or not warm_pace:
        return None

    difference = (warm_pace - cool_pace) / cool_pace

    # Only the normal pattern (slower in the heat) is worth surfacing
    if difference < 0.05:
        return None

    change_pct = difference * 100

    return Insight(
        id="weather_performance",
        title="Weather Performance Pattern",
        category=InsightCategory.PERFORMANCE,
        priority=InsightPriority.HIGH if change_pct > 15 else InsightPriority.MEDIUM,
        finding=(
            f"You run {change_pct:.1f}% slower in warm weather ({WARM_TEMPERATURE_C}°C+) "
            f"compared to cool weather (<{COOL_TEMPERATURE_C}°C)"
        ),
        interpretation=(
            "This is normal - your body works harder to cool itself in warm "
            "conditions, affecting performance."
        ),
        recommendation=(
            "Consider running during cooler parts of the day (early morning or evening) "
            "for better performance, especially for key workouts."
        ),
        confidence=0.75,
        sample_size=len(cool) + len(warm),
        data_quality=DataQuality.HIGH if len(with_weather) >= 20 else DataQuality.MEDIUM,
        actionable=True,
        difficulty=Difficulty.EASY,
        timeframe=Timeframe.IMMEDIATE,
        data=InsightData(current=warm_pace, previous=cool_pace, unit="sec/km"),
    )


# =============================================================================
# Consistency
# =============================================================================

@register_detector("running_frequency")
def detect_weekly_frequency(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Bucket runs per week over the trailing 30 days."""
    if len(records) < 7:
        return None

    window = timedelta(days=FREQUENCY_WINDOW_DAYS)
    last_30_days = [r for r in records if context.now - r.start_date_local <= window]
    runs_per_week = (len(last_30_days) / FREQUENCY_WINDOW_DAYS) * 7

    if runs_per_week >= 6:
        priority = InsightPriority.MEDIUM
        finding = f"You're running {runs_per_week:.1f} times per week - very high frequency."
        interpretation = (
            "Running six or more days a week leaves little room for recovery and "
            "raises overuse injury risk unless most runs are very easy."
        )
        recommendation = (
            "Make sure at least one day per week is a full rest day and keep most "
            "runs at an easy, conversational effort."
        )
        difficulty = Difficulty.MODERATE
    elif runs_per_week >= 4:
        priority = InsightPriority.LOW
        finding = f"You're running {runs_per_week:.1f} times per week - excellent consistency!"
        interpretation = (
            "This frequency is ideal for building and maintaining fitness while "
            "allowing adequate recovery."
        )
        recommendation = (
            "Keep up this excellent consistency! Consider varying your run types "
            "(easy, tempo, long) for balanced training."
        )
        difficulty = Difficulty.EASY
    elif runs_per_week >= 2:
        priority = InsightPriority.MEDIUM
        finding = f"You're running {runs_per_week:.1f} times per week - good foundation."
        interpretation = (
            "This is a solid base for fitness improvement, though there's room to "
            "increase frequency."
        )
        recommendation = (
            "Consider adding one more run per week to accelerate your fitness "
            "improvements. Start with an easy, short run."
        )
        difficulty = Difficulty.EASY
    else:
        priority = InsightPriority.HIGH
        finding = (
            f"You're running {runs_per_week:.1f} times per week - "
            "opportunity for more consistency."
        )
        interpretation = (
            "Running less than twice per week limits fitness gains and makes each "
            "run feel harder."
        )
        recommendation = (
            "Try to aim for at least 3 runs per week. Start by adding short, easy "
            "runs to build the habit."
        )
        difficulty = Difficulty.MODERATE

    return Insight(
        id="running_frequency",
        title="Running Frequency Analysis",
        category=InsightCategory.CONSISTENCY,
        priority=priority,
        finding=finding,
        interpretation=interpretation,
        recommendation=recommendation,
        confidence=0.9,
        sample_size=len(last_30_days),
        data_quality=DataQuality.HIGH if len(last_30_days) >= 8 else DataQuality.MEDIUM,
        actionable=True,
        difficulty=difficulty,
        timeframe=Timeframe.SHORT_TERM,
        data=InsightData(current=runs_per_week, target=4, unit="runs/week"),
    )


@register_detector("weekly_pattern")
def detect_weekday_pattern(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Find the preferred running day of the week."""
    if len(records) < 14:
        return None

    by_day = Counter(r.start_date_local.weekday() for r in records)
    day, count = by_day.most_common(1)[0]

    if count < len(records) * 0.25:
        return None

    day_name = DAY_NAMES[day]

    return Insight(
        id="weekly_pattern",
        title="Weekly Running Pattern",
        category=InsightCategory.CONSISTENCY,
        priority=InsightPriority.LOW,
        finding=f"You run most often on {day_name}s ({count} times)",
        interpretation=(
            "Having a preferred running day shows good routine building, which "
            "supports consistency."
        ),
        recommendation=(
            f"Consider scheduling your key workouts on {day_name}s when you're most "
            "consistent. Also try to add runs on other days for better weekly distribution."
        ),
        confidence=0.8,
        sample_size=len(records),
        data_quality=DataQuality.HIGH if len(records) >= 20 else DataQuality.MEDIUM,
        actionable=True,
        difficulty=Difficulty.EASY,
        timeframe=Timeframe.SHORT_TERM,
        data=InsightData(current=count, unit="runs"),
    )


# =============================================================================
# Training
# =============================================================================

@register_detector("training_variety")
def detect_training_variety(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Flag low variety in run distances (coefficient of variation < 0.3)."""
    if len(records) < 10:
        return None

    distances = [r.distance for r in records]
    cv = statistics.pstdev(distances) / statistics.mean(distances)

    if cv >= 0.3:
        return None

    return Insight(
        id="training_variety",
        title="Training Variety Analysis",
        category=InsightCategory.TRAINING,
        priority=InsightPriority.MEDIUM,
        finding="Your runs are very similar in distance, with limited variety in training stimulus.",
        interpretation=(
            "Running the same distance repeatedly can lead to plateaus and doesn't "
            "prepare you for different challenges."
        ),
        recommendation=(
            "Add variety to your training: include one long run per week, some shorter "
            "faster runs, and vary your routes and paces."
        ),
        confidence=0.8,
        sample_size=len(records),
        data_quality=DataQuality.HIGH if len(records) >= 15 else DataQuality.MEDIUM,
        actionable=True,
        difficulty=Difficulty.MODERATE,
        timeframe=Timeframe.SHORT_TERM,
        data=InsightData(current=cv, target=0.4, unit="variety score"),
    )


# =============================================================================
# Health
# =============================================================================

@register_detector("recovery_patterns")
def detect_recovery_pattern(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Flag a high share of runs started less than a day after the previous one."""
    if len(records) < 10:
        return None

    gaps = [
        _days_between(prev.start_date_local, cur.start_date_local)
        for prev, cur in zip(records, records[1:])
    ]
    short_gaps = sum(1 for gap in gaps if gap < 1)
    short_ratio = short_gaps / len(gaps)

    if short_ratio < 0.3:
        return None

    return Insight(
        id="recovery_patterns",
        title="Recovery Pattern Analysis",
        category=InsightCategory.HEALTH,
        priority=InsightPriority.HIGH if short_ratio > 0.5 else InsightPriority.MEDIUM,
        finding=f"You run on consecutive days {short_ratio * 100:.0f}% of the time",
        interpretation=(
            "Frequent consecutive running days can increase injury risk, especially "
            "without proper recovery strategies."
        ),
        recommendation=(
            "Consider adding rest days or easy recovery runs between harder efforts. "
            "Listen to your body and don't hesitate to take extra rest when needed."
        ),
        confidence=0.7,
        sample_size=len(gaps),
        data_quality=DataQuality.HIGH if len(records) >= 15 else DataQuality.MEDIUM,
        actionable=True,
        difficulty=Difficulty.MODERATE,
        timeframe=Timeframe.IMMEDIATE,
        data=InsightData(
            current=statistics.mean(gaps), target=1.5, unit="days between runs"
        ),
    )


@register_detector("heart_rate_patterns")
def detect_heart_rate_load(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Flag a mean running heart rate at or above 80% of the estimated max."""
    with_hr = [r for r in records if r.average_heartrate and r.average_heartrate > 0]
    if len(with_hr) < 8:
        return None

    avg_hr = statistics.mean(r.average_heartrate for r in with_hr)
    estimated_max_hr = 220 - context.config.athlete_age
    hr_pct = avg_hr / estimated_max_hr

    if hr_pct < 0.8:
        return None

    return Insight(
        id="heart_rate_patterns",
        title="Heart Rate Analysis",
        category=InsightCategory.HEALTH,
        priority=InsightPriority.HIGH if hr_pct > 0.9 else InsightPriority.MEDIUM,
        finding=(
            f"Your average heart rate during runs is {avg_hr:.0f} bpm "
            f"({hr_pct * 100:.0f}% of estimated max)"
        ),
        interpretation=(
            "Running at consistently high heart rates may indicate you're training "
            "too intensely for most of your runs."
        ),
        recommendation=(
            "Follow the 80/20 rule: 80% of your runs should be at an easy, "
            "conversational pace. Slow down on your easy days to improve your aerobic base."
        ),
        confidence=0.7,
        sample_size=len(with_hr),
        data_quality=DataQuality.HIGH if len(with_hr) >= 15 else DataQuality.MEDIUM,
        actionable=True,
        difficulty=Difficulty.MODERATE,
        timeframe=Timeframe.SHORT_TERM,
        data=InsightData(current=avg_hr, target=estimated_max_hr * 0.7, unit="bpm"),
    )


# =============================================================================
# Achievements
# =============================================================================

@register_detector("personal_records", achievement=True)
def detect_recent_personal_record(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Celebrate a best-ever pace set within the last 30 days."""
    if len(records) < 5:
        return None

    fastest = min(records, key=lambda r: r.pace_per_km)
    days_since = _days_between(fastest.start_date_local, context.now)

    if days_since > PR_WINDOW_DAYS:
        return None

    days_ago = int(max(0, days_since))

    return Insight(
        id="personal_records",
        title="Recent Personal Record",
        category=InsightCategory.ACHIEVEMENT,
        priority=InsightPriority.MEDIUM,
        finding=f"You set a pace personal record {days_ago} days ago!",
        interpretation=(
            "Personal records indicate improving fitness and are great motivation boosters."
        ),
        recommendation=(
            "Celebrate this achievement! Use it as motivation while focusing on "
            "consistent training to build on this success."
        ),
        confidence=0.95,
        sample_size=len(records),
        data_quality=DataQuality.HIGH,
        actionable=True,
        difficulty=Difficulty.EASY,
        timeframe=Timeframe.IMMEDIATE,
        data=InsightData(current=fastest.pace_per_km, unit="sec/km"),
    )


@register_detector("milestone_achievement", achievement=True)
def detect_milestone(
    records: Sequence[ActivityRecord], context: DetectorContext
) -> Optional[Insight]:
    """Celebrate total distance or run count that recently entered a milestone band."""
    total_km = sum(r.distance for r in records) / 1000
    total_runs = len(records)

    distance_milestone = next(
        (m for m in context.config.distance_milestones_km
         if m <= total_km < m + DISTANCE_MILESTONE_WINDOW_KM),
        None,
    )
    run_milestone = next(
        (m for m in context.config.run_count_milestones
         if m <= total_runs < m + RUN_MILESTONE_WINDOW),
        None,
    )

    if distance_milestone is not None:
        milestone, unit, current = distance_milestone, "km", total_km
    elif run_milestone is not None:
        milestone, unit, current = run_milestone, "runs", float(total_runs)
    else:
        return None

    return Insight(
        id="milestone_achievement",
        title="Milestone Achievement",
        category=InsightCategory.ACHIEVEMENT,
        priority=InsightPriority.LOW,
        finding=f"You've reached {milestone:g} total {unit}!",
        interpretation=(
            "Milestones represent significant commitment to your running journey and "
            "show consistent progress."
        ),
        recommendation=(
            "Celebrate this achievement! You're building great habits. Keep up the "
            "consistency to reach your next milestone."
        ),
        confidence=1.0,
        sample_size=total_runs,
        data_quality=DataQuality.HIGH,
        actionable=True,
        difficulty=Difficulty.EASY,
        timeframe=Timeframe.IMMEDIATE,
        data=InsightData(current=current, target=milestone, unit=unit),
    )


def run_detectors(
    records: Sequence[ActivityRecord],
    context: DetectorContext,
) -> List[Insight]:
    """Run the whole battery and collect the insights that fired."""
    candidates = []
    for detector in DETECTORS:
        if detector.achievement and not context.config.include_achievements:
            continue
        insight = detector.run(records, context)
        if insight is not None:
            logger.debug("Detector %s fired (confidence %.2f)", detector.name, insight.confidence)
            candidates.append(insight)
    return candidates
