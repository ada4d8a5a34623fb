"""Data quality filter for activity records.

Device-derived activity data routinely contains GPS dropouts and sensor
glitches: 300 m "runs", 1:50/km paces, 2 km of climbing on a 1 km jog.
Every downstream computation assumes clean input, so goal progress and
insight generation both go through this filter first.

A record is kept only if ALL of the following hold:
- distance between 0.5 km and 200 km
- moving time greater than zero
- pace between 2:30/km and 12:00/km
- speed at most 25 km/h
- elevation gain (when present) not larger than the distance
"""

import logging
from datetime import datetime
from typing import Iterable, List

from ..models.activity import (
    ActivityRecord,
    FilterReasons,
    FilterStats,
    RejectedRecord,
)
from ..utils.formatting import format_pace


logger = logging.getLogger(__name__)


MIN_DISTANCE_M = 500
MAX_DISTANCE_M = 200_000
MIN_PACE_SEC_PER_KM = 150  # 2:30/km
MAX_PACE_SEC_PER_KM = 720  # 12:00/km
MAX_SPEED_KMH = 25.0
DEFAULT_PACE_TOLERANCE = 0.10


def _distance_ok(record: ActivityRecord) -> bool:
    return MIN_DISTANCE_M <= record.distance <= MAX_DISTANCE_M


def _time_ok(record: ActivityRecord) -> bool:
    return record.moving_time > 0


def _pace_ok(record: ActivityRecord) -> bool:
    pace = record.pace_per_km
    return pace is not None and MIN_PACE_SEC_PER_KM <= pace <= MAX_PACE_SEC_PER_KM


def _speed_ok(record: ActivityRecord) -> bool:
    speed = record.speed_kmh
    return speed is not None and speed <= MAX_SPEED_KMH


def _elevation_ok(record: ActivityRecord) -> bool:
    # More climbing than distance covered is a GPS artifact
    gain = record.total_elevation_gain
    return not gain or gain <= record.distance


def is_valid_record(record: ActivityRecord) -> bool:
    """Check a single record against every quality predicate."""
    return (
        _distance_ok(record)
        and _time_ok(record)
        and _pace_ok(record)
        and _speed_ok(record)
        and _elevation_ok(record)
    )


def filter_valid_records(records: Iterable[ActivityRecord]) -> List[ActivityRecord]:
    """Drop GPS errors and data anomalies, preserving input order.

    Args:
        records: Activity records in any order

    Returns:
        The records passing every quality predicate
    """
    records = list(records)
    valid = [r for r in records if is_valid_record(r)]

    dropped = len(records) - len(valid)
    if dropped:
        logger.debug("Quality filter dropped %d of %d records", dropped, len(records))

    return valid


def filter_for_pace_goal(
    records: Iterable[ActivityRecord],
    target_distance: float,
    tolerance: float = DEFAULT_PACE_TOLERANCE,
) -> List[ActivityRecord]:
    """Keep clean records whose distance is comparable to a race distance.

    A race-time goal is only meaningful against efforts of similar length,
    so records must fall within +/- ``tolerance`` of ``target_distance``.

    Args:
        records: Activity records
        target_distance: Race distance in meters
        tolerance: Allowed relative deviation (0.10 = +/-10%)

    Returns:
        Clean records within the distance window
    """
    min_distance = target_distance * (1 - tolerance)
    max_distance = target_distance * (1 + tolerance)

    return [
        r for r in filter_valid_records(records)
        if min_distance <= r.distance <= max_distance
    ]


def filter_by_timeframe(
    records: Iterable[ActivityRecord],
    start: datetime,
    end: datetime,
) -> List[ActivityRecord]:
    """Keep clean records whose local start falls in [start, end]."""
    return [
        r for r in filter_valid_records(records)
        if start <= r.start_date_local <= end
    ]


def filter_stats(records: Iterable[ActivityRecord]) -> FilterStats:
    """Count rejections per reason, for debugging only.

    A record failing several predicates is counted under each reason but
    only once in ``filtered``. Pace and speed are only checked when they
    can be computed.
    """
    records = list(records)
    reasons = FilterReasons()
    valid = 0

    for record in records:
        is_valid = True

        if not _distance_ok(record):
            reasons.distance_outliers += 1
            is_valid = False

        if not _time_ok(record):
            reasons.time_invalid += 1
            is_valid = False

        if record.pace_per_km is not None:
            if not _pace_ok(record):
                reasons.pace_outliers += 1
                is_valid = False
            if not _speed_ok(record):
                reasons.speed_outliers += 1
                is_valid = False

        if not _elevation_ok(record):
            reasons.elevation_outliers += 1
            is_valid = False

        if is_valid:
            valid += 1

    return FilterStats(
        total=len(records),
        valid=valid,
        filtered=len(records) - valid,
        filter_reasons=reasons,
    )


def rejection_reasons(record: ActivityRecord) -> List[str]:
    """Explain why a record fails the quality filter (empty when it passes)."""
    reasons = []

    if not _distance_ok(record):
        reasons.append(f"Unrealistic distance: {record.distance / 1000:.2f}km")

    if not _time_ok(record):
        reasons.append("Invalid moving time (zero or negative)")

    pace = record.pace_per_km
    if pace is not None:
        if not _pace_ok(record):
            reasons.append(
                f"Unrealistic pace: {format_pace(pace)}/km "
                f"(should be between {format_pace(MIN_PACE_SEC_PER_KM)}"
                f"-{format_pace(MAX_PACE_SEC_PER_KM)}/km)"
            )
        if not _speed_ok(record):
            reasons.append(f"Unrealistic speed: {record.speed_kmh:.1f}km/h")

    if not _elevation_ok(record):
        reasons.append(
            f"Unrealistic elevation: {record.total_elevation_gain:.0f}m gain "
            f"over {record.distance / 1000:.2f}km"
        )

    return reasons


def get_rejection_details(records: Iterable[ActivityRecord]) -> List[RejectedRecord]:
    """List every rejected record with its rejection reasons."""
    details = []
    for record in records:
        reasons = rejection_reasons(record)
        if reasons:
            details.append(
                RejectedRecord(record=record, reasons=reasons, pace=record.pace_per_km)
            )
    return details
