"""Pure analysis functions: quality filtering, pattern detection and scoring."""

from .detectors import (
    DETECTORS,
    Detector,
    DetectorContext,
    calculate_average_pace,
    register_detector,
    run_detectors,
)
from .quality import (
    filter_by_timeframe,
    filter_for_pace_goal,
    filter_stats,
    filter_valid_records,
    get_rejection_details,
    is_valid_record,
    rejection_reasons,
)
from .scoring import (
    calculate_prioritization_score,
    filter_insights,
    prioritize_insights,
)

__all__ = [
    # Quality
    "filter_valid_records",
    "filter_for_pace_goal",
    "filter_by_timeframe",
    "filter_stats",
    "is_valid_record",
    "rejection_reasons",
    "get_rejection_details",
    # Detectors
    "DETECTORS",
    "Detector",
    "DetectorContext",
    "calculate_average_pace",
    "register_detector",
    "run_detectors",
    # Scoring
    "calculate_prioritization_score",
    "prioritize_insights",
    "filter_insights",
]
