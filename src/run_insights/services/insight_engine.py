"""
Actionable insights engine.

Turns a runner's activity history into a short, ranked list of insights,
each one a finding, what it means and what to do about it.

Pipeline:
1. Quality-filter the records and sort them by local start time
2. Run every registered detector over the same snapshot
3. Drop low-confidence or thinly supported candidates
4. Rank by prioritization score and keep the top ``max_insights``
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..analysis import scoring
from ..analysis.detectors import DetectorContext, run_detectors
from ..analysis.quality import filter_valid_records
from ..config import get_settings
from ..models.activity import ActivityRecord
from ..models.insights import (
    Insight,
    InsightCategory,
    InsightConfig,
    InsightFilter,
    PrioritizationScore,
)
from ..utils.dates import to_local_naive


logger = logging.getLogger(__name__)


MOST_IMPORTANT_LIMIT = 4

INSIGHT_CATEGORIES: List[Dict[str, str]] = [
    {
        "value": InsightCategory.PERFORMANCE.value,
        "label": "Performance",
        "description": "Pace trends, speed improvements and race performance",
    },
    {
        "value": InsightCategory.CONSISTENCY.value,
        "label": "Consistency",
        "description": "Running frequency, habits and routine patterns",
    },
    {
        "value": InsightCategory.HEALTH.value,
        "label": "Health",
        "description": "Recovery, heart rate and injury prevention",
    },
    {
        "value": InsightCategory.TRAINING.value,
        "label": "Training",
        "description": "Distance progression, variety and training structure",
    },
    {
        "value": InsightCategory.ACHIEVEMENT.value,
        "label": "Achievements",
        "description": "Personal records, milestones and celebrations",
    },
]


class InsightEngine:
    """
    Generates ranked insights from activity records.

    The engine holds only its configuration; every call works on its own
    snapshot of the records.
    """

    def __init__(self, config: Optional[InsightConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Engine configuration (defaults to values from settings)
        """
        self.config = config or InsightConfig.from_settings(get_settings())

    def generate_insights(
        self,
        records: Sequence[ActivityRecord],
        now: Optional[datetime] = None,
    ) -> List[Insight]:
        """
        Generate the ranked insight list.

        Args:
            records: Activity records in any order, unfiltered
            now: Evaluation time for time-relative detectors

        Returns:
            At most ``max_insights`` insights, highest score first. Empty when
            fewer than ``min_sample_size`` records survive quality filtering.
        """
        now = to_local_naive(now) or datetime.now()

        valid = filter_valid_records(records)
        if len(valid) < self.config.min_sample_size:
            logger.debug(
                "Not enough valid records for insights (%d < %d)",
                len(valid), self.config.min_sample_size,
            )
            return []

        ordered = sorted(valid, key=lambda r: r.start_date_local)
        context = DetectorContext(now=now, config=self.config)

        candidates = run_detectors(ordered, context)
        ranked = scoring.prioritize_insights(
            candidates,
            min_confidence=self.config.min_confidence,
            min_sample_size=self.config.min_sample_size,
            max_insights=self.config.max_insights,
        )

        logger.debug(
            "Generated %d insights from %d records (%d candidates)",
            len(ranked), len(ordered), len(candidates),
        )
        return ranked

    def filter_insights(
        self,
        insights: Sequence[Insight],
        criteria: InsightFilter,
    ) -> List[Insight]:
        """Narrow a ranked list by criteria without re-ranking it."""
        return scoring.filter_insights(insights, criteria)

    def calculate_prioritization_score(self, insight: Insight) -> PrioritizationScore:
        """Score breakdown for a single insight."""
        return scoring.calculate_prioritization_score(insight)

    def get_prioritized_insights(
        self,
        records: Sequence[ActivityRecord],
        criteria: Optional[InsightFilter] = None,
        now: Optional[datetime] = None,
    ) -> List[Insight]:
        """Generate insights and optionally narrow them by criteria."""
        insights = self.generate_insights(records, now)
        if criteria is None:
            return insights
        return self.filter_insights(insights, criteria)

    def get_most_important_insights(
        self,
        records: Sequence[ActivityRecord],
        now: Optional[datetime] = None,
    ) -> List[Insight]:
        """Top insights for a dashboard card."""
        return self.generate_insights(records, now)[:MOST_IMPORTANT_LIMIT]


def get_insight_categories() -> List[Dict[str, str]]:
    """Category catalogue for UI filters."""
    return [dict(category) for category in INSIGHT_CATEGORIES]


# ============================================================================
# Factory function for dependency injection
# ============================================================================

_insight_engine: Optional[InsightEngine] = None


def get_insight_engine() -> InsightEngine:
    """Get or create the insight engine singleton."""
    global _insight_engine
    if _insight_engine is None:
        _insight_engine = InsightEngine()
    return _insight_engine


def reset_insight_engine() -> None:
    """Reset the engine singleton (for testing)."""
    global _insight_engine
    _insight_engine = None


def generate_insights(
    records: Sequence[ActivityRecord],
    now: Optional[datetime] = None,
) -> List[Insight]:
    """Generate insights with the default engine."""
    return get_insight_engine().generate_insights(records, now)
