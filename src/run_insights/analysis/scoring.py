"""Insight prioritization and filtering.

total = 0.35 * impact + 0.25 * confidence + 0.30 * actionability + 0.10 * urgency
"""

from typing import Iterable, List, Sequence

from ..models.insights import (
    DataQuality,
    Difficulty,
    Insight,
    InsightCategory,
    InsightFilter,
    InsightPriority,
    PrioritizationScore,
    Timeframe,
    Trend,
)


IMPACT_WEIGHT = 0.35
CONFIDENCE_WEIGHT = 0.25
ACTIONABILITY_WEIGHT = 0.30
URGENCY_WEIGHT = 0.10

_PRIORITY_IMPACT = {
    InsightPriority.HIGH: 0.8,
    InsightPriority.MEDIUM: 0.6,
    InsightPriority.LOW: 0.4,
}

_CATEGORY_IMPACT_BONUS = {
    InsightCategory.PERFORMANCE: 0.2,
    InsightCategory.HEALTH: 0.15,  # Injury prevention
}

_QUALITY_ADJUSTMENT = {
    DataQuality.HIGH: 0.1,
    DataQuality.MEDIUM: 0.0,
    DataQuality.LOW: -0.1,
}

_DIFFICULTY_ADJUSTMENT = {
    Difficulty.EASY: 0.2,
    Difficulty.MODERATE: 0.1,
    Difficulty.CHALLENGING: -0.1,
}

_TIMEFRAME_ADJUSTMENT = {
    Timeframe.IMMEDIATE: 0.15,
    Timeframe.SHORT_TERM: 0.1,
    Timeframe.LONG_TERM: -0.05,
}


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def calculate_impact_score(insight: Insight) -> float:
    """Priority level plus a bonus for performance and health findings."""
    score = _PRIORITY_IMPACT[insight.priority]
    score += _CATEGORY_IMPACT_BONUS.get(insight.category, 0.0)
    return min(1.0, score)


def calculate_confidence_score(insight: Insight) -> float:
    """Self-reported confidence adjusted by sample size and data quality."""
    score = insight.confidence

    if insight.sample_size >= 20:
        score += 0.1
    elif insight.sample_size < 5:
        score -= 0.2

    score += _QUALITY_ADJUSTMENT[insight.data_quality]
    return _clamp(score)


def calculate_actionability_score(insight: Insight) -> float:
    """Reward easy, soon-paying-off actions. Non-actionable insights score 0."""
    if not insight.actionable:
        return 0.0

    score = 0.8
    score += _DIFFICULTY_ADJUSTMENT[insight.difficulty]
    score += _TIMEFRAME_ADJUSTMENT[insight.timeframe]
    return min(1.0, score)


def calculate_urgency_score(insight: Insight) -> float:
    """Health alarms first, declining performance next, celebrations last."""
    if insight.category == InsightCategory.HEALTH and insight.priority == InsightPriority.HIGH:
        return 1.0
    if insight.category == InsightCategory.PERFORMANCE and insight.data.trend == Trend.DECLINING:
        return 0.8
    if insight.category == InsightCategory.ACHIEVEMENT:
        return 0.2
    return 0.5


def calculate_prioritization_score(insight: Insight) -> PrioritizationScore:
    """Compute the weighted ranking score of an insight."""
    impact = calculate_impact_score(insight)
    confidence = calculate_confidence_score(insight)
    actionability = calculate_actionability_score(insight)
    urgency = calculate_urgency_score(insight)

    total = (
        impact * IMPACT_WEIGHT
        + confidence * CONFIDENCE_WEIGHT
        + actionability * ACTIONABILITY_WEIGHT
        + urgency * URGENCY_WEIGHT
    )

    return PrioritizationScore(
        impact_score=impact,
        confidence_score=confidence,
        actionability_score=actionability,
        urgency_score=urgency,
        total_score=total,
    )


def prioritize_insights(
    insights: Iterable[Insight],
    min_confidence: float,
    min_sample_size: int,
    max_insights: int,
) -> List[Insight]:
    """Drop weak candidates, rank the rest by score and keep the top ``max_insights``."""
    eligible = [
        i for i in insights
        if i.confidence >= min_confidence and i.sample_size >= min_sample_size
    ]
    ranked = sorted(
        eligible,
        key=lambda i: calculate_prioritization_score(i).total_score,
        reverse=True,
    )
    return ranked[:max(0, max_insights)]


def filter_insights(insights: Sequence[Insight], criteria: InsightFilter) -> List[Insight]:
    """Narrow a ranked insight list without changing its order."""
    result = []
    for insight in insights:
        if criteria.categories and insight.category not in criteria.categories:
            continue
        if criteria.priorities and insight.priority not in criteria.priorities:
            continue
        if criteria.min_confidence is not None and insight.confidence < criteria.min_confidence:
            continue
        if criteria.only_actionable and not insight.actionable:
            continue
        if criteria.timeframes and insight.timeframe not in criteria.timeframes:
            continue
        if criteria.difficulties and insight.difficulty not in criteria.difficulties:
            continue
        result.append(insight)
    return result
