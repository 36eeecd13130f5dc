"""
ML Confidence Engine.

Hybrid confidence for a keyword's ranking history. Combines a traditional
statistics score with the fixed-weight inference model, penalises outliers
and attaches pattern recognition and plain-language recommendations.

Process (calculate_ml_confidence):
    1. Traditional score: freshness, consistency, reliability and day
       coverage of the rankings, weighted 0.30 / 0.30 / 0.25 / 0.15
    2. ML score: feature extraction -> inference model -> context adjustment
    3. Anomaly score: outlier rate penalty
    4. Pattern recognition: trend, cycles, seasonality, anomalies
    5. Hybrid score: clamp01((0.4 * traditional + 0.6 * ml) * anomaly)
    6. Confidence level and recommendations

All numeric scores in the result are rounded to 2 decimals; the confidence
level is bucketed from the unrounded hybrid score.

Usage:
    engine = MLConfidenceEngine()
    result = engine.calculate_ml_confidence(MLConfidenceInput(rankings=records))
    results = await engine.calculate_batch_ml_confidence(inputs)
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

from seo_accuracy.core.config import Settings, get_settings
from seo_accuracy.models.enums import ConfidenceLevel, DataSource, Trend
from seo_accuracy.models.schemas import (
    ContextualData,
    MLConfidenceInput,
    MLConfidenceResult,
    PatternRecognitionResult,
    RankingRecord,
)
from seo_accuracy.services import inference_model
from seo_accuracy.services.anomaly_detection import calculate_anomaly_score
from seo_accuracy.services.pattern_recognition import recognize_patterns
from seo_accuracy.services.ranking_features import (
    extract_ml_features,
    newest_check,
    position_stats,
    positions_array,
)
from seo_accuracy.services.validation import (
    as_utc,
    ensure_ml_confidence_input,
    hours_since,
    utc_now,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

RANKING_FRESHNESS_BANDS: Tuple[Tuple[float, float], ...] = (
    (1.0, 1.0),
    (6.0, 0.9),
    (24.0, 0.8),
    (72.0, 0.6),
    (168.0, 0.4),
)
STALE_RANKING_FRESHNESS: float = 0.2

# (max population std of positions, score)
RANKING_CONSISTENCY_BANDS: Tuple[Tuple[float, float], ...] = (
    (2.0, 1.0),
    (5.0, 0.8),
    (10.0, 0.6),
    (20.0, 0.4),
)
INCONSISTENT_RANKINGS: float = 0.2
SPARSE_CONSISTENCY: float = 0.5

# (min distinct days, score)
COVERAGE_BANDS: Tuple[Tuple[int, float], ...] = (
    (30, 1.0),
    (14, 0.8),
    (7, 0.6),
    (3, 0.4),
)
MIN_COVERAGE: float = 0.2

TRADITIONAL_WEIGHTS: Tuple[float, float, float, float] = (0.30, 0.30, 0.25, 0.15)
TRADITIONAL_HYBRID_WEIGHT: float = 0.4
ML_HYBRID_WEIGHT: float = 0.6

CONFIDENCE_LEVEL_BANDS: Tuple[Tuple[float, ConfidenceLevel], ...] = (
    (0.9, ConfidenceLevel.VERY_HIGH),
    (0.75, ConfidenceLevel.HIGH),
    (0.6, ConfidenceLevel.MEDIUM),
    (0.4, ConfidenceLevel.LOW),
)

SCORE_GAP: float = 0.1
LOW_ANOMALY_SCORE: float = 0.7
MIN_RECORDS_FOR_TRUST: int = 10

RECOMMEND_ML_HIGHER = "ML model detected higher confidence than traditional metrics suggest"
RECOMMEND_MANUAL_REVIEW = "Traditional metrics outperform ML model - consider manual review"
RECOMMEND_INVESTIGATE_ANOMALIES = "High anomaly rate detected - investigate unusual ranking changes"
RECOMMEND_TRACK_MORE_OFTEN = "High volatility detected - increase tracking frequency"
RECOMMEND_SEASONAL_STRATEGY = "Cyclical pattern detected - consider seasonal optimization strategies"
RECOMMEND_MORE_HISTORY = "Limited data points - collect more historical data for improved accuracy"
RECOMMEND_MORE_SOURCES = "Single data source detected - add additional sources for validation"
RECOMMEND_CONTINUE = "ML confidence analysis looks good - continue current tracking practices"


# =============================================================================
# Traditional Score
# =============================================================================


def ranking_freshness_score(rankings: Sequence[RankingRecord], now: Optional[datetime] = None) -> float:
    if not rankings:
        return 0.0
    age_hours = hours_since(newest_check(rankings), now)
    for max_age, score in RANKING_FRESHNESS_BANDS:
        if age_hours <= max_age:
            return score
    return STALE_RANKING_FRESHNESS


def ranking_consistency_score(rankings: Sequence[RankingRecord]) -> float:
    if len(rankings) < 2:
        return SPARSE_CONSISTENCY
    _, std = position_stats(positions_array(rankings))
    for max_std, score in RANKING_CONSISTENCY_BANDS:
        if std <= max_std:
            return score
    return INCONSISTENT_RANKINGS


def ranking_reliability_score(rankings: Sequence[RankingRecord]) -> float:
    """
    Source and volume based trust in a ranking series.

    Base 0.5, +0.3 with Search Console, +0.2 with SerpAPI, +0.1 for more
    than one source, +0.1 scaled by the share of records with clicks, +0.1
    from 7 records and another +0.1 from 30 records. Capped at 1.
    """
    if not rankings:
        return 0.0

    sources = {r.source for r in rankings}
    score = 0.5
    if DataSource.GOOGLE_SEARCH_CONSOLE in sources:
        score += 0.3
    if DataSource.SERPAPI in sources:
        score += 0.2
    if len(sources) > 1:
        score += 0.1

    with_clicks = sum(1 for r in rankings if r.clicks is not None)
    score += 0.1 * with_clicks / len(rankings)

    if len(rankings) >= 7:
        score += 0.1
    if len(rankings) >= 30:
        score += 0.1

    return min(1.0, score)


def ranking_coverage_score(rankings: Sequence[RankingRecord]) -> float:
    """Score by the number of distinct UTC calendar days with a check."""
    if not rankings:
        return 0.0
    days = len({as_utc(r.checkedAt).date() for r in rankings})
    for min_days, score in COVERAGE_BANDS:
        if days >= min_days:
            return score
    return MIN_COVERAGE


def calculate_traditional_score(
    rankings: Sequence[RankingRecord],
    now: Optional[datetime] = None,
) -> float:
    """Weighted statistics score in [0, 1]; 0 for an empty series."""
    if not rankings:
        return 0.0

    components = (
        ranking_freshness_score(rankings, now),
        ranking_consistency_score(rankings),
        ranking_reliability_score(rankings),
        ranking_coverage_score(rankings),
    )
    return sum(w * c for w, c in zip(TRADITIONAL_WEIGHTS, components))


# =============================================================================
# ML Score
# =============================================================================


def calculate_ml_score(
    rankings: Sequence[RankingRecord],
    contextual: Optional[ContextualData] = None,
    now: Optional[datetime] = None,
) -> float:
    """Context-adjusted model prediction in [0, 1]; 0 for an empty series."""
    if not rankings:
        return 0.0

    features = extract_ml_features(rankings, contextual, now)
    prediction = inference_model.predict(features)
    return inference_model.apply_contextual_adjustments(prediction, contextual)


# =============================================================================
# Combination
# =============================================================================


def combine_scores(traditional: float, ml: float, anomaly: float) -> float:
    blended = TRADITIONAL_HYBRID_WEIGHT * traditional + ML_HYBRID_WEIGHT * ml
    return min(1.0, max(0.0, blended * anomaly))


def determine_confidence_level(score: float) -> ConfidenceLevel:
    for lower_bound, level in CONFIDENCE_LEVEL_BANDS:
        if score >= lower_bound:
            return level
    return ConfidenceLevel.VERY_LOW


def generate_recommendations(
    rankings: Sequence[RankingRecord],
    traditional: float,
    ml: float,
    anomaly: float,
    patterns: PatternRecognitionResult,
) -> List[str]:
    """
    Plain-language advice for the keyword; never empty.

    Rules, in output order:
        - ML score above traditional by more than 0.1, or the reverse
        - anomaly score below 0.7
        - volatile trend
        - cycle detected
        - fewer than 10 rank checks
        - exactly one distinct source
    When no rule fires, a single "looks good" message is returned.
    """
    recommendations: List[str] = []

    if ml > traditional + SCORE_GAP:
        recommendations.append(RECOMMEND_ML_HIGHER)
    elif traditional > ml + SCORE_GAP:
        recommendations.append(RECOMMEND_MANUAL_REVIEW)

    if anomaly < LOW_ANOMALY_SCORE:
        recommendations.append(RECOMMEND_INVESTIGATE_ANOMALIES)

    if patterns.trend == Trend.VOLATILE:
        recommendations.append(RECOMMEND_TRACK_MORE_OFTEN)

    if patterns.cycleDetected:
        recommendations.append(RECOMMEND_SEASONAL_STRATEGY)

    if len(rankings) < MIN_RECORDS_FOR_TRUST:
        recommendations.append(RECOMMEND_MORE_HISTORY)

    if len({r.source for r in rankings}) == 1:
        recommendations.append(RECOMMEND_MORE_SOURCES)

    if not recommendations:
        recommendations.append(RECOMMEND_CONTINUE)

    return recommendations


# =============================================================================
# Engine
# =============================================================================


class MLConfidenceEngine:
    """Hybrid ML confidence scoring for single keywords and batches."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def calculate_ml_confidence(
        self,
        input: Union[MLConfidenceInput, dict],
        now: Optional[datetime] = None,
    ) -> MLConfidenceResult:
        """
        Hybrid confidence for one ranking series.

        Args:
            input: Rankings, optional history and optional keyword context.
            now: Reference time for freshness; defaults to the current UTC time.

        Returns:
            MLConfidenceResult with 2-decimal scores.

        Raises:
            DataValidationError: If the input or any ranking is malformed.
        """
        data = ensure_ml_confidence_input(input)
        now = now or utc_now()
        rankings = data.rankings

        traditional = calculate_traditional_score(rankings, now)
        ml = calculate_ml_score(rankings, data.contextualData, now)
        anomaly = calculate_anomaly_score(rankings)
        patterns = recognize_patterns(rankings, data.historical)
        hybrid = combine_scores(traditional, ml, anomaly)

        return MLConfidenceResult(
            mlScore=round(ml, 2),
            traditionalScore=round(traditional, 2),
            hybridScore=round(hybrid, 2),
            anomalyScore=round(anomaly, 2),
            patternRecognition=patterns,
            confidenceLevel=determine_confidence_level(hybrid),
            recommendations=generate_recommendations(
                rankings, traditional, ml, anomaly, patterns
            ),
            modelMetadata=inference_model.model_metadata(),
        )

    async def _score(self, input: Union[MLConfidenceInput, dict]) -> MLConfidenceResult:
        # CPU-bound numpy scoring stays off the event loop
        return await asyncio.to_thread(self.calculate_ml_confidence, input)

    async def calculate_batch_ml_confidence(
        self,
        inputs: Sequence[Union[MLConfidenceInput, dict]],
    ) -> List[MLConfidenceResult]:
        """
        Score many series in groups of ``ml_batch_size``.

        Items of a group are scored concurrently in worker threads, with a
        short pause between groups. Results are returned in input order. A
        malformed input fails the whole batch with DataValidationError.
        """
        batch_size = self.settings.ml_batch_size
        pause = self.settings.ml_batch_pause_seconds
        results: List[MLConfidenceResult] = []

        logger.info(f"Scoring {len(inputs)} ML confidence inputs in groups of {batch_size}")

        for start in range(0, len(inputs), batch_size):
            group = inputs[start:start + batch_size]
            results.extend(await asyncio.gather(*(self._score(i) for i in group)))

            if start + batch_size < len(inputs) and pause > 0:
                await asyncio.sleep(pause)

        return results
