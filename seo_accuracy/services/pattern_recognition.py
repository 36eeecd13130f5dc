"""
Time-series pattern recognition for ranking histories.

Outputs a PatternRecognitionResult:
    - trend: volatile when the population std exceeds 10 positions, else
      improving / declining by the sign of the daily slope (lower positions
      are better), else stable
    - cycleDetected: lag-n/3 autocorrelation of the centred positions
    - seasonality: fixed placeholder once enough history exists
    - anomalies: outlying rank checks (see anomaly_detection)
"""

from typing import Optional, Sequence

import numpy as np

from seo_accuracy.models.enums import Trend
from seo_accuracy.models.schemas import PatternRecognitionResult, RankingRecord
from seo_accuracy.services.anomaly_detection import identify_specific_anomalies
from seo_accuracy.services.ranking_features import (
    calculate_trend_slope,
    check_days,
    position_stats,
    positions_array,
)


VOLATILE_STD: float = 10.0
TREND_SLOPE_THRESHOLD: float = 0.1

MIN_POSITIONS_FOR_CYCLES: int = 10
CYCLE_CORRELATION_THRESHOLD: float = 0.5

MIN_HISTORY_FOR_SEASONALITY: int = 30
# Placeholder until a real seasonal decomposition exists.
SEASONALITY_PLACEHOLDER: float = 0.3


def classify_trend(slope: float, positions: np.ndarray) -> Trend:
    if len(positions) == 0:
        return Trend.STABLE

    _, std = position_stats(positions)
    if std > VOLATILE_STD:
        return Trend.VOLATILE
    if slope < -TREND_SLOPE_THRESHOLD:
        return Trend.IMPROVING
    if slope > TREND_SLOPE_THRESHOLD:
        return Trend.DECLINING
    return Trend.STABLE


def detect_cycles(positions: np.ndarray) -> bool:
    """
    True when the lag floor(n/3) autocorrelation magnitude exceeds 0.5.

    The correlation is the mean of lagged products of mean-centred positions
    (not normalised by the variance).
    """
    n = len(positions)
    if n < MIN_POSITIONS_FOR_CYCLES:
        return False

    centered = positions - np.mean(positions)
    lag = n // 3
    correlation = float(np.mean(centered[:-lag] * centered[lag:]))
    return abs(correlation) > CYCLE_CORRELATION_THRESHOLD


def detect_seasonality(historical: Optional[Sequence[RankingRecord]]) -> float:
    if not historical or len(historical) < MIN_HISTORY_FOR_SEASONALITY:
        return 0.0
    return SEASONALITY_PLACEHOLDER


def recognize_patterns(
    rankings: Sequence[RankingRecord],
    historical: Optional[Sequence[RankingRecord]] = None,
) -> PatternRecognitionResult:
    """Trend, cycle, seasonality and anomaly summary of a ranking series."""
    positions = positions_array(rankings)
    slope = calculate_trend_slope(positions, check_days(rankings))

    return PatternRecognitionResult(
        trend=classify_trend(slope, positions),
        seasonality=detect_seasonality(historical),
        cycleDetected=detect_cycles(positions),
        anomalies=identify_specific_anomalies(rankings),
    )
