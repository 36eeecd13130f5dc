"""
Feature extraction over a keyword's ranking history.

Produces the fixed 11-element feature vector consumed by the inference model
in ``inference_model``. Statistics use numpy with population standard
deviation (ddof=0), matching the rest of the statistical services.

Feature vector (in order):
    0. mean position / 100
    1. std of positions / 50
    2. freshness: clamp01(1 - hours since newest check / 168)
    3. distinct sources / 3
    4. share of records carrying clicks or impressions
    5. |trend slope| in positions per day
    6. stability: 1 - min(1, std / mean)
    7. industry weight: 1.0 for competitive, otherwise 0.5
    8. competition level (default 0.5)
    9. seasonality (default 0.5)
   10. min(1, search volume / 10000) (default 0.5)

Trend slope:
    Ordinary least squares of position against check time measured in days
    since the first check. A positive slope means the keyword is moving to
    larger (worse) positions.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import numpy as np

from seo_accuracy.core.exceptions import DataValidationError
from seo_accuracy.models.enums import Industry
from seo_accuracy.models.schemas import ContextualData, RankingRecord
from seo_accuracy.services.validation import as_utc, hours_since


# =============================================================================
# Constants
# =============================================================================

FEATURE_COUNT: int = 11

POSITION_SCALE: float = 100.0
STD_SCALE: float = 50.0
RECENCY_HORIZON_HOURS: float = 168.0
MAX_EXPECTED_SOURCES: float = 3.0
SEARCH_VOLUME_SCALE: float = 10000.0

DEFAULT_CONTEXT_FEATURE: float = 0.5
COMPETITIVE_INDUSTRY_WEIGHT: float = 1.0
OTHER_INDUSTRY_WEIGHT: float = 0.5

SECONDS_PER_DAY: float = 86400.0


# =============================================================================
# Series helpers
# =============================================================================


def positions_array(rankings: Sequence[RankingRecord]) -> np.ndarray:
    return np.array([r.position for r in rankings], dtype=np.float64)


def check_days(rankings: Sequence[RankingRecord]) -> np.ndarray:
    """Check times as fractional days since the earliest check."""
    if not rankings:
        return np.empty(0, dtype=np.float64)
    stamps = [as_utc(r.checkedAt) for r in rankings]
    origin = min(stamps)
    return np.array(
        [(s - origin).total_seconds() / SECONDS_PER_DAY for s in stamps],
        dtype=np.float64,
    )


def position_stats(positions: np.ndarray) -> Tuple[float, float]:
    """(mean, population std) of a non-empty position array."""
    return float(np.mean(positions)), float(np.std(positions))


def calculate_trend_slope(positions: np.ndarray, days: np.ndarray) -> float:
    """
    OLS slope of positions over time, in positions per day.

    Returns 0.0 for fewer than two points or when every check happened at
    the same instant.
    """
    if len(positions) < 2:
        return 0.0

    x_centered = days - np.mean(days)
    denominator = float(np.sum(x_centered ** 2))
    if denominator == 0.0:
        return 0.0

    y_centered = positions - np.mean(positions)
    return float(np.sum(x_centered * y_centered)) / denominator


def newest_check(rankings: Sequence[RankingRecord]) -> datetime:
    return max(as_utc(r.checkedAt) for r in rankings)


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def _context_value(value: Optional[float]) -> float:
    return DEFAULT_CONTEXT_FEATURE if value is None else float(value)


# =============================================================================
# Feature Extraction
# =============================================================================


def extract_ml_features(
    rankings: Sequence[RankingRecord],
    contextual: Optional[ContextualData] = None,
    now: Optional[datetime] = None,
) -> List[float]:
    """
    Build the 11-element feature vector for a ranking series.

    Args:
        rankings: Non-empty ranking history of one keyword.
        contextual: Optional keyword context; absent values default to 0.5.
        now: Reference time for the freshness feature.

    Returns:
        List of 11 floats in the documented order.

    Raises:
        DataValidationError: If ``rankings`` is empty.
    """
    if not rankings:
        raise DataValidationError("rankings", "Feature extraction needs at least one ranking")

    positions = positions_array(rankings)
    mean, std = position_stats(positions)
    slope = calculate_trend_slope(positions, check_days(rankings))

    recency_hours = hours_since(newest_check(rankings), now)
    source_count = len({r.source for r in rankings})
    with_activity = sum(
        1 for r in rankings
        if r.clicks is not None or r.impressions is not None
    )

    context = contextual or ContextualData()
    industry_weight = (
        COMPETITIVE_INDUSTRY_WEIGHT
        if context.industry == Industry.COMPETITIVE.value
        else OTHER_INDUSTRY_WEIGHT
    )
    if context.searchVolume is None:
        search_volume = DEFAULT_CONTEXT_FEATURE
    else:
        search_volume = min(1.0, context.searchVolume / SEARCH_VOLUME_SCALE)

    return [
        mean / POSITION_SCALE,
        std / STD_SCALE,
        _clamp01(1.0 - recency_hours / RECENCY_HORIZON_HOURS),
        source_count / MAX_EXPECTED_SOURCES,
        with_activity / len(rankings),
        abs(slope),
        1.0 - min(1.0, std / mean),
        industry_weight,
        _context_value(context.competitionLevel),
        _context_value(context.seasonality),
        search_volume,
    ]
