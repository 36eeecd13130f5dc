"""
Confidence component scorers and the confidence aggregator.

Every function here is pure: it reads only its arguments and the immutable
lookup tables defined in this module, so it can be called concurrently from
any number of requests without coordination.

Components (each on a 0-100 scale):
    - Freshness: staircase over the age of the primary observation
    - Reliability: static trust level of the observation's source
    - Consistency: mean relative variance against recent comparison points
    - Completeness: share of the metric's expected sources that are connected

Overall confidence:
    overall = round(0.30*F + 0.35*C + 0.25*R + 0.10*P)

Zero baseline:
    Relative variance against a primary value of exactly 0 is undefined.
    ``relative_variance`` returns None for that case and both the consistency
    scorer and the discrepancy detector treat it as "no valid comparison".
    Negative primary values use |primary| as the denominator.
"""

import math
from datetime import datetime
from types import MappingProxyType
from typing import Collection, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple, Union

from seo_accuracy.core.exceptions import ZeroBaselineError
from seo_accuracy.models.enums import DataSource, DiscrepancySeverity
from seo_accuracy.models.schemas import DataPoint, Discrepancy
from seo_accuracy.services.validation import hours_since


# =============================================================================
# Lookup Tables
# =============================================================================

# (max age in hours, score); first band whose bound is >= age wins.
FRESHNESS_BANDS: Tuple[Tuple[float, int], ...] = (
    (1.0, 100),
    (6.0, 90),
    (12.0, 80),
    (24.0, 70),
    (48.0, 50),
    (72.0, 30),
)
STALE_FRESHNESS_SCORE: int = 10

RELIABILITY_SCORES: Mapping[DataSource, int] = MappingProxyType({
    DataSource.GOOGLE_SEARCH_CONSOLE: 95,
    DataSource.GOOGLE_ANALYTICS: 95,
    DataSource.SERPAPI: 85,
    DataSource.AHREFS_API: 85,
    DataSource.SEMRUSH_API: 85,
    DataSource.DATAFORSEO: 80,
    DataSource.MOZ_API: 75,
    DataSource.INTERNAL_CRAWLER: 70,
})
DEFAULT_RELIABILITY: int = 50

# (max mean variance, score)
CONSISTENCY_BANDS: Tuple[Tuple[float, int], ...] = (
    (0.05, 95),
    (0.10, 85),
    (0.20, 70),
    (0.35, 50),
)
INCONSISTENT_SCORE: int = 25
NEUTRAL_CONSISTENCY: int = 50
COMPARISON_WINDOW_HOURS: float = 48.0

EXPECTED_SOURCES: Mapping[str, FrozenSet[DataSource]] = MappingProxyType({
    "organic_clicks": frozenset({
        DataSource.GOOGLE_SEARCH_CONSOLE,
        DataSource.GOOGLE_ANALYTICS,
    }),
    "organic_impressions": frozenset({DataSource.GOOGLE_SEARCH_CONSOLE}),
    "keyword_position": frozenset({
        DataSource.GOOGLE_SEARCH_CONSOLE,
        DataSource.SERPAPI,
        DataSource.DATAFORSEO,
    }),
    "page_views": frozenset({DataSource.GOOGLE_ANALYTICS}),
    "bounce_rate": frozenset({DataSource.GOOGLE_ANALYTICS}),
    "backlinks": frozenset({
        DataSource.AHREFS_API,
        DataSource.SEMRUSH_API,
        DataSource.MOZ_API,
    }),
    "domain_rating": frozenset({
        DataSource.AHREFS_API,
        DataSource.MOZ_API,
    }),
})
DEFAULT_EXPECTED_SOURCES: FrozenSet[DataSource] = frozenset({DataSource.GOOGLE_SEARCH_CONSOLE})

# Weights of the overall confidence score; they sum to 1.
FRESHNESS_WEIGHT: float = 0.30
CONSISTENCY_WEIGHT: float = 0.35
RELIABILITY_WEIGHT: float = 0.25
COMPLETENESS_WEIGHT: float = 0.10

ACCURACY_MIN_OVERALL: int = 70
MAX_HIGH_SEVERITY_RATIO: float = 0.5


# =============================================================================
# Freshness
# =============================================================================


def calculate_freshness_score(timestamp: datetime, now: Optional[datetime] = None) -> int:
    """
    Score the age of an observation.

    Future timestamps have a negative age and therefore score 100.

    Example:
        >>> calculate_freshness_score(now - timedelta(hours=3), now=now)
        90
    """
    age_hours = hours_since(timestamp, now)
    for max_age, score in FRESHNESS_BANDS:
        if age_hours <= max_age:
            return score
    return STALE_FRESHNESS_SCORE


# =============================================================================
# Reliability
# =============================================================================


def calculate_reliability_score(source: Union[DataSource, str]) -> int:
    """Static trust level of a source; unknown sources get 50."""
    try:
        source = DataSource(source)
    except ValueError:
        return DEFAULT_RELIABILITY
    return RELIABILITY_SCORES.get(source, DEFAULT_RELIABILITY)


# =============================================================================
# Consistency
# =============================================================================


def relative_variance(
    primary_value: float,
    compare_value: float,
    strict: bool = False,
) -> Optional[float]:
    """
    Relative absolute difference ``|primary - compare| / |primary|``.

    Args:
        primary_value: Baseline observation.
        compare_value: Observation being compared.
        strict: Raise ZeroBaselineError instead of returning None when the
            baseline is zero.

    Returns:
        The variance (always >= 0), or None for a zero baseline.
    """
    if primary_value == 0:
        if strict:
            raise ZeroBaselineError()
        return None
    return abs(primary_value - compare_value) / abs(primary_value)


def score_mean_variance(mean_variance: float) -> int:
    for max_variance, score in CONSISTENCY_BANDS:
        if mean_variance <= max_variance:
            return score
    return INCONSISTENT_SCORE


def calculate_consistency_score(
    primary: DataPoint,
    compare: Sequence[DataPoint],
    now: Optional[datetime] = None,
    window_hours: float = COMPARISON_WINDOW_HOURS,
) -> int:
    """
    Score cross-source agreement for the primary observation.

    Comparison points older than ``window_hours`` are ignored. When nothing
    comparable remains (no points, all stale, or a zero primary value) the
    neutral score 50 is returned: there is no evidence either way.
    """
    variances = []
    for point in compare:
        if hours_since(point.timestamp, now) > window_hours:
            continue
        variance = relative_variance(primary.value, point.value)
        if variance is None:
            continue
        variances.append(variance)

    if not variances:
        return NEUTRAL_CONSISTENCY

    return score_mean_variance(sum(variances) / len(variances))


# =============================================================================
# Completeness
# =============================================================================


def expected_sources_for_metric(metric: str) -> FrozenSet[DataSource]:
    """Sources a metric is expected to be reported by; defaults to GSC only."""
    return EXPECTED_SOURCES.get(metric, DEFAULT_EXPECTED_SOURCES)


def calculate_completeness_score(
    expected: Collection[DataSource],
    available: Iterable[DataSource],
) -> float:
    """Percentage of expected sources that are available, capped at 100."""
    if not expected:
        return 100.0
    covered = set(expected) & set(available)
    return min(100.0, 100.0 * len(covered) / len(expected))


# =============================================================================
# Aggregation
# =============================================================================


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_overall_score(
    freshness: float,
    consistency: float,
    reliability: float,
    completeness: float,
) -> int:
    """
    Weighted overall confidence.

    Pure function of the four components; recomputing it from a stored
    ConfidenceScore always reproduces the stored ``overall``.
    """
    weighted = (
        freshness * FRESHNESS_WEIGHT
        + consistency * CONSISTENCY_WEIGHT
        + reliability * RELIABILITY_WEIGHT
        + completeness * COMPLETENESS_WEIGHT
    )
    return max(0, min(100, round_half_up(weighted)))


def determine_accuracy(overall: float, discrepancies: Sequence[Discrepancy]) -> bool:
    """
    Accuracy verdict.

    Accurate when overall >= 70, no discrepancy is CRITICAL, and fewer than
    half of the discrepancies are HIGH or CRITICAL.
    """
    if overall < ACCURACY_MIN_OVERALL:
        return False

    if any(d.severity == DiscrepancySeverity.CRITICAL for d in discrepancies):
        return False

    severe = sum(
        1 for d in discrepancies
        if d.severity in (DiscrepancySeverity.HIGH, DiscrepancySeverity.CRITICAL)
    )
    return severe / max(len(discrepancies), 1) < MAX_HIGH_SEVERITY_RATIO
