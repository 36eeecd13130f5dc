"""
Cross-source discrepancy detection.

For each comparison point the relative variance against the primary value is
classified into a severity tier. Pairs at or below the 5% noise floor are not
emitted at all, and neither are comparisons against a zero primary value
(same rule as the consistency scorer).

Severity tiers (inclusive upper bounds):
    variance <= 0.15 -> LOW
    variance <= 0.30 -> MEDIUM
    variance <= 0.50 -> HIGH
    otherwise        -> CRITICAL
"""

from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

from seo_accuracy.models.enums import DiscrepancySeverity
from seo_accuracy.models.schemas import DataPoint, Discrepancy
from seo_accuracy.services.scoring import relative_variance


NOISE_FLOOR: float = 0.05

SEVERITY_BANDS: Tuple[Tuple[float, DiscrepancySeverity], ...] = (
    (0.15, DiscrepancySeverity.LOW),
    (0.30, DiscrepancySeverity.MEDIUM),
    (0.50, DiscrepancySeverity.HIGH),
)

SEVERITY_EXPLANATIONS: Mapping[DiscrepancySeverity, str] = MappingProxyType({
    DiscrepancySeverity.LOW: "Minor variance within acceptable range",
    DiscrepancySeverity.MEDIUM: "Moderate variance requiring attention",
    DiscrepancySeverity.HIGH: "Significant variance indicating data quality issues",
    DiscrepancySeverity.CRITICAL: "Critical variance suggesting data corruption or source issues",
})


def classify_variance(variance: float) -> Optional[DiscrepancySeverity]:
    """Severity for a variance, or None when it is within the noise floor."""
    if variance <= NOISE_FLOOR:
        return None
    for upper_bound, severity in SEVERITY_BANDS:
        if variance <= upper_bound:
            return severity
    return DiscrepancySeverity.CRITICAL


def detect_discrepancies(
    primary: DataPoint,
    compare: Sequence[DataPoint],
) -> List[Discrepancy]:
    """
    Classify every significant difference between the primary observation
    and the comparison points, in input order.
    """
    discrepancies: List[Discrepancy] = []

    for point in compare:
        variance = relative_variance(primary.value, point.value)
        if variance is None:
            continue

        severity = classify_variance(variance)
        if severity is None:
            continue

        discrepancies.append(
            Discrepancy(
                source1=primary.source,
                source2=point.source,
                value1=primary.value,
                value2=point.value,
                variance=variance,
                severity=severity,
                explanation=SEVERITY_EXPLANATIONS[severity],
            )
        )

    return discrepancies
