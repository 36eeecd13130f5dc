"""
Outlier detection over ranking positions.

A rank check is an outlier when it lies more than 2 population standard
deviations from the series mean.

Anomaly score:
    n < 5            -> 1.0 (too little data to call anything an outlier)
    otherwise        -> max(0, 1 - 2 * outlier_rate)

Per-record severity:
    A single outlier among n points can sit at most (n - 1) / sqrt(n) global
    standard deviations from the mean, so a "> 3 sigma" test against the
    global sigma never fires for short series. Severity is instead judged
    against the spread of the remaining records: "high" when the deviation
    exceeds 3x the standard deviation of the other records, otherwise
    "medium".
"""

from typing import List, Sequence

import numpy as np

from seo_accuracy.models.enums import AnomalySeverity
from seo_accuracy.models.schemas import RankingAnomaly, RankingRecord
from seo_accuracy.services.ranking_features import position_stats, positions_array


MIN_RECORDS_FOR_DETECTION: int = 5
OUTLIER_SIGMA: float = 2.0
HIGH_SEVERITY_SIGMA: float = 3.0
ANOMALY_RATE_PENALTY: float = 2.0


def _outlier_mask(positions: np.ndarray) -> np.ndarray:
    mean, std = position_stats(positions)
    return np.abs(positions - mean) > OUTLIER_SIGMA * std


def calculate_anomaly_score(rankings: Sequence[RankingRecord]) -> float:
    """
    Score in [0, 1]; 1 means no outliers.

    Example:
        >>> calculate_anomaly_score(ten_stable_records)
        1.0
    """
    if len(rankings) < MIN_RECORDS_FOR_DETECTION:
        return 1.0

    mask = _outlier_mask(positions_array(rankings))
    rate = float(np.count_nonzero(mask)) / len(rankings)
    return max(0.0, 1.0 - ANOMALY_RATE_PENALTY * rate)


def identify_specific_anomalies(rankings: Sequence[RankingRecord]) -> List[RankingAnomaly]:
    """Every outlying rank check, in input order."""
    if not rankings:
        return []

    positions = positions_array(rankings)
    mean, _ = position_stats(positions)
    mask = _outlier_mask(positions)

    anomalies: List[RankingAnomaly] = []
    for i in np.flatnonzero(mask):
        deviation = abs(float(positions[i]) - mean)
        others = np.delete(positions, i)
        other_std = float(np.std(others)) if len(others) else 0.0
        severity = (
            AnomalySeverity.HIGH
            if deviation > HIGH_SEVERITY_SIGMA * other_std
            else AnomalySeverity.MEDIUM
        )
        record = rankings[int(i)]
        anomalies.append(
            RankingAnomaly(
                timestamp=record.checkedAt,
                position=record.position,
                deviation=deviation,
                severity=severity,
            )
        )

    return anomalies
