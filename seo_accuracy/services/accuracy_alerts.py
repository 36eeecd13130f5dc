"""
Accuracy alert evaluation.

Derives alerts from a finished AccuracyReport. Evaluation is pure; delivery
(email, web notifications, webhooks) is left to the caller.

Rules:
    CONFIDENCE_DROP       overall confidence < threshold (default 70)
                          severity by overall: >=80 LOW, >=60 MEDIUM,
                          >=40 HIGH, else CRITICAL
    CRITICAL_DISCREPANCY  any CRITICAL discrepancy; CRITICAL when the
                          largest variance exceeds 0.5, else HIGH
    DATA_STALE            report older than the freshness window (default
                          24h); HIGH beyond 72h, else MEDIUM
    CONSISTENCY_ISSUE     consistency component below 50; always MEDIUM
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from seo_accuracy.core.config import Settings, get_settings
from seo_accuracy.models.enums import AccuracyAlertType, DiscrepancySeverity
from seo_accuracy.models.schemas import AccuracyAlert, AccuracyReport
from seo_accuracy.services.scoring import round_half_up
from seo_accuracy.services.validation import hours_since, utc_now


CRITICAL_VARIANCE: float = 0.5
VERY_STALE_HOURS: float = 72.0
LOW_CONSISTENCY: float = 50.0


@dataclass(frozen=True)
class AlertThresholds:
    confidence_threshold: int = 70
    data_freshness_hours: float = 24.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AlertThresholds":
        settings = settings or get_settings()
        return cls(
            confidence_threshold=settings.alert_confidence_threshold,
            data_freshness_hours=settings.alert_data_freshness_hours,
        )


def _alert_id(prefix: str, now: datetime) -> str:
    return f"{prefix}_{int(now.timestamp() * 1000)}_{secrets.token_hex(4)}"


def confidence_severity(overall: float) -> DiscrepancySeverity:
    if overall >= 80:
        return DiscrepancySeverity.LOW
    if overall >= 60:
        return DiscrepancySeverity.MEDIUM
    if overall >= 40:
        return DiscrepancySeverity.HIGH
    return DiscrepancySeverity.CRITICAL


def evaluate_accuracy_alerts(
    report: AccuracyReport,
    thresholds: Optional[AlertThresholds] = None,
    now: Optional[datetime] = None,
) -> List[AccuracyAlert]:
    """
    Alerts raised by a report, in rule order.

    Args:
        report: The report to evaluate.
        thresholds: Alert thresholds; defaults to the configured ones.
        now: Reference time for staleness; defaults to the current UTC time.

    Returns:
        Possibly empty list of AccuracyAlert.
    """
    thresholds = thresholds or AlertThresholds.from_settings()
    now = now or utc_now()
    score = report.confidenceScore
    alerts: List[AccuracyAlert] = []

    if score.overall < thresholds.confidence_threshold:
        alerts.append(AccuracyAlert(
            id=_alert_id("confidence", now),
            type=AccuracyAlertType.CONFIDENCE_DROP,
            severity=confidence_severity(score.overall),
            projectId=report.projectId,
            metric=report.metric,
            message=f"Confidence score dropped to {score.overall}% for {report.metric}",
            data={
                "confidenceScore": score.model_dump(mode="json"),
                "threshold": thresholds.confidence_threshold,
            },
            triggeredAt=now,
        ))

    critical = [d for d in report.discrepancies if d.severity == DiscrepancySeverity.CRITICAL]
    if critical:
        max_variance = max(d.variance for d in critical)
        affected = []
        for d in critical:
            affected.extend([d.source1.value, d.source2.value])
        alerts.append(AccuracyAlert(
            id=_alert_id("discrepancy", now),
            type=AccuracyAlertType.CRITICAL_DISCREPANCY,
            severity=(
                DiscrepancySeverity.CRITICAL
                if max_variance > CRITICAL_VARIANCE
                else DiscrepancySeverity.HIGH
            ),
            projectId=report.projectId,
            metric=report.metric,
            message=(
                f"Critical data discrepancy detected for {report.metric} "
                f"({round_half_up(max_variance * 100)}% variance)"
            ),
            data={
                "discrepancies": [d.model_dump(mode="json") for d in critical],
                "maxVariance": max_variance,
                "affectedSources": affected,
            },
            triggeredAt=now,
        ))

    hours_old = hours_since(report.checkedAt, now)
    if hours_old > thresholds.data_freshness_hours:
        alerts.append(AccuracyAlert(
            id=_alert_id("stale", now),
            type=AccuracyAlertType.DATA_STALE,
            severity=(
                DiscrepancySeverity.HIGH
                if hours_old > VERY_STALE_HOURS
                else DiscrepancySeverity.MEDIUM
            ),
            projectId=report.projectId,
            metric=report.metric,
            message=f"Data for {report.metric} is {round_half_up(hours_old)} hours old",
            data={
                "hoursOld": round_half_up(hours_old),
                "threshold": thresholds.data_freshness_hours,
                "lastUpdate": report.checkedAt.isoformat(),
            },
            triggeredAt=now,
        ))

    if score.consistency < LOW_CONSISTENCY:
        alerts.append(AccuracyAlert(
            id=_alert_id("consistency", now),
            type=AccuracyAlertType.CONSISTENCY_ISSUE,
            severity=DiscrepancySeverity.MEDIUM,
            projectId=report.projectId,
            metric=report.metric,
            message=(
                f"Data consistency issues detected for {report.metric} "
                f"({score.consistency:g}% consistency score)"
            ),
            data={
                "consistencyScore": score.consistency,
                "sourcesCount": len(report.secondaryValues),
                "discrepancyCount": len(report.discrepancies),
            },
            triggeredAt=now,
        ))

    return alerts
