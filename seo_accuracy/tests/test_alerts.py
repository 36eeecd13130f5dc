"""
Tests for alert evaluation over finished accuracy reports.
"""

import re
from datetime import datetime, timedelta
from typing import List, Optional

import pytest

from seo_accuracy.core.config import Settings
from seo_accuracy.models import (
    AccuracyAlertType,
    AccuracyReport,
    ConfidenceScore,
    DataSource,
    Discrepancy,
    DiscrepancySeverity,
    SecondaryValue,
)
from seo_accuracy.services.accuracy_alerts import (
    AlertThresholds,
    confidence_severity,
    evaluate_accuracy_alerts,
)


GSC = DataSource.GOOGLE_SEARCH_CONSOLE
GA = DataSource.GOOGLE_ANALYTICS


def make_report(
    now: datetime,
    overall: int = 90,
    consistency: float = 95,
    hours_old: float = 1,
    discrepancies: Optional[List[Discrepancy]] = None,
) -> AccuracyReport:
    return AccuracyReport(
        id="acc_1",
        projectId="proj_1",
        metric="organic_clicks",
        primaryValue=100.0,
        secondaryValues=[SecondaryValue(source=GA, value=101.0, timestamp=now)],
        confidenceScore=ConfidenceScore(
            overall=overall,
            freshness=100,
            consistency=consistency,
            reliability=95,
            completeness=100,
        ),
        discrepancies=discrepancies or [],
        isAccurate=True,
        checkedAt=now - timedelta(hours=hours_old),
    )


def critical_discrepancy(variance: float, source2: DataSource = GA) -> Discrepancy:
    return Discrepancy(
        source1=GSC,
        source2=source2,
        value1=100.0,
        value2=100.0 * (1 + variance),
        variance=variance,
        severity=DiscrepancySeverity.CRITICAL,
        explanation="test",
    )


class TestConfidenceSeverity:

    @pytest.mark.parametrize("overall,expected", [
        (80, DiscrepancySeverity.LOW),
        (79, DiscrepancySeverity.MEDIUM),
        (60, DiscrepancySeverity.MEDIUM),
        (59, DiscrepancySeverity.HIGH),
        (40, DiscrepancySeverity.HIGH),
        (39, DiscrepancySeverity.CRITICAL),
    ])
    def test_bands(self, overall: int, expected: DiscrepancySeverity) -> None:
        assert confidence_severity(overall) == expected


class TestEvaluateAccuracyAlerts:

    def test_healthy_report_raises_nothing(self, now: datetime) -> None:
        assert evaluate_accuracy_alerts(make_report(now), AlertThresholds(), now) == []

    def test_confidence_drop(self, now: datetime) -> None:
        alerts = evaluate_accuracy_alerts(make_report(now, overall=65), AlertThresholds(), now)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AccuracyAlertType.CONFIDENCE_DROP
        assert alert.severity == DiscrepancySeverity.MEDIUM
        assert alert.message == "Confidence score dropped to 65% for organic_clicks"
        assert alert.data["threshold"] == 70
        assert alert.data["confidenceScore"]["overall"] == 65
        assert alert.triggeredAt == now
        assert re.fullmatch(rf"confidence_{int(now.timestamp() * 1000)}_[0-9a-f]{{8}}", alert.id)

    def test_threshold_is_exclusive(self, now: datetime) -> None:
        assert evaluate_accuracy_alerts(make_report(now, overall=70), AlertThresholds(), now) == []

    def test_critical_discrepancy(self, now: datetime) -> None:
        report = make_report(
            now,
            discrepancies=[
                critical_discrepancy(0.6),
                critical_discrepancy(0.8, DataSource.SERPAPI),
            ],
        )

        alerts = evaluate_accuracy_alerts(report, AlertThresholds(), now)

        assert [a.type for a in alerts] == [AccuracyAlertType.CRITICAL_DISCREPANCY]
        alert = alerts[0]
        assert alert.severity == DiscrepancySeverity.CRITICAL
        assert alert.message == "Critical data discrepancy detected for organic_clicks (80% variance)"
        assert alert.data["maxVariance"] == pytest.approx(0.8)
        assert alert.data["affectedSources"] == [
            "GOOGLE_SEARCH_CONSOLE", "GOOGLE_ANALYTICS",
            "GOOGLE_SEARCH_CONSOLE", "SERPAPI",
        ]
        assert len(alert.data["discrepancies"]) == 2
        assert alert.id.startswith("discrepancy_")

    def test_critical_discrepancy_at_half_variance_is_high(self, now: datetime) -> None:
        report = make_report(now, discrepancies=[critical_discrepancy(0.5)])
        alerts = evaluate_accuracy_alerts(report, AlertThresholds(), now)
        assert alerts[0].severity == DiscrepancySeverity.HIGH

    def test_non_critical_discrepancies_do_not_alert(self, now: datetime) -> None:
        high = Discrepancy(
            source1=GSC, source2=GA, value1=100.0, value2=140.0,
            variance=0.4, severity=DiscrepancySeverity.HIGH, explanation="test",
        )
        report = make_report(now, discrepancies=[high])
        assert evaluate_accuracy_alerts(report, AlertThresholds(), now) == []

    @pytest.mark.parametrize("hours_old,expected", [
        (30, DiscrepancySeverity.MEDIUM),
        (72, DiscrepancySeverity.MEDIUM),
        (80, DiscrepancySeverity.HIGH),
    ])
    def test_stale_data(self, now: datetime, hours_old: float, expected: DiscrepancySeverity) -> None:
        alerts = evaluate_accuracy_alerts(make_report(now, hours_old=hours_old), AlertThresholds(), now)

        assert [a.type for a in alerts] == [AccuracyAlertType.DATA_STALE]
        assert alerts[0].severity == expected
        assert alerts[0].message == f"Data for organic_clicks is {hours_old} hours old"
        assert alerts[0].data["hoursOld"] == hours_old

    def test_consistency_issue(self, now: datetime) -> None:
        alerts = evaluate_accuracy_alerts(make_report(now, consistency=40), AlertThresholds(), now)

        assert [a.type for a in alerts] == [AccuracyAlertType.CONSISTENCY_ISSUE]
        assert alerts[0].severity == DiscrepancySeverity.MEDIUM
        assert alerts[0].message == (
            "Data consistency issues detected for organic_clicks (40% consistency score)"
        )
        assert alerts[0].data["sourcesCount"] == 1

    def test_rules_fire_in_order(self, now: datetime) -> None:
        report = make_report(
            now,
            overall=30,
            consistency=25,
            hours_old=100,
            discrepancies=[critical_discrepancy(0.9)],
        )

        alerts = evaluate_accuracy_alerts(report, AlertThresholds(), now)

        assert [a.type for a in alerts] == [
            AccuracyAlertType.CONFIDENCE_DROP,
            AccuracyAlertType.CRITICAL_DISCREPANCY,
            AccuracyAlertType.DATA_STALE,
            AccuracyAlertType.CONSISTENCY_ISSUE,
        ]
        assert alerts[0].severity == DiscrepancySeverity.CRITICAL
        assert len({a.id for a in alerts}) == 4


class TestAlertThresholds:

    def test_from_settings(self, now: datetime) -> None:
        settings = Settings(
            alert_confidence_threshold=90,
            alert_data_freshness_hours=2,
            _env_file=None,
        )
        thresholds = AlertThresholds.from_settings(settings)

        assert thresholds == AlertThresholds(confidence_threshold=90, data_freshness_hours=2)

        alerts = evaluate_accuracy_alerts(
            make_report(now, overall=85, hours_old=3), thresholds, now
        )
        assert [a.type for a in alerts] == [
            AccuracyAlertType.CONFIDENCE_DROP,
            AccuracyAlertType.DATA_STALE,
        ]
        assert alerts[0].severity == DiscrepancySeverity.LOW
