"""
Data Accuracy Engine.

Turns one primary observation of a metric plus optional observations of the
same metric from other sources into a confidence score, a list of
discrepancies and a persisted accuracy verdict, and summarises the reports
stored for a project.

Process (generate_accuracy_report):
    1. Validate the primary and comparison points (fail fast on bad input)
    2. Score freshness, consistency, reliability and completeness
    3. Aggregate them into the overall confidence score
    4. Detect and classify cross-source discrepancies
    5. Decide whether the value is accurate
    6. Persist the report best-effort; a store failure is logged, never raised

Collaborators:
    - ReportStore: create / find_many
    - IntegrationStatusProvider: active_sources(project_id)

Usage:
    engine = DataAccuracyEngine(
        store=InMemoryReportStore(),
        integration_status=StaticIntegrationStatusProvider(),
    )
    report = await engine.generate_accuracy_report(
        project_id="proj_1",
        metric="organic_clicks",
        primary=primary_point,
        compare=[analytics_point],
    )
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Set, Union

from seo_accuracy.core.config import Settings, get_settings
from seo_accuracy.core.exceptions import StorageError
from seo_accuracy.models.enums import DataSource
from seo_accuracy.models.schemas import (
    AccuracyReport,
    ConfidenceScore,
    DataPoint,
    Discrepancy,
    ProjectAccuracyStatus,
    SecondaryValue,
)
from seo_accuracy.services import discrepancy as discrepancy_service
from seo_accuracy.services import scoring
from seo_accuracy.services.integration_status import IntegrationStatusProvider
from seo_accuracy.services.report_store import ReportStore
from seo_accuracy.services.validation import (
    as_utc,
    ensure_data_point,
    ensure_data_points,
    utc_now,
)


logger = logging.getLogger(__name__)

# Reports whose overall confidence is below this count as critical issues
# in the project status.
CRITICAL_CONFIDENCE: int = 50

# Used when the integration-status lookup itself fails.
FALLBACK_AVAILABLE_SOURCES = frozenset({DataSource.GOOGLE_SEARCH_CONSOLE})

DataPointLike = Union[DataPoint, dict]


def generate_report_id(now: Optional[datetime] = None) -> str:
    """Unique report id of the form ``accuracy_<epoch ms>_<suffix>``."""
    reference = now or utc_now()
    return f"accuracy_{int(reference.timestamp() * 1000)}_{secrets.token_hex(4)}"


def empty_status() -> ProjectAccuracyStatus:
    return ProjectAccuracyStatus(
        overallAccuracy=0,
        lastChecked=None,
        criticalIssues=0,
        averageConfidence=0,
        dataFreshness=0,
    )


class DataAccuracyEngine:
    """Confidence scoring, discrepancy detection and accuracy reporting."""

    def __init__(
        self,
        store: ReportStore,
        integration_status: IntegrationStatusProvider,
        settings: Optional[Settings] = None,
    ) -> None:
        self.store = store
        self.integration_status = integration_status
        self.settings = settings or get_settings()

    # =========================================================================
    # Confidence
    # =========================================================================

    async def calculate_confidence_score(
        self,
        project_id: str,
        metric: str,
        primary: DataPointLike,
        compare: Optional[Sequence[DataPointLike]] = None,
        now: Optional[datetime] = None,
    ) -> ConfidenceScore:
        """
        Multi-factor confidence in the primary observation.

        Args:
            project_id: Project the metric belongs to (completeness lookup).
            metric: Metric name, e.g. 'organic_clicks'.
            primary: Observation being scored.
            compare: Observations of the same metric from other sources.
            now: Reference time; defaults to the current UTC time.

        Raises:
            DataValidationError: If any observation is malformed.
        """
        primary = ensure_data_point(primary)
        compare = ensure_data_points(compare)
        now = now or utc_now()

        freshness = scoring.calculate_freshness_score(primary.timestamp, now)
        consistency = scoring.calculate_consistency_score(
            primary,
            compare,
            now=now,
            window_hours=self.settings.consistency_window_hours,
        )
        reliability = scoring.calculate_reliability_score(primary.source)
        completeness = scoring.calculate_completeness_score(
            scoring.expected_sources_for_metric(metric),
            await self._available_sources(project_id),
        )

        return ConfidenceScore(
            overall=scoring.calculate_overall_score(
                freshness, consistency, reliability, completeness
            ),
            freshness=freshness,
            consistency=consistency,
            reliability=reliability,
            completeness=completeness,
        )

    async def _available_sources(self, project_id: str) -> Set[DataSource]:
        try:
            return set(await self.integration_status.active_sources(project_id))
        except Exception as e:
            logger.warning(
                f"Integration status lookup failed for project {project_id}; "
                f"assuming Search Console only: {e}"
            )
            return set(FALLBACK_AVAILABLE_SOURCES)

    # =========================================================================
    # Discrepancies
    # =========================================================================

    def detect_discrepancies(
        self,
        primary: DataPointLike,
        compare: Sequence[DataPointLike],
    ) -> List[Discrepancy]:
        """Classified differences between the primary and each comparison."""
        return discrepancy_service.detect_discrepancies(
            ensure_data_point(primary),
            ensure_data_points(compare),
        )

    # =========================================================================
    # Reports
    # =========================================================================

    async def generate_accuracy_report(
        self,
        project_id: str,
        metric: str,
        primary: DataPointLike,
        compare: Optional[Sequence[DataPointLike]] = None,
    ) -> AccuracyReport:
        """
        Build an accuracy report and persist it best-effort.

        The report is returned even when the store rejects or cannot receive
        it.

        Raises:
            DataValidationError: If any observation is malformed.
        """
        primary = ensure_data_point(primary)
        compare = ensure_data_points(compare)
        now = utc_now()

        confidence = await self.calculate_confidence_score(
            project_id, metric, primary, compare, now=now
        )
        discrepancies = discrepancy_service.detect_discrepancies(primary, compare)

        report = AccuracyReport(
            id=generate_report_id(now),
            projectId=project_id,
            metric=metric,
            primaryValue=primary.value,
            secondaryValues=[
                SecondaryValue(source=p.source, value=p.value, timestamp=p.timestamp)
                for p in compare
            ],
            confidenceScore=confidence,
            discrepancies=discrepancies,
            isAccurate=scoring.determine_accuracy(confidence.overall, discrepancies),
            checkedAt=now,
        )

        await self._persist(report)
        return report

    async def _persist(self, report: AccuracyReport) -> bool:
        try:
            await self.store.create(report)
        except StorageError as e:
            logger.warning(f"Accuracy report {report.id} computed but not persisted: {e}")
            return False
        except Exception:
            logger.exception(f"Unexpected store failure for accuracy report {report.id}")
            return False
        return True

    async def get_accuracy_history(
        self,
        project_id: str,
        metric: Optional[str] = None,
        days: int = 30,
    ) -> List[AccuracyReport]:
        """Reports of the last ``days`` days, newest first; [] if the store fails."""
        since = utc_now() - timedelta(days=days)
        try:
            return await self.store.find_many(
                project_id, metric, since, limit=self.settings.history_limit
            )
        except StorageError as e:
            logger.warning(f"Failed to load accuracy history for {project_id}: {e}")
            return []

    async def get_project_accuracy_status(self, project_id: str) -> ProjectAccuracyStatus:
        """
        Summarise every report of the status window (24h by default).

        Returns:
            ProjectAccuracyStatus with:
            - overallAccuracy: percent of reports judged accurate
            - lastChecked: checkedAt of the newest report
            - criticalIssues: reports with overall confidence below 50
            - averageConfidence: mean overall confidence
            - dataFreshness: freshness score of the newest report
            All zero (lastChecked None) when there are no reports or the
            store is unavailable.
        """
        now = utc_now()
        since = now - timedelta(hours=self.settings.status_window_hours)

        try:
            reports = await self.store.find_many(
                project_id, None, since, limit=None
            )
        except StorageError as e:
            logger.warning(f"Failed to load accuracy status for {project_id}: {e}")
            return empty_status()

        if not reports:
            return empty_status()

        latest = max(reports, key=lambda r: as_utc(r.checkedAt))
        accurate = sum(1 for r in reports if r.isAccurate)
        total_confidence = sum(r.confidenceScore.overall for r in reports)

        return ProjectAccuracyStatus(
            overallAccuracy=scoring.round_half_up(100 * accurate / len(reports)),
            lastChecked=latest.checkedAt,
            criticalIssues=sum(
                1 for r in reports if r.confidenceScore.overall < CRITICAL_CONFIDENCE
            ),
            averageConfidence=scoring.round_half_up(total_confidence / len(reports)),
            dataFreshness=scoring.calculate_freshness_score(latest.checkedAt, now),
        )
