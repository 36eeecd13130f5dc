"""
Tests for the accuracy and confidence route handlers.

Handlers are awaited directly with engines built from the shared fixtures,
so no HTTP client or running server is needed.
"""

from datetime import datetime, timedelta
from typing import List
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import HTTPException

from seo_accuracy.api.accuracy import (
    create_accuracy_report,
    find_discrepancies,
    get_accuracy_reports,
    get_accuracy_status,
    score_confidence,
)
from seo_accuracy.api.confidence import score_ml_confidence, score_ml_confidence_batch
from seo_accuracy.core.config import Settings
from seo_accuracy.core.dependencies import (
    get_integration_status,
    get_ml_engine,
    get_report_store,
)
from seo_accuracy.core.exceptions import DataValidationError
from seo_accuracy.main import health_check, root
from seo_accuracy.models import (
    AccuracyAlertType,
    AccuracyCheckRequest,
    DataSource,
    DiscrepancyRequest,
    DiscrepancySeverity,
    MLBatchRequest,
    MLConfidenceInput,
    RankingRecord,
)
from seo_accuracy.services.accuracy_engine import DataAccuracyEngine
from seo_accuracy.services.integration_status import PostgresIntegrationStatusProvider
from seo_accuracy.services.ml_confidence import MLConfidenceEngine
from seo_accuracy.services.report_store import InMemoryReportStore, PostgresReportStore


GSC = DataSource.GOOGLE_SEARCH_CONSOLE
GA = DataSource.GOOGLE_ANALYTICS


@pytest.fixture
def check_request(make_point) -> AccuracyCheckRequest:
    return AccuracyCheckRequest(
        projectId="proj_1",
        metric="organic_clicks",
        primaryDataPoint=make_point(GSC, 100),
        compareDataPoints=[make_point(GA, 180)],
    )


def failing_engine(error: Exception) -> Mock:
    engine = Mock(spec=DataAccuracyEngine)
    engine.generate_accuracy_report = AsyncMock(side_effect=error)
    engine.calculate_confidence_score = AsyncMock(side_effect=error)
    engine.get_project_accuracy_status = AsyncMock(side_effect=error)
    engine.detect_discrepancies = Mock(side_effect=error)
    return engine


# =============================================================================
# /accuracy
# =============================================================================


class TestAccuracyRoutes:

    @pytest.mark.asyncio
    async def test_create_report_persists_and_alerts(
        self,
        check_request: AccuracyCheckRequest,
        accuracy_engine: DataAccuracyEngine,
        report_store: InMemoryReportStore,
        test_settings: Settings,
    ) -> None:
        response = await create_accuracy_report(check_request, accuracy_engine, test_settings)

        assert response.success is True
        assert response.report.isAccurate is False
        assert response.report.discrepancies[0].severity == DiscrepancySeverity.CRITICAL
        assert AccuracyAlertType.CRITICAL_DISCREPANCY in [a.type for a in response.alerts]
        assert len(report_store) == 1

    @pytest.mark.asyncio
    async def test_create_report_validation_error_is_400(
        self,
        check_request: AccuracyCheckRequest,
        test_settings: Settings,
    ) -> None:
        engine = failing_engine(DataValidationError("primaryDataPoint.value"))

        with pytest.raises(HTTPException) as exc_info:
            await create_accuracy_report(check_request, engine, test_settings)

        assert exc_info.value.status_code == 400
        assert "primaryDataPoint.value" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_create_report_unexpected_error_is_500(
        self,
        check_request: AccuracyCheckRequest,
        test_settings: Settings,
    ) -> None:
        engine = failing_engine(RuntimeError("boom"))

        with pytest.raises(HTTPException) as exc_info:
            await create_accuracy_report(check_request, engine, test_settings)

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Failed to generate accuracy report"

    @pytest.mark.asyncio
    async def test_history_and_status(
        self,
        check_request: AccuracyCheckRequest,
        accuracy_engine: DataAccuracyEngine,
        test_settings: Settings,
    ) -> None:
        await create_accuracy_report(check_request, accuracy_engine, test_settings)

        history = await get_accuracy_reports(
            accuracy_engine, projectId="proj_1", metric="organic_clicks", days=30
        )
        status = await get_accuracy_status(accuracy_engine, projectId="proj_1")

        assert history.projectId == "proj_1"
        assert len(history.history) == 1
        assert history.status == status.accuracy
        assert status.accuracy.criticalIssues == 0
        assert status.accuracy.overallAccuracy == 0

    @pytest.mark.asyncio
    async def test_status_failure_is_500(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_accuracy_status(failing_engine(RuntimeError("down")), projectId="proj_1")
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_confidence_does_not_persist(
        self,
        check_request: AccuracyCheckRequest,
        accuracy_engine: DataAccuracyEngine,
        report_store: InMemoryReportStore,
    ) -> None:
        score = await score_confidence(check_request, accuracy_engine)

        assert 0 <= score.overall <= 100
        assert score.consistency == 25
        assert len(report_store) == 0

    @pytest.mark.asyncio
    async def test_confidence_validation_error_is_400(self, check_request: AccuracyCheckRequest) -> None:
        engine = failing_engine(DataValidationError("metric", "unknown"))
        with pytest.raises(HTTPException) as exc_info:
            await score_confidence(check_request, engine)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_discrepancies(
        self,
        make_point,
        accuracy_engine: DataAccuracyEngine,
    ) -> None:
        request = DiscrepancyRequest(
            primaryDataPoint=make_point(GSC, 100),
            compareDataPoints=[make_point(GA, 120), make_point(DataSource.SERPAPI, 101)],
        )

        result = await find_discrepancies(request, accuracy_engine)

        assert [d.severity for d in result] == [DiscrepancySeverity.MEDIUM]

    @pytest.mark.asyncio
    async def test_discrepancies_unexpected_error_is_500(self, make_point) -> None:
        request = DiscrepancyRequest(primaryDataPoint=make_point(GSC, 100))
        with pytest.raises(HTTPException) as exc_info:
            await find_discrepancies(request, failing_engine(KeyError("x")))
        assert exc_info.value.status_code == 500


# =============================================================================
# /confidence
# =============================================================================


class TestConfidenceRoutes:

    @pytest.mark.asyncio
    async def test_single(
        self,
        ml_engine: MLConfidenceEngine,
        stable_rankings: List[RankingRecord],
    ) -> None:
        result = await score_ml_confidence(
            MLConfidenceInput(keywordId="kw_1", rankings=stable_rankings), ml_engine
        )
        assert 0.0 <= result.hybridScore <= 1.0
        assert result.modelMetadata.trainedSamples == 10000

    @pytest.mark.asyncio
    async def test_single_failure_is_500(self, stable_rankings: List[RankingRecord]) -> None:
        engine = Mock(spec=MLConfidenceEngine)
        engine.calculate_ml_confidence = Mock(side_effect=ValueError("bad shape"))

        with pytest.raises(HTTPException) as exc_info:
            await score_ml_confidence(MLConfidenceInput(rankings=stable_rankings), engine)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_batch_keeps_order(self, ml_engine: MLConfidenceEngine, now: datetime) -> None:
        from seo_accuracy.tests.conftest import build_rankings

        inputs = [
            MLConfidenceInput(rankings=build_rankings([5] * 10, end=now)),
            MLConfidenceInput(rankings=[]),
            MLConfidenceInput(rankings=build_rankings([3, 4], end=now - timedelta(hours=3))),
            MLConfidenceInput(rankings=[]),
        ]

        results = await score_ml_confidence_batch(MLBatchRequest(inputs=inputs), ml_engine)

        assert len(results) == 4
        assert results[1].hybridScore == 0.0
        assert results[3].hybridScore == 0.0
        assert results[0].hybridScore > 0.0
        assert results[2].hybridScore > 0.0

    @pytest.mark.asyncio
    async def test_batch_validation_error_is_400(self, stable_rankings: List[RankingRecord]) -> None:
        engine = Mock(spec=MLConfidenceEngine)
        engine.calculate_batch_ml_confidence = AsyncMock(
            side_effect=DataValidationError("rankings.0.position", "must be positive")
        )

        with pytest.raises(HTTPException) as exc_info:
            await score_ml_confidence_batch(
                MLBatchRequest(inputs=[MLConfidenceInput(rankings=stable_rankings)]), engine
            )

        assert exc_info.value.status_code == 400


# =============================================================================
# Dependencies and application routes
# =============================================================================


class TestDependencies:

    def test_preview_adapters_without_database(self, test_settings: Settings) -> None:
        store = get_report_store(test_settings)

        assert isinstance(store, InMemoryReportStore)
        assert get_report_store(test_settings) is store
        assert not isinstance(get_integration_status(test_settings), PostgresIntegrationStatusProvider)

    def test_postgres_adapters_with_database(self) -> None:
        settings = Settings(database_url="postgresql://u:p@localhost/db", _env_file=None)

        assert isinstance(get_report_store(settings), PostgresReportStore)
        assert isinstance(get_integration_status(settings), PostgresIntegrationStatusProvider)

    def test_ml_engine_uses_given_settings(self, test_settings: Settings) -> None:
        assert get_ml_engine(test_settings).settings is test_settings


class TestApplicationRoutes:

    @pytest.mark.asyncio
    async def test_health(self) -> None:
        assert await health_check() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_root(self) -> None:
        body = await root()
        assert body["name"] == "SEO Accuracy API"
        assert body["version"] == "1.0.0"
