"""
FastAPI router for data accuracy reports, confidence scores and discrepancies.

Key Endpoints:
- POST /accuracy/report - Generate (and persist) an accuracy report plus alerts
- GET /accuracy/report - Project status and report history
- GET /accuracy/status - Project accuracy status only
- POST /accuracy/confidence - Confidence score without persisting anything
- POST /accuracy/discrepancies - Classified cross-source discrepancies

Response shapes:
- POST /accuracy/report: { success, report, alerts, generatedAt }
- GET /accuracy/report: { success, projectId, metric, status, history, retrievedAt }
- GET /accuracy/status: { success, accuracy }

Error mapping:
- DataValidationError -> 400 with the offending field in the detail
- anything else -> 500, logged with traceback
A report store outage is not an error here: the engine still returns the
report and the history routes fall back to empty results.

Dependencies:
- seo_accuracy/core/dependencies.py: AccuracyEngineDep, SettingsDep
- seo_accuracy/services/accuracy_engine.py: DataAccuracyEngine
- seo_accuracy/services/accuracy_alerts.py: evaluate_accuracy_alerts
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from seo_accuracy.core.dependencies import AccuracyEngineDep, SettingsDep
from seo_accuracy.core.exceptions import DataValidationError
from seo_accuracy.models.schemas import (
    AccuracyCheckRequest,
    AccuracyHistoryResponse,
    AccuracyReportResponse,
    AccuracyStatusResponse,
    ConfidenceScore,
    Discrepancy,
    DiscrepancyRequest,
)
from seo_accuracy.services.accuracy_alerts import AlertThresholds, evaluate_accuracy_alerts
from seo_accuracy.services.validation import utc_now


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS: int = 30
MAX_HISTORY_DAYS: int = 365

router = APIRouter(prefix="/accuracy", tags=["accuracy"])


# =============================================================================
# POST /accuracy/report - Generate Report
# =============================================================================


@router.post("/report", response_model=AccuracyReportResponse)
async def create_accuracy_report(
    request: AccuracyCheckRequest,
    engine: AccuracyEngineDep,
    settings: SettingsDep,
) -> AccuracyReportResponse:
    """
    Generate an accuracy report for one metric observation.

    The report is persisted best-effort and evaluated against the configured
    alert thresholds.

    Example Request:
        POST /accuracy/report
        {
            "projectId": "proj_1",
            "metric": "organic_clicks",
            "primaryDataPoint": {
                "id": "dp_1", "source": "GOOGLE_SEARCH_CONSOLE",
                "value": 1000, "timestamp": "2026-10-16T08:00:00Z"
            },
            "compareDataPoints": [...]
        }
    """
    try:
        report = await engine.generate_accuracy_report(
            project_id=request.projectId,
            metric=request.metric,
            primary=request.primaryDataPoint,
            compare=request.compareDataPoints,
        )
        alerts = evaluate_accuracy_alerts(report, AlertThresholds.from_settings(settings))

        logger.info(
            f"Accuracy report {report.id} for {request.projectId}/{request.metric}: "
            f"overall={report.confidenceScore.overall} accurate={report.isAccurate} "
            f"alerts={len(alerts)}"
        )

        return AccuracyReportResponse(
            report=report,
            alerts=alerts,
            generatedAt=utc_now(),
        )

    except DataValidationError as e:
        logger.warning(f"POST /accuracy/report rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating accuracy report: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to generate accuracy report"
        )


# =============================================================================
# GET /accuracy/report - Status and History
# =============================================================================


@router.get("/report", response_model=AccuracyHistoryResponse)
async def get_accuracy_reports(
    engine: AccuracyEngineDep,
    projectId: str = Query(..., min_length=1, description="Project ID"),
    metric: Optional[str] = Query(default=None, description="Filter by metric"),
    days: int = Query(default=DEFAULT_HISTORY_DAYS, ge=1, le=MAX_HISTORY_DAYS),
) -> AccuracyHistoryResponse:
    """Project accuracy status plus the reports of the last ``days`` days."""
    try:
        status = await engine.get_project_accuracy_status(projectId)
        history = await engine.get_accuracy_history(projectId, metric, days)

        logger.debug(f"Retrieved {len(history)} accuracy reports for {projectId}")

        return AccuracyHistoryResponse(
            projectId=projectId,
            metric=metric,
            status=status,
            history=history,
            retrievedAt=utc_now(),
        )

    except Exception as e:
        logger.error(f"Error fetching accuracy reports: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch accuracy reports"
        )


# =============================================================================
# GET /accuracy/status - Project Status
# =============================================================================


@router.get("/status", response_model=AccuracyStatusResponse)
async def get_accuracy_status(
    engine: AccuracyEngineDep,
    projectId: str = Query(..., min_length=1, description="Project ID"),
) -> AccuracyStatusResponse:
    try:
        status = await engine.get_project_accuracy_status(projectId)
        return AccuracyStatusResponse(accuracy=status)

    except Exception as e:
        logger.error(f"Error fetching accuracy status: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch accuracy status"
        )


# =============================================================================
# POST /accuracy/confidence - Confidence Score
# =============================================================================


@router.post("/confidence", response_model=ConfidenceScore)
async def score_confidence(
    request: AccuracyCheckRequest,
    engine: AccuracyEngineDep,
) -> ConfidenceScore:
    """Confidence score for an observation; nothing is persisted."""
    try:
        return await engine.calculate_confidence_score(
            project_id=request.projectId,
            metric=request.metric,
            primary=request.primaryDataPoint,
            compare=request.compareDataPoints,
        )

    except DataValidationError as e:
        logger.warning(f"POST /accuracy/confidence rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error calculating confidence score: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to calculate confidence score"
        )


# =============================================================================
# POST /accuracy/discrepancies - Discrepancy Detection
# =============================================================================


@router.post("/discrepancies", response_model=List[Discrepancy])
async def find_discrepancies(
    request: DiscrepancyRequest,
    engine: AccuracyEngineDep,
) -> List[Discrepancy]:
    try:
        return engine.detect_discrepancies(
            request.primaryDataPoint,
            request.compareDataPoints,
        )

    except DataValidationError as e:
        logger.warning(f"POST /accuracy/discrepancies rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error detecting discrepancies: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to detect discrepancies"
        )
