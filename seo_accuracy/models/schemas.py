"""
Pydantic request/response models for the SEO accuracy service.

Field names are camelCase to match the JSON shapes consumed by the dashboard
(same convention as the rest of the API). Observations and reports are
frozen: the engine only ever reads them and a new report is a new object.

Groups:
- Observations: DataPoint, RankingRecord, ContextualData
- Accuracy: ConfidenceScore, Discrepancy, SecondaryValue, AccuracyReport,
  ProjectAccuracyStatus
- ML confidence: MLConfidenceInput, RankingAnomaly, PatternRecognitionResult,
  ModelMetadata, MLConfidenceResult
- Alerts: AccuracyAlert
- API envelopes: request/response bodies used by the routers

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from seo_accuracy.models.enums import (
    AccuracyAlertType,
    AnomalySeverity,
    ConfidenceLevel,
    DataSource,
    DiscrepancySeverity,
    Trend,
)


# =============================================================================
# Observations
# =============================================================================


class DataPoint(BaseModel):
    """
    One observation of a metric from one source.

    Values may be negative (delta metrics) but must be finite.
    """
    model_config = ConfigDict(
        frozen=True,
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "id": "dp_1",
                "source": "GOOGLE_SEARCH_CONSOLE",
                "value": 1000,
                "timestamp": "2026-10-16T08:00:00Z",
            }
        },
    )

    id: str = Field(..., min_length=1, description="Observation identifier")
    source: DataSource = Field(..., description="Provider of the observation")
    value: float = Field(..., description="Observed metric value")
    timestamp: datetime = Field(..., description="When the value was observed")
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Free-form provider metadata",
    )


class RankingRecord(BaseModel):
    """One rank check of a tracked keyword."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    position: float = Field(..., gt=0, description="SERP position, 1 is best")
    checkedAt: datetime = Field(..., description="When the rank was checked")
    clicks: Optional[int] = Field(default=None, ge=0)
    impressions: Optional[int] = Field(default=None, ge=0)
    source: DataSource = Field(..., description="Provider of the rank check")


class ContextualData(BaseModel):
    """Optional hints about the keyword used by the ML scorer."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    # Free text; only "competitive" changes scoring.
    industry: Optional[str] = None
    competitionLevel: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    seasonality: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    searchVolume: Optional[float] = Field(default=None, ge=0.0)


# =============================================================================
# Accuracy Models
# =============================================================================


class ConfidenceScore(BaseModel):
    """
    Multi-factor confidence in a metric value.

    `overall` is always derived from the four component scores by the
    confidence aggregator; it never carries independent state.
    """
    model_config = ConfigDict(frozen=True)

    overall: int = Field(..., ge=0, le=100)
    freshness: float = Field(..., ge=0, le=100)
    consistency: float = Field(..., ge=0, le=100)
    reliability: float = Field(..., ge=0, le=100)
    completeness: float = Field(..., ge=0, le=100)


class Discrepancy(BaseModel):
    """A cross-source difference above the 5% noise floor."""
    model_config = ConfigDict(frozen=True)

    source1: DataSource
    source2: DataSource
    value1: float
    value2: float
    variance: float = Field(..., ge=0.0, description="|v1 - v2| / |v1|")
    severity: DiscrepancySeverity
    explanation: str


class SecondaryValue(BaseModel):
    """A comparison observation as recorded on a report."""
    model_config = ConfigDict(frozen=True)

    source: DataSource
    value: float
    timestamp: datetime


class AccuracyReport(BaseModel):
    """Immutable accuracy verdict for one metric observation."""
    model_config = ConfigDict(frozen=True)

    id: str
    projectId: str
    metric: str
    primaryValue: float
    secondaryValues: List[SecondaryValue] = Field(default_factory=list)
    confidenceScore: ConfidenceScore
    discrepancies: List[Discrepancy] = Field(default_factory=list)
    isAccurate: bool
    checkedAt: datetime


class ProjectAccuracyStatus(BaseModel):
    """Rolled-up accuracy status over the recent reports of a project."""

    overallAccuracy: int = Field(..., ge=0, le=100)
    lastChecked: Optional[datetime] = None
    criticalIssues: int = Field(..., ge=0)
    averageConfidence: int = Field(..., ge=0, le=100)
    dataFreshness: int = Field(..., ge=0, le=100)


# =============================================================================
# ML Confidence Models
# =============================================================================


class MLConfidenceInput(BaseModel):
    """Ranking history and context for one keyword."""

    keywordId: Optional[str] = None
    rankings: List[RankingRecord] = Field(default_factory=list)
    historical: Optional[List[RankingRecord]] = None
    contextualData: Optional[ContextualData] = None


class RankingAnomaly(BaseModel):
    """A rank check far from the series mean."""

    timestamp: datetime
    position: float
    deviation: float = Field(..., ge=0.0)
    severity: AnomalySeverity


class PatternRecognitionResult(BaseModel):
    trend: Trend
    seasonality: float = Field(..., ge=0.0, le=1.0)
    cycleDetected: bool
    anomalies: List[RankingAnomaly] = Field(default_factory=list)


class ModelMetadata(BaseModel):
    """Describes the fixed-weight approximator. Not measured at runtime."""

    version: str
    trainedSamples: int
    accuracy: float
    lastUpdated: datetime


class MLConfidenceResult(BaseModel):
    """Hybrid confidence for a ranking series."""

    mlScore: float = Field(..., ge=0.0, le=1.0)
    traditionalScore: float = Field(..., ge=0.0, le=1.0)
    hybridScore: float = Field(..., ge=0.0, le=1.0)
    anomalyScore: float = Field(..., ge=0.0, le=1.0)
    patternRecognition: PatternRecognitionResult
    confidenceLevel: ConfidenceLevel
    recommendations: List[str] = Field(..., min_length=1)
    modelMetadata: ModelMetadata


# =============================================================================
# Alerts
# =============================================================================


class AccuracyAlert(BaseModel):
    """An alert derived from an accuracy report."""

    id: str
    type: AccuracyAlertType
    severity: DiscrepancySeverity
    projectId: str
    metric: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    triggeredAt: datetime


# =============================================================================
# API Envelopes
# =============================================================================


class AccuracyCheckRequest(BaseModel):
    """Body for report generation and confidence scoring."""

    projectId: str = Field(..., min_length=1)
    metric: str = Field(..., min_length=1)
    primaryDataPoint: DataPoint
    compareDataPoints: List[DataPoint] = Field(default_factory=list)


class DiscrepancyRequest(BaseModel):
    primaryDataPoint: DataPoint
    compareDataPoints: List[DataPoint] = Field(default_factory=list)


class AccuracyReportResponse(BaseModel):
    success: bool = True
    report: AccuracyReport
    alerts: List[AccuracyAlert] = Field(default_factory=list)
    generatedAt: datetime


class AccuracyHistoryResponse(BaseModel):
    success: bool = True
    projectId: str
    metric: Optional[str] = None
    status: ProjectAccuracyStatus
    history: List[AccuracyReport] = Field(default_factory=list)
    retrievedAt: datetime


class AccuracyStatusResponse(BaseModel):
    success: bool = True
    accuracy: ProjectAccuracyStatus


class MLBatchRequest(BaseModel):
    inputs: List[MLConfidenceInput] = Field(..., min_length=1, max_length=50)
