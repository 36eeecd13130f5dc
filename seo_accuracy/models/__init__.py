"""
Package initialization for the service data models.

Re-exports all enumerations and Pydantic schemas so other modules can import
them from ``seo_accuracy.models`` directly:

    from seo_accuracy.models import DataPoint, DataSource, AccuracyReport
"""

# =============================================================================
# Enums
# =============================================================================

from seo_accuracy.models.enums import (
    AccuracyAlertType,
    AnomalySeverity,
    ConfidenceLevel,
    DataSource,
    DiscrepancySeverity,
    Industry,
    IntegrationService,
    Trend,
)


# =============================================================================
# Schemas
# =============================================================================

from seo_accuracy.models.schemas import (
    # Observations
    DataPoint,
    RankingRecord,
    ContextualData,
    # Accuracy
    ConfidenceScore,
    Discrepancy,
    SecondaryValue,
    AccuracyReport,
    ProjectAccuracyStatus,
    # ML confidence
    MLConfidenceInput,
    RankingAnomaly,
    PatternRecognitionResult,
    ModelMetadata,
    MLConfidenceResult,
    # Alerts
    AccuracyAlert,
    # API envelopes
    AccuracyCheckRequest,
    DiscrepancyRequest,
    AccuracyReportResponse,
    AccuracyHistoryResponse,
    AccuracyStatusResponse,
    MLBatchRequest,
)


__all__ = [
    'AccuracyAlertType',
    'AnomalySeverity',
    'ConfidenceLevel',
    'DataSource',
    'DiscrepancySeverity',
    'Industry',
    'IntegrationService',
    'Trend',
    'DataPoint',
    'RankingRecord',
    'ContextualData',
    'ConfidenceScore',
    'Discrepancy',
    'SecondaryValue',
    'AccuracyReport',
    'ProjectAccuracyStatus',
    'MLConfidenceInput',
    'RankingAnomaly',
    'PatternRecognitionResult',
    'ModelMetadata',
    'MLConfidenceResult',
    'AccuracyAlert',
    'AccuracyCheckRequest',
    'DiscrepancyRequest',
    'AccuracyReportResponse',
    'AccuracyHistoryResponse',
    'AccuracyStatusResponse',
    'MLBatchRequest',
]
