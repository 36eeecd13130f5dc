"""
Services Module

Business logic of the SEO accuracy service. Scorers are pure functions over
immutable lookup tables; the engines only do I/O through the ReportStore and
IntegrationStatusProvider collaborators.

Services:
- scoring: freshness, reliability, consistency, completeness and overall
- discrepancy: cross-source discrepancy classification
- accuracy_engine: accuracy reports, history and project status
- report_store / integration_status: storage and integration adapters
- accuracy_alerts: alerts derived from accuracy reports
- ranking_features / inference_model: ML feature vector and fixed network
- anomaly_detection / pattern_recognition: ranking series analysis
- ml_confidence: hybrid ML confidence engine

All services are consumed by the API layer (seo_accuracy/api/).
"""

# =============================================================================
# Confidence Scoring Exports
# =============================================================================

from seo_accuracy.services.scoring import (
    calculate_freshness_score,
    calculate_reliability_score,
    calculate_consistency_score,
    calculate_completeness_score,
    calculate_overall_score,
    determine_accuracy,
    expected_sources_for_metric,
    relative_variance,
)

from seo_accuracy.services.discrepancy import (
    classify_variance,
    detect_discrepancies,
)

# =============================================================================
# Accuracy Engine Exports
# Report generation, history and project status over pluggable adapters
# =============================================================================

from seo_accuracy.services.accuracy_engine import DataAccuracyEngine

from seo_accuracy.services.report_store import (
    ReportStore,
    InMemoryReportStore,
    PostgresReportStore,
)

from seo_accuracy.services.integration_status import (
    IntegrationStatusProvider,
    StaticIntegrationStatusProvider,
    PostgresIntegrationStatusProvider,
)

from seo_accuracy.services.accuracy_alerts import (
    AlertThresholds,
    evaluate_accuracy_alerts,
)

# =============================================================================
# ML Confidence Exports
# Feature extraction, fixed-weight inference, anomalies and patterns
# =============================================================================

from seo_accuracy.services.ranking_features import extract_ml_features

from seo_accuracy.services.anomaly_detection import (
    calculate_anomaly_score,
    identify_specific_anomalies,
)

from seo_accuracy.services.pattern_recognition import recognize_patterns

from seo_accuracy.services.ml_confidence import (
    MLConfidenceEngine,
    calculate_traditional_score,
    calculate_ml_score,
    combine_scores,
    determine_confidence_level,
    generate_recommendations,
)

__all__ = [
    # Scoring
    'calculate_freshness_score',
    'calculate_reliability_score',
    'calculate_consistency_score',
    'calculate_completeness_score',
    'calculate_overall_score',
    'determine_accuracy',
    'expected_sources_for_metric',
    'relative_variance',
    # Discrepancies
    'classify_variance',
    'detect_discrepancies',
    # Accuracy engine and adapters
    'DataAccuracyEngine',
    'ReportStore',
    'InMemoryReportStore',
    'PostgresReportStore',
    'IntegrationStatusProvider',
    'StaticIntegrationStatusProvider',
    'PostgresIntegrationStatusProvider',
    # Alerts
    'AlertThresholds',
    'evaluate_accuracy_alerts',
    # ML confidence
    'extract_ml_features',
    'calculate_anomaly_score',
    'identify_specific_anomalies',
    'recognize_patterns',
    'MLConfidenceEngine',
    'calculate_traditional_score',
    'calculate_ml_score',
    'combine_scores',
    'determine_confidence_level',
    'generate_recommendations',
]
