"""
FastAPI dependency injection for the SEO accuracy service.

Endpoint handlers never build engines or stores themselves; they receive
them through the providers below, which pick the adapters from the current
settings:

- database configured and preview mode off: PostgresReportStore and
  PostgresIntegrationStatusProvider over the shared asyncpg pool
- otherwise: a process-wide InMemoryReportStore and the static preview
  integration status

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: the cached Settings singleton
- get_report_store: ReportStore adapter
- get_integration_status: IntegrationStatusProvider adapter
- get_accuracy_engine / AccuracyEngineDep: DataAccuracyEngine
- get_ml_engine / MLEngineDep: MLConfidenceEngine

Usage Examples:
    @router.get("/accuracy/status")
    async def get_status(projectId: str, engine: AccuracyEngineDep):
        return await engine.get_project_accuracy_status(projectId)

Tests can swap any provider through FastAPI's override mechanism:

    app.dependency_overrides[get_accuracy_engine] = lambda: fake_engine
"""

from typing import Annotated

from fastapi import Depends

from seo_accuracy.core.config import Settings, get_settings
from seo_accuracy.services.accuracy_engine import DataAccuracyEngine
from seo_accuracy.services.integration_status import (
    IntegrationStatusProvider,
    PostgresIntegrationStatusProvider,
    StaticIntegrationStatusProvider,
)
from seo_accuracy.services.ml_confidence import MLConfidenceEngine
from seo_accuracy.services.report_store import (
    InMemoryReportStore,
    PostgresReportStore,
    ReportStore,
)


# Shared by every request when no database is in use, so reports written
# through POST /accuracy/report are visible to the history routes.
_preview_store = InMemoryReportStore()


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Collaborator Dependencies
# =============================================================================

def get_report_store(settings: SettingsDep) -> ReportStore:
    if settings.uses_database:
        return PostgresReportStore()
    return _preview_store


def get_integration_status(settings: SettingsDep) -> IntegrationStatusProvider:
    if settings.uses_database:
        return PostgresIntegrationStatusProvider()
    return StaticIntegrationStatusProvider()


# =============================================================================
# Engine Dependencies
# =============================================================================

def get_accuracy_engine(
    settings: SettingsDep,
    store: Annotated[ReportStore, Depends(get_report_store)],
    integration_status: Annotated[IntegrationStatusProvider, Depends(get_integration_status)],
) -> DataAccuracyEngine:
    """Build the accuracy engine over the adapters chosen for these settings."""
    return DataAccuracyEngine(
        store=store,
        integration_status=integration_status,
        settings=settings,
    )


def get_ml_engine(settings: SettingsDep) -> MLConfidenceEngine:
    return MLConfidenceEngine(settings=settings)


AccuracyEngineDep = Annotated[DataAccuracyEngine, Depends(get_accuracy_engine)]
MLEngineDep = Annotated[MLConfidenceEngine, Depends(get_ml_engine)]
