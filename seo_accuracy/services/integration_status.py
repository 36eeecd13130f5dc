"""
Lookup of which data sources are connected for a project.

Used by the completeness scorer. Only Google integrations are tracked in the
database today; third-party sources are never reported as available by the
PostgreSQL provider.
"""

import logging
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Protocol, Set

from seo_accuracy.core.database import execute_query
from seo_accuracy.models.enums import DataSource, IntegrationService


logger = logging.getLogger(__name__)

SERVICE_SOURCES: Mapping[IntegrationService, DataSource] = MappingProxyType({
    IntegrationService.SEARCH_CONSOLE: DataSource.GOOGLE_SEARCH_CONSOLE,
    IntegrationService.ANALYTICS: DataSource.GOOGLE_ANALYTICS,
})

PREVIEW_SOURCES: FrozenSet[DataSource] = frozenset({
    DataSource.GOOGLE_SEARCH_CONSOLE,
    DataSource.GOOGLE_ANALYTICS,
})

ACTIVE_SERVICES_SQL = """
    SELECT DISTINCT gi.service
    FROM google_integration gi
    JOIN project p ON p.organization_id = gi.organization_id
    WHERE p.id = $1
      AND gi.is_active = TRUE
"""


class IntegrationStatusProvider(Protocol):
    async def active_sources(self, project_id: str) -> Set[DataSource]:
        ...


class StaticIntegrationStatusProvider:
    """Reports the same set of sources for every project."""

    def __init__(self, sources: Iterable[DataSource] = PREVIEW_SOURCES) -> None:
        self._sources = frozenset(sources)

    async def active_sources(self, project_id: str) -> Set[DataSource]:
        return set(self._sources)


class PostgresIntegrationStatusProvider:
    """Reads active Google integrations of the project's organization."""

    async def active_sources(self, project_id: str) -> Set[DataSource]:
        rows = await execute_query(ACTIVE_SERVICES_SQL, project_id)

        sources: Set[DataSource] = set()
        for row in rows:
            try:
                service = IntegrationService(row["service"])
            except ValueError:
                logger.debug(f"Ignoring unknown integration service {row['service']!r}")
                continue
            sources.add(SERVICE_SOURCES[service])

        return sources
