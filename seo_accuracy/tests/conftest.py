"""
Pytest Configuration and Shared Fixtures for SEO Accuracy Tests.

This module provides fixtures for all tests, supporting:
- Async test execution with pytest-asyncio
- A mocked asyncpg pool for exercising the PostgreSQL adapters
- Deterministic reference times and observation factories
- Synthetic ranking series built with numpy
- Engines wired to in-memory adapters

Dependencies:
- pytest
- pytest-asyncio
- numpy
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from unittest.mock import AsyncMock, Mock

import numpy as np
import pytest

from seo_accuracy.core.config import Settings
from seo_accuracy.models import DataPoint, DataSource, RankingRecord
from seo_accuracy.services.accuracy_engine import DataAccuracyEngine
from seo_accuracy.services.integration_status import StaticIntegrationStatusProvider
from seo_accuracy.services.ml_confidence import MLConfidenceEngine
from seo_accuracy.services.report_store import InMemoryReportStore


# ============================================================
# PYTEST PLUGINS CONFIGURATION
# ============================================================

pytest_plugins: List[str] = ['pytest_asyncio']


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - storage: tests exercising the PostgreSQL adapters against a mocked pool
    """
    config.addinivalue_line(
        'markers',
        'storage: marks tests of the PostgreSQL report and integration adapters'
    )


# ============================================================
# DATABASE FIXTURES
# ============================================================

@pytest.fixture
def mock_db_pool() -> AsyncMock:
    """
    Mocked asyncpg pool.

    pool.acquire() returns an async context manager yielding a connection
    whose execute/fetch/fetchrow are AsyncMocks.

    Usage:
        mock_db_pool.acquire.return_value.__aenter__.return_value.fetch.return_value = [...]
    """
    pool = AsyncMock()

    conn = AsyncMock()
    conn.execute = AsyncMock(return_value="INSERT 0 1")
    conn.fetch = AsyncMock(return_value=[])
    conn.fetchrow = AsyncMock(return_value=None)

    acquire_context = AsyncMock()
    acquire_context.__aenter__ = AsyncMock(return_value=conn)
    acquire_context.__aexit__ = AsyncMock(return_value=None)
    pool.acquire = Mock(return_value=acquire_context)

    return pool


# ============================================================
# SETTINGS AND TIME FIXTURES
# ============================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with no database and no pause between ML batch groups."""
    return Settings(
        database_url=None,
        preview_mode=True,
        ml_batch_size=3,
        ml_batch_pause_seconds=0.0,
        _env_file=None,
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used across scorer tests."""
    return datetime(2026, 10, 16, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================
# OBSERVATION FACTORIES
# ============================================================

@pytest.fixture
def make_point() -> Callable[..., DataPoint]:
    """
    Factory for DataPoint instances.

    Usage:
        point = make_point(DataSource.GOOGLE_ANALYTICS, 1010, minutes_ago=20)
    """
    counter = {'n': 0}

    def _make(
        source: DataSource = DataSource.GOOGLE_SEARCH_CONSOLE,
        value: float = 1000.0,
        minutes_ago: float = 15.0,
        reference: Optional[datetime] = None,
    ) -> DataPoint:
        counter['n'] += 1
        base = reference or datetime.now(timezone.utc)
        return DataPoint(
            id=f"dp_{counter['n']}",
            source=source,
            value=value,
            timestamp=base - timedelta(minutes=minutes_ago),
        )

    return _make


def build_rankings(
    positions: List[float],
    end: datetime,
    step: timedelta = timedelta(days=1),
    sources: Optional[List[DataSource]] = None,
    clicks: Optional[int] = 10,
) -> List[RankingRecord]:
    """
    Ranking series ending at ``end``, one check per ``step``, oldest first.

    Sources cycle through ``sources`` (default: Search Console only).
    """
    sources = sources or [DataSource.GOOGLE_SEARCH_CONSOLE]
    n = len(positions)
    return [
        RankingRecord(
            position=float(p),
            checkedAt=end - step * (n - 1 - i),
            clicks=clicks,
            impressions=None if clicks is None else clicks * 10,
            source=sources[i % len(sources)],
        )
        for i, p in enumerate(positions)
    ]


@pytest.fixture
def stable_rankings(now: datetime) -> List[RankingRecord]:
    """Ten daily checks hovering around position 5, two sources."""
    positions = [5, 5, 6, 5, 4, 5, 5, 6, 5, 4]
    return build_rankings(
        positions,
        end=now - timedelta(minutes=30),
        sources=[DataSource.GOOGLE_SEARCH_CONSOLE, DataSource.SERPAPI],
    )


@pytest.fixture
def outlier_rankings(now: datetime) -> List[RankingRecord]:
    """Nine checks at position 5 and one at 50."""
    positions = [5.0] * 9 + [50.0]
    return build_rankings(positions, end=now - timedelta(hours=2))


@pytest.fixture
def noisy_rankings(now: datetime) -> List[RankingRecord]:
    """Thirty daily checks drawn around position 20 with std 15 (seeded)."""
    rng = np.random.default_rng(42)
    positions = np.clip(rng.normal(20, 15, size=30), 1, 100)
    return build_rankings(positions.tolist(), end=now - timedelta(hours=1))


# ============================================================
# ENGINE FIXTURES
# ============================================================

@pytest.fixture
def report_store() -> InMemoryReportStore:
    return InMemoryReportStore()


@pytest.fixture
def accuracy_engine(
    report_store: InMemoryReportStore,
    test_settings: Settings,
) -> DataAccuracyEngine:
    """Accuracy engine over an in-memory store; GSC and GA connected."""
    return DataAccuracyEngine(
        store=report_store,
        integration_status=StaticIntegrationStatusProvider(
            {DataSource.GOOGLE_SEARCH_CONSOLE, DataSource.GOOGLE_ANALYTICS}
        ),
        settings=test_settings,
    )


@pytest.fixture
def ml_engine(test_settings: Settings) -> MLConfidenceEngine:
    return MLConfidenceEngine(settings=test_settings)
