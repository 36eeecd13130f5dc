'''
SEO Accuracy Test Suite

Test Modules:
-------------
- test_scoring.py: Confidence component scorers and aggregation
  - Freshness staircase boundaries
  - Consistency bands, stale comparisons, zero primaries
  - Completeness against expected sources
  - Round-half-up overall score and accuracy verdict

- test_discrepancy.py: Discrepancy tiers and ordering

- test_accuracy_engine.py: Report generation, history and project status
  - Best-effort persistence
  - PostgreSQL adapters over a mocked asyncpg pool

- test_ml_confidence.py: Hybrid ML confidence
  - Feature vector, fixed network, contextual adjustments
  - Anomalies, trends, cycles, seasonality
  - Batch ordering and pacing

- test_alerts.py: Alert rules, severities and thresholds

- test_api.py: Route handlers, error mapping and dependency wiring

Running Tests:
--------------
    pip install -e ".[test]"
    pytest seo_accuracy/tests/ -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

# This file enables pytest discovery of the tests directory

__all__ = []
