"""
SEO Accuracy Package.

FastAPI service that tells an operator how much to trust an SEO metric
gathered from several external data providers: multi-factor confidence
scores, cross-source discrepancies, persisted accuracy reports and
ML-enhanced confidence for keyword ranking histories.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and errors
    - models: Pydantic schemas and enums
    - services: Scoring engines and storage adapters
"""

__version__ = "1.0.0"
