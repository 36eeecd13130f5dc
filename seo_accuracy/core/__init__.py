"""
Core infrastructure package for the SEO accuracy service.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg
- The error taxonomy shared by services and routers

This module re-exports the pieces most modules need, allowing imports like:

    from seo_accuracy.core import get_settings, init_db, StorageError

FastAPI dependency providers live in ``seo_accuracy.core.dependencies`` and
are not re-exported here, since they import the service layer.
"""

# =============================================================================
# Re-exports from seo_accuracy.core.config
# =============================================================================
from seo_accuracy.core.config import Settings, get_settings

# =============================================================================
# Re-exports from seo_accuracy.core.database
# =============================================================================
from seo_accuracy.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from seo_accuracy.core.exceptions
# =============================================================================
from seo_accuracy.core.exceptions import (
    AccuracyEngineError,
    DataValidationError,
    StorageError,
    ZeroBaselineError,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # Errors (from exceptions.py)
    'AccuracyEngineError',
    'DataValidationError',
    'StorageError',
    'ZeroBaselineError',
]
