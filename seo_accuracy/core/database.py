"""
Async PostgreSQL connection pool for accuracy report persistence.

A single module-level asyncpg pool is shared by the report store and the
integration-status provider. The pool is optional: when no DATABASE_URL is
configured (or preview mode is on) ``init_db`` leaves it unset and the
service falls back to in-memory adapters.

Key Components:
- init_db(): Create the pool at application startup (idempotent)
- get_db_pool(): Return the pool, initializing lazily if needed
- close_db(): Close the pool at shutdown
- execute_query / execute_command: small helpers that
  acquire a connection, run one statement and release it

Connection Pool Configuration:
- min_size: 1
- max_size: 10
- command_timeout: 30 seconds

Usage:
    await init_db()

    rows = await execute_query(
        "SELECT * FROM data_accuracy_report WHERE project_id = $1",
        project_id,
    )

    await close_db()
"""

import logging
from typing import Any, List, Optional

import asyncpg
from asyncpg import Pool

from seo_accuracy.core.config import get_settings


logger = logging.getLogger(__name__)


# =============================================================================
# Global Pool Singleton
# =============================================================================

# None until init_db() succeeds; shared across all async tasks.
_pool: Optional[Pool] = None


# =============================================================================
# Pool Lifecycle Functions
# =============================================================================

async def init_db() -> Optional[Pool]:
    """
    Initialize the database connection pool.

    Returns the existing pool when already initialized. Returns None without
    connecting when the settings do not call for a database.

    Returns:
        The asyncpg pool, or None when running without a database.

    Raises:
        asyncpg.PostgresError: If connecting to the database fails.
        OSError: If the database host is unreachable.
    """
    global _pool

    settings = get_settings()
    if not settings.uses_database:
        logger.info("No database configured; running with preview adapters")
        return None

    if _pool is None:
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=1,
            max_size=10,
            command_timeout=30,
        )

    return _pool


async def get_db_pool() -> Pool:
    """
    Get the database connection pool, initializing if needed.

    Raises:
        RuntimeError: If the service is configured without a database.
        asyncpg.PostgresError: If lazy initialization fails.
    """
    if _pool is None:
        await init_db()

    if _pool is None:
        raise RuntimeError("Database pool requested but DATABASE_URL is not configured")

    return _pool


async def close_db() -> None:
    """Close the pool gracefully. Safe to call when no pool exists."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None


# =============================================================================
# Query Execution Helpers
# =============================================================================

async def execute_query(query: str, *args: Any) -> List[asyncpg.Record]:
    """
    Execute a query and return all rows.

    Args:
        query: SQL with $1, $2, ... placeholders.
        *args: Positional query parameters.
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        return await conn.fetch(query, *args)


async def execute_command(query: str, *args: Any) -> str:
    """
    Execute an INSERT/UPDATE/DELETE and return asyncpg's status string
    (e.g. 'INSERT 0 1').
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        return await conn.execute(query, *args)
