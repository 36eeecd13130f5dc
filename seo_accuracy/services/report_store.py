"""
Persistence of accuracy reports.

The engine talks to a ``ReportStore`` protocol so its computation can run and
be tested without any database. Two adapters are provided:

- PostgresReportStore: asyncpg-backed, table ``data_accuracy_report``. The
  full confidence breakdown, secondary values and discrepancies are kept in a
  JSONB ``metadata`` column so reading a report back reproduces it exactly.
- InMemoryReportStore: process-local list, used in preview mode and tests.

Adapters raise StorageError for any backend failure; deciding whether that
failure matters is the caller's job.

Table Schema (data_accuracy_report):
    - id: TEXT PRIMARY KEY
    - project_id: TEXT NOT NULL
    - metric: TEXT NOT NULL
    - primary_value: DOUBLE PRECISION NOT NULL
    - confidence_score: INTEGER NOT NULL (overall)
    - is_accurate: BOOLEAN NOT NULL
    - checked_at: TIMESTAMPTZ NOT NULL
    - metadata: JSONB NOT NULL
"""

import json
from datetime import datetime
from typing import Any, List, Mapping, Optional, Protocol

import asyncpg

from seo_accuracy.core.database import execute_command, execute_query
from seo_accuracy.core.exceptions import StorageError
from seo_accuracy.models.schemas import AccuracyReport
from seo_accuracy.services.validation import as_utc


DEFAULT_HISTORY_LIMIT: int = 100

# Errors from the database layer that mean "store unavailable or rejected".
_BACKEND_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError)


class ReportStore(Protocol):
    """Storage collaborator for accuracy reports."""

    async def create(self, report: AccuracyReport) -> None:
        ...

    async def find_many(
        self,
        project_id: str,
        metric: Optional[str],
        since: datetime,
        limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
    ) -> List[AccuracyReport]:
        """Reports checked at or after ``since``, newest first; ``limit=None`` returns all."""
        ...


# =============================================================================
# In-memory adapter
# =============================================================================


class InMemoryReportStore:
    """Process-local report store."""

    def __init__(self) -> None:
        self._reports: List[AccuracyReport] = []

    async def create(self, report: AccuracyReport) -> None:
        self._reports.append(report)

    async def find_many(
        self,
        project_id: str,
        metric: Optional[str],
        since: datetime,
        limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
    ) -> List[AccuracyReport]:
        since = as_utc(since)
        matches = [
            r for r in self._reports
            if r.projectId == project_id
            and (metric is None or r.metric == metric)
            and as_utc(r.checkedAt) >= since
        ]
        matches.sort(key=lambda r: as_utc(r.checkedAt), reverse=True)
        return matches[:limit]

    def __len__(self) -> int:
        return len(self._reports)


# =============================================================================
# PostgreSQL adapter
# =============================================================================


CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS data_accuracy_report (
        id TEXT PRIMARY KEY,
        project_id TEXT NOT NULL,
        metric TEXT NOT NULL,
        primary_value DOUBLE PRECISION NOT NULL,
        confidence_score INTEGER NOT NULL,
        is_accurate BOOLEAN NOT NULL,
        checked_at TIMESTAMPTZ NOT NULL,
        metadata JSONB NOT NULL
    )
"""

INSERT_REPORT_SQL = """
    INSERT INTO data_accuracy_report (
        id,
        project_id,
        metric,
        primary_value,
        confidence_score,
        is_accurate,
        checked_at,
        metadata
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8::jsonb)
"""

# A NULL $4 means LIMIT NULL, which PostgreSQL treats as no limit.
SELECT_REPORTS_SQL = """
    SELECT
        id,
        project_id,
        metric,
        primary_value,
        is_accurate,
        checked_at,
        metadata
    FROM data_accuracy_report
    WHERE project_id = $1
      AND ($2::text IS NULL OR metric = $2)
      AND checked_at >= $3
    ORDER BY checked_at DESC
    LIMIT $4
"""


def report_to_metadata(report: AccuracyReport) -> str:
    """Serialize the parts of a report that live in the JSONB column."""
    payload = report.model_dump(
        mode="json",
        include={"confidenceScore", "secondaryValues", "discrepancies"},
    )
    return json.dumps(payload)


def row_to_report(row: Mapping[str, Any]) -> AccuracyReport:
    """Rebuild a report from a data_accuracy_report row."""
    metadata = row["metadata"]
    if isinstance(metadata, (str, bytes)):
        metadata = json.loads(metadata)

    return AccuracyReport.model_validate({
        "id": row["id"],
        "projectId": row["project_id"],
        "metric": row["metric"],
        "primaryValue": float(row["primary_value"]),
        "secondaryValues": metadata.get("secondaryValues", []),
        "confidenceScore": metadata["confidenceScore"],
        "discrepancies": metadata.get("discrepancies", []),
        "isAccurate": bool(row["is_accurate"]),
        "checkedAt": row["checked_at"],
    })


class PostgresReportStore:
    """Report store backed by the shared asyncpg pool."""

    async def ensure_schema(self) -> None:
        try:
            await execute_command(CREATE_TABLE_SQL)
        except _BACKEND_ERRORS as exc:
            raise StorageError(f"Failed to create report table: {exc}") from exc

    async def create(self, report: AccuracyReport) -> None:
        try:
            await execute_command(
                INSERT_REPORT_SQL,
                report.id,
                report.projectId,
                report.metric,
                report.primaryValue,
                report.confidenceScore.overall,
                report.isAccurate,
                as_utc(report.checkedAt),
                report_to_metadata(report),
            )
        except _BACKEND_ERRORS as exc:
            raise StorageError(f"Failed to store accuracy report {report.id}: {exc}") from exc

    async def find_many(
        self,
        project_id: str,
        metric: Optional[str],
        since: datetime,
        limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
    ) -> List[AccuracyReport]:
        try:
            rows = await execute_query(
                SELECT_REPORTS_SQL,
                project_id,
                metric,
                as_utc(since),
                limit,
            )
        except _BACKEND_ERRORS as exc:
            raise StorageError(f"Failed to load accuracy reports for {project_id}: {exc}") from exc

        try:
            return [row_to_report(row) for row in rows]
        except (KeyError, ValueError, TypeError) as exc:
            raise StorageError(f"Malformed accuracy report row for {project_id}: {exc}") from exc
