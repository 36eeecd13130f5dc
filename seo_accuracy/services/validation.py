"""
Input normalisation for observations entering the engine.

Callers may hand the engine either model instances or plain dicts (e.g. rows
decoded from a queue). Both paths end up as frozen Pydantic models; any
pydantic ValidationError is re-raised as DataValidationError naming the
first offending field, so the primary computation path fails fast with a
descriptive error.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from seo_accuracy.core.exceptions import DataValidationError
from seo_accuracy.models.schemas import DataPoint, MLConfidenceInput, RankingRecord


ModelT = TypeVar("ModelT", bound=BaseModel)

SECONDS_PER_HOUR: float = 3600.0


def _coerce(model: Type[ModelT], value: Union[ModelT, dict, Any]) -> ModelT:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or model.__name__
        raise DataValidationError(
            field,
            f"Invalid {model.__name__}: field '{field}' {first.get('msg', 'is invalid')}",
        ) from exc


def ensure_data_point(value: Union[DataPoint, dict]) -> DataPoint:
    """Return a validated DataPoint or raise DataValidationError."""
    return _coerce(DataPoint, value)


def ensure_data_points(values: Optional[Iterable[Union[DataPoint, dict]]]) -> List[DataPoint]:
    return [ensure_data_point(v) for v in (values or [])]


def ensure_ranking_record(value: Union[RankingRecord, dict]) -> RankingRecord:
    """Return a validated RankingRecord or raise DataValidationError."""
    return _coerce(RankingRecord, value)


def ensure_ranking_records(
    values: Optional[Iterable[Union[RankingRecord, dict]]]
) -> List[RankingRecord]:
    return [ensure_ranking_record(v) for v in (values or [])]


def ensure_ml_confidence_input(value: Union[MLConfidenceInput, dict]) -> MLConfidenceInput:
    """Return a validated MLConfidenceInput or raise DataValidationError."""
    return _coerce(MLConfidenceInput, value)


# =============================================================================
# Time helpers
# =============================================================================


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are interpreted as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_since(timestamp: datetime, now: Optional[datetime] = None) -> float:
    """
    Age of ``timestamp`` in hours relative to ``now``.

    Negative for timestamps in the future.
    """
    reference = as_utc(now) if now is not None else utc_now()
    return (reference - as_utc(timestamp)).total_seconds() / SECONDS_PER_HOUR
