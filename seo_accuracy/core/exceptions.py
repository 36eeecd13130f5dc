"""
Error taxonomy for the accuracy engine.

- DataValidationError: a DataPoint or RankingRecord is missing a required
  numeric field or carries a non-finite value. Fails fast and names the field.
- ZeroBaselineError: a relative variance was requested against a zero
  baseline. Scorers never let this escape; they normalise the case into
  "no valid comparison".
- StorageError: the report store is unavailable or rejected a write/read.
  Caught and logged by the engine, never re-raised from report generation.
"""

from typing import Optional


class AccuracyEngineError(Exception):
    """Base class for all accuracy engine errors."""


class DataValidationError(AccuracyEngineError, ValueError):
    """Raised when an observation is malformed."""

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message or f"Invalid or missing value for field '{field}'")


class ZeroBaselineError(AccuracyEngineError, ArithmeticError):
    """Raised when a relative variance would divide by a zero baseline."""

    def __init__(self, field: str = "value") -> None:
        self.field = field
        super().__init__(
            f"Cannot compute relative variance: primary '{field}' is zero"
        )


class StorageError(AccuracyEngineError):
    """Raised by report store adapters when persistence fails."""
