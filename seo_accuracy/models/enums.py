"""
Enumeration definitions for the SEO accuracy service.

All enums inherit from both `str` and `Enum` so they serialize as plain
strings through Pydantic models and JSON responses, and so scorers can match
on closed sets instead of raw strings.
"""

from enum import Enum


class DataSource(str, Enum):
    """
    External providers a metric observation can come from.

    Closed set used as a lookup key for reliability and availability.

    - GOOGLE_SEARCH_CONSOLE / GOOGLE_ANALYTICS: first-party Google data
    - SERPAPI / DATAFORSEO: third-party SERP scrapers
    - AHREFS_API / SEMRUSH_API / MOZ_API: third-party SEO suites
    - INTERNAL_CRAWLER: self-hosted rank checker
    """
    GOOGLE_SEARCH_CONSOLE = "GOOGLE_SEARCH_CONSOLE"
    GOOGLE_ANALYTICS = "GOOGLE_ANALYTICS"
    SERPAPI = "SERPAPI"
    DATAFORSEO = "DATAFORSEO"
    AHREFS_API = "AHREFS_API"
    SEMRUSH_API = "SEMRUSH_API"
    MOZ_API = "MOZ_API"
    INTERNAL_CRAWLER = "INTERNAL_CRAWLER"


class DiscrepancySeverity(str, Enum):
    """
    Classification of the relative variance between two sources.

    Inclusive upper bounds:
    - LOW: variance <= 0.15
    - MEDIUM: variance <= 0.30
    - HIGH: variance <= 0.50
    - CRITICAL: variance > 0.50
    """
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Trend(str, Enum):
    """Direction of a ranking series. Lower position numbers are better."""
    STABLE = "stable"
    IMPROVING = "improving"
    DECLINING = "declining"
    VOLATILE = "volatile"


class ConfidenceLevel(str, Enum):
    """
    Buckets of the hybrid confidence score, inclusive at the lower bound.

    - very_high: >= 0.9
    - high: >= 0.75
    - medium: >= 0.6
    - low: >= 0.4
    - very_low: below 0.4
    """
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


class AnomalySeverity(str, Enum):
    """Severity tag on an individual ranking anomaly."""
    HIGH = "high"
    MEDIUM = "medium"


class Industry(str, Enum):
    """Well-known values of the free-text ContextualData.industry hint."""
    COMPETITIVE = "competitive"
    MODERATE = "moderate"
    LOW_COMPETITION = "low_competition"


class IntegrationService(str, Enum):
    """Service column values of the google_integration table."""
    SEARCH_CONSOLE = "SEARCH_CONSOLE"
    ANALYTICS = "ANALYTICS"


class AccuracyAlertType(str, Enum):
    """Kinds of accuracy alerts derived from a report."""
    CONFIDENCE_DROP = "CONFIDENCE_DROP"
    CRITICAL_DISCREPANCY = "CRITICAL_DISCREPANCY"
    DATA_STALE = "DATA_STALE"
    CONSISTENCY_ISSUE = "CONSISTENCY_ISSUE"
