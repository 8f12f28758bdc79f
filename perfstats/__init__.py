"""Query statistics aggregation for performance-statistics reports."""

from .aggregation import AggregatedQueryInfo, AggregationTable, BoundedTopK, IdentityCorrelator
from .config import Settings, settings
from .handlers import PerformanceStatisticsHandler, QueryHandler, SynchronizedHandler
from .ingest import QueryIdentity, QueryKind, QueryRecord
from .report.builder import ReportBuilder

__all__ = [
    "AggregatedQueryInfo",
    "AggregationTable",
    "BoundedTopK",
    "IdentityCorrelator",
    "PerformanceStatisticsHandler",
    "QueryHandler",
    "QueryIdentity",
    "QueryKind",
    "QueryRecord",
    "ReportBuilder",
    "Settings",
    "SynchronizedHandler",
    "settings",
]
