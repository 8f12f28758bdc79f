"""Statistics handlers that turn event streams into report sections."""

from .base import PerformanceStatisticsHandler
from .query import QueryHandler
from .synchronized import SynchronizedHandler

__all__ = ["PerformanceStatisticsHandler", "QueryHandler", "SynchronizedHandler"]
