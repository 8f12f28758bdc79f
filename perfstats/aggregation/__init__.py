"""In-memory aggregation structures backing the query handler."""

from .correlator import IdentityCorrelator
from .table import AggregatedQueryInfo, AggregationTable, PropertyCount
from .top_k import BoundedTopK

__all__ = [
    "AggregatedQueryInfo",
    "AggregationTable",
    "BoundedTopK",
    "IdentityCorrelator",
    "PropertyCount",
]
