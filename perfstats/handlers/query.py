"""Aggregates query statistics and the slowest queries per query kind."""

from __future__ import annotations

from typing import Any, Dict, Hashable, Optional

from .base import PerformanceStatisticsHandler
from ..aggregation.correlator import IdentityCorrelator
from ..aggregation.table import AggregationTable
from ..aggregation.top_k import BoundedTopK
from ..config import Settings, settings as default_settings
from ..ingest.events import QueryIdentity, QueryKind, QueryRecord
from ..report.builder import ReportBuilder
from ..utils.logging_utils import get_logger
from ..utils.timing import timed

LOGGER = get_logger("handlers.query")


class QueryHandler(PerformanceStatisticsHandler):
    """Builds the ``sql``/``scan``/``index`` rollups and ``topSlow*`` sections.

    One instance holds the state of one aggregation run. Callers must not
    deliver the same completion event twice, since nothing here can tell a
    repeat from a new execution.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self.table = AggregationTable()
        self.correlator = IdentityCorrelator(
            scope_rows_by_kind=self.settings.scope_rows_by_kind
        )
        self.top_slow: Dict[QueryKind, BoundedTopK[QueryRecord]] = {}

    def query(
        self,
        node_id: Hashable,
        kind: QueryKind,
        text: str,
        query_id: int,
        start_time: int,
        duration: int,
        success: bool,
    ) -> None:
        record = QueryRecord(kind, text, node_id, query_id, start_time, duration, success)

        tree = self.top_slow.get(kind)
        if tree is None:
            tree = self.top_slow[kind] = BoundedTopK(self.settings.top_slow_size)
        tree.put(duration, record)

        self.table.merge(kind, text, record.identity, duration, success)

    def query_reads(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        logical_reads: int,
        physical_reads: int,
    ) -> None:
        self.correlator.record_reads(
            kind, QueryIdentity(query_node_id, query_id), logical_reads, physical_reads
        )

    def query_rows(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        action: str,
        rows: int,
    ) -> None:
        self.correlator.record_rows(QueryIdentity(query_node_id, query_id), action, rows, kind)

    def query_property(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        name: str,
        value: str,
    ) -> None:
        self.correlator.record_property(QueryIdentity(query_node_id, query_id), name, value, kind)

    def results(self) -> Dict[str, Any]:
        builder = ReportBuilder(self.table, self.correlator, self.top_slow)
        with timed("query report", self._log_timing):
            report = builder.build()
        return report

    def _log_timing(self, section: str, duration: float) -> None:
        LOGGER.info(
            "Built %s for %d distinct queries in %.3fs", section, len(self.table), duration
        )
