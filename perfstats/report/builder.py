"""Join aggregated queries with correlated facts into report sections.

Rollup section example::

    {
        "<text or cache name>": {
            "count": 3,
            "duration": 1500,
            "logicalReads": 10,
            "physicalReads": 2,
            "failures": 0,
            "properties": {"<name>": {"value": "<value>", "count": 1}},
            "rows": {"<action>": 3}
        }
    }

Slowest queries section example::

    [
        {
            "text": "<text or cache name>",
            "startTime": 1700000000000,
            "duration": 900,
            "nodeId": "<origin node>",
            "success": true,
            "logicalReads": 10,
            "physicalReads": 2,
            "properties": {...},
            "rows": {...}
        }
    ]

Properties and rows blocks appear for SQL field queries only, and only when
there is something to show.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..aggregation.correlator import IdentityCorrelator
from ..aggregation.table import AggregatedQueryInfo, AggregationTable, PropertyCount
from ..aggregation.top_k import BoundedTopK
from ..ingest.events import QueryKind, QueryRecord

NANOS_PER_MILLI = 1_000_000

# Reported kinds with their rollup and slowest queries section names.
REPORT_SECTIONS: Tuple[Tuple[QueryKind, str, str], ...] = (
    (QueryKind.SQL_FIELDS, "sql", "topSlowSql"),
    (QueryKind.SCAN, "scan", "topSlowScan"),
    (QueryKind.INDEX, "index", "topSlowIndex"),
)


def nanos_to_millis(nanos: int) -> int:
    return nanos // NANOS_PER_MILLI


def _properties_block(props: Mapping[Tuple[str, str], PropertyCount]) -> Dict[str, Any]:
    # One slot per property name; the lowest (name, value) pair takes it.
    block: Dict[str, Any] = {}
    for key in sorted(props):
        prop = props[key]
        if prop.name not in block:
            block[prop.name] = {"value": prop.value, "count": prop.count}
    return block


def _rows_block(rows: Mapping[str, int]) -> Dict[str, int]:
    return {action: rows[action] for action in sorted(rows)}


class ReportBuilder:
    """Materializes rollup and slowest queries sections.

    Building reads the tables but never mutates them, so it can be repeated.
    """

    def __init__(
        self,
        table: AggregationTable,
        correlator: IdentityCorrelator,
        top_slow: Mapping[QueryKind, BoundedTopK[QueryRecord]],
    ) -> None:
        self.table = table
        self.correlator = correlator
        self.top_slow = top_slow

    def build(self) -> Dict[str, Any]:
        report: Dict[str, Any] = {}
        for kind, rollup_name, _ in REPORT_SECTIONS:
            report[rollup_name] = self.build_rollup(kind)
        for kind, _, top_slow_name in REPORT_SECTIONS:
            report[top_slow_name] = self.build_top_slow(kind)
        return report

    # ------------------------------------------------------------------
    # Rollups

    def correlate(self, kind: QueryKind, info: AggregatedQueryInfo) -> AggregatedQueryInfo:
        """Return a copy of *info* with reads, rows and properties pulled in."""

        result = info.detached()
        for identity in info.identities():
            reads = self.correlator.lookup_reads(kind, identity)
            if reads is not None:
                result.logical_reads += reads[0]
                result.physical_reads += reads[1]

            if kind is not QueryKind.SQL_FIELDS:
                continue

            props = self.correlator.lookup_properties(identity, kind)
            if props:
                result.add_properties(props)

            rows = self.correlator.lookup_rows(identity, kind)
            if rows:
                result.add_rows(rows)
        return result

    def build_rollup(self, kind: QueryKind) -> Dict[str, Any]:
        section: Dict[str, Any] = {}
        for text, info in self.table.snapshot(kind):
            totals = self.correlate(kind, info)
            entry: Dict[str, Any] = {
                "count": totals.count,
                "duration": nanos_to_millis(totals.total_duration),
                "logicalReads": totals.logical_reads,
                "physicalReads": totals.physical_reads,
                "failures": totals.failures,
            }
            if totals.properties:
                entry["properties"] = _properties_block(totals.properties)
            if totals.rows:
                entry["rows"] = _rows_block(totals.rows)
            section[text] = entry
        return section

    # ------------------------------------------------------------------
    # Slowest queries

    def build_top_slow(self, kind: QueryKind) -> List[Dict[str, Any]]:
        tree = self.top_slow.get(kind)
        if tree is None:
            return []
        return [self._top_slow_entry(kind, query) for query in tree.values()]

    def _top_slow_entry(self, kind: QueryKind, query: QueryRecord) -> Dict[str, Any]:
        identity = query.identity
        reads: Optional[Tuple[int, int]] = self.correlator.lookup_reads(kind, identity)
        logical, physical = reads if reads is not None else (0, 0)
        entry: Dict[str, Any] = {
            "text": query.text,
            "startTime": query.start_time,
            "duration": nanos_to_millis(query.duration),
            "nodeId": str(query.node_id),
            "success": query.success,
            "logicalReads": logical,
            "physicalReads": physical,
        }
        if kind is QueryKind.SQL_FIELDS:
            props = self.correlator.lookup_properties(identity, kind)
            if props is not None:
                entry["properties"] = _properties_block(props)
            rows = self.correlator.lookup_rows(identity, kind)
            if rows is not None:
                entry["rows"] = _rows_block(rows)
        return entry
