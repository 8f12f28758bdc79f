"""Handler interface for performance statistics events."""

from __future__ import annotations

from typing import Any, Dict, Hashable

from ..ingest.events import QueryKind


class PerformanceStatisticsHandler:
    """Receives statistics events in delivery order and produces report sections.

    Every callback is a no-op by default so a handler only overrides the
    events it aggregates.
    """

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
        """A query execution finished on *node_id*, the originating node."""

    def query_reads(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        logical_reads: int,
        physical_reads: int,
    ) -> None:
        """Page reads of the query ``(query_node_id, query_id)`` seen on *node_id*."""

    def query_rows(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        action: str,
        rows: int,
    ) -> None:
        """Rows processed by the query for *action*."""

    def query_property(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        name: str,
        value: str,
    ) -> None:
        """A name/value property of the query."""

    def results(self) -> Dict[str, Any]:
        """Return report sections keyed by section name."""

        return {}
