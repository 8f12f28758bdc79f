"""Coarse locking wrapper for handlers fed by several producers."""

from __future__ import annotations

from threading import Lock
from typing import Any, Dict, Hashable

from .base import PerformanceStatisticsHandler
from ..ingest.events import QueryKind


class SynchronizedHandler(PerformanceStatisticsHandler):
    """Serializes every call to the wrapped handler under one lock."""

    def __init__(self, delegate: PerformanceStatisticsHandler) -> None:
        self.delegate = delegate
        self._lock = Lock()

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
        with self._lock:
            self.delegate.query(node_id, kind, text, query_id, start_time, duration, success)

    def query_reads(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        logical_reads: int,
        physical_reads: int,
    ) -> None:
        with self._lock:
            self.delegate.query_reads(
                node_id, kind, query_node_id, query_id, logical_reads, physical_reads
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
        with self._lock:
            self.delegate.query_rows(node_id, kind, query_node_id, query_id, action, rows)

    def query_property(
        self,
        node_id: Hashable,
        kind: QueryKind,
        query_node_id: Hashable,
        query_id: int,
        name: str,
        value: str,
    ) -> None:
        with self._lock:
            self.delegate.query_property(node_id, kind, query_node_id, query_id, name, value)

    def results(self) -> Dict[str, Any]:
        with self._lock:
            return self.delegate.results()
