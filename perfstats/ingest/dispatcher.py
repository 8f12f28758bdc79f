"""Replay decoded statistics events into handlers in delivery order."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .events import (
    EventDecodeError,
    QueryEvent,
    QueryPropertyRecord,
    QueryReadsRecord,
    QueryRecord,
    QueryRowsRecord,
    decode_event,
)
from ..handlers.base import PerformanceStatisticsHandler
from ..handlers.synchronized import SynchronizedHandler
from ..utils.concurrency import create_thread_pool
from ..utils.logging_utils import get_logger

LOGGER = get_logger("ingest.dispatcher")

EventPayload = Union[Mapping[str, Any], QueryEvent]


@dataclass
class ReplaySummary:
    """Counters gathered while replaying one event stream."""

    queries: int = 0
    reads: int = 0
    rows: int = 0
    properties: int = 0
    skipped: int = 0
    duration_seconds: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def delivered(self) -> int:
        return self.queries + self.reads + self.rows + self.properties

    def absorb(self, other: "ReplaySummary") -> None:
        self.queries += other.queries
        self.reads += other.reads
        self.rows += other.rows
        self.properties += other.properties
        self.skipped += other.skipped
        self.duration_seconds = max(self.duration_seconds, other.duration_seconds)
        self.errors.extend(other.errors)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "queries": self.queries,
            "reads": self.reads,
            "rows": self.rows,
            "properties": self.properties,
            "skipped": self.skipped,
            "delivered": self.delivered,
            "duration_seconds": self.duration_seconds,
        }


def dispatch_event(
    event: QueryEvent,
    handlers: Sequence[PerformanceStatisticsHandler],
    summary: ReplaySummary,
) -> None:
    """Deliver one typed record to every handler."""

    if isinstance(event, QueryRecord):
        summary.queries += 1
        for handler in handlers:
            handler.query(
                event.node_id,
                event.kind,
                event.text,
                event.query_id,
                event.start_time,
                event.duration,
                event.success,
            )
    elif isinstance(event, QueryReadsRecord):
        summary.reads += 1
        for handler in handlers:
            handler.query_reads(
                event.node_id,
                event.kind,
                event.query_node_id,
                event.query_id,
                event.logical_reads,
                event.physical_reads,
            )
    elif isinstance(event, QueryRowsRecord):
        summary.rows += 1
        for handler in handlers:
            handler.query_rows(
                event.node_id,
                event.kind,
                event.query_node_id,
                event.query_id,
                event.action,
                event.rows,
            )
    elif isinstance(event, QueryPropertyRecord):
        summary.properties += 1
        for handler in handlers:
            handler.query_property(
                event.node_id,
                event.kind,
                event.query_node_id,
                event.query_id,
                event.name,
                event.value,
            )
    else:
        raise EventDecodeError(f"Unsupported event record: {type(event).__name__}")


def replay_events(
    events: Iterable[EventPayload],
    handlers: Sequence[PerformanceStatisticsHandler],
) -> ReplaySummary:
    """Decode and deliver *events* to *handlers*, skipping malformed entries."""

    summary = ReplaySummary()
    start = time.perf_counter()
    for position, payload in enumerate(events, start=1):
        try:
            event = decode_event(payload)
        except EventDecodeError as exc:
            summary.skipped += 1
            summary.errors.append(f"event {position}: {exc}")
            LOGGER.debug("Skipping malformed event #%d: %s", position, exc)
            continue
        dispatch_event(event, handlers, summary)
    summary.duration_seconds = time.perf_counter() - start

    LOGGER.info(
        "Replayed %d events: queries=%d reads=%d rows=%d properties=%d skipped=%d in %.2fs",
        summary.delivered,
        summary.queries,
        summary.reads,
        summary.rows,
        summary.properties,
        summary.skipped,
        summary.duration_seconds,
    )
    return summary


def replay_concurrently(
    shards: Sequence[Iterable[EventPayload]],
    handlers: Sequence[PerformanceStatisticsHandler],
    *,
    max_workers: Optional[int] = None,
) -> ReplaySummary:
    """Replay independent event shards in parallel into locked handlers.

    Each shard keeps its own delivery order; shards interleave arbitrarily.
    The handlers must not be used for reporting until this returns.
    """

    synchronized = [SynchronizedHandler(handler) for handler in handlers]
    total = ReplaySummary()
    with create_thread_pool(max_workers) as pool:
        futures = [pool.submit(replay_events, shard, synchronized) for shard in shards]
        for future in futures:
            total.absorb(future.result())
    LOGGER.info("Replayed %d shards (%d events)", len(shards), total.delivered)
    return total
