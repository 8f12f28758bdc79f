"""Running totals per query kind and query text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Set, Tuple

from ..ingest.events import QueryIdentity, QueryKind


@dataclass
class PropertyCount:
    """Occurrences of one exact property name/value pair."""

    name: str
    value: str
    count: int = 0

    def copy(self) -> "PropertyCount":
        return PropertyCount(self.name, self.value, self.count)


@dataclass
class AggregatedQueryInfo:
    """Aggregated statistics of every execution sharing a kind and text.

    Reads, rows and properties are not known at merge time. ``ids`` keeps the
    identities of merged executions so the report can pull them in later.
    """

    count: int = 0
    total_duration: int = 0
    logical_reads: int = 0
    physical_reads: int = 0
    failures: int = 0
    properties: Dict[Tuple[str, str], PropertyCount] = field(default_factory=dict)
    rows: Dict[str, int] = field(default_factory=dict)
    # origin node -> query ids
    ids: Dict[Hashable, Set[int]] = field(default_factory=dict)

    def merge(self, identity: QueryIdentity, duration: int, success: bool) -> None:
        self.count += 1
        self.total_duration += duration
        if not success:
            self.failures += 1
        self.ids.setdefault(identity.node_id, set()).add(identity.query_id)

    def identities(self) -> List[QueryIdentity]:
        return [
            QueryIdentity(node_id, query_id)
            for node_id, query_ids in self.ids.items()
            for query_id in query_ids
        ]

    def detached(self) -> "AggregatedQueryInfo":
        """Copy with private property and row containers; ``ids`` is shared."""

        return AggregatedQueryInfo(
            count=self.count,
            total_duration=self.total_duration,
            logical_reads=self.logical_reads,
            physical_reads=self.physical_reads,
            failures=self.failures,
            properties={key: prop.copy() for key, prop in self.properties.items()},
            rows=dict(self.rows),
            ids=self.ids,
        )

    def add_properties(self, props: Dict[Tuple[str, str], PropertyCount]) -> None:
        for key, prop in props.items():
            existing = self.properties.get(key)
            if existing is None:
                self.properties[key] = prop.copy()
            else:
                existing.count += prop.count

    def add_rows(self, rows: Dict[str, int]) -> None:
        for action, count in rows.items():
            self.rows[action] = self.rows.get(action, 0) + count


class AggregationTable:
    """Maps ``(kind, text)`` to exactly one :class:`AggregatedQueryInfo`."""

    def __init__(self) -> None:
        self._entries: Dict[QueryKind, Dict[str, AggregatedQueryInfo]] = {}

    def merge(
        self,
        kind: QueryKind,
        text: str,
        identity: QueryIdentity,
        duration: int,
        success: bool,
    ) -> AggregatedQueryInfo:
        """Fold one completion event into the entry for ``(kind, text)``.

        Merging the same execution twice counts it twice.
        """

        by_text = self._entries.setdefault(kind, {})
        info = by_text.get(text)
        if info is None:
            info = by_text[text] = AggregatedQueryInfo()
        info.merge(identity, duration, success)
        return info

    def snapshot(self, kind: QueryKind) -> List[Tuple[str, AggregatedQueryInfo]]:
        """Return ``(text, info)`` pairs for *kind* in first-seen order."""

        return list(self._entries.get(kind, {}).items())

    def __len__(self) -> int:
        return sum(len(by_text) for by_text in self._entries.values())
