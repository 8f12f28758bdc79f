"""Per-identity correlation tables for reads, rows and property events.

Reads, rows and properties arrive as separate events, before or after the
completion event they describe. Each table accumulates partial facts under
the execution identity until the report joins them back by identity.

Reads are keyed by query kind and identity. Rows and properties are keyed by
identity only, unless ``scope_rows_by_kind`` is set, in which case the kind is
added to their key as well.
"""

from __future__ import annotations

import sys
from typing import Dict, Hashable, Optional, Tuple

from .table import PropertyCount
from ..ingest.events import QueryIdentity, QueryKind

# scope -> origin node -> query id -> fact
_ScopedTable = Dict[Optional[QueryKind], Dict[Hashable, Dict[int, dict]]]


class IdentityCorrelator:
    """Accumulates reads, rows and properties keyed by execution identity."""

    def __init__(self, *, scope_rows_by_kind: bool = False) -> None:
        self.scope_rows_by_kind = scope_rows_by_kind
        # kind -> origin node -> query id -> [logical, physical]
        self._reads: Dict[QueryKind, Dict[Hashable, Dict[int, list]]] = {}
        self._rows: _ScopedTable = {}
        self._properties: _ScopedTable = {}

    def _scope(self, kind: Optional[QueryKind]) -> Optional[QueryKind]:
        return kind if self.scope_rows_by_kind else None

    # ------------------------------------------------------------------
    # Recording

    def record_reads(
        self,
        kind: QueryKind,
        identity: QueryIdentity,
        logical_reads: int,
        physical_reads: int,
    ) -> None:
        node_reads = self._reads.setdefault(kind, {}).setdefault(identity.node_id, {})
        counters = node_reads.get(identity.query_id)
        if counters is None:
            node_reads[identity.query_id] = [logical_reads, physical_reads]
        else:
            counters[0] += logical_reads
            counters[1] += physical_reads

    def record_rows(
        self,
        identity: QueryIdentity,
        action: str,
        rows: int,
        kind: Optional[QueryKind] = None,
    ) -> None:
        actions = (
            self._rows.setdefault(self._scope(kind), {})
            .setdefault(identity.node_id, {})
            .setdefault(identity.query_id, {})
        )
        action = sys.intern(action)
        actions[action] = actions.get(action, 0) + rows

    def record_property(
        self,
        identity: QueryIdentity,
        name: str,
        value: str,
        kind: Optional[QueryKind] = None,
    ) -> None:
        props = (
            self._properties.setdefault(self._scope(kind), {})
            .setdefault(identity.node_id, {})
            .setdefault(identity.query_id, {})
        )
        key = (name, value)
        prop = props.get(key)
        if prop is None:
            props[key] = PropertyCount(sys.intern(name), sys.intern(value), 1)
        else:
            prop.count += 1

    # ------------------------------------------------------------------
    # Lookups

    def lookup_reads(
        self, kind: QueryKind, identity: QueryIdentity
    ) -> Optional[Tuple[int, int]]:
        """Return ``(logical, physical)`` totals or ``None`` if none arrived."""

        counters = (
            self._reads.get(kind, {}).get(identity.node_id, {}).get(identity.query_id)
        )
        if counters is None:
            return None
        return counters[0], counters[1]

    def lookup_rows(
        self, identity: QueryIdentity, kind: Optional[QueryKind] = None
    ) -> Optional[Dict[str, int]]:
        actions = (
            self._rows.get(self._scope(kind), {})
            .get(identity.node_id, {})
            .get(identity.query_id)
        )
        if actions is None:
            return None
        return dict(actions)

    def lookup_properties(
        self, identity: QueryIdentity, kind: Optional[QueryKind] = None
    ) -> Optional[Dict[Tuple[str, str], PropertyCount]]:
        props = (
            self._properties.get(self._scope(kind), {})
            .get(identity.node_id, {})
            .get(identity.query_id)
        )
        if props is None:
            return None
        return {key: prop.copy() for key, prop in props.items()}

