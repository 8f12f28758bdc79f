"""Typed query telemetry events and decoders for already-parsed mappings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, Mapping, NamedTuple, Union


class EventDecodeError(ValueError):
    """Raised when an event mapping cannot be turned into a typed record."""


class QueryKind(Enum):
    """Cache query types reported by the engine, in wire ordinal order."""

    SPI = 0
    SCAN = 1
    SQL = 2
    SQL_FIELDS = 3
    TEXT = 4
    SET = 5
    INDEX = 6

    @classmethod
    def parse(cls, value: Union["QueryKind", str, int]) -> "QueryKind":
        """Resolve an enum member from a member, a name or an ordinal."""

        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise EventDecodeError(f"Unknown query kind: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise EventDecodeError(f"Unknown query kind ordinal: {value}") from None
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise EventDecodeError(f"Unknown query kind: {value!r}") from None
        raise EventDecodeError(f"Unknown query kind: {value!r}")


class QueryIdentity(NamedTuple):
    """Originating node plus node-local query id of one execution."""

    node_id: Hashable
    query_id: int


@dataclass(frozen=True)
class QueryRecord:
    """A finished query execution. Durations are in nanoseconds."""

    kind: QueryKind
    text: str
    node_id: Hashable
    query_id: int
    start_time: int
    duration: int
    success: bool

    @property
    def identity(self) -> QueryIdentity:
        return QueryIdentity(self.node_id, self.query_id)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": "query",
            "kind": self.kind.name,
            "text": self.text,
            "nodeId": str(self.node_id),
            "id": self.query_id,
            "startTime": self.start_time,
            "duration": self.duration,
            "success": self.success,
        }


@dataclass(frozen=True)
class QueryReadsRecord:
    """Page reads reported for a query, possibly one of several partial reports."""

    node_id: Hashable
    kind: QueryKind
    query_node_id: Hashable
    query_id: int
    logical_reads: int
    physical_reads: int

    @property
    def identity(self) -> QueryIdentity:
        return QueryIdentity(self.query_node_id, self.query_id)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": "queryReads",
            "nodeId": str(self.node_id),
            "kind": self.kind.name,
            "queryNodeId": str(self.query_node_id),
            "id": self.query_id,
            "logicalReads": self.logical_reads,
            "physicalReads": self.physical_reads,
        }


@dataclass(frozen=True)
class QueryRowsRecord:
    """Number of rows processed by a query for one action."""

    node_id: Hashable
    kind: QueryKind
    query_node_id: Hashable
    query_id: int
    action: str
    rows: int

    @property
    def identity(self) -> QueryIdentity:
        return QueryIdentity(self.query_node_id, self.query_id)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": "queryRows",
            "nodeId": str(self.node_id),
            "kind": self.kind.name,
            "queryNodeId": str(self.query_node_id),
            "id": self.query_id,
            "action": self.action,
            "rows": self.rows,
        }


@dataclass(frozen=True)
class QueryPropertyRecord:
    """A free-form name/value property attached to a query."""

    node_id: Hashable
    kind: QueryKind
    query_node_id: Hashable
    query_id: int
    name: str
    value: str

    @property
    def identity(self) -> QueryIdentity:
        return QueryIdentity(self.query_node_id, self.query_id)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": "queryProperty",
            "nodeId": str(self.node_id),
            "kind": self.kind.name,
            "queryNodeId": str(self.query_node_id),
            "id": self.query_id,
            "name": self.name,
            "value": self.value,
        }


QueryEvent = Union[QueryRecord, QueryReadsRecord, QueryRowsRecord, QueryPropertyRecord]


# ---------------------------------------------------------------------------
# Decoding helpers


def _require(entry: Mapping[str, Any], key: str) -> Any:
    try:
        value = entry[key]
    except KeyError:
        raise EventDecodeError(f"Missing field {key!r}") from None
    if value is None:
        raise EventDecodeError(f"Field {key!r} is null")
    return value


def _as_int(entry: Mapping[str, Any], key: str) -> int:
    value = _require(entry, key)
    if isinstance(value, bool):
        raise EventDecodeError(f"Field {key!r} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise EventDecodeError(f"Field {key!r} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise EventDecodeError(f"Field {key!r} must be an integer, got {value!r}") from None


def _as_bool(entry: Mapping[str, Any], key: str) -> bool:
    value = _require(entry, key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes"}:
            return True
        if normalized in {"false", "0", "no"}:
            return False
    if isinstance(value, int):
        return bool(value)
    raise EventDecodeError(f"Field {key!r} must be a boolean, got {value!r}")


def _as_str(entry: Mapping[str, Any], key: str) -> str:
    return str(_require(entry, key))


def _decode_query(entry: Mapping[str, Any]) -> QueryRecord:
    return QueryRecord(
        kind=QueryKind.parse(_require(entry, "kind")),
        text=_as_str(entry, "text"),
        node_id=_as_str(entry, "nodeId"),
        query_id=_as_int(entry, "id"),
        start_time=_as_int(entry, "startTime"),
        duration=_as_int(entry, "duration"),
        success=_as_bool(entry, "success"),
    )


def _decode_reads(entry: Mapping[str, Any]) -> QueryReadsRecord:
    return QueryReadsRecord(
        node_id=_as_str(entry, "nodeId"),
        kind=QueryKind.parse(_require(entry, "kind")),
        query_node_id=_as_str(entry, "queryNodeId"),
        query_id=_as_int(entry, "id"),
        logical_reads=_as_int(entry, "logicalReads"),
        physical_reads=_as_int(entry, "physicalReads"),
    )


def _decode_rows(entry: Mapping[str, Any]) -> QueryRowsRecord:
    return QueryRowsRecord(
        node_id=_as_str(entry, "nodeId"),
        kind=QueryKind.parse(_require(entry, "kind")),
        query_node_id=_as_str(entry, "queryNodeId"),
        query_id=_as_int(entry, "id"),
        action=_as_str(entry, "action"),
        rows=_as_int(entry, "rows"),
    )


def _decode_property(entry: Mapping[str, Any]) -> QueryPropertyRecord:
    return QueryPropertyRecord(
        node_id=_as_str(entry, "nodeId"),
        kind=QueryKind.parse(_require(entry, "kind")),
        query_node_id=_as_str(entry, "queryNodeId"),
        query_id=_as_int(entry, "id"),
        name=_as_str(entry, "name"),
        value=_as_str(entry, "value"),
    )


_DECODERS = {
    "query": _decode_query,
    "queryReads": _decode_reads,
    "queryRows": _decode_rows,
    "queryProperty": _decode_property,
}


def decode_event(entry: Union[Mapping[str, Any], QueryEvent]) -> QueryEvent:
    """Turn a decoded log entry into a typed record.

    Typed records are passed through unchanged. Raises
    :class:`EventDecodeError` for unknown types and malformed fields.
    """

    if isinstance(entry, (QueryRecord, QueryReadsRecord, QueryRowsRecord, QueryPropertyRecord)):
        return entry
    if not isinstance(entry, Mapping):
        raise EventDecodeError(f"Unsupported event payload: {type(entry).__name__}")
    event_type = entry.get("type")
    decoder = _DECODERS.get(event_type) if isinstance(event_type, str) else None
    if decoder is None:
        raise EventDecodeError(f"Unknown event type: {event_type!r}")
    return decoder(entry)
