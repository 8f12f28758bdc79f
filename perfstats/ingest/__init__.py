"""Typed query telemetry events consumed by the statistics handlers."""

from .events import (
    EventDecodeError,
    QueryIdentity,
    QueryKind,
    QueryPropertyRecord,
    QueryReadsRecord,
    QueryRecord,
    QueryRowsRecord,
    decode_event,
)

__all__ = [
    "EventDecodeError",
    "QueryIdentity",
    "QueryKind",
    "QueryPropertyRecord",
    "QueryReadsRecord",
    "QueryRecord",
    "QueryRowsRecord",
    "decode_event",
]
