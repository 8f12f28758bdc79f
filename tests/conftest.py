"""Shared fixtures for the perfstats test suite."""

from __future__ import annotations

import uuid

import pytest

from perfstats.config import Settings
from perfstats.handlers import QueryHandler

MS = 1_000_000  # nanoseconds per millisecond


@pytest.fixture
def node_a() -> uuid.UUID:
    return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def node_b() -> uuid.UUID:
    return uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def make_handler():
    """Build a query handler with per-test setting overrides."""

    def _factory(**overrides) -> QueryHandler:
        return QueryHandler(Settings(**overrides))

    return _factory


@pytest.fixture
def handler(make_handler) -> QueryHandler:
    return make_handler(top_slow_size=30, scope_rows_by_kind=False)


@pytest.fixture
def sample_events():
    """A small stream mixing all four event types, as decoded mappings."""

    node = "11111111-1111-1111-1111-111111111111"
    return [
        {"type": "queryReads", "nodeId": node, "kind": "SQL_FIELDS", "queryNodeId": node,
         "id": 1, "logicalReads": 4, "physicalReads": 1},
        {"type": "query", "nodeId": node, "kind": "SQL_FIELDS", "text": "SELECT * FROM T",
         "id": 1, "startTime": 1000, "duration": 250 * MS, "success": True},
        {"type": "queryRows", "nodeId": node, "kind": "SQL_FIELDS", "queryNodeId": node,
         "id": 1, "action": "FETCHED", "rows": 12},
        {"type": "queryProperty", "nodeId": node, "kind": "SQL_FIELDS", "queryNodeId": node,
         "id": 1, "name": "schema", "value": "PUBLIC"},
        {"type": "query", "nodeId": node, "kind": "SCAN", "text": "cache-a",
         "id": 2, "startTime": 2000, "duration": 40 * MS, "success": False},
        {"type": "queryReads", "nodeId": node, "kind": "SCAN", "queryNodeId": node,
         "id": 2, "logicalReads": 100, "physicalReads": 7},
        {"type": "query", "nodeId": node, "kind": "INDEX", "text": "cache-b",
         "id": 3, "startTime": 3000, "duration": 9 * MS, "success": True},
    ]
