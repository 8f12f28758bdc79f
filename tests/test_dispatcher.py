"""Tests for replaying decoded events into handlers."""

from perfstats.handlers import PerformanceStatisticsHandler, QueryHandler, SynchronizedHandler
from perfstats.ingest import QueryKind
from perfstats.ingest.dispatcher import replay_concurrently, replay_events


class RecordingHandler(PerformanceStatisticsHandler):
    def __init__(self):
        self.calls = []

    def query(self, node_id, kind, text, query_id, start_time, duration, success):
        self.calls.append(("query", kind, query_id))

    def query_reads(self, node_id, kind, query_node_id, query_id, logical_reads, physical_reads):
        self.calls.append(("reads", kind, query_id))


class TestReplayEvents:
    def test_counts_every_event_type(self, handler, sample_events):
        summary = replay_events(sample_events, [handler])

        assert summary.as_dict()["delivered"] == 7
        assert (summary.queries, summary.reads, summary.rows, summary.properties) == (3, 2, 1, 1)
        assert summary.skipped == 0

    def test_report_from_replay(self, handler, sample_events):
        replay_events(sample_events, [handler])

        results = handler.results()

        assert results["sql"]["SELECT * FROM T"] == {
            "count": 1,
            "duration": 250,
            "logicalReads": 4,
            "physicalReads": 1,
            "failures": 0,
            "properties": {"schema": {"value": "PUBLIC", "count": 1}},
            "rows": {"FETCHED": 12},
        }
        assert results["scan"]["cache-a"]["failures"] == 1
        assert results["scan"]["cache-a"]["logicalReads"] == 100
        assert results["index"]["cache-b"]["duration"] == 9

    def test_delivery_order_is_preserved(self, sample_events):
        recorder = RecordingHandler()

        replay_events(sample_events, [recorder])

        assert recorder.calls == [
            ("reads", QueryKind.SQL_FIELDS, 1),
            ("query", QueryKind.SQL_FIELDS, 1),
            ("query", QueryKind.SCAN, 2),
            ("reads", QueryKind.SCAN, 2),
            ("query", QueryKind.INDEX, 3),
        ]

    def test_malformed_events_are_skipped(self, handler, sample_events):
        events = [{"type": "bogus"}] + sample_events + [{"type": "query", "nodeId": "n"}]

        summary = replay_events(events, [handler])

        assert summary.skipped == 2
        assert summary.delivered == 7
        assert len(summary.errors) == 2
        assert summary.errors[0].startswith("event 1:")

    def test_every_handler_sees_every_event(self, handler, sample_events):
        recorder = RecordingHandler()

        replay_events(sample_events, [handler, recorder])

        assert len(recorder.calls) == 5
        assert len(handler.table) == 3


class TestReplayConcurrently:
    def test_sharded_replay_matches_sequential(self, make_handler):
        node = "n1"
        shards = []
        for kind in ("SQL_FIELDS", "SCAN", "INDEX"):
            shard = []
            for query_id in range(200):
                shard.append({"type": "query", "nodeId": node, "kind": kind, "text": f"{kind}-{query_id % 7}",
                              "id": query_id, "startTime": query_id, "duration": query_id * 1000,
                              "success": query_id % 5 != 0})
                shard.append({"type": "queryReads", "nodeId": node, "kind": kind, "queryNodeId": node,
                              "id": query_id, "logicalReads": 2, "physicalReads": 1})
            shards.append(shard)

        sequential = make_handler(top_slow_size=5)
        replay_events([event for shard in shards for event in shard], [sequential])

        concurrent = make_handler(top_slow_size=5)
        summary = replay_concurrently(shards, [concurrent], max_workers=3)

        assert summary.delivered == 1200
        assert concurrent.results() == sequential.results()

    def test_synchronized_handler_delegates(self, handler):
        wrapped = SynchronizedHandler(handler)

        wrapped.query("n1", QueryKind.SQL_FIELDS, "q", 1, 0, 2_000_000, True)
        wrapped.query_reads("n1", QueryKind.SQL_FIELDS, "n1", 1, 3, 1)
        wrapped.query_rows("n1", QueryKind.SQL_FIELDS, "n1", 1, "UPDATE", 2)
        wrapped.query_property("n1", QueryKind.SQL_FIELDS, "n1", 1, "lazy", "true")

        assert wrapped.results() == handler.results()
        assert wrapped.results()["sql"]["q"]["rows"] == {"UPDATE": 2}

    def test_base_handler_is_a_no_op(self):
        base = PerformanceStatisticsHandler()

        base.query("n1", QueryKind.SCAN, "c", 1, 0, 1, True)

        assert base.results() == {}
        assert isinstance(QueryHandler(), PerformanceStatisticsHandler)
