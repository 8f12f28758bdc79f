"""Tests for identity-keyed correlation of reads, rows and properties."""

import itertools

from perfstats.aggregation import IdentityCorrelator
from perfstats.ingest import QueryIdentity, QueryKind

SQL = QueryKind.SQL_FIELDS
SCAN = QueryKind.SCAN


class TestReads:
    def test_absent_reads_are_none(self):
        correlator = IdentityCorrelator()

        assert correlator.lookup_reads(SQL, QueryIdentity("n1", 1)) is None

    def test_partial_reads_are_summed_in_any_order(self):
        contributions = [(10, 2), (5, 0), (1, 1), (0, 9)]
        for order in itertools.permutations(contributions):
            correlator = IdentityCorrelator()
            for logical, physical in order:
                correlator.record_reads(SQL, QueryIdentity("n1", 7), logical, physical)

            assert correlator.lookup_reads(SQL, QueryIdentity("n1", 7)) == (16, 12)

    def test_reads_are_scoped_by_kind(self):
        correlator = IdentityCorrelator()
        correlator.record_reads(SQL, QueryIdentity("n1", 7), 10, 2)

        assert correlator.lookup_reads(SCAN, QueryIdentity("n1", 7)) is None

    def test_reads_are_scoped_by_origin_node(self):
        correlator = IdentityCorrelator()
        correlator.record_reads(SQL, QueryIdentity("n1", 7), 10, 2)

        assert correlator.lookup_reads(SQL, QueryIdentity("n2", 7)) is None


class TestRows:
    def test_rows_sum_per_action(self):
        correlator = IdentityCorrelator()
        identity = QueryIdentity("n1", 3)
        for action, rows in (("UPDATE", 3), ("FETCHED", 10), ("UPDATE", 4)):
            correlator.record_rows(identity, action, rows)

        assert correlator.lookup_rows(identity) == {"UPDATE": 7, "FETCHED": 10}

    def test_lookup_returns_a_copy(self):
        correlator = IdentityCorrelator()
        identity = QueryIdentity("n1", 3)
        correlator.record_rows(identity, "UPDATE", 3)

        correlator.lookup_rows(identity)["UPDATE"] = 100

        assert correlator.lookup_rows(identity) == {"UPDATE": 3}

    def test_rows_ignore_kind_by_default(self):
        correlator = IdentityCorrelator()
        identity = QueryIdentity("n1", 3)
        correlator.record_rows(identity, "UPDATE", 3, SCAN)

        assert correlator.lookup_rows(identity, SQL) == {"UPDATE": 3}

    def test_rows_can_be_scoped_by_kind(self):
        correlator = IdentityCorrelator(scope_rows_by_kind=True)
        identity = QueryIdentity("n1", 3)
        correlator.record_rows(identity, "UPDATE", 3, SCAN)

        assert correlator.lookup_rows(identity, SQL) is None
        assert correlator.lookup_rows(identity, SCAN) == {"UPDATE": 3}


class TestProperties:
    def test_occurrences_count_exact_pairs(self):
        correlator = IdentityCorrelator()
        identity = QueryIdentity("n1", 3)
        for name, value in (("lazy", "true"), ("lazy", "true"), ("lazy", "false"), ("schema", "PUBLIC")):
            correlator.record_property(identity, name, value)

        props = correlator.lookup_properties(identity)

        assert {key: prop.count for key, prop in props.items()} == {
            ("lazy", "true"): 2,
            ("lazy", "false"): 1,
            ("schema", "PUBLIC"): 1,
        }

    def test_absent_properties_are_none(self):
        correlator = IdentityCorrelator()

        assert correlator.lookup_properties(QueryIdentity("n1", 3)) is None

    def test_lookup_does_not_leak_counters(self):
        correlator = IdentityCorrelator()
        identity = QueryIdentity("n1", 3)
        correlator.record_property(identity, "lazy", "true")

        correlator.lookup_properties(identity)[("lazy", "true")].count = 50

        assert correlator.lookup_properties(identity)[("lazy", "true")].count == 1
