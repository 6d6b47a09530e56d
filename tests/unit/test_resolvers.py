"""
Unit Tests for Neighbor Resolvers.

Tests that the scan and index strategies return the same neighbor sets.
"""

import pytest

from neighborbench.benchmark.resolvers import (
    RESOLVERS,
    IndexedResolver,
    ScanResolver,
    get_resolver,
)
from neighborbench.graph.schema import attribute_key
from neighborbench.graph.store import NodeNotFoundError

STRATEGIES = [ScanResolver(), IndexedResolver()]


class TestAttributeKey:
    """Test cases for the attribute naming convention."""

    @pytest.mark.parametrize("index,key", [(0, "name0"), (7, "name7"), (12, "name12")])
    def test_attribute_key(self, index: int, key: str) -> None:
        """Test that index k maps to property name<k>."""
        assert attribute_key(index) == key


class TestResolvers:
    """Test cases shared by both strategies."""

    @pytest.mark.parametrize("resolver", STRATEGIES, ids=lambda r: r.name)
    def test_end_to_end_example(self, small_graph, resolver) -> None:
        """Test that 0,0,x resolves to {1}."""
        with small_graph.begin_transaction() as tx:
            assert resolver.resolve(tx, 0, 0, "x") == {1}

    @pytest.mark.parametrize("resolver", STRATEGIES, ids=lambda r: r.name)
    def test_duplicate_edges_counted_once(self, small_graph, resolver) -> None:
        """Test that two edges to the same neighbor yield one id."""
        with small_graph.begin_transaction() as tx:
            assert resolver.resolve(tx, 3, 0, "x") == {1, 4}

    @pytest.mark.parametrize("resolver", STRATEGIES, ids=lambda r: r.name)
    def test_no_match_returns_empty(self, small_graph, resolver) -> None:
        """Test that an unmatched predicate returns an empty set rather than failing."""
        with small_graph.begin_transaction() as tx:
            assert resolver.resolve(tx, 0, 0, "nothing") == frozenset()
            assert resolver.resolve(tx, 0, 9, "x") == frozenset()

    @pytest.mark.parametrize("resolver", STRATEGIES, ids=lambda r: r.name)
    def test_node_without_edges(self, small_graph, resolver) -> None:
        """Test that a node with no outgoing edges has no neighbors."""
        with small_graph.begin_transaction() as tx:
            assert resolver.resolve(tx, 5, 0, "x") == frozenset()

    @pytest.mark.parametrize("resolver", STRATEGIES, ids=lambda r: r.name)
    def test_exact_string_equality(self, small_graph, resolver) -> None:
        """Test that matching is exact, not prefix or case-insensitive."""
        with small_graph.begin_transaction() as tx:
            assert resolver.resolve(tx, 0, 0, "X") == frozenset()
            assert resolver.resolve(tx, 0, 0, "x ") == frozenset()

    @pytest.mark.parametrize("resolver", STRATEGIES, ids=lambda r: r.name)
    def test_missing_node_raises(self, small_graph, resolver) -> None:
        """Test that an unknown start node is an engine error."""
        with small_graph.begin_transaction() as tx:
            with pytest.raises(NodeNotFoundError):
                resolver.resolve(tx, 99, 0, "x")

    def test_strategies_agree(self, small_graph) -> None:
        """Test that scan and index return identical sets for every query on the graph."""
        scan, indexed = ScanResolver(), IndexedResolver()
        values = {"w", "x", "y", "z", "q", "missing"}

        with small_graph.begin_transaction() as tx:
            for node_id in small_graph.nodes:
                for attribute in (0, 1, 2):
                    for value in values:
                        assert scan.resolve(tx, node_id, attribute, value) == indexed.resolve(
                            tx, node_id, attribute, value
                        ), (node_id, attribute, value)

    def test_indexed_uses_label_and_key(self, small_graph) -> None:
        """Test that the index lookup goes through the configured label and name<k> key."""
        resolver = IndexedResolver(label="Person")
        with small_graph.begin_transaction() as tx:
            resolver.resolve(tx, 3, 1, "z")

        assert small_graph.index_lookups == [("Person", "name1", "z")]

    def test_scan_does_not_use_index(self, small_graph) -> None:
        """Test that the scan strategy never queries the attribute index."""
        with small_graph.begin_transaction() as tx:
            ScanResolver().resolve(tx, 0, 0, "x")

        assert small_graph.index_lookups == []


class TestGetResolver:
    """Test cases for mode selection."""

    def test_latency_mode_is_scan(self) -> None:
        assert isinstance(get_resolver("latency"), ScanResolver)

    def test_latency_index_mode(self) -> None:
        resolver = get_resolver("latency-index", label="Node")
        assert isinstance(resolver, IndexedResolver)
        assert resolver.label == "Node"

    def test_unknown_mode(self) -> None:
        """Test that unsupported modes return None."""
        assert get_resolver("throughput") is None

    def test_supported_modes(self) -> None:
        assert set(RESOLVERS) == {"latency", "latency-index"}
