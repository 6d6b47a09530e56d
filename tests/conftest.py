"""
Pytest Configuration and Shared Fixtures.

Provides an in-memory graph store implementing the store contract, plus
query file helpers.
"""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from neighborbench.config.settings import Settings, get_settings
from neighborbench.graph.schema import GraphNode, GraphRelationship
from neighborbench.graph.store import GraphStore, GraphTransaction, NodeNotFoundError


# =============================================================================
# In-Memory Graph Store
# =============================================================================


class InMemoryTransaction(GraphTransaction):
    """Transaction over an InMemoryGraphStore that counts node lookups."""

    def __init__(self, store: "InMemoryGraphStore"):
        self._store = store
        self.node_lookups = 0
        self.committed = False
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise RuntimeError("transaction is closed")

    def get_node(self, node_id: int) -> GraphNode:
        self._check_open()
        self.node_lookups += 1
        try:
            return self._store.nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def outgoing_relationships(self, node: GraphNode) -> Iterator[GraphRelationship]:
        self._check_open()
        for target in self._store.edges.get(node.id, []):
            yield GraphRelationship(node, self._store.nodes[target], "LINK")

    def find_nodes(self, label: str, key: str, value: str) -> Iterator[GraphNode]:
        self._check_open()
        self._store.index_lookups.append((label, key, value))
        for node in self._store.nodes.values():
            if node.get(key) == value:
                yield node

    def commit(self) -> None:
        self._check_open()
        if self._store.fail_commit_at is not None and len(self._store.committed) == self._store.fail_commit_at:
            raise RuntimeError("commit failed")
        self.committed = True
        self._store.committed.append(self)

    def close(self) -> None:
        self.closed = True


class InMemoryGraphStore(GraphStore):
    """Graph store fake with transaction bookkeeping."""

    database = "memory"

    def __init__(self) -> None:
        self.nodes: dict[int, GraphNode] = {}
        self.edges: dict[int, list[int]] = {}
        self.transactions: list[InMemoryTransaction] = []
        self.committed: list[InMemoryTransaction] = []
        self.index_lookups: list[tuple[str, str, str]] = []
        self.fail_commit_at: int | None = None
        self.is_open = False
        self.index_waits: list[float | None] = []

    def add_node(self, node_id: int, **properties: Any) -> GraphNode:
        node = GraphNode(node_id, properties)
        self.nodes[node_id] = node
        return node

    def add_edge(self, source: int, target: int) -> None:
        self.edges.setdefault(source, []).append(target)

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def begin_transaction(self) -> InMemoryTransaction:
        tx = InMemoryTransaction(self)
        self.transactions.append(tx)
        return tx

    def await_indexes(self, timeout_seconds: float | None = None) -> None:
        self.index_waits.append(timeout_seconds)

    def ensure_attribute_indexes(self, label: str, attribute_count: int) -> list[str]:
        return [f"{label.lower()}_name{k}" for k in range(attribute_count)]


# =============================================================================
# Graph Fixtures
# =============================================================================


@pytest.fixture
def memory_store() -> InMemoryGraphStore:
    """An empty in-memory graph store."""
    return InMemoryGraphStore()


@pytest.fixture
def small_graph(memory_store: InMemoryGraphStore) -> InMemoryGraphStore:
    """
    Node 0 points at 1 (name0="x") and 2 (name0="y").

    Node 3 points at 1 twice, at 4 (name0="x", name1="z") and at 0.
    Node 5 has name0="x" but is not a neighbor of anything.
    """
    memory_store.add_node(0, name0="w")
    memory_store.add_node(1, name0="x", name1="q")
    memory_store.add_node(2, name0="y", name1="q")
    memory_store.add_node(3, name0="w")
    memory_store.add_node(4, name0="x", name1="z")
    memory_store.add_node(5, name0="x")
    memory_store.add_edge(0, 1)
    memory_store.add_edge(0, 2)
    memory_store.add_edge(3, 1)
    memory_store.add_edge(3, 1)
    memory_store.add_edge(3, 4)
    memory_store.add_edge(3, 0)
    return memory_store


# =============================================================================
# Query File Fixtures
# =============================================================================


@pytest.fixture
def write_queries(tmp_path: Path) -> Callable[[str, list[str]], Path]:
    """Write query lines to a file under tmp_path and return its path."""

    def _write(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Iterator[Settings]:
    """Provide settings with small phase counts."""
    with patch.dict(
        "os.environ",
        {
            "NEO4J_URI": "bolt://localhost:7687",
            "NEO4J_USERNAME": "neo4j",
            "NEO4J_PASSWORD": "password123",
            "BENCH_WARMUP_N": "4",
            "BENCH_MEASURE_N": "6",
            "BENCH_COOLDOWN_N": "2",
        },
    ):
        get_settings.cache_clear()
        yield get_settings()
    get_settings.cache_clear()
