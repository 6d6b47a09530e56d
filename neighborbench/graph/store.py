"""
Graph Store Contract.

The narrow set of engine operations the benchmark depends on. Any backend
offering these can be benchmarked.
"""

import atexit
from abc import ABC, abstractmethod
from collections.abc import Iterable

import structlog

from neighborbench.graph.schema import GraphNode, GraphRelationship

logger = structlog.get_logger(__name__)


class GraphStoreError(Exception):
    """Raised when the storage engine cannot serve a request."""


class NodeNotFoundError(GraphStoreError):
    """Raised when a node id does not exist in the store."""

    def __init__(self, node_id: int):
        super().__init__(f"Node {node_id} not found")
        self.node_id = node_id


class GraphTransaction(ABC):
    """A unit of work against the store. Uncommitted work is rolled back on close."""

    @abstractmethod
    def get_node(self, node_id: int) -> GraphNode:
        """Fetch a node by id, raising NodeNotFoundError if absent."""

    @abstractmethod
    def outgoing_relationships(self, node: GraphNode) -> Iterable[GraphRelationship]:
        """Enumerate relationships starting at ``node``."""

    @abstractmethod
    def find_nodes(self, label: str, key: str, value: str) -> Iterable[GraphNode]:
        """Look up labelled nodes whose indexed property ``key`` equals ``value``."""

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self) -> "GraphTransaction":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        try:
            if exc_type is None:
                self.commit()
        finally:
            self.close()
        return False


class GraphStore(ABC):
    """A persistent graph store opened by path or database name."""

    @abstractmethod
    def open(self) -> None:
        """Open the store, creating it if necessary."""

    @abstractmethod
    def close(self) -> None:
        """Shut the store down. Safe to call more than once."""

    @abstractmethod
    def begin_transaction(self) -> GraphTransaction:
        pass

    @abstractmethod
    def await_indexes(self, timeout_seconds: float | None = None) -> None:
        """Block until every index is online, waiting at most ``timeout_seconds`` when given."""

    @abstractmethod
    def ensure_attribute_indexes(self, label: str, attribute_count: int) -> list[str]:
        """Create ``name0 .. name{attribute_count - 1}`` indexes on ``label``."""

    def register_shutdown_hook(self) -> None:
        """Close the store at interpreter exit, including fail-fast exits."""
        atexit.register(self.close)
        logger.debug("Shutdown hook registered", store=type(self).__name__)

    def __enter__(self) -> "GraphStore":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
