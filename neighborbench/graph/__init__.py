"""
Graph Store Module.

Store contract consumed by the benchmark and its Neo4j implementation.
"""

from neighborbench.graph.neo4j_client import Neo4jGraphStore, Neo4jTransaction
from neighborbench.graph.schema import (
    GraphNode,
    GraphRelationship,
    NodeLabel,
    attribute_key,
)
from neighborbench.graph.store import (
    GraphStore,
    GraphStoreError,
    GraphTransaction,
    NodeNotFoundError,
)

__all__ = [
    # Schema
    "NodeLabel",
    "GraphNode",
    "GraphRelationship",
    "attribute_key",
    # Contract
    "GraphStore",
    "GraphTransaction",
    "GraphStoreError",
    "NodeNotFoundError",
    # Neo4j
    "Neo4jGraphStore",
    "Neo4jTransaction",
]
