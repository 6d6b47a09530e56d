"""
Graph Schema Models.

Defines the node label, node/relationship views, and the attribute naming
convention shared by query files and the graph loader.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ATTRIBUTE_PREFIX = "name"


class NodeLabel(str, Enum):
    """Node labels in the benchmark graph."""

    NODE = "Node"


def attribute_key(index: int) -> str:
    """Map an attribute index to its property key (``3`` -> ``"name3"``)."""
    return f"{ATTRIBUTE_PREFIX}{index}"


@dataclass(frozen=True)
class GraphNode:
    """A node read from the store. Identity is the integer node id."""

    id: int
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass(frozen=True)
class GraphRelationship:
    """A directed relationship between two nodes."""

    start: GraphNode
    end: GraphNode
    type: str = ""

    def other_node(self, node: GraphNode) -> GraphNode:
        """Return the endpoint that is not ``node``."""
        return self.end if node == self.start else self.start
