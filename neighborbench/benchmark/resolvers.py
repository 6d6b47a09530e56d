"""
Neighbor Resolvers.

Two ways of answering "which out-neighbors of node N have name<k> == value":

- ScanResolver reads the attribute off every out-neighbor
- IndexedResolver intersects an attribute index lookup with the out-neighbor set

Both return the same set of neighbor ids for the same graph.
"""

from abc import ABC, abstractmethod

from neighborbench.graph.schema import NodeLabel, attribute_key
from neighborbench.graph.store import GraphTransaction

NeighborSet = frozenset[int]


class NeighborResolver(ABC):
    """Resolves one neighbor-node query inside an open transaction."""

    name: str = "resolver"

    @abstractmethod
    def resolve(
        self,
        tx: GraphTransaction,
        node_id: int,
        attribute_index: int,
        search_value: str,
    ) -> NeighborSet:
        """
        Find out-neighbors of ``node_id`` whose attribute matches.

        Returns:
            Distinct neighbor ids; empty when nothing matches
        """


class ScanResolver(NeighborResolver):
    """Full adjacency scan with a property comparison per neighbor."""

    name = "scan"

    def resolve(
        self,
        tx: GraphTransaction,
        node_id: int,
        attribute_index: int,
        search_value: str,
    ) -> NeighborSet:
        node = tx.get_node(node_id)
        key = attribute_key(attribute_index)
        result = set()
        for rel in tx.outgoing_relationships(node):
            neighbor = rel.other_node(node)
            if neighbor.get(key) == search_value:
                result.add(neighbor.id)
        return frozenset(result)


class IndexedResolver(NeighborResolver):
    """Attribute index lookup intersected with the adjacency set."""

    name = "index"

    def __init__(self, label: str = NodeLabel.NODE.value):
        self.label = label

    def resolve(
        self,
        tx: GraphTransaction,
        node_id: int,
        attribute_index: int,
        search_value: str,
    ) -> NeighborSet:
        node = tx.get_node(node_id)
        neighbors = {rel.other_node(node).id for rel in tx.outgoing_relationships(node)}
        matches = tx.find_nodes(self.label, attribute_key(attribute_index), search_value)
        return frozenset(match.id for match in matches if match.id in neighbors)


# Command-line mode -> strategy
RESOLVERS: dict[str, type[NeighborResolver]] = {
    "latency": ScanResolver,
    "latency-index": IndexedResolver,
}


def get_resolver(mode: str, label: str = NodeLabel.NODE.value) -> NeighborResolver | None:
    """Build the resolver for a mode, or None if the mode is not supported."""
    resolver_cls = RESOLVERS.get(mode)
    if resolver_cls is None:
        return None
    if resolver_cls is IndexedResolver:
        return IndexedResolver(label)
    return resolver_cls()
