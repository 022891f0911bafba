"""
DAGSCOPE GRAPH STORE - The Adjacency Index

A mutable container of nodes plus forward and backward edge sets. Every
other component reads a DAGStructure into one of these before doing any
work, so the store is the single place adjacency is defined.

Architecture:
- _nodes: Dict[str, DAGNode]               (id -> node, insertion ordered)
- _outgoing: Dict[str, Dict[str, None]]    (id -> children)
- _incoming: Dict[str, Dict[str, None]]    (id -> parents)

The adjacency "sets" are dicts with None values so iteration follows edge
insertion order. Traversal tie-breaks and cycle reporting depend on that
order, and it keeps results stable across interpreter runs.

Invariant: _nodes, _outgoing and _incoming always have the same key set,
and b in _outgoing[a] iff a in _incoming[b]. Only the methods below mutate
the maps; the raw dicts are never handed out.

Policy:
- add_edge with an unregistered endpoint is a silent no-op
- No operation raises for graph content
"""
import logging
from typing import Dict, Iterator, List, Optional, Tuple

import rustworkx as rx

from dagcore.schemas import (
    DAGEdge,
    DAGNode,
    DAGStructure,
    GraphError,
    StructureLike,
    as_structure,
)

logger = logging.getLogger(__name__)

__all__ = ["GraphStore", "GraphError"]


class GraphStore:
    """
    In-memory directed graph keyed by node identifier.

    Usage:
        store = GraphStore(structure)
        store.get_children("a")   # ["b", "c"]
        store.get_roots()         # ["a"]
        store.to_structure()      # DAGStructure(...)

    Thread Safety:
        NOT thread-safe. Each dagcore call builds its own store.
    """

    def __init__(self, structure: Optional[StructureLike] = None):
        self._nodes: Dict[str, DAGNode] = {}
        self._outgoing: Dict[str, Dict[str, None]] = {}
        self._incoming: Dict[str, Dict[str, None]] = {}

        if structure is not None:
            self.load(structure)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def node_count(self) -> int:
        """Number of nodes in the store."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of (deduplicated) edges in the store."""
        return sum(len(children) for children in self._outgoing.values())

    @property
    def is_empty(self) -> bool:
        """True if the store has no nodes."""
        return not self._nodes

    # =========================================================================
    # NODE OPERATIONS
    # =========================================================================

    def add_node(self, node: DAGNode) -> None:
        """
        Insert or replace a node.

        Re-adding an existing id replaces its payload (last write wins) and
        keeps its edges and its original insertion position.
        """
        self._nodes[node.id] = node
        if node.id not in self._outgoing:
            self._outgoing[node.id] = {}
        if node.id not in self._incoming:
            self._incoming[node.id] = {}

    def remove_node(self, node_id: str) -> None:
        """
        Remove a node and every edge touching it.

        Unknown ids are ignored.
        """
        if node_id not in self._nodes:
            return

        for child in self._outgoing.pop(node_id):
            self._incoming[child].pop(node_id, None)
        for parent in self._incoming.pop(node_id):
            self._outgoing[parent].pop(node_id, None)
        del self._nodes[node_id]

    def get_node(self, node_id: str) -> Optional[DAGNode]:
        """Return the node with this id, or None."""
        return self._nodes.get(node_id)

    def get_nodes(self) -> List[DAGNode]:
        """All nodes in insertion order."""
        return list(self._nodes.values())

    def node_ids(self) -> List[str]:
        """All node ids in insertion order."""
        return list(self._nodes)

    def has_node(self, node_id: str) -> bool:
        """Check if a node exists."""
        return node_id in self._nodes

    # =========================================================================
    # EDGE OPERATIONS
    # =========================================================================

    def add_edge(self, source: str, target: str) -> None:
        """
        Add the edge source -> target.

        Both endpoints must already be registered; otherwise nothing happens.
        Adding an existing edge is a no-op.
        """
        if source not in self._nodes or target not in self._nodes:
            logger.debug(f"Dropping edge {source} -> {target}: unregistered endpoint")
            return

        self._outgoing[source][target] = None
        self._incoming[target][source] = None

    def remove_edge(self, source: str, target: str) -> None:
        """Remove the edge source -> target if present."""
        if source in self._outgoing:
            self._outgoing[source].pop(target, None)
        if target in self._incoming:
            self._incoming[target].pop(source, None)

    def has_edge(self, source: str, target: str) -> bool:
        """Check if an edge exists."""
        return target in self._outgoing.get(source, ())

    def iter_edges(self) -> Iterator[Tuple[str, str]]:
        """Iterate (source, target) pairs grouped by source."""
        for source, children in self._outgoing.items():
            for target in children:
                yield source, target

    # =========================================================================
    # ADJACENCY QUERIES
    # =========================================================================

    def get_children(self, node_id: str) -> List[str]:
        """Direct successors, in edge insertion order. Empty for unknown ids."""
        return list(self._outgoing.get(node_id, ()))

    def get_parents(self, node_id: str) -> List[str]:
        """Direct predecessors, in edge insertion order. Empty for unknown ids."""
        return list(self._incoming.get(node_id, ()))

    def out_degree(self, node_id: str) -> int:
        return len(self._outgoing.get(node_id, ()))

    def in_degree(self, node_id: str) -> int:
        return len(self._incoming.get(node_id, ()))

    def get_roots(self) -> List[str]:
        """Ids of nodes with no incoming edges."""
        return [nid for nid in self._nodes if not self._incoming[nid]]

    def get_leaves(self) -> List[str]:
        """Ids of nodes with no outgoing edges."""
        return [nid for nid in self._nodes if not self._outgoing[nid]]

    # =========================================================================
    # BULK OPERATIONS
    # =========================================================================

    def load(self, structure: StructureLike) -> None:
        """
        Replace the contents with a structure.

        Nodes are added before edges, so edge order in the structure does not
        matter. Edges naming unknown nodes are dropped.
        """
        structure = as_structure(structure)
        self.clear()
        for node in structure.nodes:
            self.add_node(node)
        for edge in structure.edges:
            self.add_edge(edge.source, edge.target)

    def to_structure(self) -> DAGStructure:
        """Export nodes in insertion order and edges grouped by source."""
        return DAGStructure(
            nodes=self.get_nodes(),
            edges=[DAGEdge(source, target) for source, target in self.iter_edges()],
        )

    def clear(self) -> None:
        """Remove all nodes and edges."""
        self._nodes.clear()
        self._outgoing.clear()
        self._incoming.clear()

    def to_rustworkx(self) -> Tuple[rx.PyDiGraph, Dict[str, int]]:
        """
        Copy the store into a rustworkx PyDiGraph.

        Node weights are the DAGNode objects; edge weights are None.

        Returns:
            (graph, id -> rustworkx index)
        """
        graph = rx.PyDiGraph(multigraph=False)
        indices = graph.add_nodes_from(list(self._nodes.values()))
        index_map = dict(zip(self._nodes, indices))
        graph.add_edges_from_no_data(
            [(index_map[s], index_map[t]) for s, t in self.iter_edges()]
        )
        return graph, index_map

    # =========================================================================
    # DUNDER METHODS
    # =========================================================================

    def __len__(self) -> int:
        return self.node_count

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __repr__(self) -> str:
        return f"GraphStore(nodes={self.node_count}, edges={self.edge_count})"
