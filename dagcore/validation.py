"""
DAGSCOPE STRUCTURAL VALIDATOR - Is This Really a DAG?

Checks a graph structure for the three anomalies an editor cares about,
and reports them as data instead of raising:

1. Missing references: an edge endpoint that names no node
2. Cycles: at least one closed walk per cyclic DFS tree
3. Orphans: nodes that take part in no edge

is_valid = no missing references and no cycles
is_acyclic = no cycles (a graph can be acyclic yet invalid)

Cycle detection walks nodes in listing order and children in adjacency
order, so for a given structure the reported cycle is deterministic. It is
not an enumeration of all cycles: each DFS tree stops at its first cycle.
"""
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

import rustworkx as rx

from dagcore.graph_store import GraphStore
from dagcore.schemas import (
    MissingReference,
    StructureLike,
    ValidationResult,
    as_structure,
)

logger = logging.getLogger(__name__)


# =============================================================================
# INDIVIDUAL CHECKS
# =============================================================================

def find_missing_references(structure: StructureLike) -> List[MissingReference]:
    """
    Report every edge endpoint that does not name a node.

    "from" is checked before "to"; an edge with both endpoints unknown
    produces two entries.
    """
    structure = as_structure(structure)
    node_ids = set(structure.node_ids())

    missing: List[MissingReference] = []
    for edge in structure.edges:
        if edge.source not in node_ids:
            missing.append(MissingReference(edge=edge, missing="from"))
        if edge.target not in node_ids:
            missing.append(MissingReference(edge=edge, missing="to"))
    return missing


def _first_cycle_from(
    store: GraphStore,
    start: str,
    visited: Set[str],
) -> Optional[List[str]]:
    """
    Depth-first search from `start`, stopping at the first back edge.

    `path_index` doubles as the recursion stack: it holds exactly the nodes
    on the current path, with their position in `path`.
    """
    path: List[str] = []
    path_index: Dict[str, int] = {}
    stack: List[Tuple[str, Any]] = []

    def enter(node_id: str) -> None:
        visited.add(node_id)
        path_index[node_id] = len(path)
        path.append(node_id)
        stack.append((node_id, iter(store.get_children(node_id))))

    enter(start)
    while stack:
        node_id, children = stack[-1]
        for child in children:
            if child not in visited:
                enter(child)
                break
            if child in path_index:
                return path[path_index[child]:] + [child]
        else:
            stack.pop()
            path.pop()
            del path_index[node_id]

    return None


def find_cycles(structure: StructureLike) -> List[List[str]]:
    """
    Find cycles by depth-first search.

    Each cycle is a closed walk: [start, ..., start]. A self-loop on "a"
    is reported as ["a", "a"].

    Returns:
        At least one cycle if the graph is cyclic, otherwise []
    """
    store = GraphStore(structure)
    visited: Set[str] = set()
    cycles: List[List[str]] = []

    for node_id in store.node_ids():
        if node_id in visited:
            continue
        cycle = _first_cycle_from(store, node_id, visited)
        if cycle is not None:
            logger.debug(f"Cycle found: {' -> '.join(cycle)}")
            cycles.append(cycle)

    return cycles


def find_orphan_nodes(structure: StructureLike) -> List[str]:
    """Ids of nodes that appear in no edge, in listing order."""
    structure = as_structure(structure)

    endpoints: Set[str] = set()
    for edge in structure.edges:
        endpoints.add(edge.source)
        endpoints.add(edge.target)

    return [node.id for node in structure.nodes if node.id not in endpoints]


# =============================================================================
# FULL VALIDATION
# =============================================================================

def validate_dag(structure: StructureLike) -> ValidationResult:
    """
    Run all structural checks.

    Empty result lists are reported as None.

    Example:
        result = validate_dag({"nodes": [{"id": "a"}], "edges": []})
        result.is_valid       # True
        result.orphan_nodes   # ["a"]
    """
    structure = as_structure(structure)

    missing = find_missing_references(structure)
    cycles = find_cycles(structure)
    orphans = find_orphan_nodes(structure)

    result = ValidationResult(
        is_valid=not missing and not cycles,
        is_acyclic=not cycles,
        cycles=cycles or None,
        orphan_nodes=orphans or None,
        missing_references=missing or None,
    )
    logger.debug(
        f"Validated {len(structure.nodes)} nodes / {len(structure.edges)} edges: "
        f"valid={result.is_valid} cycles={len(cycles)} "
        f"orphans={len(orphans)} missing={len(missing)}"
    )
    return result


def graph_metrics(structure: StructureLike) -> Dict[str, Any]:
    """
    Basic graph metrics computed with rustworkx.

    Dangling edges are not counted (the store drops them).

    Returns:
        Dict with node_count, edge_count, is_dag, weakly_connected_components
        and cyclomatic_complexity (|E| - |V| + components)
    """
    graph, _ = GraphStore(structure).to_rustworkx()

    num_nodes = graph.num_nodes()
    num_edges = graph.num_edges()
    components = rx.number_weakly_connected_components(graph) if num_nodes else 0

    return {
        "node_count": num_nodes,
        "edge_count": num_edges,
        "is_dag": rx.is_directed_acyclic_graph(graph),
        "weakly_connected_components": components,
        "cyclomatic_complexity": num_edges - num_nodes + components,
    }
