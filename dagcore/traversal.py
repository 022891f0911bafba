"""
DAGSCOPE TRAVERSAL ENGINE - Canonical Orders

Three orders over a graph structure:
- topological_sort: Kahn's algorithm
- bfs_from_roots: breadth-first from roots (or explicit start ids)
- dfs_post_order: depth-first post-order from roots (or explicit start ids)

Each routine reads the structure into a private GraphStore and never
touches the caller's value. Ties are broken by node listing order first,
then by adjacency (edge insertion) order.

topological_sort does not detect cycles. Nodes on or downstream of a cycle
never reach in-degree zero and are silently left out, so callers should
check validate_dag(...).is_acyclic first.
"""
from collections import deque
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from dagcore.graph_store import GraphStore
from dagcore.schemas import StructureLike


def topological_sort(structure: StructureLike) -> List[str]:
    """
    Return node ids in topological order.

    Initial roots are queued in listing order; nodes that become ready later
    are queued in the order their last parent releases them.
    """
    store = GraphStore(structure)
    in_degree: Dict[str, int] = {nid: store.in_degree(nid) for nid in store.node_ids()}

    queue = deque(nid for nid, deg in in_degree.items() if deg == 0)
    result: List[str] = []

    while queue:
        node_id = queue.popleft()
        result.append(node_id)
        for child in store.get_children(node_id):
            in_degree[child] -= 1
            if in_degree[child] == 0:
                queue.append(child)

    return result


def bfs_from_roots(
    structure: StructureLike,
    start_ids: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Breadth-first order from `start_ids`, or from the graph's roots.

    Repeated or overlapping start ids are visited once.
    """
    store = GraphStore(structure)
    start = list(start_ids) if start_ids is not None else store.get_roots()

    visited: Set[str] = set()
    queue = deque(start)
    result: List[str] = []

    while queue:
        node_id = queue.popleft()
        if node_id in visited:
            continue
        visited.add(node_id)
        result.append(node_id)
        for child in store.get_children(node_id):
            if child not in visited:
                queue.append(child)

    return result


def dfs_post_order(
    structure: StructureLike,
    start_ids: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Depth-first post-order from `start_ids`, or from the graph's roots.

    A node is emitted after all of its children. The visited set is shared
    across start nodes, so a node reachable from two starts appears once,
    at its first completion.
    """
    store = GraphStore(structure)
    start = list(start_ids) if start_ids is not None else store.get_roots()

    visited: Set[str] = set()
    result: List[str] = []

    for root in start:
        if root in visited:
            continue
        visited.add(root)
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(store.get_children(root)))]
        while stack:
            node_id, children = stack[-1]
            for child in children:
                if child not in visited:
                    visited.add(child)
                    stack.append((child, iter(store.get_children(child))))
                    break
            else:
                stack.pop()
                result.append(node_id)

    return result
