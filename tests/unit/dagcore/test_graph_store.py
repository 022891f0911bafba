"""
Unit tests for dagcore/graph_store.py - GraphStore

Tests the adjacency container including:
- Node upsert and removal
- Edge insertion policy (unregistered endpoints are dropped)
- Adjacency queries (children, parents, roots, leaves)
- load / to_structure / clear
- rustworkx export
"""
import pytest

from dagcore.graph_store import GraphStore
from dagcore.schemas import DAGEdge, DAGNode, DAGStructure


def _edge_set(structure):
    return {(e.source, e.target) for e in structure.edges}


# =============================================================================
# NODE OPERATIONS TESTS
# =============================================================================

def test_add_node_creates_node(fresh_store):
    """
    Validate that add_node registers a node with empty adjacency.

    Verifies:
    - Node count increases by 1
    - Node can be retrieved by ID
    - New node is both a root and a leaf
    """
    fresh_store.add_node(DAGNode("a", data="A"))

    assert fresh_store.node_count == 1
    assert fresh_store.has_node("a")
    assert "a" in fresh_store
    assert fresh_store.get_node("a").data == "A"
    assert fresh_store.get_roots() == ["a"]
    assert fresh_store.get_leaves() == ["a"]


def test_add_node_same_id_replaces_payload(fresh_store):
    """
    Validate that re-adding an id is an upsert (last write wins).

    Verifies:
    - Payload is replaced
    - Existing edges survive the replacement
    - Insertion position is unchanged
    """
    fresh_store.add_node(DAGNode("a", data=1))
    fresh_store.add_node(DAGNode("b"))
    fresh_store.add_edge("a", "b")

    fresh_store.add_node(DAGNode("a", data=2))

    assert fresh_store.node_count == 2
    assert fresh_store.get_node("a").data == 2
    assert fresh_store.get_children("a") == ["b"]
    assert fresh_store.node_ids() == ["a", "b"]


def test_get_node_unknown_returns_none(fresh_store):
    assert fresh_store.get_node("missing") is None


def test_remove_node_scrubs_all_references(fresh_store):
    """
    Validate that remove_node removes the node and every incident edge.

    Creates: a -> b -> c, a -> c

    Verifies:
    - b is gone from the node map
    - a no longer lists b as a child, c no longer lists b as a parent
    - The unrelated edge a -> c survives
    """
    fresh_store.load({
        "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
        "edges": [{"from": "a", "to": "b"}, {"from": "b", "to": "c"}, {"from": "a", "to": "c"}],
    })

    fresh_store.remove_node("b")

    assert not fresh_store.has_node("b")
    assert fresh_store.get_children("a") == ["c"]
    assert fresh_store.get_parents("c") == ["a"]
    assert fresh_store.get_children("b") == []
    assert fresh_store.edge_count == 1


def test_remove_node_with_self_loop(fresh_store):
    fresh_store.add_node(DAGNode("a"))
    fresh_store.add_edge("a", "a")

    fresh_store.remove_node("a")

    assert fresh_store.is_empty
    assert fresh_store.edge_count == 0


def test_remove_unknown_node_is_noop(fresh_store):
    fresh_store.add_node(DAGNode("a"))

    fresh_store.remove_node("zzz")

    assert fresh_store.node_ids() == ["a"]


# =============================================================================
# EDGE OPERATIONS TESTS
# =============================================================================

def test_add_edge_updates_both_directions(fresh_store):
    fresh_store.add_node(DAGNode("a"))
    fresh_store.add_node(DAGNode("b"))

    fresh_store.add_edge("a", "b")

    assert fresh_store.has_edge("a", "b")
    assert not fresh_store.has_edge("b", "a")
    assert fresh_store.get_children("a") == ["b"]
    assert fresh_store.get_parents("b") == ["a"]
    assert fresh_store.out_degree("a") == 1
    assert fresh_store.in_degree("b") == 1


def test_add_edge_unregistered_endpoint_is_dropped(fresh_store):
    """
    Validate the permissive edge policy.

    Verifies:
    - Edge to an unknown node is silently ignored
    - Edge from an unknown node is silently ignored
    - No adjacency entry is created for the unknown id
    """
    fresh_store.add_node(DAGNode("a"))

    fresh_store.add_edge("a", "ghost")
    fresh_store.add_edge("ghost", "a")

    assert fresh_store.edge_count == 0
    assert fresh_store.get_children("a") == []
    assert fresh_store.get_parents("a") == []
    assert not fresh_store.has_node("ghost")


def test_add_edge_twice_is_deduplicated(fresh_store):
    fresh_store.add_node(DAGNode("a"))
    fresh_store.add_node(DAGNode("b"))

    fresh_store.add_edge("a", "b")
    fresh_store.add_edge("a", "b")

    assert fresh_store.edge_count == 1


def test_remove_edge(fresh_store):
    fresh_store.load({
        "nodes": [{"id": "a"}, {"id": "b"}],
        "edges": [{"from": "a", "to": "b"}],
    })

    fresh_store.remove_edge("a", "b")
    fresh_store.remove_edge("a", "b")  # second call is a no-op

    assert not fresh_store.has_edge("a", "b")
    assert fresh_store.get_roots() == ["a", "b"]


# =============================================================================
# ADJACENCY QUERY TESTS
# =============================================================================

def test_children_and_parents_of_unknown_id_are_empty(fresh_store):
    assert fresh_store.get_children("nope") == []
    assert fresh_store.get_parents("nope") == []
    assert fresh_store.in_degree("nope") == 0


def test_get_children_returns_copy(fresh_store):
    """Mutating a returned adjacency list must not touch the store."""
    fresh_store.load({
        "nodes": [{"id": "a"}, {"id": "b"}],
        "edges": [{"from": "a", "to": "b"}],
    })

    children = fresh_store.get_children("a")
    children.append("intruder")

    assert fresh_store.get_children("a") == ["b"]


def test_roots_and_leaves(gallery):
    """
    Validate roots/leaves on the diamond-with-tail sample.

    Verifies:
    - Only "a" has no parents
    - Only "e" has no children
    """
    store = GraphStore(gallery["diamond_tail"])

    assert store.get_roots() == ["a"]
    assert store.get_leaves() == ["e"]


def test_children_follow_edge_insertion_order(fresh_store):
    fresh_store.load({
        "nodes": [{"id": "r"}, {"id": "x"}, {"id": "y"}, {"id": "z"}],
        "edges": [{"from": "r", "to": "z"}, {"from": "r", "to": "x"}, {"from": "r", "to": "y"}],
    })

    assert fresh_store.get_children("r") == ["z", "x", "y"]


# =============================================================================
# BULK OPERATIONS TESTS
# =============================================================================

def test_load_then_to_structure_round_trip(gallery):
    """
    Validate that to_structure() after load() reproduces the input.

    Verifies:
    - Same node ids (as a set)
    - Same edge pairs (as a set)
    """
    original = gallery["deep_7"]
    store = GraphStore()
    store.load(original)

    exported = store.to_structure()

    assert {n.id for n in exported.nodes} == {n["id"] for n in original["nodes"]}
    assert _edge_set(exported) == {(e["from"], e["to"]) for e in original["edges"]}


def test_load_drops_dangling_edges():
    store = GraphStore({
        "nodes": [{"id": "a"}],
        "edges": [{"from": "a", "to": "z"}],
    })

    assert store.to_structure().edges == []


def test_load_replaces_previous_contents(fresh_store):
    fresh_store.load({"nodes": [{"id": "old"}], "edges": []})
    fresh_store.load({"nodes": [{"id": "new"}], "edges": []})

    assert fresh_store.node_ids() == ["new"]


def test_load_accepts_struct():
    structure = DAGStructure(
        nodes=[DAGNode("a"), DAGNode("b")],
        edges=[DAGEdge("a", "b")],
    )

    store = GraphStore(structure)

    assert store.has_edge("a", "b")


def test_load_does_not_mutate_input(gallery):
    original = gallery["diamond_tail"]
    snapshot = repr(original)

    store = GraphStore(original)
    store.remove_node("a")

    assert repr(original) == snapshot


def test_clear(gallery):
    store = GraphStore(gallery["fork"])

    store.clear()

    assert store.is_empty
    assert len(store) == 0
    assert store.edge_count == 0
    assert store.get_roots() == []


def test_repr(gallery):
    store = GraphStore(gallery["fork"])
    assert repr(store) == "GraphStore(nodes=3, edges=2)"


# =============================================================================
# RUSTWORKX EXPORT TESTS
# =============================================================================

def test_to_rustworkx_preserves_structure(gallery):
    """
    Validate the rustworkx bridge.

    Verifies:
    - Node and edge counts match
    - Every store edge exists between the mapped indices
    - Node weights are the DAGNode objects
    """
    store = GraphStore(gallery["diamond_tail"])

    graph, index_map = store.to_rustworkx()

    assert graph.num_nodes() == 5
    assert graph.num_edges() == 5
    for source, target in store.iter_edges():
        assert graph.has_edge(index_map[source], index_map[target])
    assert graph[index_map["a"]].data == "Task A"


def test_to_rustworkx_empty_store(fresh_store):
    graph, index_map = fresh_store.to_rustworkx()

    assert graph.num_nodes() == 0
    assert index_map == {}
