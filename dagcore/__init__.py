"""
DAGSCOPE CORE - Central exports for the graph library.

This module provides access to:
- Data model and JSON codec (DAGStructure, decode_structure, ...)
- Graph Store (GraphStore)
- Structural validation (validate_dag, find_cycles, ...)
- Traversal orders (topological_sort, bfs_from_roots, dfs_post_order)
- Subgraph matching (vf2_subgraph_isomorphism, SubgraphMatcher, ...)
"""

# Data model
from dagcore.schemas import (
    DAGNode,
    DAGEdge,
    DAGStructure,
    MissingReference,
    ValidationResult,
    GraphError,
    StructureDecodeError,
    as_structure,
    decode_structure,
    encode_structure,
    encode_validation_result,
)

# Graph Store
from dagcore.graph_store import GraphStore

# Validation
from dagcore.validation import (
    validate_dag,
    find_cycles,
    find_missing_references,
    find_orphan_nodes,
    graph_metrics,
)

# Traversal
from dagcore.traversal import (
    topological_sort,
    bfs_from_roots,
    dfs_post_order,
)

# Subgraph matching
from dagcore.matcher import (
    SubgraphMatcher,
    PartialMapping,
    SearchBudgetExceededError,
    data_matches,
    vf2_subgraph_isomorphism,
    is_subgraph_isomorphic,
    iter_subgraph_mappings,
)

__all__ = [
    # Data model
    "DAGNode",
    "DAGEdge",
    "DAGStructure",
    "MissingReference",
    "ValidationResult",
    "GraphError",
    "StructureDecodeError",
    "as_structure",
    "decode_structure",
    "encode_structure",
    "encode_validation_result",
    # Graph Store
    "GraphStore",
    # Validation
    "validate_dag",
    "find_cycles",
    "find_missing_references",
    "find_orphan_nodes",
    "graph_metrics",
    # Traversal
    "topological_sort",
    "bfs_from_roots",
    "dfs_post_order",
    # Subgraph matching
    "SubgraphMatcher",
    "PartialMapping",
    "SearchBudgetExceededError",
    "data_matches",
    "vf2_subgraph_isomorphism",
    "is_subgraph_isomorphic",
    "iter_subgraph_mappings",
]
