"""
DAGSCOPE SUBGRAPH MATCHER - VF2-Style Backtracking Search

Decides whether a pattern graph occurs inside a target graph, and returns
the mapping that proves it.

A mapping M (pattern id -> target id) is accepted when:
1. M is injective (no target node used twice)
2. data_matches(pattern_node.data, M(pattern_node).data) for every node
3. For every pattern edge p1 -> p2, the target has M(p1) -> M(p2)

Search:
- One pattern node is committed per level, in pattern listing order
- Candidates are target nodes in target listing order
- Each candidate passes a feasibility test before it is committed:
    a. Payload equality
    b. Degree consistency (see below)
    c. Every already-mapped pattern neighbor is a target neighbor, in the
       same direction
- Chronological backtracking through a PartialMapping (push / pop),
  driven by an explicit stack so pattern size is not bounded by the
  interpreter's recursion limit

Degree consistency (strict_degrees=True, the default):
- Root pattern node (in-degree 0): target out-degree must be equal
- Leaf pattern node (out-degree 0): target in-degree must be equal
- Interior pattern node: both must be equal
- Isolated pattern node is root and leaf, so both must be equal
This prunes harder than plain subgraph containment requires and rejects
some mappings that a monomorphism search would accept (a 2-node path does
not match inside a 4-node diamond). Pass strict_degrees=False for plain
monomorphism semantics.

Worst case is exponential in pattern size. Callers can bound it with
max_pattern_nodes, which refuses oversized patterns before searching.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

import msgspec

from daginfra.config import get_config
from dagcore.graph_store import GraphStore
from dagcore.schemas import GraphError, StructureLike

logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class SearchBudgetExceededError(GraphError):
    """Raised when a pattern is larger than the configured search budget."""
    def __init__(self, pattern_nodes: int, limit: int):
        self.pattern_nodes = pattern_nodes
        self.limit = limit
        super().__init__(
            f"Pattern has {pattern_nodes} nodes, search budget is {limit}"
        )


# =============================================================================
# PAYLOAD EQUALITY
# =============================================================================

_canonical_encoder = msgspec.json.Encoder(order="deterministic")

_COMPOSITE_TYPES = (dict, list, tuple, set, frozenset, msgspec.Struct)


def _integral_floats_to_int(value: Any) -> Any:
    # Applied to msgspec builtins output, so only dicts and lists nest
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, dict):
        return {
            _integral_floats_to_int(key): _integral_floats_to_int(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_integral_floats_to_int(item) for item in value]
    return value


def _canonical_bytes(value: Any) -> bytes:
    builtins = msgspec.to_builtins(value, order="deterministic")
    return _canonical_encoder.encode(_integral_floats_to_int(builtins))


def data_matches(a: Any, b: Any) -> bool:
    """
    Value equality for node payloads.

    - Primitives compare with ==, except that a bool never equals a number
    - None only equals None
    - Composites (dict, list, tuple, set, Struct) are equal when their
      canonical JSON encodings are equal, so dict key order is irrelevant
      and [1, 2] equals (1, 2)
    - Inside composites an integral float equals the int (so [1.0] equals
      [1]), matching how primitives compare; bools stay distinct
    - A composite never equals a primitive
    """
    if a is b:
        return True
    if a is None or b is None:
        return False

    a_composite = isinstance(a, _COMPOSITE_TYPES)
    b_composite = isinstance(b, _COMPOSITE_TYPES)
    if a_composite and b_composite:
        try:
            return _canonical_bytes(a) == _canonical_bytes(b)
        except (TypeError, msgspec.EncodeError):
            # Not JSON-encodable (e.g. arbitrary objects inside)
            return a == b
    if a_composite or b_composite:
        return False

    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


# =============================================================================
# PARTIAL MAPPING (Search State)
# =============================================================================

class PartialMapping:
    """
    Tentative pattern -> target assignments, undone in LIFO order.

    Keeps a reverse index so "is this target already used?" is O(1).
    snapshot() is the only way a mapping leaves the search, and it is
    always a fresh dict.
    """

    def __init__(self):
        self._forward: Dict[str, str] = {}
        self._reverse: Dict[str, str] = {}

    def push(self, pattern_id: str, target_id: str) -> None:
        """
        Commit pattern_id -> target_id.

        Raises:
            ValueError: If either side is already assigned
        """
        if pattern_id in self._forward:
            raise ValueError(f"Pattern node already mapped: {pattern_id}")
        if target_id in self._reverse:
            raise ValueError(f"Target node already used: {target_id}")
        self._forward[pattern_id] = target_id
        self._reverse[target_id] = pattern_id

    def pop(self) -> Tuple[str, str]:
        """
        Undo the most recent assignment.

        Raises:
            KeyError: If the mapping is empty
        """
        pattern_id, target_id = self._forward.popitem()
        del self._reverse[target_id]
        return pattern_id, target_id

    def target_of(self, pattern_id: str) -> Optional[str]:
        return self._forward.get(pattern_id)

    def is_used(self, target_id: str) -> bool:
        return target_id in self._reverse

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current assignments."""
        return dict(self._forward)

    def __len__(self) -> int:
        return len(self._forward)

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._forward

    def __repr__(self) -> str:
        return f"PartialMapping({self._forward!r})"


# =============================================================================
# SUBGRAPH MATCHER
# =============================================================================

class SubgraphMatcher:
    """
    Backtracking search for a pattern inside a target.

    Both structures are read into private GraphStores on construction;
    the inputs are never modified.

    Usage:
        matcher = SubgraphMatcher(pattern, target)
        mapping = matcher.match()           # first mapping or None
        for m in matcher.iter_mappings():   # every mapping, in search order
            ...

    One search at a time per matcher: the search state is shared between
    iter_mappings() generators of the same instance.

    Args:
        pattern: The graph to look for
        target: The graph to search in
        strict_degrees: Degree-consistency pruning. Defaults to config.
        max_pattern_nodes: Search budget. Defaults to config (None = no limit).

    Raises:
        SearchBudgetExceededError: If the pattern exceeds max_pattern_nodes
    """

    def __init__(
        self,
        pattern: StructureLike,
        target: StructureLike,
        *,
        strict_degrees: Optional[bool] = None,
        max_pattern_nodes: Optional[int] = None,
    ):
        matcher_config = get_config().matcher
        self.strict_degrees = (
            matcher_config.strict_degrees if strict_degrees is None else strict_degrees
        )
        self.max_pattern_nodes = (
            matcher_config.max_pattern_nodes if max_pattern_nodes is None else max_pattern_nodes
        )

        self._pattern = GraphStore(pattern)
        self._target = GraphStore(target)
        self._pattern_ids: List[str] = self._pattern.node_ids()
        self._target_ids: List[str] = self._target.node_ids()
        self._mapping = PartialMapping()

        # Number of tentative assignments made so far
        self.states_explored = 0

        if self.max_pattern_nodes is not None and len(self._pattern_ids) > self.max_pattern_nodes:
            raise SearchBudgetExceededError(len(self._pattern_ids), self.max_pattern_nodes)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def match(self) -> Optional[Dict[str, str]]:
        """Return the first mapping found, or None."""
        mappings = self.iter_mappings()
        try:
            return next(mappings, None)
        finally:
            mappings.close()

    def iter_mappings(self) -> Iterator[Dict[str, str]]:
        """
        Yield every mapping in search order.

        Each yielded dict is a fresh copy; mutating it does not affect the
        search. states_explored counts from zero for each call.
        """
        self.states_explored = 0
        if not self._pattern_ids:
            yield {}
            return

        if len(self._pattern_ids) > len(self._target_ids):
            logger.debug(
                f"Pattern ({len(self._pattern_ids)} nodes) larger than "
                f"target ({len(self._target_ids)} nodes): no search"
            )
            return

        logger.debug(
            f"Subgraph search: {len(self._pattern_ids)} pattern nodes, "
            f"{len(self._target_ids)} target nodes, strict_degrees={self.strict_degrees}"
        )
        yield from self._search()

    # =========================================================================
    # SEARCH
    # =========================================================================

    def _search(self) -> Iterator[Dict[str, str]]:
        """
        Depth-first search with an explicit stack of candidate iterators.

        Frame k tries target candidates for pattern node k (listing order).
        While frame k is on top, the mapping holds exactly k assignments.
        """
        total = len(self._pattern_ids)
        stack: List[Iterator[str]] = [iter(self._target_ids)]

        try:
            while stack:
                pattern_id = self._pattern_ids[len(stack) - 1]
                for target_id in stack[-1]:
                    if self._mapping.is_used(target_id):
                        continue
                    if not self._feasible(pattern_id, target_id):
                        continue

                    self._mapping.push(pattern_id, target_id)
                    self.states_explored += 1
                    if len(self._mapping) == total:
                        yield self._mapping.snapshot()
                        self._mapping.pop()
                        continue

                    stack.append(iter(self._target_ids))
                    break
                else:
                    # Candidates exhausted: backtrack into the previous level
                    stack.pop()
                    if stack:
                        self._mapping.pop()
        finally:
            # Generator closed mid-search
            while len(self._mapping):
                self._mapping.pop()

    def _feasible(self, pattern_id: str, target_id: str) -> bool:
        pattern_node = self._pattern.get_node(pattern_id)
        target_node = self._target.get_node(target_id)
        if not data_matches(pattern_node.data, target_node.data):
            return False

        if self.strict_degrees and not self._degrees_consistent(pattern_id, target_id):
            return False

        return self._neighbors_consistent(pattern_id, target_id)

    def _degrees_consistent(self, pattern_id: str, target_id: str) -> bool:
        p_out = self._pattern.out_degree(pattern_id)
        p_in = self._pattern.in_degree(pattern_id)
        t_out = self._target.out_degree(target_id)
        t_in = self._target.in_degree(target_id)

        is_root = p_in == 0
        is_leaf = p_out == 0
        if is_root and p_out != t_out:
            return False
        if is_leaf and p_in != t_in:
            return False
        if not is_root and not is_leaf and (p_out != t_out or p_in != t_in):
            return False
        return True

    def _neighbors_consistent(self, pattern_id: str, target_id: str) -> bool:
        # p -> p2 with p2 mapped requires t -> M(p2)
        for child in self._pattern.get_children(pattern_id):
            mapped = self._mapping.target_of(child)
            if mapped is not None and not self._target.has_edge(target_id, mapped):
                return False

        # p1 -> p with p1 mapped requires M(p1) -> t
        for parent in self._pattern.get_parents(pattern_id):
            mapped = self._mapping.target_of(parent)
            if mapped is not None and not self._target.has_edge(mapped, target_id):
                return False

        return True


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def vf2_subgraph_isomorphism(
    pattern: StructureLike,
    target: StructureLike,
    *,
    strict_degrees: Optional[bool] = None,
    max_pattern_nodes: Optional[int] = None,
) -> Optional[Dict[str, str]]:
    """
    Find a mapping from pattern node ids to target node ids.

    Returns:
        {} for an empty pattern, a mapping if the pattern occurs in the
        target, otherwise None
    """
    matcher = SubgraphMatcher(
        pattern,
        target,
        strict_degrees=strict_degrees,
        max_pattern_nodes=max_pattern_nodes,
    )
    mapping = matcher.match()
    logger.debug(
        f"Subgraph search finished after {matcher.states_explored} assignments: "
        f"{'match' if mapping is not None else 'no match'}"
    )
    return mapping


def is_subgraph_isomorphic(
    pattern: StructureLike,
    target: StructureLike,
    **kwargs: Any,
) -> bool:
    """Check if the pattern occurs in the target."""
    return vf2_subgraph_isomorphism(pattern, target, **kwargs) is not None


def iter_subgraph_mappings(
    pattern: StructureLike,
    target: StructureLike,
    **kwargs: Any,
) -> Iterator[Dict[str, str]]:
    """Yield every mapping of pattern into target, in search order."""
    return SubgraphMatcher(pattern, target, **kwargs).iter_mappings()
