"""
DAGSCOPE SCHEMAS - The Interchange Grammar

Every component of dagcore speaks in these structures. A graph crosses a
component boundary only as a DAGStructure: an ordered list of nodes and an
ordered list of edges. Each component reads it once into its own adjacency
index and never writes back.

This module defines:
- DAGNode: Identifier plus an opaque payload (compared, never interpreted)
- DAGEdge: Ordered (from, to) pair, no payload
- DAGStructure: The canonical nodes + edges value
- MissingReference / ValidationResult: Validator output
- JSON codec helpers for the {"nodes": [...], "edges": [...]} document shape

Design Principles:
1. STRICT TYPING: msgspec.Struct, decoding rejects wrong shapes
2. WIRE NAMES: Edges use "from"/"to" on the wire, source/target in Python
3. ABSENCE OVER EMPTINESS: Optional result lists are None when nothing was found
"""
import msgspec
from typing import Any, Dict, List, Literal, Optional, Union


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class GraphError(Exception):
    """Base exception for dagcore boundary errors."""
    pass


class StructureDecodeError(GraphError):
    """Raised when a document cannot be read as a graph structure."""
    def __init__(self, message: str):
        super().__init__(f"Invalid graph structure: {message}")


# =============================================================================
# GRAPH STRUCTURE
# =============================================================================

class DAGNode(msgspec.Struct, frozen=True, omit_defaults=True):
    """
    A graph node.

    `data` is the node label. The core never looks inside it; the subgraph
    matcher only compares two payloads for equality.
    """
    id: str
    data: Any = None


class DAGEdge(msgspec.Struct, frozen=True):
    """A directed edge. Serialized as {"from": ..., "to": ...}."""
    source: str = msgspec.field(name="from")
    target: str = msgspec.field(name="to")


class DAGStructure(msgspec.Struct, kw_only=True):
    """
    The interchange value: nodes and edges in listing order.

    Listing order is not semantically required, but traversal tie-breaks
    and cycle reporting follow it.
    """
    nodes: List[DAGNode] = msgspec.field(default_factory=list)
    edges: List[DAGEdge] = msgspec.field(default_factory=list)

    def node_ids(self) -> List[str]:
        """Node identifiers in listing order."""
        return [n.id for n in self.nodes]


# =============================================================================
# VALIDATION RESULTS
# =============================================================================

class MissingReference(msgspec.Struct, frozen=True):
    """An edge endpoint that names no node."""
    edge: DAGEdge
    missing: Literal["from", "to"]


class ValidationResult(msgspec.Struct, kw_only=True, omit_defaults=True, rename="camel"):
    """
    Outcome of validate_dag().

    is_valid requires no cycles and no missing references. Orphans are
    reported but do not affect validity.
    """
    is_valid: bool
    is_acyclic: bool
    cycles: Optional[List[List[str]]] = None
    orphan_nodes: Optional[List[str]] = None
    missing_references: Optional[List[MissingReference]] = None


# =============================================================================
# JSON CODEC
# =============================================================================

StructureLike = Union[DAGStructure, Dict[str, Any]]

_encoder = msgspec.json.Encoder()
_structure_decoder = msgspec.json.Decoder(type=DAGStructure)


def as_structure(value: StructureLike) -> DAGStructure:
    """
    Coerce a plain {"nodes": [...], "edges": [...]} mapping to a DAGStructure.

    DAGStructure instances are returned unchanged.

    Raises:
        StructureDecodeError: If the value does not have the structure shape
    """
    if isinstance(value, DAGStructure):
        return value
    try:
        return msgspec.convert(value, DAGStructure)
    except msgspec.ValidationError as e:
        raise StructureDecodeError(str(e)) from e


def decode_structure(data: Union[bytes, str]) -> DAGStructure:
    """
    Parse a JSON graph document.

    Raises:
        StructureDecodeError: On malformed JSON or a wrong document shape
    """
    try:
        return _structure_decoder.decode(data)
    except msgspec.DecodeError as e:
        raise StructureDecodeError(str(e)) from e


def encode_structure(structure: StructureLike) -> bytes:
    """Serialize a structure to JSON bytes."""
    return _encoder.encode(as_structure(structure))


def encode_validation_result(result: ValidationResult) -> bytes:
    """Serialize a ValidationResult (camelCase keys, absent lists omitted)."""
    return _encoder.encode(result)
