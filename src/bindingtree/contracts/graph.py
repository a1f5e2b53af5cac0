"""Editor graph model: event-type boxes, logical gates and the edges between them.

The editor owns the mutable graph; everything here describes one immutable
snapshot of it. Edge endpoints are structured records rather than the
editor's delimited handle strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from bindingtree.contracts.enums import GateKind, NodeKind
from bindingtree.contracts.types import BoxContent, NodeID, VariableName


@dataclass(frozen=True, slots=True)
class QualifierInfo:
    """How an object type relates to an event type under one qualifier.

    Attributes:
        qualifier: Qualifier name (e.g., "initiates", "participates")
        multiple: True if one event can relate to several objects under this qualifier
        object_types: Object types observed with this qualifier
    """

    qualifier: str
    multiple: bool
    object_types: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ObjectVariable:
    """A named object variable with its object type."""

    name: VariableName
    object_type: str


@dataclass(frozen=True, slots=True)
class EdgeEndpoint:
    """One side of a dependency edge: the qualifier and the shared object type."""

    qualifier: str
    object_type: str


@dataclass(frozen=True, slots=True)
class EventTypeNode:
    """An event-type box.

    box_content is opaque to the compiler and copied verbatim into the tree.
    """

    id: NodeID
    event_type: str
    qualifier_info: dict[str, QualifierInfo] = field(default_factory=dict)
    bound_variables: tuple[ObjectVariable, ...] = ()
    box_content: BoxContent = field(default_factory=dict)

    @property
    def kind(self) -> NodeKind:
        return NodeKind.EVENT_TYPE


@dataclass(frozen=True, slots=True)
class GateNode:
    """A structural AND/OR/NOT node with no payload besides its children."""

    id: NodeID
    gate: GateKind

    @property
    def kind(self) -> NodeKind:
        return NodeKind.GATE


GraphNode: TypeAlias = EventTypeNode | GateNode


@dataclass(frozen=True, slots=True)
class GraphEdge:
    """A directed link from source node to target node.

    An edge without endpoints is a structural link (gate to child, or a plain
    box-to-box link). An edge with both endpoints is a dependency edge whose
    quantifier semantics come from the qualifiers' multiplicity.
    """

    source: NodeID
    target: NodeID
    source_endpoint: EdgeEndpoint | None = None
    target_endpoint: EdgeEndpoint | None = None
    name: str | None = None

    @property
    def is_dependency(self) -> bool:
        """True if both qualifier endpoints are present."""
        return self.source_endpoint is not None and self.target_endpoint is not None

    @property
    def object_type(self) -> str | None:
        """Object type shared by both endpoints (the editor only connects matching types)."""
        if self.source_endpoint is None:
            return None
        return self.source_endpoint.object_type

    def describe(self) -> str:
        return f"{self.source} -> {self.target}"


@dataclass(frozen=True, slots=True)
class GraphSnapshot:
    """Nodes and edges handed over by the editor for one compilation."""

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    def node_map(self) -> dict[NodeID, GraphNode]:
        """Nodes keyed by id, in snapshot order."""
        return {node.id: node for node in self.nodes}
