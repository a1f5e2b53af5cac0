# src/bindingtree/core/dag/models.py
"""Types and exceptions shared by the compilation stages.

Leaf module: no intra-package imports from core.dag.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from bindingtree.contracts.diagnostics import InvalidGateArity
from bindingtree.contracts.graph import GraphEdge, GraphNode
from bindingtree.contracts.types import NodeID


class GraphValidationError(ValueError):
    """Raised when a graph cannot be compiled into a valid tree."""

    pass


class TreeBuildError(GraphValidationError):
    """Raised by the tree builder for structural modeling errors.

    Carries every offending gate so the caller can report them all at once.
    """

    def __init__(self, diagnostics: tuple[InvalidGateArity, ...]) -> None:
        self.diagnostics = diagnostics
        super().__init__("; ".join(d.message for d in diagnostics))


@dataclass(frozen=True, slots=True)
class NodeEntry:
    """Registry entry: a node with its distinct parents and children in edge order."""

    node: GraphNode
    parents: tuple[NodeID, ...] = ()
    children: tuple[NodeID, ...] = ()

    @property
    def node_id(self) -> NodeID:
        return self.node.id

    @property
    def is_disconnected(self) -> bool:
        return not self.parents and not self.children

    @property
    def is_root(self) -> bool:
        return not self.parents and bool(self.children)


NodeRegistry: TypeAlias = dict[NodeID, NodeEntry]


def build_registry(nodes: tuple[GraphNode, ...] | list[GraphNode], edges: tuple[GraphEdge, ...] | list[GraphEdge]) -> NodeRegistry:
    """Key nodes by id and derive parent/child lists from edges.

    Edges must already be resolved (both ends present). Repeated edges
    between the same pair count once.
    """
    parents: dict[NodeID, dict[NodeID, None]] = {node.id: {} for node in nodes}
    children: dict[NodeID, dict[NodeID, None]] = {node.id: {} for node in nodes}
    for edge in edges:
        children[edge.source][edge.target] = None
        parents[edge.target][edge.source] = None
    return {
        node.id: NodeEntry(
            node=node,
            parents=tuple(parents[node.id]),
            children=tuple(children[node.id]),
        )
        for node in nodes
    }
