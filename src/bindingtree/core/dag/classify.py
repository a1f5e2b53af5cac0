# src/bindingtree/core/dag/classify.py
"""Dependency classification and edge resolution.

Classification derives an edge's quantifier semantics from the
multiplicity of the qualifiers it connects. Resolution drops edges the
editor left half-built (missing node, missing or undeclared qualifier)
so that later stages only ever see well-formed edges.
"""

from __future__ import annotations

from collections.abc import Mapping

from bindingtree.contracts.diagnostics import DanglingEdge
from bindingtree.contracts.enums import DependencyType
from bindingtree.contracts.graph import EdgeEndpoint, EventTypeNode, GateNode, GraphEdge, GraphNode
from bindingtree.contracts.types import NodeID


def classify(source_multiple: bool, target_multiple: bool) -> DependencyType:
    """Map qualifier multiplicities to a dependency type.

    Args:
        source_multiple: Source qualifier relates one event to several objects
        target_multiple: Target qualifier relates one event to several objects

    Returns:
        ALL for set-to-set, EXISTS_IN_SOURCE / EXISTS_IN_TARGET when only one
        side is a set, SIMPLE otherwise.
    """
    if source_multiple:
        return DependencyType.ALL if target_multiple else DependencyType.EXISTS_IN_SOURCE
    return DependencyType.EXISTS_IN_TARGET if target_multiple else DependencyType.SIMPLE


def _is_multiple(node: GraphNode, endpoint: EdgeEndpoint) -> bool:
    if not isinstance(node, EventTypeNode):
        raise KeyError(f"Node '{node.id}' is a gate and declares no qualifiers")
    return node.qualifier_info[endpoint.qualifier].multiple


def classify_edge(edge: GraphEdge, nodes: Mapping[NodeID, GraphNode]) -> DependencyType | None:
    """Classify a resolved edge, or None for structural links.

    Raises:
        KeyError: If an endpoint references an undeclared qualifier
            (resolve_edges() filters these out beforehand)
    """
    if edge.source_endpoint is None or edge.target_endpoint is None:
        return None
    return classify(
        _is_multiple(nodes[edge.source], edge.source_endpoint),
        _is_multiple(nodes[edge.target], edge.target_endpoint),
    )


def _dangling_reason(edge: GraphEdge, nodes: Mapping[NodeID, GraphNode]) -> str | None:
    for role, node_id in (("source", edge.source), ("target", edge.target)):
        if node_id not in nodes:
            return f"{role} node '{node_id}' does not exist"

    if (edge.source_endpoint is None) != (edge.target_endpoint is None):
        missing = "source" if edge.source_endpoint is None else "target"
        return f"missing {missing} handle"

    for role, node_id, endpoint in (
        ("source", edge.source, edge.source_endpoint),
        ("target", edge.target, edge.target_endpoint),
    ):
        if endpoint is None:
            continue
        node = nodes[node_id]
        if isinstance(node, GateNode):
            return f"{role} handle '{endpoint.qualifier}' attached to gate '{node_id}'"
        if endpoint.qualifier not in node.qualifier_info:
            return f"{role} qualifier '{endpoint.qualifier}' not declared on '{node_id}'"

    if edge.source_endpoint is not None and edge.target_endpoint is not None:
        if edge.source_endpoint.object_type != edge.target_endpoint.object_type:
            return f"object types differ ('{edge.source_endpoint.object_type}' vs '{edge.target_endpoint.object_type}')"
    return None


def resolve_edges(
    edges: tuple[GraphEdge, ...] | list[GraphEdge],
    nodes: Mapping[NodeID, GraphNode],
) -> tuple[tuple[GraphEdge, ...], tuple[DanglingEdge, ...]]:
    """Split edges into usable ones and dangling ones, preserving order.

    Dangling edges are the one place compilation degrades instead of
    failing: an edge being drawn in the editor is skipped, not fatal.
    """
    valid: list[GraphEdge] = []
    dangling: list[DanglingEdge] = []
    for edge in edges:
        reason = _dangling_reason(edge, nodes)
        if reason is None:
            valid.append(edge)
        else:
            dangling.append(DanglingEdge(edge=edge, reason=reason))
    return tuple(valid), tuple(dangling)
