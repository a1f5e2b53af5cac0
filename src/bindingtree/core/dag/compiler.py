# src/bindingtree/core/dag/compiler.py
"""Whole-snapshot compilation: resolve, partition, linearize, build, propagate.

Each weakly connected component is linearized independently, so a cycle
in one component never prevents the others from producing trees. Each
root of a component yields its own tree. Failures are collected as
structured diagnostics in the CompilationResult; raise_for_errors()
converts them into an exception for callers that want all-or-nothing
behavior.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import networkx as nx
import structlog

from bindingtree.contracts.diagnostics import CompilationError, DanglingEdge
from bindingtree.contracts.graph import GraphEdge, GraphNode, GraphSnapshot
from bindingtree.contracts.tree import LinearTree
from bindingtree.contracts.types import NodeID
from bindingtree.core.config import CompilerSettings
from bindingtree.core.dag.builder import build
from bindingtree.core.dag.classify import resolve_edges
from bindingtree.core.dag.linearize import linearize
from bindingtree.core.dag.models import GraphValidationError, TreeBuildError
from bindingtree.core.dag.variables import PropagationResult, propagate

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CompiledTree:
    """The tree compiled for one root, with the data that produced it.

    order[i] is the graph node that became tree.nodes[i]; order[0] is root.
    """

    root: NodeID
    order: tuple[NodeID, ...]
    tree: LinearTree
    variables: PropagationResult

    def index_of(self, node_id: NodeID) -> int:
        """Tree index of a graph node.

        Raises:
            ValueError: If the node is not part of this tree
        """
        return self.order.index(node_id)


@dataclass(frozen=True, slots=True)
class CompilationResult:
    trees: tuple[CompiledTree, ...] = ()
    errors: tuple[CompilationError, ...] = ()
    warnings: tuple[DanglingEdge, ...] = ()
    disconnected: tuple[NodeID, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise if any component failed.

        Raises:
            GraphValidationError: Listing every error message
        """
        if self.errors:
            details = "\n  ".join(error.message for error in self.errors)
            raise GraphValidationError(f"Graph compilation failed with {len(self.errors)} error(s):\n  {details}")

    def to_json(self) -> dict[str, Any]:
        """Summary in the editor's camelCase convention.

        trees, roots and variables are parallel lists with one entry per tree.
        """
        return {
            "trees": [compiled.tree.to_json() for compiled in self.trees],
            "roots": [compiled.root for compiled in self.trees],
            "variables": [compiled.variables.to_json() for compiled in self.trees],
            "errors": [{"code": e.code, "message": e.message, "nodeIds": list(e.node_ids)} for e in self.errors],
            "warnings": [{"code": w.code, "message": w.message, "nodeIds": list(w.node_ids)} for w in self.warnings],
            "disconnected": list(self.disconnected),
        }


def _components(nodes: tuple[GraphNode, ...], edges: tuple[GraphEdge, ...]) -> list[tuple[GraphNode, ...]]:
    """Weakly connected components with at least one edge, in snapshot order."""
    position = {node.id: index for index, node in enumerate(nodes)}
    graph: nx.DiGraph[NodeID] = nx.DiGraph()
    graph.add_nodes_from(position)
    graph.add_edges_from((edge.source, edge.target) for edge in edges)

    by_id = {node.id: node for node in nodes}
    components = []
    for component in nx.weakly_connected_components(graph):
        if len(component) == 1:
            (only,) = component
            if not graph.has_edge(only, only):
                continue
        members = sorted(component, key=position.__getitem__)
        components.append(tuple(by_id[node_id] for node_id in members))
    components.sort(key=lambda members: position[members[0].id])
    return components


def _reach(edges: tuple[GraphEdge, ...], roots: tuple[NodeID, ...]) -> dict[NodeID, frozenset[NodeID]]:
    """Each root together with every node reachable from it."""
    graph: nx.DiGraph[NodeID] = nx.DiGraph()
    graph.add_nodes_from(roots)
    graph.add_edges_from((edge.source, edge.target) for edge in edges)
    return {root: frozenset(nx.descendants(graph, root)) | {root} for root in roots}


def compile_graph(snapshot: GraphSnapshot, settings: CompilerSettings | None = None) -> CompilationResult:
    """Compile an editor snapshot into one binding-box tree per root.

    Each weakly connected component is linearized once. Every root of the
    component then gets its own tree holding the part of that order
    reachable from it, so the root sits at index 0. A node reachable from
    several roots appears in each of their trees.

    Args:
        snapshot: Nodes and edges exported by the editor
        settings: Compiler knobs; defaults when omitted

    Returns:
        CompilationResult with compiled trees, errors, dangling-edge warnings
        and disconnected node ids.
    """
    settings = settings or CompilerSettings()
    node_map = snapshot.node_map()
    edges, dangling = resolve_edges(snapshot.edges, node_map)
    for warning in dangling:
        logger.warning("dangling_edge_skipped", source=warning.edge.source, target=warning.edge.target, reason=warning.reason)

    touched = {edge.source for edge in edges} | {edge.target for edge in edges}
    disconnected = tuple(node.id for node in snapshot.nodes if node.id not in touched)

    trees: list[CompiledTree] = []
    errors: list[CompilationError] = []
    for members in _components(snapshot.nodes, edges):
        member_ids = {node.id for node in members}
        component_edges = tuple(edge for edge in edges if edge.source in member_ids)

        result = linearize(members, component_edges, settings.queue_order)
        if result.error is not None:
            logger.warning("component_rejected", code=result.error.code, nodes=list(result.error.node_ids))
            errors.append(result.error)
            continue

        reported: set[NodeID] = set()
        for root, reachable in _reach(component_edges, result.roots).items():
            sub_order = tuple(node_id for node_id in result.order if node_id in reachable)
            order = tuple(node_map[node_id] for node_id in sub_order)
            tree_edges = tuple(edge for edge in component_edges if edge.source in reachable)
            try:
                tree = build(order, tree_edges)
            except TreeBuildError as exc:
                # A gate shared by several roots is reported once
                fresh = [d for d in exc.diagnostics if d.node_id not in reported]
                reported.update(d.node_id for d in fresh)
                logger.warning("tree_rejected", root=root, code="invalid_gate_arity", nodes=[d.node_id for d in exc.diagnostics])
                errors.extend(fresh)
                continue

            variables = propagate(order, tree_edges, settings.variable_prefix_length)
            trees.append(CompiledTree(root=root, order=sub_order, tree=tree, variables=variables))

    logger.debug(
        "graph_compiled",
        nodes=len(snapshot.nodes),
        edges=len(edges),
        trees=len(trees),
        errors=len(errors),
        disconnected=len(disconnected),
    )
    return CompilationResult(
        trees=tuple(trees),
        errors=tuple(errors),
        warnings=dangling,
        disconnected=disconnected,
    )
