# src/bindingtree/core/dag/variables.py
"""Variable and quantifier propagation along dependency edges.

Every dependency edge binds one object variable shared by its two
endpoints. The variable is introduced (``bound=False``) at the first node
that needs it and carried (``bound=True``) to every descendant that
references it through an edge of the same object type.

Naming works in two passes:

1. Identity: walk nodes in linear order and decide, per edge, whether the
   source already holds a matching variable (reuse) or introduces a new one.
2. Naming: a variable is visible at its introducing node and at all of
   that node's descendants. Variables are named in introduction order, each
   avoiding the names of already-named variables whose visibility overlaps
   its own. Sibling subtrees may therefore reuse a name as long as they
   never meet; once they share a descendant the later variable is renamed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import networkx as nx

from bindingtree.contracts.enums import DependencyType
from bindingtree.contracts.graph import EventTypeNode, GraphEdge, GraphNode
from bindingtree.contracts.types import NodeID, VariableName
from bindingtree.core.dag.classify import classify_edge


@dataclass(frozen=True, slots=True)
class SelectedVariable:
    """A variable as held by one node."""

    name: VariableName
    object_type: str
    qualifier: str | None
    bound: bool


@dataclass(frozen=True, slots=True)
class EdgeVariable:
    """The variable a dependency edge binds, with its inferred quantifier."""

    edge: GraphEdge
    name: VariableName
    object_type: str
    dependency_type: DependencyType


@dataclass(frozen=True, slots=True)
class PropagationResult:
    edge_variables: tuple[EdgeVariable, ...] = ()
    node_variables: Mapping[NodeID, tuple[SelectedVariable, ...]] = field(default_factory=dict)

    def variables_for(self, node_id: NodeID) -> tuple[SelectedVariable, ...]:
        return self.node_variables.get(node_id, ())

    def variable_for(self, edge: GraphEdge) -> EdgeVariable | None:
        for assignment in self.edge_variables:
            if assignment.edge == edge:
                return assignment
        return None

    def to_json(self) -> dict[str, Any]:
        """Wire shape: the variable of each dependency edge and the variables each node holds."""
        return {
            "edges": [
                {
                    "source": assignment.edge.source,
                    "target": assignment.edge.target,
                    "name": assignment.name,
                    "objectType": assignment.object_type,
                    "dependencyType": assignment.dependency_type.value,
                }
                for assignment in self.edge_variables
            ],
            "nodes": {
                node_id: [
                    {"name": v.name, "objectType": v.object_type, "qualifier": v.qualifier, "bound": v.bound}
                    for v in held
                ]
                for node_id, held in self.node_variables.items()
            },
        }


@dataclass(slots=True)
class _Variable:
    """Working record for one variable identity during propagation."""

    key: int
    object_type: str
    quantifies_set: bool
    introducer: NodeID
    name: VariableName | None = None
    fixed: bool = False


@dataclass(slots=True)
class _Holding:
    variable: _Variable
    qualifier: str | None
    bound: bool


def base_name(object_type: str, dependency_type: DependencyType, prefix_length: int = 2) -> str:
    """Variable base name: leading characters of the object type.

    Upper-case when the variable quantifies over a set (ALL,
    EXISTS_IN_SOURCE), lower-case for a single witness.
    """
    return _stem(object_type, dependency_type.quantifies_set, prefix_length)


def _stem(object_type: str, quantifies_set: bool, prefix_length: int) -> str:
    prefix = object_type[:prefix_length]
    return prefix.upper() if quantifies_set else prefix.lower()


def _declared_quantifies_set(name: str) -> bool:
    stem = name.rsplit("_", 1)[0]
    return stem.isupper()


def _descendant_regions(order: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> dict[NodeID, frozenset[NodeID]]:
    graph: nx.DiGraph[NodeID] = nx.DiGraph()
    graph.add_nodes_from(node.id for node in order)
    graph.add_edges_from((edge.source, edge.target) for edge in edges if edge.source in graph and edge.target in graph)
    return {node.id: frozenset(nx.descendants(graph, node.id)) | {node.id} for node in order}


def _pick_name(base: str, taken: set[str]) -> VariableName:
    suffix = 0
    while f"{base}_{suffix}" in taken:
        suffix += 1
    return VariableName(f"{base}_{suffix}")


def propagate(
    order: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    prefix_length: int = 2,
) -> PropagationResult:
    """Assign variables to every dependency edge between nodes of order.

    Args:
        order: Nodes in linearizer order (parents before children)
        edges: Resolved edges; structural edges only contribute to visibility
        prefix_length: Characters of the object type used for base names

    Returns:
        PropagationResult with one EdgeVariable per dependency edge (edge
        order) and the variables each node holds (introduction order).
    """
    nodes = {node.id: node for node in order}
    holdings: dict[NodeID, list[_Holding]] = {node.id: [] for node in order}
    variables: list[_Variable] = []

    for node in order:
        if not isinstance(node, EventTypeNode):
            continue
        for declared in node.bound_variables:
            variable = _Variable(
                key=len(variables),
                object_type=declared.object_type,
                quantifies_set=_declared_quantifies_set(declared.name),
                introducer=node.id,
                name=declared.name,
                fixed=True,
            )
            variables.append(variable)
            holdings[node.id].append(_Holding(variable=variable, qualifier=None, bound=False))

    dependency_edges = [
        edge for edge in edges if edge.is_dependency and edge.source in nodes and edge.target in nodes and edge.source != edge.target
    ]
    edge_assignments: list[tuple[GraphEdge, _Variable, DependencyType]] = []
    for node in order:
        for edge in dependency_edges:
            if edge.source != node.id:
                continue
            dependency_type = classify_edge(edge, nodes)
            assert dependency_type is not None  # is_dependency guarantees both endpoints
            assert edge.source_endpoint is not None and edge.target_endpoint is not None
            object_type = edge.source_endpoint.object_type
            wants_set = dependency_type.quantifies_set

            held = next(
                (h.variable for h in holdings[node.id] if h.variable.object_type == object_type and h.variable.quantifies_set == wants_set),
                None,
            )
            if held is None:
                held = _Variable(key=len(variables), object_type=object_type, quantifies_set=wants_set, introducer=node.id)
                variables.append(held)
                holdings[node.id].append(_Holding(variable=held, qualifier=edge.source_endpoint.qualifier, bound=False))

            if all(h.variable is not held for h in holdings[edge.target]):
                holdings[edge.target].append(_Holding(variable=held, qualifier=edge.target_endpoint.qualifier, bound=True))
            edge_assignments.append((edge, held, dependency_type))

    regions = _descendant_regions(order, edges)
    # Declared names are fixed, so they reserve their regions before any generated name
    for variable in sorted(variables, key=lambda v: (not v.fixed, v.key)):
        if variable.fixed:
            continue
        region = regions[variable.introducer]
        taken = {other.name for other in variables if other.name is not None and not region.isdisjoint(regions[other.introducer])}
        variable.name = _pick_name(_stem(variable.object_type, variable.quantifies_set, prefix_length), taken)

    node_variables = {
        node_id: tuple(
            SelectedVariable(
                name=VariableName(h.variable.name or ""),
                object_type=h.variable.object_type,
                qualifier=h.qualifier,
                bound=h.bound,
            )
            for h in held_list
        )
        for node_id, held_list in holdings.items()
    }
    edge_variables = tuple(
        EdgeVariable(
            edge=edge,
            name=VariableName(variable.name or ""),
            object_type=variable.object_type,
            dependency_type=dependency_type,
        )
        for edge, variable, dependency_type in edge_assignments
    )
    return PropagationResult(edge_variables=edge_variables, node_variables=node_variables)
