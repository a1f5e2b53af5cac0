# src/bindingtree/core/dag/builder.py
"""Tree construction from a linearized order.

Construction logic only: the order (and therefore every node's index) is
fixed by the linearizer, this module maps nodes and edges onto it.

The result is a tree, not a DAG. A node with several parents in the order
(a join) becomes the child of exactly one of them, its tree parent:

1. A gate parent is preferred over an event-type parent, since gates need
   a fixed number of children and boxes do not.
2. Among parents of the same kind, the one latest in the order wins.

Edges to other parents stay in the graph for variable propagation but are
not tree edges, so they carry no child index and no edge name.
"""

from __future__ import annotations

from collections.abc import Sequence

from bindingtree.contracts.diagnostics import InvalidGateArity
from bindingtree.contracts.enums import GateKind
from bindingtree.contracts.graph import EventTypeNode, GateNode, GraphEdge, GraphNode
from bindingtree.contracts.tree import AndNode, BoxNode, LinearTree, NotNode, OrNode, TreeNode
from bindingtree.contracts.types import EdgeKey, NodeID
from bindingtree.core.dag.models import TreeBuildError


def _tree_edges(order: Sequence[GraphNode], edges: Sequence[GraphEdge], index_map: dict[NodeID, int]) -> list[GraphEdge]:
    """Edges that join each node to its tree parent, in edge order.

    Parallel edges between a node and its tree parent are all kept; the
    callers collapse them. Self loops and edges leaving order are dropped.
    """
    is_gate = {node.id: isinstance(node, GateNode) for node in order}
    tree_parent: dict[NodeID, NodeID] = {}
    for edge in edges:
        if edge.source not in index_map or edge.target not in index_map or edge.source == edge.target:
            continue
        current = tree_parent.get(edge.target)
        if current is None or (is_gate[edge.source], index_map[edge.source]) > (is_gate[current], index_map[current]):
            tree_parent[edge.target] = edge.source
    return [edge for edge in edges if edge.target in tree_parent and tree_parent[edge.target] == edge.source]


def _child_indices(edges: Sequence[GraphEdge], index_map: dict[NodeID, int]) -> dict[NodeID, tuple[int, ...]]:
    """Distinct child indices per node, in edge order."""
    children: dict[NodeID, dict[int, None]] = {node_id: {} for node_id in index_map}
    for edge in edges:
        children[edge.source][index_map[edge.target]] = None
    return {node_id: tuple(indices) for node_id, indices in children.items()}


def _gate_node(node: GateNode, children: tuple[int, ...]) -> TreeNode | InvalidGateArity:
    expected = node.gate.arity
    if len(children) != expected:
        return InvalidGateArity(node_id=node.id, expected=expected, actual=len(children))
    match node.gate:
        case GateKind.AND:
            return AndNode(left=children[0], right=children[1])
        case GateKind.OR:
            return OrNode(left=children[0], right=children[1])
        case GateKind.NOT:
            return NotNode(child=children[0])


def _edge_names(edges: Sequence[GraphEdge], index_map: dict[NodeID, int]) -> tuple[tuple[EdgeKey, str], ...]:
    names: dict[EdgeKey, str] = {}
    for edge in edges:
        if edge.name is None:
            continue
        key = (index_map[edge.source], index_map[edge.target])
        # First named edge wins when the editor holds two links between the same pair
        names.setdefault(key, edge.name)
    return tuple(names.items())


def build(order: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> LinearTree:
    """Convert a linear order and its edges into an index-addressed tree.

    Args:
        order: Nodes in linearizer order; position defines the tree index
        edges: Resolved edges. Edges touching nodes outside order are ignored,
            and only edges to a node's tree parent become tree edges.

    Returns:
        LinearTree; empty when order is empty.

    Raises:
        TreeBuildError: If any gate has the wrong number of children. All
            offending gates are reported; none is repaired.
    """
    if not order:
        return LinearTree()

    index_map = {node.id: index for index, node in enumerate(order)}
    tree_edges = _tree_edges(order, edges, index_map)
    children = _child_indices(tree_edges, index_map)

    tree_nodes: list[TreeNode] = []
    arity_errors: list[InvalidGateArity] = []
    for node in order:
        match node:
            case EventTypeNode(box_content=content):
                tree_nodes.append(BoxNode(content=dict(content), children=children[node.id]))
            case GateNode():
                built = _gate_node(node, children[node.id])
                if isinstance(built, InvalidGateArity):
                    arity_errors.append(built)
                else:
                    tree_nodes.append(built)

    if arity_errors:
        raise TreeBuildError(tuple(arity_errors))

    return LinearTree(nodes=tuple(tree_nodes), edge_names=_edge_names(tree_edges, index_map))
