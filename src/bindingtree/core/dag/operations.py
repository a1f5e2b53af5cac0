# src/bindingtree/core/dag/operations.py
"""Operations on compiled trees: validation, composition, decompilation.

These work on LinearTree values only and never need the original graph.
"""

from __future__ import annotations

from bindingtree.contracts.enums import GateKind
from bindingtree.contracts.graph import EventTypeNode, GateNode, GraphEdge, GraphNode, GraphSnapshot
from bindingtree.contracts.tree import AndNode, BoxNode, LinearTree, NotNode, OrNode, child_indices, shift_node
from bindingtree.contracts.types import NodeID
from bindingtree.core.dag.models import GraphValidationError

UNNAMED_EDGE_PREFIX = "unnamed_edge"


def edge_name(tree: LinearTree, parent: int, child: int, unnamed_prefix: str = UNNAMED_EDGE_PREFIX) -> str:
    """User-assigned name of an edge, or the evaluation engine's default name."""
    for key, name in tree.edge_names:
        if key == (parent, child):
            return name
    return f"{unnamed_prefix}_{parent}_{child}"


def validate_tree(tree: LinearTree) -> None:
    """Check that a LinearTree is an index-valid tree rooted at 0.

    Validates:
    1. Every child index is inside the tree and differs from its parent
    2. Index 0 is a root (no node lists it as a child)
    3. Every other index is the child of exactly one node
    4. Every index is reachable from index 0
    5. Every edge name addresses an existing parent/child pair

    Gate arity needs no check: the node types only hold the right number
    of children.

    Raises:
        GraphValidationError: If validation fails
    """
    size = len(tree.nodes)
    pairs: set[tuple[int, int]] = set()
    parents: dict[int, int] = {}
    for index, node in enumerate(tree.nodes):
        for child in child_indices(node):
            if not 0 <= child < size:
                raise GraphValidationError(f"Tree node {index} references child {child} outside tree of {size} node(s)")
            if child == index:
                raise GraphValidationError(f"Tree node {index} references itself as child")
            if child == 0:
                raise GraphValidationError(f"Tree node {index} references root index 0 as child")
            if child in parents and parents[child] != index:
                raise GraphValidationError(f"Tree node {child} has two parents: {parents[child]} and {index}")
            parents[child] = index
            pairs.add((index, child))

    # Single parents and no edge into 0: anything unreached lies on a cycle
    reached = {0} if size else set()
    frontier = list(reached)
    while frontier:
        for child in child_indices(tree.nodes[frontier.pop()]):
            if child not in reached:
                reached.add(child)
                frontier.append(child)
    unreached = sorted(set(range(size)) - reached)
    if unreached:
        raise GraphValidationError(f"Tree node(s) {unreached} not reachable from root index 0")

    for key, name in tree.edge_names:
        if key not in pairs:
            raise GraphValidationError(f"Edge name '{name}' addresses {key}, which is not an edge of the tree")


def combine_or(left_name: str, left: LinearTree, right_name: str, right: LinearTree) -> LinearTree:
    """Put two trees under a new OR root.

    The root takes index 0, the left tree starts at index 1 and the right
    tree at 1 + len(left). Edge names of both trees are shifted accordingly.

    Raises:
        GraphValidationError: If either tree is empty
    """
    if left.is_empty or right.is_empty:
        raise GraphValidationError("Cannot combine an empty tree under an OR gate")

    left_offset = 1
    right_offset = 1 + len(left)
    nodes = (
        OrNode(left=left_offset, right=right_offset),
        *(shift_node(node, left_offset) for node in left.nodes),
        *(shift_node(node, right_offset) for node in right.nodes),
    )
    edge_names = (
        ((0, left_offset), left_name),
        ((0, right_offset), right_name),
        *(((p + left_offset, c + left_offset), name) for (p, c), name in left.edge_names),
        *(((p + right_offset, c + right_offset), name) for (p, c), name in right.edge_names),
    )
    return LinearTree(nodes=nodes, edge_names=edge_names)


def tree_to_graph(tree: LinearTree, id_prefix: str = "tree") -> GraphSnapshot:
    """Decompile a tree into an editor snapshot.

    Node ids are ``{id_prefix}-node-{index}``; edges are structural links in
    child order carrying the tree's edge names. Box content is copied;
    qualifier information and event types are not part of the tree and stay
    empty. No positions are produced.
    """
    names = tree.edge_name_map()

    def node_id(index: int) -> NodeID:
        return NodeID(f"{id_prefix}-node-{index}")

    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []
    for index, tree_node in enumerate(tree.nodes):
        match tree_node:
            case BoxNode(content=content):
                nodes.append(EventTypeNode(id=node_id(index), event_type="", box_content=dict(content)))
            case AndNode():
                nodes.append(GateNode(id=node_id(index), gate=GateKind.AND))
            case OrNode():
                nodes.append(GateNode(id=node_id(index), gate=GateKind.OR))
            case NotNode():
                nodes.append(GateNode(id=node_id(index), gate=GateKind.NOT))
        for child in child_indices(tree_node):
            edges.append(GraphEdge(source=node_id(index), target=node_id(child), name=names.get((index, child))))

    return GraphSnapshot(nodes=tuple(nodes), edges=tuple(edges))
