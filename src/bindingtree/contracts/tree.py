"""Binding-box tree: the compiled, index-addressed output consumed by the evaluation engine.

Tree nodes form a closed union (BoxNode | AndNode | OrNode | NotNode).
Consumers match on it exhaustively; adding a variant means every
``match`` in the package must learn about it.

Wire shape::

    {"nodes": [{"Box": [content, [1, 2]]}, {"AND": [3, 4]}, {"NOT": 5}, ...],
     "edgeNames": [[[0, 1], "name"], ...]}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias, assert_never

from bindingtree.contracts.types import BoxContent, EdgeKey


@dataclass(frozen=True, slots=True)
class BoxNode:
    """Event-type box with its binding-box content and child indices."""

    content: BoxContent = field(default_factory=dict)
    children: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class AndNode:
    left: int
    right: int


@dataclass(frozen=True, slots=True)
class OrNode:
    left: int
    right: int


@dataclass(frozen=True, slots=True)
class NotNode:
    child: int


TreeNode: TypeAlias = BoxNode | AndNode | OrNode | NotNode


def child_indices(node: TreeNode) -> tuple[int, ...]:
    """Child indices of a tree node, in serialization order."""
    match node:
        case BoxNode(children=children):
            return children
        case AndNode(left=left, right=right) | OrNode(left=left, right=right):
            return (left, right)
        case NotNode(child=child):
            return (child,)
        case _:
            assert_never(node)


def shift_node(node: TreeNode, offset: int) -> TreeNode:
    """Return a copy of node with every child index moved by offset."""
    match node:
        case BoxNode(content=content, children=children):
            return BoxNode(content=content, children=tuple(c + offset for c in children))
        case AndNode(left=left, right=right):
            return AndNode(left=left + offset, right=right + offset)
        case OrNode(left=left, right=right):
            return OrNode(left=left + offset, right=right + offset)
        case NotNode(child=child):
            return NotNode(child=child + offset)
        case _:
            assert_never(node)


def node_to_json(node: TreeNode) -> dict[str, Any]:
    match node:
        case BoxNode(content=content, children=children):
            return {"Box": [dict(content), list(children)]}
        case AndNode(left=left, right=right):
            return {"AND": [left, right]}
        case OrNode(left=left, right=right):
            return {"OR": [left, right]}
        case NotNode(child=child):
            return {"NOT": child}
        case _:
            assert_never(node)


def node_from_json(data: Mapping[str, Any]) -> TreeNode:
    """Parse one serialized tree node.

    Raises:
        ValueError: If the mapping is not exactly one known variant
    """
    if len(data) != 1:
        raise ValueError(f"Tree node must have exactly one variant key, got {sorted(data)}")
    ((tag, value),) = data.items()
    if tag == "Box":
        content, children = value
        return BoxNode(content=dict(content), children=tuple(int(c) for c in children))
    if tag == "AND":
        left, right = value
        return AndNode(left=int(left), right=int(right))
    if tag == "OR":
        left, right = value
        return OrNode(left=int(left), right=int(right))
    if tag == "NOT":
        return NotNode(child=int(value))
    raise ValueError(f"Unknown tree node variant: '{tag}'")


@dataclass(frozen=True, slots=True)
class LinearTree:
    """Ordered tree nodes plus user-assigned edge names.

    Index 0 is a root; child indices point into the same sequence.
    Never edited in place: regenerate it from a graph snapshot instead.
    """

    nodes: tuple[TreeNode, ...] = ()
    edge_names: tuple[tuple[EdgeKey, str], ...] = ()

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def edge_name_map(self) -> dict[EdgeKey, str]:
        return dict(self.edge_names)

    def to_json(self) -> dict[str, Any]:
        """Serialize to the evaluation engine's JSON shape."""
        return {
            "nodes": [node_to_json(node) for node in self.nodes],
            "edgeNames": [[[parent, child], name] for (parent, child), name in self.edge_names],
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> LinearTree:
        """Parse the evaluation engine's JSON shape.

        Raises:
            ValueError: If any node or edge-name entry is malformed
        """
        nodes = tuple(node_from_json(node) for node in data["nodes"])
        edge_names: list[tuple[EdgeKey, str]] = []
        for entry in data.get("edgeNames", []):
            (parent, child), name = entry
            edge_names.append(((int(parent), int(child)), str(name)))
        return cls(nodes=nodes, edge_names=tuple(edge_names))
