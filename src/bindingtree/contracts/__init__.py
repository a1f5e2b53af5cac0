"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes are NOT re-exported here - import them from
bindingtree.core.config.

Import patterns:
    # Contracts (lightweight, no heavy dependencies)
    from bindingtree.contracts import GraphSnapshot, LinearTree, DependencyType

    # Settings classes
    from bindingtree.core.config import CompilerSettings
"""

from bindingtree.contracts.diagnostics import (
    CompilationError,
    CycleDetected,
    DanglingEdge,
    InvalidGateArity,
    UnreachableNodes,
)
from bindingtree.contracts.enums import DependencyType, GateKind, NodeKind, QueueOrder
from bindingtree.contracts.graph import (
    EdgeEndpoint,
    EventTypeNode,
    GateNode,
    GraphEdge,
    GraphNode,
    GraphSnapshot,
    ObjectVariable,
    QualifierInfo,
)
from bindingtree.contracts.tree import (
    AndNode,
    BoxNode,
    LinearTree,
    NotNode,
    OrNode,
    TreeNode,
    child_indices,
)
from bindingtree.contracts.types import BoxContent, EdgeKey, NodeID, VariableName

__all__ = [
    "AndNode",
    "BoxContent",
    "BoxNode",
    "CompilationError",
    "CycleDetected",
    "DanglingEdge",
    "DependencyType",
    "EdgeEndpoint",
    "EdgeKey",
    "EventTypeNode",
    "GateKind",
    "GateNode",
    "GraphEdge",
    "GraphNode",
    "GraphSnapshot",
    "InvalidGateArity",
    "LinearTree",
    "NodeID",
    "NodeKind",
    "NotNode",
    "ObjectVariable",
    "OrNode",
    "QualifierInfo",
    "QueueOrder",
    "TreeNode",
    "UnreachableNodes",
    "VariableName",
    "child_indices",
]
