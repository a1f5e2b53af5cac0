"""Structured compilation diagnostics.

Errors are returned as values, not raised: the caller decides whether a
failed component blocks compilation or whether the remaining trees are
used. Each diagnostic carries a stable ``code`` for programmatic handling
and a human-readable ``message``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypeAlias

from bindingtree.contracts.graph import GraphEdge
from bindingtree.contracts.types import NodeID


@dataclass(frozen=True, slots=True)
class CycleDetected:
    """Dependency ordering is unsatisfiable for a component.

    Attributes:
        node_ids: Nodes left waiting in the work queue (or the whole rootless component)
        cycle: One witness cycle as a node path, empty if none could be extracted
    """

    code: ClassVar[str] = "cycle_detected"

    node_ids: tuple[NodeID, ...]
    cycle: tuple[NodeID, ...] = ()

    @property
    def message(self) -> str:
        if self.cycle:
            return f"Cycle detected: {' -> '.join([*self.cycle, self.cycle[0]])}"
        return f"Cycle detected among nodes: {', '.join(self.node_ids)}"


@dataclass(frozen=True, slots=True)
class UnreachableNodes:
    """Connected nodes that no root reaches."""

    code: ClassVar[str] = "unreachable_nodes"

    node_ids: tuple[NodeID, ...]

    @property
    def message(self) -> str:
        return f"Nodes not reachable from root: {', '.join(self.node_ids)}"


@dataclass(frozen=True, slots=True)
class InvalidGateArity:
    """Gate with the wrong number of children. Never repaired."""

    code: ClassVar[str] = "invalid_gate_arity"

    node_id: NodeID
    expected: int
    actual: int

    @property
    def node_ids(self) -> tuple[NodeID, ...]:
        return (self.node_id,)

    @property
    def message(self) -> str:
        return f"Gate '{self.node_id}' requires exactly {self.expected} child(ren), found {self.actual}"


@dataclass(frozen=True, slots=True)
class DanglingEdge:
    """Edge pointing at a missing node or undeclared qualifier; skipped with a warning."""

    code: ClassVar[str] = "dangling_edge"

    edge: GraphEdge
    reason: str

    @property
    def node_ids(self) -> tuple[NodeID, ...]:
        return (self.edge.source, self.edge.target)

    @property
    def message(self) -> str:
        return f"Skipping edge {self.edge.describe()}: {self.reason}"


CompilationError: TypeAlias = CycleDetected | UnreachableNodes | InvalidGateArity
