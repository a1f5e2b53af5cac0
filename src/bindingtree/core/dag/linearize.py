# src/bindingtree/core/dag/linearize.py
"""Root/reachability linearization.

Produces an evaluation order in which every node comes after all of its
parents, starting from root nodes (no incoming edges). The ordered
``reachable`` list is at the same time the execution order and the proof
that each node is reachable from a root.

The algorithm is a fold over an immutable work list: each step takes the
current (queue, reachable) state and returns a new one, so intermediate
states can be inspected and tested directly.
"""

from __future__ import annotations

from dataclasses import dataclass

import networkx as nx

from bindingtree.contracts.diagnostics import CycleDetected, UnreachableNodes
from bindingtree.contracts.enums import QueueOrder
from bindingtree.contracts.graph import GraphEdge, GraphNode
from bindingtree.contracts.types import NodeID
from bindingtree.core.dag.models import NodeRegistry, build_registry


@dataclass(frozen=True, slots=True)
class Partition:
    """Nodes split by connectivity, each group in snapshot order."""

    disconnected: tuple[NodeID, ...]
    roots: tuple[NodeID, ...]
    connected: tuple[NodeID, ...]


@dataclass(frozen=True, slots=True)
class LinearizerState:
    """One point of the fold: nodes waiting, and nodes already ordered."""

    queue: tuple[NodeID, ...]
    reachable: tuple[NodeID, ...] = ()

    @property
    def done(self) -> bool:
        return not self.queue


@dataclass(frozen=True, slots=True)
class LinearizationResult:
    """Outcome of linearizing one graph fragment.

    order is always the reachable prefix that could be established, even
    when error is set. When error is None, each root's tree indices are
    this order filtered to the nodes that root reaches.
    """

    order: tuple[NodeID, ...]
    roots: tuple[NodeID, ...]
    disconnected: tuple[NodeID, ...] = ()
    error: CycleDetected | UnreachableNodes | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def partition(registry: NodeRegistry) -> Partition:
    disconnected: list[NodeID] = []
    roots: list[NodeID] = []
    connected: list[NodeID] = []
    for node_id, entry in registry.items():
        if entry.is_disconnected:
            disconnected.append(node_id)
            continue
        if entry.is_root:
            roots.append(node_id)
        connected.append(node_id)
    return Partition(disconnected=tuple(disconnected), roots=tuple(roots), connected=tuple(connected))


def _ordered_queue(queue: tuple[NodeID, ...], registry: NodeRegistry, queue_order: QueueOrder) -> tuple[NodeID, ...]:
    if queue_order == QueueOrder.INSERTION:
        return queue
    # sorted() is stable: equal parent counts keep insertion order
    return tuple(sorted(queue, key=lambda node_id: -len(registry[node_id].parents)))


def step(
    state: LinearizerState,
    registry: NodeRegistry,
    queue_order: QueueOrder = QueueOrder.PARENT_COUNT,
) -> LinearizerState | None:
    """Advance the fold by one node.

    Takes the first queued node whose parents are all reachable, appends it
    to reachable and enqueues its children that are neither queued nor
    reachable yet.

    Returns:
        The next state, or None if no queued node can be satisfied (cycle).
    """
    queue = _ordered_queue(state.queue, registry, queue_order)
    reached = set(state.reachable)
    for position, node_id in enumerate(queue):
        if all(parent in reached for parent in registry[node_id].parents):
            break
    else:
        return None

    remaining = queue[:position] + queue[position + 1 :]
    reachable = state.reachable + (node_id,)
    pending = set(remaining) | set(reachable)
    enqueued = tuple(child for child in registry[node_id].children if child not in pending)
    return LinearizerState(queue=remaining + enqueued, reachable=reachable)


def _cycle_witness(registry: NodeRegistry, start: tuple[NodeID, ...]) -> tuple[NodeID, ...]:
    """Find one cycle among the ancestors of start, in edge direction."""
    graph: nx.DiGraph[NodeID] = nx.DiGraph()
    for node_id, entry in registry.items():
        graph.add_node(node_id)
        for child in entry.children:
            graph.add_edge(node_id, child)
    try:
        # Walking the reversed graph from a blocked node finds the cycle it waits on
        cycle_edges = nx.find_cycle(graph.reverse(copy=False), source=list(start))
    except nx.NetworkXNoCycle:
        return ()
    return tuple(reversed([NodeID(u) for u, _v in cycle_edges]))


def linearize_registry(registry: NodeRegistry, queue_order: QueueOrder = QueueOrder.PARENT_COUNT) -> LinearizationResult:
    """Linearize an already-built registry. See linearize()."""
    parts = partition(registry)

    if parts.connected and not parts.roots:
        # Every connected node has a parent, so the fragment must contain a cycle
        return LinearizationResult(
            order=(),
            roots=(),
            disconnected=parts.disconnected,
            error=CycleDetected(node_ids=parts.connected, cycle=_cycle_witness(registry, parts.connected)),
        )

    state = LinearizerState(queue=parts.roots)
    while not state.done:
        next_state = step(state, registry, queue_order)
        if next_state is None:
            blocked = state.queue
            return LinearizationResult(
                order=state.reachable,
                roots=parts.roots,
                disconnected=parts.disconnected,
                error=CycleDetected(node_ids=blocked, cycle=_cycle_witness(registry, blocked)),
            )
        state = next_state

    reached = set(state.reachable)
    unreachable = tuple(node_id for node_id in parts.connected if node_id not in reached)
    return LinearizationResult(
        order=state.reachable,
        roots=parts.roots,
        disconnected=parts.disconnected,
        error=UnreachableNodes(node_ids=unreachable) if unreachable else None,
    )


def linearize(
    nodes: tuple[GraphNode, ...] | list[GraphNode],
    edges: tuple[GraphEdge, ...] | list[GraphEdge],
    queue_order: QueueOrder = QueueOrder.PARENT_COUNT,
) -> LinearizationResult:
    """Order a graph fragment so that every node follows all of its parents.

    Disconnected nodes (no edges at all) are reported and left out of the
    order. Failures are returned, not raised:

    - CycleDetected when the queue still holds nodes but none can be
      satisfied, or when connected nodes exist but none is a root.
    - UnreachableNodes when the queue drains and connected nodes were
      never reached (they hang off a rootless fragment).

    Args:
        nodes: Nodes of the fragment, in snapshot order
        edges: Resolved edges (both ends present in nodes)
        queue_order: Work-queue ordering applied before each pass

    Returns:
        LinearizationResult with the order and at most one error.
    """
    return linearize_registry(build_registry(nodes, edges), queue_order)
