# tests/unit/core/dag/test_operations.py
"""Tests for tree-level operations: naming, validation, OR composition, decompilation."""

from __future__ import annotations

import pytest

from bindingtree.contracts import AndNode, BoxNode, EventTypeNode, GateKind, GateNode, GraphEdge, GraphSnapshot, LinearTree, NotNode, OrNode
from bindingtree.core.dag import GraphValidationError, combine_or, compile_graph, edge_name, tree_to_graph, validate_tree

CHAIN = LinearTree(
    nodes=(BoxNode(content={"k": 1}, children=(1,)), BoxNode(content={"k": 2})),
    edge_names=(((0, 1), "then"),),
)
SINGLE = LinearTree(nodes=(BoxNode(content={"k": 3}),))


class TestEdgeName:
    def test_named_edge(self) -> None:
        assert edge_name(CHAIN, 0, 1) == "then"

    def test_unnamed_edge_gets_default_name(self) -> None:
        tree = LinearTree(nodes=CHAIN.nodes)

        assert edge_name(tree, 0, 1) == "unnamed_edge_0_1"

    def test_custom_prefix(self) -> None:
        tree = LinearTree(nodes=CHAIN.nodes)

        assert edge_name(tree, 0, 1, "edge") == "edge_0_1"


class TestValidateTree:
    def test_valid_tree(self) -> None:
        validate_tree(CHAIN)
        validate_tree(LinearTree())

    def test_child_out_of_range(self) -> None:
        tree = LinearTree(nodes=(AndNode(left=1, right=5), BoxNode()))

        with pytest.raises(GraphValidationError, match="outside tree"):
            validate_tree(tree)

    def test_self_reference(self) -> None:
        tree = LinearTree(nodes=(BoxNode(children=(1,)), NotNode(child=1)))

        with pytest.raises(GraphValidationError, match="itself"):
            validate_tree(tree)

    def test_root_as_child(self) -> None:
        tree = LinearTree(nodes=(BoxNode(children=(1,)), NotNode(child=0)))

        with pytest.raises(GraphValidationError, match="root index 0"):
            validate_tree(tree)

    def test_edge_name_on_missing_edge(self) -> None:
        tree = LinearTree(nodes=CHAIN.nodes, edge_names=(((1, 0), "backwards"),))

        with pytest.raises(GraphValidationError, match="backwards"):
            validate_tree(tree)

    def test_join_rejected(self) -> None:
        """Two roots sharing a child, flattened into one sequence."""
        tree = LinearTree(nodes=(BoxNode(children=(2,)), BoxNode(children=(2,)), BoxNode()))

        with pytest.raises(GraphValidationError, match="two parents: 0 and 1"):
            validate_tree(tree)

    def test_second_root_unreachable(self) -> None:
        tree = LinearTree(nodes=(BoxNode(children=(1,)), BoxNode(), BoxNode(children=(3,)), BoxNode()))

        with pytest.raises(GraphValidationError, match=r"\[2, 3\] not reachable"):
            validate_tree(tree)

    def test_detached_cycle_unreachable(self) -> None:
        tree = LinearTree(nodes=(BoxNode(), NotNode(child=2), NotNode(child=1)))

        with pytest.raises(GraphValidationError, match="not reachable"):
            validate_tree(tree)

    def test_compiled_trees_of_shared_child_are_valid(self) -> None:
        graph = GraphSnapshot(
            nodes=(EventTypeNode(id="R1", event_type="r1"), EventTypeNode(id="R2", event_type="r2"), EventTypeNode(id="C", event_type="c")),
            edges=(GraphEdge(source="R1", target="C"), GraphEdge(source="R2", target="C")),
        )

        trees = compile_graph(graph).trees

        assert [compiled.root for compiled in trees] == ["R1", "R2"]
        for compiled in trees:
            validate_tree(compiled.tree)


class TestCombineOr:
    def test_layout(self) -> None:
        combined = combine_or("A", CHAIN, "B", SINGLE)

        assert combined.nodes == (
            OrNode(left=1, right=3),
            BoxNode(content={"k": 1}, children=(2,)),
            BoxNode(content={"k": 2}),
            BoxNode(content={"k": 3}),
        )
        assert combined.edge_names == (((0, 1), "A"), ((0, 3), "B"), ((1, 2), "then"))
        validate_tree(combined)

    def test_nested_combination(self) -> None:
        inner = combine_or("x", SINGLE, "y", SINGLE)

        combined = combine_or("left", inner, "right", SINGLE)

        assert combined.nodes[0] == OrNode(left=1, right=4)
        assert combined.nodes[1] == OrNode(left=2, right=3)
        assert edge_name(combined, 1, 3) == "y"
        validate_tree(combined)

    def test_empty_tree_rejected(self) -> None:
        with pytest.raises(GraphValidationError, match="empty"):
            combine_or("A", LinearTree(), "B", SINGLE)


class TestTreeToGraph:
    def test_nodes_and_edges(self) -> None:
        tree = LinearTree(
            nodes=(AndNode(left=1, right=2), BoxNode(content={"k": 1}), NotNode(child=3), BoxNode()),
            edge_names=(((0, 1), "left"),),
        )

        graph = tree_to_graph(tree, id_prefix="t")

        assert graph.nodes[0] == GateNode(id="t-node-0", gate=GateKind.AND)
        assert graph.nodes[1] == EventTypeNode(id="t-node-1", event_type="", box_content={"k": 1})
        assert graph.nodes[2] == GateNode(id="t-node-2", gate=GateKind.NOT)
        assert [(e.source, e.target, e.name) for e in graph.edges] == [
            ("t-node-0", "t-node-1", "left"),
            ("t-node-0", "t-node-2", None),
            ("t-node-2", "t-node-3", None),
        ]
        assert all(not e.is_dependency for e in graph.edges)

    def test_recompiling_reproduces_tree(self, diamond_graph: GraphSnapshot) -> None:
        (compiled,) = compile_graph(diamond_graph).trees

        recompiled = compile_graph(tree_to_graph(compiled.tree))

        assert recompiled.trees[0].tree == compiled.tree

    def test_recompiling_gates(self) -> None:
        combined = combine_or("A", SINGLE, "B", SINGLE)

        recompiled = compile_graph(tree_to_graph(combined))

        assert recompiled.trees[0].tree == combined
