# tests/unit/core/dag/test_variables.py
"""Tests for variable and quantifier propagation."""

from __future__ import annotations

from bindingtree.contracts import DependencyType, GateKind, NodeID
from bindingtree.core.dag import SelectedVariable, propagate
from bindingtree.core.dag.variables import base_name
from tests.helpers.graphs import dep, event, gate, link


def _names(result, node_id: str) -> list[str]:  # type: ignore[no-untyped-def]
    return [v.name for v in result.variables_for(NodeID(node_id))]


class TestBaseName:
    def test_single_witness_is_lower_case(self) -> None:
        assert base_name("order", DependencyType.SIMPLE) == "or"
        assert base_name("Items", DependencyType.EXISTS_IN_TARGET) == "it"

    def test_set_quantifier_is_upper_case(self) -> None:
        assert base_name("order", DependencyType.ALL) == "OR"
        assert base_name("items", DependencyType.EXISTS_IN_SOURCE) == "IT"

    def test_prefix_length(self) -> None:
        assert base_name("order", DependencyType.SIMPLE, prefix_length=1) == "o"

    def test_short_object_type(self) -> None:
        assert base_name("x", DependencyType.ALL) == "X"


class TestPropagate:
    def test_simple_dependency(self) -> None:
        edge = dep("A", "B")

        result = propagate([event("A"), event("B")], [edge])

        assignment = result.variable_for(edge)
        assert assignment is not None
        assert assignment.name == "or_0"
        assert assignment.object_type == "order"
        assert assignment.dependency_type == DependencyType.SIMPLE
        assert result.variables_for(NodeID("A")) == (SelectedVariable(name="or_0", object_type="order", qualifier="one", bound=False),)
        assert result.variables_for(NodeID("B")) == (SelectedVariable(name="or_0", object_type="order", qualifier="one", bound=True),)

    def test_set_dependency_is_upper_case(self) -> None:
        edge = dep("A", "B", "many", "many")

        result = propagate([event("A"), event("B")], [edge])

        assignment = result.variable_for(edge)
        assert assignment is not None
        assert assignment.name == "OR_0"
        assert assignment.dependency_type == DependencyType.ALL

    def test_chain_carries_one_variable(self) -> None:
        """A -> B -> C over the same object type shares the variable introduced at A."""
        edges = [dep("A", "B"), dep("B", "C")]

        result = propagate([event("A"), event("B"), event("C")], edges)

        assert [v.name for v in result.edge_variables] == ["or_0", "or_0"]
        assert result.variables_for(NodeID("B"))[0].bound
        assert result.variables_for(NodeID("C"))[0].bound
        assert not result.variables_for(NodeID("A"))[0].bound

    def test_different_quantifiers_get_distinct_variables(self) -> None:
        single = dep("A", "B", "one", "one")
        many = dep("A", "C", "many", "many")

        result = propagate([event("A"), event("B"), event("C")], [single, many])

        assert _names(result, "A") == ["or_0", "OR_0"]

    def test_different_object_types_get_distinct_variables(self) -> None:
        edges = [dep("A", "B", object_type="order"), dep("A", "C", object_type="items")]

        result = propagate([event("A"), event("B"), event("C")], edges)

        assert _names(result, "A") == ["or_0", "it_0"]

    def test_sibling_subtrees_may_reuse_names(self) -> None:
        """Variables whose visibility never meets can share a name."""
        order = [gate("G", GateKind.AND), event("A"), event("B"), event("X"), event("Y")]
        edges = [link("G", "A"), link("G", "B"), dep("A", "X"), dep("B", "Y")]

        result = propagate(order, edges)

        assert _names(result, "X") == ["or_0"]
        assert _names(result, "Y") == ["or_0"]

    def test_join_forces_distinct_names(self) -> None:
        """Once two branches share a descendant, the later variable is renamed."""
        order = [gate("G", GateKind.AND), event("A"), event("B"), event("J")]
        edges = [link("G", "A"), link("G", "B"), dep("A", "J"), dep("B", "J")]

        result = propagate(order, edges)

        assert _names(result, "A") == ["or_0"]
        assert _names(result, "B") == ["or_1"]
        assert _names(result, "J") == ["or_0", "or_1"]

    def test_declared_variable_is_reused(self) -> None:
        order = [event("A", declares=(("or_7", "order"),)), event("B")]

        result = propagate(order, [dep("A", "B")])

        assert [v.name for v in result.edge_variables] == ["or_7"]
        assert result.variables_for(NodeID("A"))[0].qualifier is None

    def test_declared_name_is_reserved(self) -> None:
        """A declared name is never handed out to a generated variable it can see."""
        order = [event("A", declares=(("or_0", "customer"),)), event("B")]

        result = propagate(order, [dep("A", "B")])

        assert [v.name for v in result.edge_variables] == ["or_1"]

    def test_structural_edges_bind_nothing(self) -> None:
        result = propagate([event("A"), event("B")], [link("A", "B")])

        assert result.edge_variables == ()
        assert result.variables_for(NodeID("B")) == ()

    def test_prefix_length_one(self) -> None:
        result = propagate([event("A"), event("B")], [dep("A", "B")], prefix_length=1)

        assert [v.name for v in result.edge_variables] == ["o_0"]
