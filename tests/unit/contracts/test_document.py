# tests/unit/contracts/test_document.py
"""Tests for the graph document schema at the editor trust boundary."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from bindingtree.contracts import EdgeEndpoint, EventTypeNode, GateKind, GateNode, ObjectVariable, QualifierInfo
from bindingtree.contracts.document import GraphDocument


def _document() -> dict[str, Any]:
    return {
        "nodes": [
            {
                "id": "place",
                "type": "eventType",
                "eventType": "place order",
                "position": {"x": 10, "y": 20},
                "qualifiers": {
                    "order": {"qualifier": "order", "multiple": False, "objectTypes": ["orders"]},
                    "items": {"qualifier": "items", "multiple": True, "objectTypes": ["items"]},
                },
                "boundVariables": [{"name": "or_0", "objectType": "orders"}],
                "box": {"newEventVars": {"0": ["e"]}},
            },
            {"id": "pay", "eventType": "pay order", "qualifiers": {"order": {"qualifier": "order"}}},
            {"id": "gate-1", "type": "gate", "gate": "or"},
        ],
        "edges": [
            {
                "source": "place",
                "target": "pay",
                "sourceHandle": {"qualifier": "order", "objectType": "orders"},
                "targetHandle": {"qualifier": "order", "objectType": "orders"},
                "name": "then",
                "style": {"stroke": "red"},
            },
            {"source": "gate-1", "target": "place"},
        ],
    }


class TestGraphDocument:
    def test_to_snapshot(self) -> None:
        graph = GraphDocument.model_validate(_document()).to_snapshot()

        place, pay, gate_node = graph.nodes
        assert isinstance(place, EventTypeNode)
        assert place.event_type == "place order"
        assert place.qualifier_info["items"] == QualifierInfo(qualifier="items", multiple=True, object_types=("items",))
        assert place.bound_variables == (ObjectVariable(name="or_0", object_type="orders"),)
        assert place.box_content == {"newEventVars": {"0": ["e"]}}
        assert isinstance(pay, EventTypeNode)
        assert pay.qualifier_info["order"].multiple is False
        assert gate_node == GateNode(id="gate-1", gate=GateKind.OR)

        dependency, structural = graph.edges
        assert dependency.is_dependency
        assert dependency.source_endpoint == EdgeEndpoint(qualifier="order", object_type="orders")
        assert dependency.name == "then"
        assert not structural.is_dependency

    def test_empty_document(self) -> None:
        graph = GraphDocument.model_validate({}).to_snapshot()

        assert graph.nodes == ()
        assert graph.edges == ()

    def test_gate_without_kind_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must declare 'gate'"):
            GraphDocument.model_validate({"nodes": [{"id": "g", "type": "gate"}]})

    def test_event_without_event_type_rejected(self) -> None:
        with pytest.raises(ValidationError, match="eventType"):
            GraphDocument.model_validate({"nodes": [{"id": "a"}]})

    def test_unknown_gate_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GraphDocument.model_validate({"nodes": [{"id": "g", "type": "gate", "gate": "xor"}]})

    def test_duplicate_node_ids_rejected(self) -> None:
        document = {"nodes": [{"id": "a", "eventType": "x"}, {"id": "a", "eventType": "y"}]}

        with pytest.raises(ValidationError, match="Duplicate node ids"):
            GraphDocument.model_validate(document)

    def test_snake_case_field_names_accepted(self) -> None:
        document = {"nodes": [{"id": "a", "event_type": "x", "bound_variables": [{"name": "v", "object_type": "t"}]}]}

        (node,) = GraphDocument.model_validate(document).to_snapshot().nodes

        assert isinstance(node, EventTypeNode)
        assert node.bound_variables == (ObjectVariable(name="v", object_type="t"),)
