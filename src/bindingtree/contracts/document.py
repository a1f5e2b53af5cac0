"""Pydantic schema for graph snapshots exported by the editor.

Trust boundary: documents come from the editor (or a hand-written file)
and are validated here before anything in core sees them. Unknown keys
such as node positions or edge styling are ignored.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bindingtree.contracts.enums import GateKind, NodeKind
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
from bindingtree.contracts.types import NodeID, VariableName

_DOCUMENT_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class QualifierDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    qualifier: str
    multiple: bool = False
    object_types: list[str] = Field(default_factory=list, alias="objectTypes")


class VariableDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    name: str = Field(min_length=1)
    object_type: str = Field(alias="objectType")


class EndpointDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    qualifier: str
    object_type: str = Field(alias="objectType")


class NodeDocument(BaseModel):
    """One editor node: either an event-type box or a gate."""

    model_config = _DOCUMENT_CONFIG

    id: str = Field(min_length=1)
    type: NodeKind = NodeKind.EVENT_TYPE
    event_type: str | None = Field(default=None, alias="eventType")
    qualifiers: dict[str, QualifierDocument] = Field(default_factory=dict)
    bound_variables: list[VariableDocument] = Field(default_factory=list, alias="boundVariables")
    box: dict[str, Any] = Field(default_factory=dict)
    gate: GateKind | None = None

    @model_validator(mode="after")
    def validate_variant_fields(self) -> NodeDocument:
        if self.type == NodeKind.GATE and self.gate is None:
            raise ValueError(f"Gate node '{self.id}' must declare 'gate' (and, or, not)")
        if self.type == NodeKind.EVENT_TYPE and self.event_type is None:
            raise ValueError(f"Event-type node '{self.id}' must declare 'eventType'")
        return self

    def to_node(self) -> GraphNode:
        if self.type == NodeKind.GATE:
            assert self.gate is not None  # guaranteed by validate_variant_fields
            return GateNode(id=NodeID(self.id), gate=self.gate)
        assert self.event_type is not None  # guaranteed by validate_variant_fields
        return EventTypeNode(
            id=NodeID(self.id),
            event_type=self.event_type,
            qualifier_info={
                name: QualifierInfo(
                    qualifier=info.qualifier,
                    multiple=info.multiple,
                    object_types=tuple(info.object_types),
                )
                for name, info in self.qualifiers.items()
            },
            bound_variables=tuple(ObjectVariable(name=VariableName(v.name), object_type=v.object_type) for v in self.bound_variables),
            box_content=dict(self.box),
        )


class EdgeDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    source: str
    target: str
    source_handle: EndpointDocument | None = Field(default=None, alias="sourceHandle")
    target_handle: EndpointDocument | None = Field(default=None, alias="targetHandle")
    name: str | None = None

    def to_edge(self) -> GraphEdge:
        return GraphEdge(
            source=NodeID(self.source),
            target=NodeID(self.target),
            source_endpoint=_endpoint(self.source_handle),
            target_endpoint=_endpoint(self.target_handle),
            name=self.name,
        )


def _endpoint(doc: EndpointDocument | None) -> EdgeEndpoint | None:
    if doc is None:
        return None
    return EdgeEndpoint(qualifier=doc.qualifier, object_type=doc.object_type)


class GraphDocument(BaseModel):
    """Top-level graph document: ``{"nodes": [...], "edges": [...]}``."""

    model_config = _DOCUMENT_CONFIG

    nodes: list[NodeDocument] = Field(default_factory=list)
    edges: list[EdgeDocument] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_node_ids(self) -> GraphDocument:
        counts = Counter(node.id for node in self.nodes)
        duplicates = sorted(node_id for node_id, count in counts.items() if count > 1)
        if duplicates:
            raise ValueError(f"Duplicate node ids: {duplicates}")
        return self

    def to_snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            nodes=tuple(node.to_node() for node in self.nodes),
            edges=tuple(edge.to_edge() for edge in self.edges),
        )
