"""
Graph data model for the rule canvas.

A rule graph is a list of nodes (rule, trigger, conditions, actions) and a
list of undirected edges. Payload shapes use camelCase on the wire
(``triggerType``, ``backendId``) and snake_case attributes in Python.
"""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from rule_canvas.core.errors import ConflictError, NotFoundError, ValidationError
from rule_canvas.domain.enums import DEFAULT_OPERATOR, NodeType
from rule_canvas.graph.connections import is_valid_connection


class CanvasModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Position(CanvasModel):
    x: float = 0.0
    y: float = 0.0


class ParamKV(CanvasModel):
    key: str = ""
    value: str = ""

    @field_validator("key", "value", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        return v if isinstance(v, str) else str(v)


class ConditionRow(CanvasModel):
    fact: str = ""
    operator: str = DEFAULT_OPERATOR
    value: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_value(cls, v: Any) -> str | None:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, bool):
            return "true" if v else "false"
        return str(v)


class ActionRow(CanvasModel):
    type: str = ""
    parameters: list[ParamKV] = Field(default_factory=list)


class RuleNodeData(CanvasModel):
    label: str = "Rule"
    name: str = ""
    saved: bool = False
    backend_id: str | int | float | None = None


class TriggerNodeData(CanvasModel):
    label: str = "Trigger"
    trigger_type: str = ""
    parameters: list[ParamKV] = Field(default_factory=list)


class ConditionsNodeData(CanvasModel):
    label: str = "Conditions"
    conditions: list[ConditionRow] = Field(default_factory=list)


class ActionsNodeData(CanvasModel):
    label: str = "Actions"
    actions: list[ActionRow] = Field(default_factory=list)


NodeData = RuleNodeData | TriggerNodeData | ConditionsNodeData | ActionsNodeData

NODE_DATA_MODELS: dict[str, type[CanvasModel]] = {
    NodeType.RULE.value: RuleNodeData,
    NodeType.TRIGGER.value: TriggerNodeData,
    NodeType.CONDITIONS.value: ConditionsNodeData,
    NodeType.ACTIONS.value: ActionsNodeData,
}


class Node(CanvasModel):
    id: str
    type: NodeType
    position: Position = Field(default_factory=Position)
    data: NodeData

    @model_validator(mode="before")
    @classmethod
    def _parse_data_for_type(cls, values: Any) -> Any:
        """Parse ``data`` with the payload model selected by ``type``."""
        if not isinstance(values, dict):
            return values
        node_type = values.get("type")
        if isinstance(node_type, NodeType):
            node_type = node_type.value
        data_model = NODE_DATA_MODELS.get(node_type)
        if data_model is None:
            return values
        data = values.get("data")
        if data is None:
            data = {}
        if isinstance(data, BaseModel) and not isinstance(data, data_model):
            data = data.model_dump(by_alias=True)
        if isinstance(data, dict):
            data = data_model.model_validate(data)
        return {**values, "data": data}

    @model_validator(mode="after")
    def _check_data_matches_type(self) -> Node:
        expected = NODE_DATA_MODELS[self.type.value]
        if not isinstance(self.data, expected):
            raise ValueError(
                f"node '{self.id}' of type '{self.type.value}' carries {type(self.data).__name__}"
            )
        return self


class Edge(CanvasModel):
    id: str = ""
    source: str
    target: str

    @model_validator(mode="after")
    def _default_id(self) -> Edge:
        if not self.id:
            self.id = f"{self.source}-{self.target}"
        return self

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def other_end(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source


class Connection(CanvasModel):
    """A proposed edge as produced by a drag gesture; either end may be missing."""

    source: str | None = None
    target: str | None = None


def empty_node_data(node_type: NodeType | str) -> NodeData:
    """Payload of a freshly dropped palette item."""
    node_type = NodeType(node_type)
    if node_type is NodeType.RULE:
        return RuleNodeData(label="Rule name", name="New rule")
    return NODE_DATA_MODELS[node_type.value]()


def new_node(
    node_type: NodeType | str,
    position: Position | dict[str, float] | None = None,
    node_id: str | None = None,
) -> Node:
    """Create a palette node with a fresh id and an empty payload."""
    node_type = NodeType(node_type)
    if isinstance(position, dict):
        position = Position(**position)
    return Node(
        id=node_id or str(uuid.uuid4()),
        type=node_type,
        position=position or Position(),
        data=empty_node_data(node_type),
    )


class RuleGraph(CanvasModel):
    """
    The in-memory node/edge collection behind one canvas.

    It is the only shared mutable state of the editor and has exactly one
    writer at a time; nothing here locks.
    """

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Node | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def require_node(self, node_id: str) -> Node:
        node = self.get_node(node_id)
        if node is None:
            raise NotFoundError(f"Node '{node_id}' not found", details={"node_id": node_id})
        return node

    def incident_edges(self, node_id: str) -> list[Edge]:
        return [e for e in self.edges if e.touches(node_id)]

    def neighbors(self, node_id: str, node_type: NodeType | str | None = None) -> list[Node]:
        """Nodes directly connected to ``node_id``, optionally filtered by type."""
        wanted = NodeType(node_type) if node_type is not None else None
        seen: set[str] = set()
        result: list[Node] = []
        for edge in self.incident_edges(node_id):
            other_id = edge.other_end(node_id)
            if other_id in seen:
                continue
            seen.add(other_id)
            other = self.get_node(other_id)
            if other is None:
                continue
            if wanted is None or other.type == wanted:
                result.append(other)
        return result

    def rule_ids(self) -> list[str]:
        return [n.id for n in self.nodes if n.type == NodeType.RULE]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> Node:
        if self.get_node(node.id) is not None:
            raise ConflictError(f"Node '{node.id}' already exists", details={"node_id": node.id})
        self.nodes.append(node)
        return node

    def remove_node(self, node_id: str) -> Node:
        """Delete a node together with every edge incident to it."""
        node = self.require_node(node_id)
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if not e.touches(node_id)]
        return node

    def connect(self, source: str, target: str, edge_id: str | None = None) -> Edge:
        """Add an edge if the connection validator accepts it."""
        candidate = Connection(source=source, target=target)
        if not is_valid_connection(candidate, self.nodes, self.edges):
            raise ValidationError(
                "Connection rejected",
                details={"source": source, "target": target},
            )
        edge = Edge(id=edge_id or "", source=source, target=target)
        if any(e.id == edge.id for e in self.edges):
            edge = Edge(id=f"{edge.id}-{uuid.uuid4().hex[:8]}", source=source, target=target)
        self.edges.append(edge)
        return edge

    def disconnect(self, edge_id: str) -> Edge:
        edge = next((e for e in self.edges if e.id == edge_id), None)
        if edge is None:
            raise NotFoundError(f"Edge '{edge_id}' not found", details={"edge_id": edge_id})
        self.edges = [e for e in self.edges if e.id != edge_id]
        return edge
