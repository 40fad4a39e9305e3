from __future__ import annotations

from typing import Any

from pydantic import Field

from rule_canvas.domain.enums import NodeType, SaveState
from rule_canvas.graph.model import (
    CanvasModel,
    Connection,
    Edge,
    Node,
    ParamKV,
    Position,
    RuleGraph,
)

# =============================================================================
# RuleV2WithUI
# =============================================================================


class TriggerSpec(CanvasModel):
    type: str = ""
    parameters: dict[str, str] = Field(default_factory=dict)


class ConditionSpec(CanvasModel):
    fact: str
    operator: str
    value: str | None = None


class ActionSpec(CanvasModel):
    type: str
    parameters: dict[str, str] = Field(default_factory=dict)


class UiNode(CanvasModel):
    type: NodeType
    position: Position


class UiEdge(CanvasModel):
    id: str
    source: str
    target: str


class UiGraph(CanvasModel):
    nodes: dict[str, UiNode] = Field(default_factory=dict)
    edges: list[UiEdge] = Field(default_factory=list)


class RuleV2WithUI(CanvasModel):
    """Portable rule document with its minimal canvas layout."""

    name: str
    trigger: TriggerSpec
    conditions: list[ConditionSpec] = Field(default_factory=list)
    actions: list[ActionSpec] = Field(default_factory=list)
    ui: UiGraph = Field(alias="_ui")


# =============================================================================
# Requests
# =============================================================================


class ConnectionValidateRequest(RuleGraph):
    connection: Connection


class SaveRuleRequest(RuleGraph):
    backend_id: str | int | float | None = None


class MaterializeRequest(CanvasModel):
    records: list[dict[str, Any]] = Field(default_factory=list)


class VisibleKeysRequest(CanvasModel):
    trigger_type: str = ""
    parameters: list[ParamKV] = Field(default_factory=list)


# =============================================================================
# Responses
# =============================================================================


class ConnectionValidateResponse(CanvasModel):
    valid: bool


class RuleValidationResponse(CanvasModel):
    rule_id: str
    valid: bool
    can_save: bool
    connected_counts: dict[str, int]
    errors: list[dict[str, Any]] = Field(default_factory=list)


class SaveRuleResponse(CanvasModel):
    rule_id: str
    backend_id: str | int | float
    state: SaveState
    nodes: list[Node]
    edges: list[Edge]


class DeleteRuleResponse(CanvasModel):
    backend_id: str
    deleted: bool


class VisibleKeysResponse(CanvasModel):
    trigger_type: str
    keys: list[str]
