"""
API routes for canvas operations.

Request bodies carry the canvas graph ({nodes, edges}) in its wire shape.
The service holds no canvas state between requests: save returns the
updated graph for the caller to adopt.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from rule_canvas.api.schemas.canvas import (
    ConnectionValidateRequest,
    ConnectionValidateResponse,
    DeleteRuleResponse,
    MaterializeRequest,
    RuleV2WithUI,
    RuleValidationResponse,
    SaveRuleRequest,
    SaveRuleResponse,
    VisibleKeysRequest,
    VisibleKeysResponse,
)
from rule_canvas.core.dependencies import EventBusDep, MetadataDep, RuleStoreDep
from rule_canvas.editors import RuleEditor, visible_keys
from rule_canvas.graph import (
    RuleGraph,
    export_rule,
    export_rule_records,
    is_valid_connection,
    materialize,
    materialize_from_store,
)
from rule_canvas.services.backend_sync import delete_rule

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/canvas", tags=["canvas"])


@router.post("/connections/validate")
async def validate_connection(payload: ConnectionValidateRequest) -> ConnectionValidateResponse:
    """Whether the proposed edge may be added to the graph."""
    return ConnectionValidateResponse(
        valid=is_valid_connection(payload.connection, payload.nodes, payload.edges)
    )


@router.post(
    "/rules/{rule_id}/export", response_model=RuleV2WithUI, response_model_exclude_none=True
)
async def export_single_rule(rule_id: str, graph: RuleGraph) -> dict[str, Any]:
    """Serialize one rule and its connected children to RuleV2WithUI."""
    return export_rule(graph.nodes, graph.edges, rule_id)


@router.post("/export")
async def export_all_rules(graph: RuleGraph) -> list[dict[str, Any]]:
    """Bulk export: one record per rule node on the canvas."""
    return export_rule_records(graph.nodes, graph.edges)


@router.post("/rules/{rule_id}/validate")
async def validate_rule(
    rule_id: str, graph: RuleGraph, metadata: MetadataDep
) -> RuleValidationResponse:
    """Run the save gate without saving."""
    editor = RuleEditor(graph, rule_id, metadata)
    errors = editor.validate()
    return RuleValidationResponse(
        rule_id=rule_id,
        valid=not errors,
        can_save=editor.can_save(),
        connected_counts=editor.connected_counts(),
        errors=errors,
    )


@router.post("/rules/{rule_id}/save")
async def save_single_rule(
    rule_id: str,
    payload: SaveRuleRequest,
    store: RuleStoreDep,
    metadata: MetadataDep,
    events: EventBusDep,
) -> SaveRuleResponse:
    """
    Validate and persist one rule.

    A ``backendId`` in the body takes precedence over the one cached on the
    rule node.
    """
    graph = RuleGraph(nodes=payload.nodes, edges=payload.edges)
    editor = RuleEditor(graph, rule_id, metadata)
    if payload.backend_id is not None:
        editor.data.backend_id = payload.backend_id

    backend_id = await editor.save(store, events=events)
    return SaveRuleResponse(
        rule_id=rule_id,
        backend_id=backend_id,
        state=editor.state,
        nodes=graph.nodes,
        edges=graph.edges,
    )


@router.delete("/rules/{backend_id}")
async def delete_persisted_rule(
    backend_id: str, store: RuleStoreDep, events: EventBusDep
) -> DeleteRuleResponse:
    """Delete a persisted rule; a blank id is a no-op."""
    deleted = await delete_rule(store, backend_id, events=events)
    return DeleteRuleResponse(backend_id=backend_id, deleted=deleted)


@router.get("/materialize")
async def materialize_canvas(store: RuleStoreDep) -> RuleGraph:
    """Rebuild the canvas from every record in the rule store."""
    return await materialize_from_store(store)


@router.post("/materialize")
async def materialize_records(payload: MaterializeRequest) -> RuleGraph:
    """Rebuild a canvas from records supplied by the caller (e.g. a backup file)."""
    return materialize(payload.records)


@router.post("/triggers/visible-keys")
async def trigger_visible_keys(
    payload: VisibleKeysRequest, metadata: MetadataDep
) -> VisibleKeysResponse:
    """Parameter keys the trigger form shows for the current values."""
    keys = visible_keys(payload.trigger_type, payload.parameters, metadata)
    return VisibleKeysResponse(trigger_type=payload.trigger_type, keys=sorted(keys))
