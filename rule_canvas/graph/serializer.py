"""
Rule serialization: canvas graph -> RuleV2WithUI.

Produces the portable rule document persisted by the rule store:

    {
      "name": "...",
      "trigger": {"type": "...", "parameters": {...}},
      "conditions": [{"fact": "...", "operator": "...", "value": "..."}],
      "actions": [{"type": "...", "parameters": {...}}],
      "_ui": {"nodes": {id: {"type", "position"}}, "edges": [{id, source, target}]}
    }

The semantic part (trigger/conditions/actions) is independent of layout.
``_ui`` carries only what is needed to put the nodes back on the canvas.

Design Principles:
- Purity: export functions never mutate the graph
- Determinism: same graph produces an identical document
- Hygiene: parameter rows with a blank key are dropped, not rejected
"""

import json
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from rule_canvas.core.errors import RuleNotFoundError
from rule_canvas.domain.enums import BOOLEAN_OPERATORS, CHILD_NODE_TYPES, DEFAULT_OPERATOR, NodeType
from rule_canvas.graph.model import (
    ActionsNodeData,
    ConditionsNodeData,
    Edge,
    Node,
    ParamKV,
    RuleNodeData,
    TriggerNodeData,
)

UNTITLED_RULE = "Untitled Rule"


def object_from_kv_list(params: Iterable[ParamKV | Mapping[str, Any]] | None) -> dict[str, str]:
    """
    Convert a parameter row list into a key -> value mapping.

    Rows whose key is empty or whitespace are dropped silently. A later row
    with the same key overwrites an earlier one.

    Example:
        >>> object_from_kv_list([{"key": "to", "value": "a@b.c"}, {"key": "", "value": "x"}])
        {'to': 'a@b.c'}
    """
    result: dict[str, str] = {}
    for row in params or []:
        if isinstance(row, Mapping):
            key, value = row.get("key"), row.get("value")
        else:
            key, value = row.key, row.value
        if not isinstance(key, str) or not key.strip():
            continue
        result[key] = "" if value is None else value
    return result


def kv_list_from_object(mapping: Mapping[str, Any] | None) -> list[ParamKV]:
    """Inverse of ``object_from_kv_list``; preserves mapping order."""
    if not isinstance(mapping, Mapping):
        return []
    return [ParamKV(key=str(k), value=v) for k, v in mapping.items()]


def canonicalize_json(obj: Any) -> Any:
    """Recursively sort mapping keys; list order is preserved."""
    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}
    if isinstance(obj, list):
        return [canonicalize_json(item) for item in obj]
    return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Deterministic JSON text for change detection.

    Example:
        >>> to_canonical_json_string({"name": "r", "actions": []})
        '{"actions":[],"name":"r"}'
    """
    return json.dumps(
        canonicalize_json(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def _select_children(rule_id: str, nodes_by_id: dict[str, Node], edges: list[Edge]) -> list[Node]:
    """First connected node of each child type, in edge order."""
    selected: dict[NodeType, Node] = {}
    for edge in edges:
        if rule_id not in (edge.source, edge.target):
            continue
        other_id = edge.target if edge.source == rule_id else edge.source
        child = nodes_by_id.get(other_id)
        if child is None or child.type not in CHILD_NODE_TYPES:
            continue
        selected.setdefault(child.type, child)
    return list(selected.values())


def _export_trigger(node: Node | None) -> dict[str, Any]:
    if node is None or not isinstance(node.data, TriggerNodeData):
        return {"type": "", "parameters": {}}
    return {
        "type": node.data.trigger_type or "",
        "parameters": object_from_kv_list(node.data.parameters),
    }


def _export_conditions(node: Node | None) -> list[dict[str, Any]]:
    if node is None or not isinstance(node.data, ConditionsNodeData):
        return []
    exported = []
    for row in node.data.conditions:
        item: dict[str, Any] = {
            "fact": row.fact or "",
            "operator": row.operator or DEFAULT_OPERATOR,
        }
        if row.operator not in BOOLEAN_OPERATORS:
            item["value"] = row.value if row.value is not None else ""
        exported.append(item)
    return exported


def _export_actions(node: Node | None) -> list[dict[str, Any]]:
    if node is None or not isinstance(node.data, ActionsNodeData):
        return []
    return [
        {"type": action.type, "parameters": object_from_kv_list(action.parameters)}
        for action in node.data.actions
    ]


def rule_display_name(data: RuleNodeData) -> str:
    return data.name or data.label or UNTITLED_RULE


def export_rule(nodes: Iterable[Node], edges: Iterable[Edge], rule_id: str) -> dict[str, Any]:
    """
    Serialize one rule node and its connected children to RuleV2WithUI.

    Args:
        nodes: Canvas nodes
        edges: Canvas edges
        rule_id: Id of the rule node to export

    Returns:
        RuleV2WithUI document as a plain dict

    Raises:
        RuleNotFoundError: If ``rule_id`` is not a rule node on the canvas
    """
    nodes = list(nodes)
    edges = list(edges)
    nodes_by_id = {n.id: n for n in nodes}

    rule = nodes_by_id.get(rule_id)
    if rule is None or rule.type != NodeType.RULE:
        raise RuleNotFoundError(f"Rule node '{rule_id}' not found", details={"rule_id": rule_id})

    children = _select_children(rule_id, nodes_by_id, edges)
    by_type = {c.type: c for c in children}
    included = [rule, *children]
    included_ids = {n.id for n in included}

    return {
        "name": rule_display_name(rule.data),
        "trigger": _export_trigger(by_type.get(NodeType.TRIGGER)),
        "conditions": _export_conditions(by_type.get(NodeType.CONDITIONS)),
        "actions": _export_actions(by_type.get(NodeType.ACTIONS)),
        "_ui": {
            "nodes": {
                n.id: {
                    "type": n.type.value,
                    "position": {"x": n.position.x, "y": n.position.y},
                }
                for n in included
            },
            "edges": [
                {"id": e.id, "source": e.source, "target": e.target}
                for e in edges
                if e.source in included_ids and e.target in included_ids
            ],
        },
    }


def export_rule_records(
    nodes: Iterable[Node], edges: Iterable[Edge], now: datetime | None = None
) -> list[dict[str, Any]]:
    """
    Serialize every rule on the canvas as a bulk-export record.

    Each record carries the rule node id, the exported spec and the export
    timestamp as both ``createdAt`` and ``updatedAt``.
    """
    nodes = list(nodes)
    edges = list(edges)
    timestamp = (now or datetime.now(UTC)).isoformat()

    records = []
    for node in nodes:
        if node.type != NodeType.RULE:
            continue
        spec = export_rule(nodes, edges, node.id)
        records.append(
            {
                "id": node.id,
                "name": spec["name"],
                "triggerType": spec["trigger"]["type"],
                "enabled": True,
                "spec": spec,
                "createdAt": timestamp,
                "updatedAt": timestamp,
            }
        )
    return records
