"""
Materialization: persisted rule records -> canvas graph.

The inverse of ``export_rule`` restricted to the ``_ui`` layer. Node ids,
types and positions come from each record's ``_ui`` sub-graph; node payloads
are rebuilt from the owning record's spec.

Tie-break: when two records list the same node id, the first record wins
and later definitions of that id are ignored.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from rule_canvas.core.observability import metrics
from rule_canvas.domain.enums import DEFAULT_OPERATOR, NodeType
from rule_canvas.graph.model import (
    ActionRow,
    ActionsNodeData,
    ConditionRow,
    ConditionsNodeData,
    Edge,
    Node,
    Position,
    RuleGraph,
    RuleNodeData,
    TriggerNodeData,
)
from rule_canvas.graph.serializer import kv_list_from_object

logger = logging.getLogger(__name__)


def record_ui(record: Mapping[str, Any]) -> Mapping[str, Any] | None:
    """The ``_ui`` sub-graph of a record, read from its spec or from the record itself."""
    spec = record.get("spec")
    ui = spec.get("_ui") if isinstance(spec, Mapping) else None
    if ui is None:
        ui = record.get("_ui")
    return ui if isinstance(ui, Mapping) else None


def _record_spec(record: Mapping[str, Any]) -> Mapping[str, Any]:
    spec = record.get("spec")
    return spec if isinstance(spec, Mapping) else record


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def build_node_data(
    node_type: NodeType, record: Mapping[str, Any]
) -> RuleNodeData | TriggerNodeData | ConditionsNodeData | ActionsNodeData:
    """Rebuild a node payload of ``node_type`` from the owning record."""
    spec = _record_spec(record)

    if node_type is NodeType.RULE:
        name = _as_text(record.get("name") or spec.get("name"))
        backend_id = record.get("id")
        if not isinstance(backend_id, (str, int, float)) or isinstance(backend_id, bool):
            backend_id = None
        return RuleNodeData(label=name, name=name, saved=True, backend_id=backend_id)

    if node_type is NodeType.TRIGGER:
        trigger = _as_mapping(spec.get("trigger"))
        return TriggerNodeData(
            label="Trigger",
            trigger_type=_as_text(trigger.get("type")),
            parameters=kv_list_from_object(_as_mapping(trigger.get("parameters"))),
        )

    if node_type is NodeType.CONDITIONS:
        rows = [
            ConditionRow(
                fact=_as_text(c.get("fact")),
                operator=_as_text(c.get("operator", DEFAULT_OPERATOR)),
                value=c.get("value"),
            )
            for c in _as_list(spec.get("conditions"))
            if isinstance(c, Mapping)
        ]
        return ConditionsNodeData(label="Conditions", conditions=rows)

    actions = [
        ActionRow(
            type=_as_text(a.get("type")),
            parameters=kv_list_from_object(_as_mapping(a.get("parameters"))),
        )
        for a in _as_list(spec.get("actions"))
        if isinstance(a, Mapping)
    ]
    return ActionsNodeData(label="Actions", actions=actions)


def _parse_position(raw: Any) -> Position:
    if not isinstance(raw, Mapping):
        return Position()
    try:
        return Position.model_validate(raw)
    except ValueError:
        return Position()


def materialize(records: Iterable[Mapping[str, Any]]) -> RuleGraph:
    """
    Rebuild a canvas graph from persisted rule records.

    Args:
        records: Persisted rule records ``{id, name, spec, ...}``

    Returns:
        RuleGraph with every materialized node and the deduplicated edges

    Tolerated input:
        - records without ``_ui`` are skipped
        - node entries with an unknown type are skipped
        - non-string names, types and facts are stringified; ``null`` becomes ""
        - a node whose payload still fails validation is skipped
        - edges whose endpoints were not materialized are omitted
        - an edge without an id gets ``"{source}-{target}"``
    """
    nodes: dict[str, Node] = {}
    raw_edges: list[Mapping[str, Any]] = []

    for record in records:
        if not isinstance(record, Mapping):
            continue
        ui = record_ui(record)
        if ui is None:
            logger.debug("Skipping record without _ui", extra={"record_id": record.get("id")})
            continue

        for node_id, entry in _as_mapping(ui.get("nodes")).items():
            if node_id in nodes or not isinstance(entry, Mapping):
                continue
            try:
                node_type = NodeType(entry.get("type"))
            except ValueError:
                logger.debug(
                    "Skipping node with unknown type",
                    extra={"node_id": node_id, "node_type": entry.get("type")},
                )
                continue
            try:
                data = build_node_data(node_type, record)
            except ValueError:
                logger.debug(
                    "Skipping node with malformed payload",
                    extra={"node_id": node_id, "record_id": record.get("id")},
                )
                continue
            nodes[node_id] = Node(
                id=node_id,
                type=node_type,
                position=_parse_position(entry.get("position")),
                data=data,
            )

        raw_edges.extend(e for e in _as_list(ui.get("edges")) if isinstance(e, Mapping))

    edges: list[Edge] = []
    seen_ids: set[str] = set()
    seen_pairs: set[frozenset[str]] = set()
    for raw in raw_edges:
        source, target = raw.get("source"), raw.get("target")
        if source not in nodes or target not in nodes:
            continue
        edge = Edge(id=str(raw.get("id") or ""), source=source, target=target)
        pair = frozenset((source, target))
        if edge.id in seen_ids or pair in seen_pairs:
            continue
        seen_ids.add(edge.id)
        seen_pairs.add(pair)
        edges.append(edge)

    return RuleGraph(nodes=list(nodes.values()), edges=edges)


async def materialize_from_store(store) -> RuleGraph:
    """Fetch every record from the rule store and materialize them."""
    records = await store.list()
    graph = materialize(records)
    metrics.materialized_nodes.observe(len(graph.nodes))
    logger.info(
        "Materialized canvas",
        extra={"records": len(records), "nodes": len(graph.nodes), "edges": len(graph.edges)},
    )
    return graph
