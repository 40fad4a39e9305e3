"""
Backend sync: persist canvas rules to the remote rule store.

Save decision:
1. Serialize the rule with export_rule
2. Cached backend id is valid -> update(str(id), spec)
3. Otherwise list records and look for one whose _ui.nodes holds the rule
   node id -> update(found id, spec)
4. Lookup failed or found nothing -> create(spec)
5. On success write backend_id and saved=True onto the rule node in place

Update/create failures propagate unchanged and leave the node untouched.
A failed lookup is logged and treated as "not found".
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from rule_canvas.core.notifications import RuleEvent, RuleEventBus, RuleEventType
from rule_canvas.core.observability import metrics
from rule_canvas.core.telemetry import get_tracer
from rule_canvas.domain.enums import NodeType
from rule_canvas.graph.materializer import record_ui
from rule_canvas.graph.model import Edge, Node, RuleNodeData
from rule_canvas.graph.serializer import export_rule
from rule_canvas.repos.rule_store import RuleStore

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def has_valid_id(value: Any) -> bool:
    """
    True for a finite number or a non-blank string.

    ``0`` is a valid id; ``None``, ``""`` and whitespace are not. Booleans
    are not ids.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        return bool(value.strip())
    return False


def find_record_for_rule(
    records: Iterable[Mapping[str, Any]], rule_id: str
) -> Mapping[str, Any] | None:
    """First record whose ``_ui.nodes`` contains ``rule_id``."""
    for record in records:
        if not isinstance(record, Mapping):
            continue
        ui = record_ui(record)
        nodes = ui.get("nodes") if ui else None
        if isinstance(nodes, Mapping) and rule_id in nodes:
            return record
    return None


async def _lookup_existing_id(store: RuleStore, rule_id: str) -> Any:
    try:
        records = await store.list()
    except Exception as e:
        logger.warning(
            "Rule lookup failed, falling back to create",
            extra={"rule_id": rule_id, "error_type": type(e).__name__, "error_message": str(e)},
        )
        return None
    match = find_record_for_rule(records, rule_id)
    if match is None:
        return None
    found_id = match.get("id")
    return found_id if has_valid_id(found_id) else None


def _mark_saved(nodes: Iterable[Node], rule_id: str, backend_id: Any) -> None:
    for node in nodes:
        if node.id != rule_id or node.type != NodeType.RULE:
            continue
        if isinstance(node.data, RuleNodeData):
            node.data.backend_id = backend_id
            node.data.saved = True
            return


async def save_rule(
    store: RuleStore,
    nodes: list[Node],
    edges: list[Edge],
    rule_id: str,
    backend_id: Any = None,
    *,
    events: RuleEventBus | None = None,
) -> Any:
    """
    Create or update one rule in the rule store.

    Args:
        store: Rule store to write to
        nodes: Canvas nodes; the rule node is updated in place on success
        edges: Canvas edges
        rule_id: Id of the rule node to save
        backend_id: Cached backend id of the rule, if any
        events: Bus that receives ``rule.saved`` after the write

    Returns:
        The backend id the rule is stored under. A cached or found id keeps
        its original type; a created id is whatever the store returned.

    Raises:
        RuleNotFoundError: If ``rule_id`` is not a rule node
        RuleStoreError: If update or create fails
    """
    spec = export_rule(nodes, edges, rule_id)

    with tracer.start_as_current_span("rule_canvas.save_rule") as span:
        span.set_attribute("rule.node_id", rule_id)

        target_id = backend_id
        if not has_valid_id(target_id):
            target_id = await _lookup_existing_id(store, rule_id)

        operation = "update" if has_valid_id(target_id) else "create"
        span.set_attribute("rule.operation", operation)
        try:
            if operation == "update":
                await store.update(str(target_id), spec)
            else:
                created = await store.create(spec)
                target_id = created["id"]
        except Exception:
            metrics.rule_saves_total.labels(operation=operation, status="error").inc()
            raise

    metrics.rule_saves_total.labels(operation=operation, status="success").inc()
    _mark_saved(nodes, rule_id, target_id)
    logger.info(
        f"Rule {operation}d in store",
        extra={"rule_id": rule_id, "backend_id": target_id, "operation": operation},
    )

    if events is not None:
        events.publish(
            RuleEvent(
                type=RuleEventType.RULE_SAVED,
                backend_id=target_id,
                rule_id=rule_id,
                details={"operation": operation, "name": spec["name"]},
            )
        )
    return target_id


async def delete_rule(
    store: RuleStore, backend_id: Any = None, *, events: RuleEventBus | None = None
) -> bool:
    """
    Delete a persisted rule.

    Skips the store call when ``backend_id`` is not a valid id. Numeric
    ``0`` is valid and deletes ``"0"``.

    Returns:
        True when the store was called
    """
    if not has_valid_id(backend_id):
        metrics.rule_deletes_total.labels(status="skipped").inc()
        logger.debug("Rule delete skipped, no backend id")
        return False

    try:
        await store.delete(str(backend_id))
    except Exception:
        metrics.rule_deletes_total.labels(status="error").inc()
        raise

    metrics.rule_deletes_total.labels(status="deleted").inc()
    logger.info("Rule deleted from store", extra={"backend_id": backend_id})

    if events is not None:
        events.publish(RuleEvent(type=RuleEventType.RULE_DELETED, backend_id=backend_id))
    return True
