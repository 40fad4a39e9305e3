"""
Connection validation for the rule canvas.

Decides whether a proposed edge may be added to the graph. The canvas is a
set of star topologies: every edge touches at least one rule node, and a
rule is connected to at most one trigger, one conditions and one actions
node. Rule-to-rule edges are always accepted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from rule_canvas.domain.enums import NodeType

if TYPE_CHECKING:
    from rule_canvas.graph.model import Edge, Node


def _endpoints(candidate: Any) -> tuple[str | None, str | None]:
    if isinstance(candidate, Mapping):
        return candidate.get("source"), candidate.get("target")
    return getattr(candidate, "source", None), getattr(candidate, "target", None)


def is_valid_connection(candidate: Any, nodes: Iterable[Node], edges: Iterable[Edge]) -> bool:
    """
    Check a candidate edge against the current graph.

    Pure function: nothing in ``nodes`` or ``edges`` is modified, and
    swapping ``source`` and ``target`` never changes the answer.

    Args:
        candidate: Proposed edge. An ``Edge``, a ``Connection`` or any
                   mapping with ``source`` and ``target`` keys.
        nodes: Current canvas nodes
        edges: Current canvas edges

    Returns:
        True when the edge may be added

    Example:
        >>> is_valid_connection({"source": "trigger-2", "target": "rule-1"}, nodes, edges)
        False  # rule-1 already has a trigger
    """
    source, target = _endpoints(candidate)
    if not source or not target:
        return False

    by_id = {n.id: n for n in nodes}
    source_node = by_id.get(source)
    target_node = by_id.get(target)
    if source_node is None or target_node is None:
        return False

    source_is_rule = source_node.type == NodeType.RULE
    target_is_rule = target_node.type == NodeType.RULE
    if not source_is_rule and not target_is_rule:
        return False
    if source_is_rule and target_is_rule:
        return True

    rule, other = (source_node, target_node) if source_is_rule else (target_node, source_node)
    pair = {rule.id, other.id}

    for edge in edges:
        if {edge.source, edge.target} == pair:
            return False
        if rule.id not in (edge.source, edge.target):
            continue
        neighbor_id = edge.target if edge.source == rule.id else edge.source
        neighbor = by_id.get(neighbor_id)
        if neighbor is not None and neighbor.type == other.type:
            return False

    return True
