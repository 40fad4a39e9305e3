"""
Shared behavior of the per-node editors.

An editor is bound to one node of a RuleGraph. Every mutation replaces the
node's payload with a shallow-merged copy and clears ``saved`` on each rule
node directly connected to it.
"""

from typing import Any

from rule_canvas.core.errors import ValidationError
from rule_canvas.domain.enums import NodeType
from rule_canvas.domain.metadata import RulesMetadata
from rule_canvas.graph.model import Node, RuleGraph, RuleNodeData


class NodeEditor:
    node_type: NodeType

    def __init__(
        self, graph: RuleGraph, node_id: str, metadata: RulesMetadata | None = None
    ) -> None:
        self.graph = graph
        self.node_id = node_id
        self.metadata = metadata
        node = graph.require_node(node_id)
        if node.type != self.node_type:
            raise ValidationError(
                f"Node '{node_id}' is a {node.type.value} node, not {self.node_type.value}",
                details={"node_id": node_id, "node_type": node.type.value},
            )

    @property
    def node(self) -> Node:
        return self.graph.require_node(self.node_id)

    @property
    def data(self) -> Any:
        return self.node.data

    def connected_rules(self) -> list[Node]:
        return self.graph.neighbors(self.node_id, NodeType.RULE)

    def invalidate_rules(self) -> None:
        for rule in self.connected_rules():
            if isinstance(rule.data, RuleNodeData) and rule.data.saved:
                rule.data = rule.data.model_copy(update={"saved": False})

    def update(self, **partial: Any) -> None:
        """Shallow-merge ``partial`` into the node payload and invalidate connected rules."""
        node = self.node
        node.data = node.data.model_copy(update=partial)
        self.invalidate_rules()


def check_index(items: list, index: int, what: str) -> None:
    if not 0 <= index < len(items):
        raise ValidationError(
            f"{what} index {index} out of range",
            details={"index": index, "size": len(items)},
        )
