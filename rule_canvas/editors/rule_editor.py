"""
Rule node editor and save gate.

A rule moves UNSAVED -> SAVING -> SAVED. Saving is allowed only when the
rule is wired to exactly one trigger, one conditions and one actions node,
has a non-blank name and all visible trigger/action parameters validate.
Every problem is reported at once in ``ValidationError.details["errors"]``.
A failed write puts the rule back to UNSAVED.
"""

import logging
from typing import Any

from rule_canvas.core.errors import ValidationError
from rule_canvas.core.notifications import RuleEventBus
from rule_canvas.domain.enums import CHILD_NODE_TYPES, NodeType, SaveState
from rule_canvas.domain.metadata import RulesMetadata
from rule_canvas.editors.base import NodeEditor
from rule_canvas.editors.params import parameter_issues
from rule_canvas.editors.trigger_editor import visible_keys
from rule_canvas.graph.model import ActionsNodeData, Node, RuleGraph, TriggerNodeData
from rule_canvas.repos.rule_store import RuleStore
from rule_canvas.services.backend_sync import save_rule

logger = logging.getLogger(__name__)


class RuleEditor(NodeEditor):
    node_type = NodeType.RULE

    def __init__(
        self, graph: RuleGraph, node_id: str, metadata: RulesMetadata | None = None
    ) -> None:
        super().__init__(graph, node_id, metadata)
        self._saving = False

    @property
    def state(self) -> SaveState:
        if self._saving:
            return SaveState.SAVING
        return SaveState.SAVED if self.data.saved else SaveState.UNSAVED

    def invalidate_rules(self) -> None:
        # a rule edit only invalidates the rule itself, not linked rules
        node = self.node
        if node.data.saved:
            node.data = node.data.model_copy(update={"saved": False})

    def rename(self, name: str) -> None:
        self.update(name=name, label=name, saved=False)

    def children(self) -> dict[NodeType, list[Node]]:
        neighbors = self.graph.neighbors(self.node_id)
        return {t: [n for n in neighbors if n.type == t] for t in CHILD_NODE_TYPES}

    def connected_counts(self) -> dict[str, int]:
        return {t.value: len(nodes) for t, nodes in self.children().items()}

    def can_save(self) -> bool:
        """Save is enabled only for a complete star: one node of each child type."""
        return all(count == 1 for count in self.connected_counts().values())

    def validate(self) -> list[dict[str, Any]]:
        """Collect every reason the rule cannot be saved; empty when it can."""
        issues: list[dict[str, Any]] = []

        for node_type, nodes in self.children().items():
            if len(nodes) != 1:
                issues.append(
                    {
                        "location": "rule",
                        "code": "topology",
                        "message": (
                            f"Rule needs exactly one {node_type.value} node, has {len(nodes)}"
                        ),
                    }
                )

        if not (self.data.name or "").strip():
            issues.append(
                {"location": "rule", "code": "name", "message": "Rule name is required"}
            )

        if self.metadata is None:
            return issues

        children = self.children()
        for trigger in children[NodeType.TRIGGER][:1]:
            data = trigger.data
            if not isinstance(data, TriggerNodeData):
                continue
            issues.extend(
                parameter_issues(
                    self.metadata.trigger_parameters(data.trigger_type),
                    data.parameters,
                    visible=visible_keys(data.trigger_type, data.parameters, self.metadata),
                    location=f"trigger {data.trigger_type}",
                )
            )

        for actions_node in children[NodeType.ACTIONS][:1]:
            data = actions_node.data
            if not isinstance(data, ActionsNodeData):
                continue
            for i, action in enumerate(data.actions):
                issues.extend(
                    parameter_issues(
                        self.metadata.action_parameters(action.type),
                        action.parameters,
                        location=f"action {i + 1} ({action.type})",
                    )
                )

        return issues

    async def save(self, store: RuleStore, events: RuleEventBus | None = None) -> Any:
        """
        Validate, then create or update the rule in the store.

        Raises:
            ValidationError: Before any store call, with every issue in details["errors"]
            RuleStoreError: If the write fails; the rule stays UNSAVED
        """
        issues = self.validate()
        if issues:
            raise ValidationError(
                "Rule cannot be saved",
                details={"rule_id": self.node_id, "errors": issues},
            )

        self._saving = True
        try:
            return await save_rule(
                store,
                self.graph.nodes,
                self.graph.edges,
                self.node_id,
                self.data.backend_id,
                events=events,
            )
        except Exception:
            node = self.node
            node.data = node.data.model_copy(update={"saved": False})
            logger.warning("Rule save failed", extra={"rule_id": self.node_id})
            raise
        finally:
            self._saving = False
