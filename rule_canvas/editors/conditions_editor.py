"""Conditions node editor."""

from rule_canvas.domain.enums import DEFAULT_OPERATOR, NodeType
from rule_canvas.domain.metadata import FactDefinition
from rule_canvas.editors.base import NodeEditor, check_index
from rule_canvas.graph.model import ConditionRow, TriggerNodeData


class ConditionsEditor(NodeEditor):
    node_type = NodeType.CONDITIONS

    @property
    def rows(self) -> list[ConditionRow]:
        return self.data.conditions

    def add_row(self) -> None:
        self.update(conditions=[*self.rows, ConditionRow(operator=DEFAULT_OPERATOR, value="")])

    def remove_row(self, index: int) -> None:
        rows = list(self.rows)
        check_index(rows, index, "Condition")
        del rows[index]
        self.update(conditions=rows)

    def set_row(
        self,
        index: int,
        fact: str | None = None,
        operator: str | None = None,
        value: str | None = None,
    ) -> None:
        rows = list(self.rows)
        check_index(rows, index, "Condition")
        candidates = {"fact": fact, "operator": operator, "value": value}
        changes = {k: v for k, v in candidates.items() if v is not None}
        rows[index] = rows[index].model_copy(update=changes)
        self.update(conditions=rows)

    def allowed_operators(self, fact: str) -> list[str]:
        """Operators the fact supports; the global list when it names none."""
        if self.metadata is None:
            return []
        definition = self.metadata.fact(fact)
        if definition is not None and definition.operators:
            return list(definition.operators)
        return self.metadata.operator_names

    def set_fact(self, index: int, fact: str) -> None:
        """Choose a fact; an operator the fact does not allow becomes its first allowed one."""
        rows = list(self.rows)
        check_index(rows, index, "Condition")
        row = rows[index]
        changes = {"fact": fact}
        allowed = self.allowed_operators(fact)
        if allowed and row.operator not in allowed:
            changes["operator"] = allowed[0]
        rows[index] = row.model_copy(update=changes)
        self.update(conditions=rows)

    def connected_trigger_type(self) -> str:
        """Trigger type of the rule this node belongs to, blank when not wired."""
        for rule in self.connected_rules():
            for trigger in self.graph.neighbors(rule.id, NodeType.TRIGGER):
                if isinstance(trigger.data, TriggerNodeData):
                    return trigger.data.trigger_type
        return ""

    def facts_for_trigger(self, trigger_type: str | None = None) -> list[FactDefinition]:
        """Facts offered for a trigger type (default: the connected rule's trigger)."""
        if self.metadata is None:
            return []
        if trigger_type is None:
            trigger_type = self.connected_trigger_type()
        return self.metadata.facts_for_trigger(trigger_type)
