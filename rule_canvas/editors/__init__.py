"""
Per-node editors for the rule canvas.

Each editor is bound to one node of a RuleGraph and to the rules metadata
catalog. Mutations shallow-merge into the node payload and clear ``saved``
on every directly connected rule.
"""

from rule_canvas.editors.actions_editor import ActionsEditor
from rule_canvas.editors.conditions_editor import ConditionsEditor
from rule_canvas.editors.params import parameter_issues
from rule_canvas.editors.rule_editor import RuleEditor
from rule_canvas.editors.trigger_editor import TriggerEditor, visible_keys

__all__ = [
    "TriggerEditor",
    "ConditionsEditor",
    "ActionsEditor",
    "RuleEditor",
    "visible_keys",
    "parameter_issues",
]
