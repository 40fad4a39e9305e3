"""Actions node editor."""

from rule_canvas.domain.enums import NodeType
from rule_canvas.domain.metadata import ParameterDefinition
from rule_canvas.editors.base import NodeEditor, check_index
from rule_canvas.editors.params import required_keys, rows_from_definitions
from rule_canvas.graph.model import ActionRow, ParamKV


class ActionsEditor(NodeEditor):
    node_type = NodeType.ACTIONS

    @property
    def actions(self) -> list[ActionRow]:
        return self.data.actions

    def _definitions(self, action_type: str) -> list[ParameterDefinition]:
        return self.metadata.action_parameters(action_type) if self.metadata else []

    def _replace_action(self, index: int, action: ActionRow) -> None:
        actions = list(self.actions)
        actions[index] = action
        self.update(actions=actions)

    def _action(self, index: int) -> ActionRow:
        check_index(self.actions, index, "Action")
        return self.actions[index]

    def add_action(self, action_type: str = "") -> None:
        row = ActionRow(
            type=action_type, parameters=rows_from_definitions(self._definitions(action_type))
        )
        self.update(actions=[*self.actions, row])

    def remove_action(self, index: int) -> None:
        actions = list(self.actions)
        check_index(actions, index, "Action")
        del actions[index]
        self.update(actions=actions)

    def set_action_type(self, index: int, action_type: str) -> None:
        """Switch an action's type; its parameters are reset to the type's metadata list."""
        self._action(index)
        self._replace_action(
            index,
            ActionRow(
                type=action_type, parameters=rows_from_definitions(self._definitions(action_type))
            ),
        )

    def set_param(
        self, index: int, param_index: int, key: str | None = None, value: str | None = None
    ) -> None:
        action = self._action(index)
        params = list(action.parameters)
        check_index(params, param_index, "Parameter")
        changes = {}
        if key is not None:
            changes["key"] = key
        if value is not None:
            changes["value"] = value
        params[param_index] = params[param_index].model_copy(update=changes)
        self._replace_action(index, action.model_copy(update={"parameters": params}))

    def add_param(self, index: int) -> None:
        action = self._action(index)
        params = [*action.parameters, ParamKV()]
        self._replace_action(index, action.model_copy(update={"parameters": params}))

    def remove_param(self, index: int, param_index: int) -> bool:
        """Remove a custom parameter of an action. Required keys are kept; returns False."""
        action = self._action(index)
        params = list(action.parameters)
        check_index(params, param_index, "Parameter")
        if params[param_index].key in required_keys(self._definitions(action.type)):
            return False
        del params[param_index]
        self._replace_action(index, action.model_copy(update={"parameters": params}))
        return True
