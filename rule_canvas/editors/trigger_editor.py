"""
Trigger node editor.

Parameter visibility is a pure function of the trigger type and the current
parameter values (``visible_keys``), recomputed whenever either changes.
"""

from collections.abc import Iterable

from rule_canvas.domain.enums import FREQUENCY_FIELDS, SCHEDULED_TIME_TRIGGER, NodeType
from rule_canvas.domain.metadata import RulesMetadata
from rule_canvas.editors.base import NodeEditor, check_index
from rule_canvas.editors.params import required_keys, rows_from_definitions
from rule_canvas.graph.model import ParamKV

_SCHEDULE_KEYS = {"frequency"}.union(*FREQUENCY_FIELDS.values())


def visible_keys(
    trigger_type: str, params: Iterable[ParamKV], metadata: RulesMetadata | None = None
) -> set[str]:
    """
    Parameter keys shown for a trigger.

    ``scheduled_time`` shows ``frequency``, the keys the current frequency
    selects, and any custom keys. Every other trigger type shows every key.

    Example:
        >>> visible_keys("scheduled_time", [ParamKV(key="frequency", value="hourly")])
        {'frequency', 'minute_of_hour', 'timezone'}
    """
    params = list(params)
    current = {p.key for p in params if p.key.strip()}
    defined = {d.name for d in metadata.trigger_parameters(trigger_type)} if metadata else set()

    if trigger_type != SCHEDULED_TIME_TRIGGER:
        return defined | current

    frequency = next((p.value for p in params if p.key == "frequency"), "")
    custom = current - defined - _SCHEDULE_KEYS
    return {"frequency", *FREQUENCY_FIELDS.get(frequency, ()), *custom}


class TriggerEditor(NodeEditor):
    node_type = NodeType.TRIGGER

    @property
    def parameters(self) -> list[ParamKV]:
        return self.data.parameters

    def _definitions(self):
        if self.metadata is None:
            return []
        return self.metadata.trigger_parameters(self.data.trigger_type)

    def set_trigger_type(self, trigger_type: str) -> None:
        """Switch type; parameters are reset to the type's metadata list."""
        definitions = self.metadata.trigger_parameters(trigger_type) if self.metadata else []
        self.update(trigger_type=trigger_type, parameters=rows_from_definitions(definitions))

    def set_param(self, index: int, key: str | None = None, value: str | None = None) -> None:
        params = list(self.parameters)
        check_index(params, index, "Parameter")
        changes = {}
        if key is not None:
            changes["key"] = key
        if value is not None:
            changes["value"] = value
        params[index] = params[index].model_copy(update=changes)
        self.update(parameters=params)

    def set_value(self, key: str, value: str) -> None:
        """Set a parameter by key, appending a row when the key is absent."""
        params = list(self.parameters)
        for i, row in enumerate(params):
            if row.key == key:
                params[i] = row.model_copy(update={"value": value})
                break
        else:
            params.append(ParamKV(key=key, value=value))
        self.update(parameters=params)

    def add_param(self) -> None:
        self.update(parameters=[*self.parameters, ParamKV()])

    def can_remove_param(self, index: int) -> bool:
        params = self.parameters
        check_index(params, index, "Parameter")
        return params[index].key not in required_keys(self._definitions())

    def remove_param(self, index: int) -> bool:
        """Remove a custom parameter. Metadata-required keys are kept; returns False."""
        if not self.can_remove_param(index):
            return False
        params = list(self.parameters)
        del params[index]
        self.update(parameters=params)
        return True

    def visible_keys(self) -> set[str]:
        return visible_keys(self.data.trigger_type, self.parameters, self.metadata)

    def visible_params(self) -> list[ParamKV]:
        keys = self.visible_keys()
        return [p for p in self.parameters if not p.key.strip() or p.key in keys]
