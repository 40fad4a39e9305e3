"""
Rule metadata: the schema catalog that drives the node editors.

The catalog lists, per trigger type and action type, an ordered parameter
list; per fact, which trigger types supply it and which operators it
supports; and the global operator list.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ParameterDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = "string"
    required: bool = False
    description: str = ""
    example: Any = None
    options: list[Any] | None = None

    @property
    def option_values(self) -> list[str]:
        """Options as the strings a parameter value is compared against."""
        return [str(o) for o in self.options or []]

    def default_value(self) -> str:
        """First option where an option list exists, blank otherwise."""
        values = self.option_values
        return values[0] if values else ""


class TriggerDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    name: str = ""
    description: str = ""
    parameters: list[ParameterDefinition] = Field(default_factory=list)


class ActionDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    name: str = ""
    description: str = ""
    parameters: list[ParameterDefinition] = Field(default_factory=list)


class FactDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = "string"
    description: str = ""
    operators: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)


class OperatorDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    symbol: str = ""
    description: str = ""
    types: list[str] = Field(default_factory=list)


class RulesMetadata(BaseModel):
    """The full catalog with lookup helpers used by the editors."""

    model_config = ConfigDict(extra="ignore")

    triggers: list[TriggerDefinition] = Field(default_factory=list)
    actions: list[ActionDefinition] = Field(default_factory=list)
    facts: list[FactDefinition] = Field(default_factory=list)
    operators: list[OperatorDefinition] = Field(default_factory=list)

    def trigger(self, trigger_type: str) -> TriggerDefinition | None:
        return next((t for t in self.triggers if t.type == trigger_type), None)

    def action(self, action_type: str) -> ActionDefinition | None:
        return next((a for a in self.actions if a.type == action_type), None)

    def fact(self, name: str) -> FactDefinition | None:
        return next((f for f in self.facts if f.name == name), None)

    def facts_for_trigger(self, trigger_type: str) -> list[FactDefinition]:
        """Facts whose trigger list names ``trigger_type``; all facts for a blank type."""
        if not trigger_type:
            return list(self.facts)
        return [f for f in self.facts if trigger_type in f.triggers]

    @property
    def operator_names(self) -> list[str]:
        return [o.name for o in self.operators]

    def trigger_parameters(self, trigger_type: str) -> list[ParameterDefinition]:
        definition = self.trigger(trigger_type)
        return list(definition.parameters) if definition else []

    def action_parameters(self, action_type: str) -> list[ParameterDefinition]:
        definition = self.action(action_type)
        return list(definition.parameters) if definition else []
