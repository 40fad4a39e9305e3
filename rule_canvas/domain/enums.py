"""
Domain enums for the rule canvas.

These enums provide type-safe representations of the values that appear
in canvas payloads and in the persisted RuleV2 format.
"""

from enum import Enum


class NodeType(str, Enum):
    """Kind of canvas node. Matches ``_ui.nodes[*].type`` in persisted rules."""

    RULE = "rule"
    TRIGGER = "trigger"
    CONDITIONS = "conditions"
    ACTIONS = "actions"


# Node kinds a rule must be connected to exactly once before it can be saved
CHILD_NODE_TYPES = (NodeType.TRIGGER, NodeType.CONDITIONS, NodeType.ACTIONS)


class ParameterType(str, Enum):
    """
    Value types for trigger and action parameters.
    Types outside this list (employees, text_area, ...) are validated as strings.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    ENUM = "enum"


class Operator(str, Enum):
    """Condition operators understood by the rules engine."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_EQUAL = "greaterThanEqual"
    LESS_THAN_EQUAL = "lessThanEqual"
    CONTAINS = "contains"
    IN = "in"
    NOT_IN = "notIn"
    IS_TRUE = "isTrue"
    IS_FALSE = "isFalse"
    BEFORE = "before"
    AFTER = "after"


# Operators that take no right-hand value; rows using them export without "value"
BOOLEAN_OPERATORS = frozenset({Operator.IS_TRUE.value, Operator.IS_FALSE.value})

DEFAULT_OPERATOR = Operator.EQUALS.value


class Frequency(str, Enum):
    """Values of the ``frequency`` parameter of the ``scheduled_time`` trigger."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONCE = "once"
    CRON = "cron"


SCHEDULED_TIME_TRIGGER = "scheduled_time"

# Parameter keys shown for each scheduled_time frequency ("frequency" is always shown)
FREQUENCY_FIELDS: dict[str, tuple[str, ...]] = {
    Frequency.HOURLY.value: ("minute_of_hour", "timezone"),
    Frequency.DAILY.value: ("time_of_day", "timezone"),
    Frequency.WEEKLY.value: ("day_of_week", "time_of_day", "timezone"),
    Frequency.MONTHLY.value: ("day_of_month", "time_of_day", "timezone"),
    Frequency.ONCE.value: ("date", "time_of_day", "timezone"),
    Frequency.CRON.value: ("cron_expression", "timezone"),
}


class SaveState(str, Enum):
    """Save lifecycle of a rule node."""

    UNSAVED = "unsaved"
    SAVING = "saving"
    SAVED = "saved"
