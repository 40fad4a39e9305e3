"""
Built-in rule metadata catalog.

Used when RULE_METADATA_SOURCE=builtin (the default) and as the fixture
catalog in tests. Mirrors the catalog served by the rules engine at
``/api/rules/metadata``.
"""

from rule_canvas.domain.enums import FREQUENCY_FIELDS, SCHEDULED_TIME_TRIGGER
from rule_canvas.domain.metadata import (
    ActionDefinition,
    FactDefinition,
    OperatorDefinition,
    ParameterDefinition,
    RulesMetadata,
    TriggerDefinition,
)

_LIFECYCLE_OPS = ["create", "update", "deactivate", "reactivate"]
_CRUD_OPS = ["create", "update", "delete"]
_LINK_OPS = ["add", "remove"]

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

STR_OPS = ["equals", "notEquals", "contains", "in", "notIn"]
NUM_OPS = ["equals", "notEquals", "greaterThan", "lessThan", "greaterThanEqual", "lessThanEqual"]
BOOL_OPS = ["isTrue", "isFalse"]
DATE_OPS = ["before", "after", "equals"]


def _operation(description: str, options: list[str]) -> ParameterDefinition:
    return ParameterDefinition(
        name="operation",
        type="string",
        required=True,
        description=description,
        options=options,
    )


def _entity_trigger(trigger_type: str, name: str, description: str, options: list[str]):
    return TriggerDefinition(
        type=trigger_type,
        name=name,
        description=description,
        parameters=[_operation(f"Operation on the {name.lower()}", options)],
    )


SCHEDULED_TIME = TriggerDefinition(
    type=SCHEDULED_TIME_TRIGGER,
    name="Scheduled Time",
    description="Fire on a fixed schedule",
    parameters=[
        ParameterDefinition(
            name="frequency",
            type="enum",
            required=True,
            description="How often the rule runs",
            options=list(FREQUENCY_FIELDS),
        ),
        ParameterDefinition(
            name="minute_of_hour",
            type="number",
            required=True,
            description="Minute past the hour (0-59)",
            example=15,
        ),
        ParameterDefinition(
            name="time_of_day",
            type="time",
            required=True,
            description="Local time in HH:MM",
            example="09:00",
        ),
        ParameterDefinition(
            name="day_of_week",
            type="enum",
            required=True,
            description="Day the weekly schedule runs on",
            options=_WEEKDAYS,
        ),
        ParameterDefinition(
            name="day_of_month",
            type="number",
            required=True,
            description="Day of the month (1-31)",
            example=1,
        ),
        ParameterDefinition(
            name="date",
            type="date",
            required=True,
            description="Date of a one-off run (YYYY-MM-DD)",
        ),
        ParameterDefinition(
            name="cron_expression",
            type="string",
            required=True,
            description="Five-field cron expression",
            example="0 9 * * 1-5",
        ),
        ParameterDefinition(
            name="timezone",
            type="string",
            required=False,
            description="IANA timezone, defaults to UTC",
            example="Europe/London",
        ),
    ],
)

TRIGGERS = [
    _entity_trigger(
        "job_position", "Job Position", "Events related to job position lifecycle", _LIFECYCLE_OPS
    ),
    _entity_trigger(
        "competency_type",
        "Competency Type",
        "Events related to competency type lifecycle",
        _LIFECYCLE_OPS,
    ),
    _entity_trigger("competency", "Competency", "Events related to competencies", _LIFECYCLE_OPS),
    _entity_trigger(
        "event_definition", "Event Definition", "Create/update/delete event definitions", _CRUD_OPS
    ),
    TriggerDefinition(
        type="scheduled_event",
        name="Scheduled Event",
        description="Create/update/delete scheduled events",
        parameters=[
            _operation("Operation on the scheduled event", _CRUD_OPS),
            ParameterDefinition(
                name="update_field",
                type="string",
                required=False,
                description="When operation=update, specify which field changed",
                options=[
                    "title",
                    "event_start_date",
                    "event_end_date",
                    "room_name",
                    "maximum_attendees",
                    "minimum_attendees",
                    "status_name",
                    "facilitator",
                    "color",
                    "other",
                ],
            ),
        ],
    ),
    TriggerDefinition(
        type="roles",
        name="Roles",
        description="Role lifecycle and permission changes",
        parameters=[
            _operation("Role operation", ["create", "update"]),
            ParameterDefinition(
                name="update_kind",
                type="string",
                required=False,
                description="When operation=update, choose specific change",
                options=["general", "permission_added", "permission_removed"],
            ),
        ],
    ),
    _entity_trigger(
        "link_job_to_competency",
        "Link Job to Competency",
        "Add or remove a link between a job position and a competency",
        _LINK_OPS,
    ),
    _entity_trigger(
        "competency_prerequisite",
        "Competency Prerequisite",
        "Add or remove a prerequisite relationship between competencies",
        _LINK_OPS,
    ),
    SCHEDULED_TIME,
]

ACTIONS = [
    ActionDefinition(
        type="notification",
        name="Send Notification",
        description="Send email or SMS notification to specified recipients",
        parameters=[
            ParameterDefinition(
                name="type",
                type="string",
                required=True,
                description="Email or SMS",
                options=["sms", "email"],
            ),
            ParameterDefinition(
                name="recipients",
                type="employees",
                required=True,
                description="Email address or user ID of the recipient",
            ),
            ParameterDefinition(
                name="subject", type="string", required=True, description="Email subject line"
            ),
            ParameterDefinition(
                name="message", type="text_area", required=True, description="Message content"
            ),
        ],
    ),
    ActionDefinition(
        type="create_event",
        name="Schedule Event",
        description="Create an event in the calendar system",
        parameters=[
            ParameterDefinition(
                name="title", type="string", required=True, description="Name of event"
            ),
            ParameterDefinition(
                name="customEventID",
                type="event_type",
                required=True,
                description="Event definition ID that this schedule is based on",
            ),
            ParameterDefinition(
                name="startTime",
                type="date",
                required=True,
                description="Event start, absolute or relative ('in 1 month')",
            ),
            ParameterDefinition(
                name="endTime",
                type="date",
                required=False,
                description="Event end, defaults to two hours after start",
            ),
            ParameterDefinition(
                name="roomName", type="string", required=False, description="Room or location"
            ),
            ParameterDefinition(
                name="maxAttendees",
                type="number",
                required=False,
                description="Maximum number of attendees",
            ),
            ParameterDefinition(
                name="minAttendees",
                type="number",
                required=False,
                description="Minimum number of attendees",
            ),
        ],
    ),
]

_COMPETENCY_TRIGGERS = ["competency", "link_job_to_competency", "competency_prerequisite"]

FACTS = [
    FactDefinition(
        name="competency.CompetencyID",
        type="number",
        description="Competency definition ID",
        operators=["equals", "notEquals", "in", "notIn"],
        triggers=_COMPETENCY_TRIGGERS,
    ),
    FactDefinition(
        name="competency.CompetencyName",
        type="string",
        description="Name of the competency",
        operators=STR_OPS,
        triggers=_COMPETENCY_TRIGGERS,
    ),
    FactDefinition(
        name="competency.IsActive",
        type="boolean",
        description="Whether the competency is currently active",
        operators=BOOL_OPS,
        triggers=["competency", "link_job_to_competency"],
    ),
    FactDefinition(
        name="competency.ExpiryPeriodMonths",
        type="number",
        description="Expiry period in months for the competency",
        operators=NUM_OPS,
        triggers=["competency"],
    ),
    FactDefinition(
        name="competencyType.TypeName",
        type="string",
        description="Competency type name",
        operators=["equals", "notEquals", "in", "notIn"],
        triggers=["competency_type"],
    ),
    FactDefinition(
        name="jobPosition.PositionCode",
        type="string",
        description="Job position code",
        operators=STR_OPS,
        triggers=["job_position", "link_job_to_competency"],
    ),
    FactDefinition(
        name="jobPosition.IsActive",
        type="boolean",
        description="Whether the job position is active",
        operators=BOOL_OPS,
        triggers=["job_position"],
    ),
    FactDefinition(
        name="event.StartDate",
        type="date",
        description="Scheduled event start date",
        operators=DATE_OPS,
        triggers=["scheduled_event"],
    ),
    FactDefinition(
        name="event.MaximumAttendees",
        type="number",
        description="Maximum attendees of the scheduled event",
        operators=NUM_OPS,
        triggers=["scheduled_event"],
    ),
    FactDefinition(
        name="schedule.Now",
        type="date",
        description="Time the schedule fired",
        operators=DATE_OPS,
        triggers=[SCHEDULED_TIME_TRIGGER],
    ),
]

OPERATORS = [
    OperatorDefinition(
        name="equals",
        symbol="==",
        description="Values are equal",
        types=["string", "number", "boolean", "date"],
    ),
    OperatorDefinition(
        name="notEquals",
        symbol="!=",
        description="Values are not equal",
        types=["string", "number", "boolean", "date"],
    ),
    OperatorDefinition(
        name="greaterThan", symbol=">", description="Left is greater", types=["number", "date"]
    ),
    OperatorDefinition(
        name="lessThan", symbol="<", description="Left is less", types=["number", "date"]
    ),
    OperatorDefinition(
        name="greaterThanEqual",
        symbol=">=",
        description="Left is greater or equal",
        types=["number", "date"],
    ),
    OperatorDefinition(
        name="lessThanEqual",
        symbol="<=",
        description="Left is less or equal",
        types=["number", "date"],
    ),
    OperatorDefinition(
        name="contains", symbol="contains", description="Substring match", types=["string"]
    ),
    OperatorDefinition(
        name="in", symbol="in", description="Value is in list", types=["string", "number"]
    ),
    OperatorDefinition(
        name="notIn",
        symbol="not in",
        description="Value is not in list",
        types=["string", "number"],
    ),
    OperatorDefinition(
        name="isTrue", symbol="isTrue", description="Boolean value is true", types=["boolean"]
    ),
    OperatorDefinition(
        name="isFalse", symbol="isFalse", description="Boolean value is false", types=["boolean"]
    ),
    OperatorDefinition(
        name="before", symbol="before", description="Date is before", types=["date"]
    ),
    OperatorDefinition(name="after", symbol="after", description="Date is after", types=["date"]),
]


def builtin_metadata() -> RulesMetadata:
    """Return a fresh copy of the built-in catalog."""
    return RulesMetadata(
        triggers=[t.model_copy(deep=True) for t in TRIGGERS],
        actions=[a.model_copy(deep=True) for a in ACTIONS],
        facts=[f.model_copy(deep=True) for f in FACTS],
        operators=[o.model_copy(deep=True) for o in OPERATORS],
    )
