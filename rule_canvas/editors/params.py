"""
Parameter row helpers shared by the trigger and action editors.
"""

import math
from collections.abc import Collection, Iterable

from rule_canvas.domain.metadata import ParameterDefinition
from rule_canvas.graph.model import ParamKV


def rows_from_definitions(definitions: Iterable[ParameterDefinition]) -> list[ParamKV]:
    """Fresh parameter rows for a type: one row per definition, first option as default."""
    return [ParamKV(key=d.name, value=d.default_value()) for d in definitions]


def required_keys(definitions: Iterable[ParameterDefinition]) -> set[str]:
    return {d.name for d in definitions if d.required}


def _is_number(value: str) -> bool:
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


def parameter_issues(
    definitions: Iterable[ParameterDefinition],
    params: Iterable[ParamKV],
    visible: Collection[str] | None = None,
    location: str = "",
) -> list[dict[str, str]]:
    """
    Check parameter rows against their definitions.

    Only definitions whose name is in ``visible`` are checked (all of them
    when ``visible`` is None). Every failing parameter is reported:

    - ``required``: a required parameter is missing or blank
    - ``number``: a ``number`` parameter does not parse as a finite number
    - ``enum``: a parameter with an option list holds a value outside it

    Blank optional parameters are not format-checked.

    Returns:
        List of issues ``{"location", "param", "code", "message"}``
    """
    values: dict[str, str] = {}
    for row in params:
        if row.key.strip() and row.key not in values:
            values[row.key] = row.value

    prefix = f"{location}: " if location else ""
    issues: list[dict[str, str]] = []
    for definition in definitions:
        name = definition.name
        if visible is not None and name not in visible:
            continue
        value = (values.get(name) or "").strip()

        if not value:
            if definition.required:
                issues.append(
                    {
                        "location": location,
                        "param": name,
                        "code": "required",
                        "message": f"{prefix}'{name}' is required",
                    }
                )
            continue

        if definition.type == "number" and not _is_number(value):
            issues.append(
                {
                    "location": location,
                    "param": name,
                    "code": "number",
                    "message": f"{prefix}'{name}' must be a number",
                }
            )
            continue

        options = definition.option_values
        if options and value not in options:
            issues.append(
                {
                    "location": location,
                    "param": name,
                    "code": "enum",
                    "message": f"{prefix}'{name}' must be one of {', '.join(options)}",
                }
            )
    return issues
