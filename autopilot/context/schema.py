"""
Schema registry and validation for entities, view models and tool payloads.

Every data boundary is checked against a JSON Schema (Draft 7). Validation
never coerces: a value either conforms or is rejected with the full list of
offending field paths.
"""

import logging
from typing import Dict, Any, List

import jsonschema

from ..core.exceptions import FieldError, ValidationError
from .entity import IssueStatus, Priority, GoalStatus, Trend, PRStatus

logger = logging.getLogger(__name__)

# Shared fragments

STATUS_SCHEMA = {"type": "string", "enum": list(IssueStatus.ALL)}
PRIORITY_SCHEMA = {"type": "string", "enum": list(Priority.ALL)}
TREND_SCHEMA = {"type": "string", "enum": list(Trend.ALL)}
PR_STATUS_SCHEMA = {"type": "string", "enum": list(PRStatus.ALL)}
GOAL_STATUS_SCHEMA = {"type": "string", "enum": list(GoalStatus.ALL)}
BOARD_STATUS_SCHEMA = {"type": "string", "enum": ["todo", "in_progress", "in_review", "done"]}
ISSUE_ID_SCHEMA = {"type": "string", "pattern": r"^[A-Z][A-Z0-9]*-\d+$"}
STRING_LIST_SCHEMA = {"type": "array", "items": {"type": "string"}}


def object_schema(properties: Dict[str, Any], required: List[str] = None,
                  description: str = None) -> Dict[str, Any]:
    """
    Build an object schema.

    Args:
        properties: Property name -> schema
        required: Names of required properties
        description: Optional description surfaced to the orchestrator

    Returns:
        JSON Schema dictionary
    """
    schema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = list(required)
    if description:
        schema["description"] = description
    return schema


def array_of(items: Dict[str, Any], description: str = None) -> Dict[str, Any]:
    schema = {"type": "array", "items": items}
    if description:
        schema["description"] = description
    return schema


class Schema:
    """
    A named JSON Schema with validation.

    Attributes:
        name: Registry name of the schema
        definition: JSON Schema definition
    """

    def __init__(self, name: str, definition: Dict[str, Any]):
        jsonschema.Draft7Validator.check_schema(definition)
        self.name = name
        self.definition = definition
        self._validator = jsonschema.Draft7Validator(definition)

    def errors(self, value: Any) -> List[FieldError]:
        """
        Collect every violation of this schema.

        Args:
            value: Value to check

        Returns:
            Field errors ordered by path; empty when the value conforms
        """
        found = sorted(self._validator.iter_errors(value), key=lambda e: list(map(str, e.absolute_path)))
        return [_to_field_error(e) for e in found]

    def validate(self, value: Any) -> Any:
        """
        Validate a value against this schema.

        Args:
            value: Value to validate

        Returns:
            The value, unchanged

        Raises:
            ValidationError: If the value does not conform
        """
        errors = self.errors(value)
        if errors:
            logger.debug(f"Validation failed for schema {self.name}: {errors}")
            raise ValidationError(self.name, errors)
        return value

    def is_valid(self, value: Any) -> bool:
        return self._validator.is_valid(value)


def _to_field_error(error: jsonschema.ValidationError) -> FieldError:
    path = ".".join(str(p) for p in error.absolute_path) if error.absolute_path else "(root)"

    expected = None
    if error.validator == "type":
        expected = error.validator_value if isinstance(error.validator_value, str) \
            else " or ".join(error.validator_value)
    elif error.validator == "enum":
        expected = "one of: " + ", ".join(str(v) for v in error.validator_value)
    elif error.validator == "required":
        # jsonschema reports missing properties on the parent object, one error each
        absent = [p for p in error.validator_value if p not in error.instance]
        missing = next((p for p in absent if error.message.startswith(repr(p))),
                       absent[0] if absent else None)
        if missing:
            path = missing if path == "(root)" else f"{path}.{missing}"
        expected = "a value"
    elif error.validator in ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"):
        expected = f"{error.validator} {error.validator_value}"
    elif error.validator == "pattern":
        expected = f"pattern {error.validator_value}"

    return FieldError(path=path, message=error.message, expected=expected)


# Entity and view-model schemas

ISSUE_SCHEMA = object_schema({
    "id": ISSUE_ID_SCHEMA,
    "title": {"type": "string"},
    "status": STATUS_SCHEMA,
    "priority": PRIORITY_SCHEMA,
    "assignee": {"type": "string"},
    "assigneeId": {"type": "string"},
    "blockerReason": {"type": "string"},
    "labels": STRING_LIST_SCHEMA,
    "points": {"type": "integer", "minimum": 0},
}, required=["id", "title", "status", "priority"])

SPRINT_DATA_SCHEMA = object_schema({
    "name": {"type": "string", "description": "Sprint name (e.g., 'Sprint 5')"},
    "planned": {"type": "number", "description": "Planned story points"},
    "completed": {"type": "number", "description": "Completed story points"},
}, required=["name", "planned", "completed"])

TEAM_MEMBER_TASK_SCHEMA = object_schema({
    "id": {"type": "string"},
    "title": {"type": "string"},
    "points": {"type": "integer", "minimum": 0},
    "status": STATUS_SCHEMA,
}, required=["id", "title", "points", "status"])

TEAM_MEMBER_SCHEMA = object_schema({
    "id": {"type": "string"},
    "name": {"type": "string"},
    "role": {"type": "string"},
    "capacity": {"type": "integer", "minimum": 0},
    "assigned": {"type": "integer", "minimum": 0},
    "tasks": array_of(TEAM_MEMBER_TASK_SCHEMA),
}, required=["id", "name", "role", "capacity", "assigned", "tasks"])

GOAL_SCHEMA = object_schema({
    "id": {"type": "string"},
    "title": {"type": "string"},
    "description": {"type": "string"},
    "progress": {"type": "number", "minimum": 0, "maximum": 100},
    "target": {"type": "string"},
    "status": GOAL_STATUS_SCHEMA,
    "dueDate": {"type": "string"},
}, required=["id", "title", "description", "progress", "status"])

SPRINT_BOARD_SCHEMA = object_schema({
    "sprintName": {"type": "string"},
    "startDate": {"type": "string"},
    "endDate": {"type": "string"},
    "tasks": array_of(object_schema({
        "id": {"type": "string"},
        "title": {"type": "string"},
        "status": BOARD_STATUS_SCHEMA,
        "priority": PRIORITY_SCHEMA,
        "assignee": {"type": "string"},
        "points": {"type": "integer", "minimum": 0},
    }, required=["id", "title", "status", "priority", "points"])),
}, required=["sprintName", "tasks"])

TEAM_LOAD_SCHEMA = object_schema({
    "members": array_of(TEAM_MEMBER_SCHEMA),
}, required=["members"])

GOALS_SCHEMA = object_schema({
    "title": {"type": "string"},
    "goals": array_of(GOAL_SCHEMA),
}, required=["goals"])

KANBAN_BOARD_SCHEMA = object_schema({
    "title": {"type": "string"},
    "columns": array_of(object_schema({
        "id": {"type": "string"},
        "title": {"type": "string"},
        "color": {"type": "string"},
        "issues": array_of(object_schema({
            "id": {"type": "string"},
            "title": {"type": "string"},
            "priority": PRIORITY_SCHEMA,
            "assignee": {"type": "string"},
            "labels": STRING_LIST_SCHEMA,
        }, required=["id", "title", "priority"])),
    }, required=["id", "title", "issues"])),
}, required=["columns"])

ISSUE_CARD_SCHEMA = object_schema({
    "id": {"type": "string"},
    "title": {"type": "string"},
    "description": {"type": "string"},
    "status": {"type": "string"},
    "priority": PRIORITY_SCHEMA,
    "assignee": object_schema({
        "name": {"type": "string"},
        "avatar": {"type": "string"},
    }, required=["name"]),
    "labels": STRING_LIST_SCHEMA,
    "createdAt": {"type": "string"},
    "linkedPRs": array_of(object_schema({
        "number": {"type": "integer"},
        "title": {"type": "string"},
        "status": PR_STATUS_SCHEMA,
    }, required=["number", "title", "status"])),
    "comments": {"type": "integer", "minimum": 0},
}, required=["id", "title", "description", "status", "priority", "labels", "createdAt"])

STANDUP_SUMMARY_SCHEMA = object_schema({
    "date": {"type": "string"},
    "completed": array_of(object_schema({
        "issue": {"type": "string"},
        "assignee": {"type": "string"},
    }, required=["issue", "assignee"])),
    "inProgress": array_of(object_schema({
        "issue": {"type": "string"},
        "assignee": {"type": "string"},
        "blockers": STRING_LIST_SCHEMA,
    }, required=["issue", "assignee"])),
    "blockers": array_of(object_schema({
        "issue": {"type": "string"},
        "reason": {"type": "string"},
        "suggestedAction": {"type": "string"},
    }, required=["issue", "reason"])),
    "highlights": STRING_LIST_SCHEMA,
}, required=["date", "completed", "inProgress", "blockers"])

VELOCITY_RESULT_SCHEMA = object_schema({
    "averageVelocity": {"type": "number", "description": "Average velocity"},
    "trend": TREND_SCHEMA,
    "projection": {"type": "number", "description": "Projected next sprint capacity"},
}, required=["averageVelocity", "trend", "projection"])

BLOCKER_RESULT_SCHEMA = object_schema({
    "issue": {"type": "string", "description": "Issue id and title"},
    "reason": {"type": "string", "description": "Blocker reason"},
    "suggestedAction": {"type": "string", "description": "Suggested action"},
}, required=["issue", "reason", "suggestedAction"])

SPRINT_HEALTH_SCHEMA = object_schema({
    "healthScore": {"type": "number", "minimum": 0, "maximum": 100},
    "onTrack": {"type": "boolean"},
    "risks": STRING_LIST_SCHEMA,
    "recommendations": STRING_LIST_SCHEMA,
}, required=["healthScore", "onTrack", "risks", "recommendations"])


# Registry

_registry: Dict[str, Schema] = {}


def register_schema(name: str, definition: Dict[str, Any]) -> Schema:
    """
    Register a schema under a name, replacing any previous definition.

    Args:
        name: Registry name
        definition: JSON Schema definition

    Returns:
        The registered Schema
    """
    schema = Schema(name, definition)
    _registry[name] = schema
    logger.debug(f"Registered schema: {name}")
    return schema


def get_schema(name: str) -> Schema:
    """
    Look up a registered schema.

    Raises:
        KeyError: If no schema is registered under the name
    """
    if name not in _registry:
        raise KeyError(f"Unknown schema: {name}")
    return _registry[name]


def validate(value: Any, schema_name: str) -> Any:
    """
    Validate a value against a named schema.

    Args:
        value: Value to validate
        schema_name: Registered schema name (e.g., "issue", "sprint_health")

    Returns:
        The value, unchanged

    Raises:
        ValidationError: If validation fails
    """
    return get_schema(schema_name).validate(value)


def schema_names() -> List[str]:
    return sorted(_registry)


for _name, _definition in (
    ("issue", ISSUE_SCHEMA),
    ("sprint_data", SPRINT_DATA_SCHEMA),
    ("team_member", TEAM_MEMBER_SCHEMA),
    ("goal", GOAL_SCHEMA),
    ("sprint_board", SPRINT_BOARD_SCHEMA),
    ("team_load", TEAM_LOAD_SCHEMA),
    ("goals", GOALS_SCHEMA),
    ("kanban_board", KANBAN_BOARD_SCHEMA),
    ("issue_card", ISSUE_CARD_SCHEMA),
    ("standup_summary", STANDUP_SUMMARY_SCHEMA),
    ("velocity_result", VELOCITY_RESULT_SCHEMA),
    ("blocker_result", BLOCKER_RESULT_SCHEMA),
    ("sprint_health", SPRINT_HEALTH_SCHEMA),
):
    register_schema(_name, _definition)
