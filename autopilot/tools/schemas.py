"""
Input and output schemas for the project tools.

Property names are the wire names the orchestrator and the dashboard use.
"""

from ..context.schema import (
    object_schema,
    array_of,
    STATUS_SCHEMA,
    PRIORITY_SCHEMA,
    STRING_LIST_SCHEMA,
    SPRINT_DATA_SCHEMA,
    VELOCITY_RESULT_SCHEMA,
    BLOCKER_RESULT_SCHEMA,
    SPRINT_HEALTH_SCHEMA,
)

# Linear-style display values accepted by the fallback tools
LINEAR_STATUSES = ["Backlog", "Todo", "In Progress", "In Review", "Done", "Canceled"]
LINEAR_PRIORITIES = ["No Priority", "Urgent", "High", "Medium", "Low"]


def _described(schema, description):
    return dict(schema, description=description)


SIMPLE_RESULT = object_schema({
    "success": {"type": "boolean"},
    "message": {"type": "string"},
}, required=["success", "message"])

# calculateVelocity

CALCULATE_VELOCITY_INPUT = object_schema({
    "sprints": array_of(SPRINT_DATA_SCHEMA,
                        "Sprint data array. If not provided, uses recent sprint history."),
})
CALCULATE_VELOCITY_OUTPUT = VELOCITY_RESULT_SCHEMA

# findBlockers

FIND_BLOCKERS_INPUT = object_schema({
    "tasks": array_of(object_schema({
        "id": {"type": "string"},
        "title": {"type": "string"},
        "status": STATUS_SCHEMA,
        "blockerReason": {"type": "string"},
    }, required=["id", "title", "status"]),
        "Task list to analyze. If not provided, uses current sprint data."),
})
FIND_BLOCKERS_OUTPUT = array_of(BLOCKER_RESULT_SCHEMA)

# analyzeSprintHealth

ANALYZE_SPRINT_HEALTH_INPUT = object_schema({
    "sprintName": {"type": "string", "description": "Sprint name to analyze"},
    "daysElapsed": {"type": "number", "minimum": 0,
                    "description": "Days elapsed in sprint. Default: 7"},
    "totalDays": {"type": "number", "exclusiveMinimum": 0,
                  "description": "Total sprint days. Default: 14"},
})
ANALYZE_SPRINT_HEALTH_OUTPUT = SPRINT_HEALTH_SCHEMA

# bulkUpdateTasks

BULK_UPDATE_TASKS_INPUT = object_schema({
    "filter": object_schema({
        "status": _described(STATUS_SCHEMA, "Filter by current status"),
        "assignee": {"type": "string", "description": "Filter by current assignee name"},
        "priority": _described(PRIORITY_SCHEMA, "Filter by current priority"),
    }, description="Criteria to select which tasks to update"),
    "update": object_schema({
        "newStatus": _described(STATUS_SCHEMA, "New status to set"),
        "newAssignee": {"type": "string", "description": "New assignee to set"},
        "newPriority": _described(PRIORITY_SCHEMA, "New priority to set"),
    }, description="Changes to apply to matching tasks"),
})
BULK_UPDATE_TASKS_OUTPUT = object_schema({
    "success": {"type": "boolean"},
    "tasksUpdated": {"type": "integer", "minimum": 0},
    "changes": {"type": "string"},
    "message": {"type": "string"},
    "updatedTasks": array_of(object_schema({
        "id": {"type": "string"},
        "title": {"type": "string"},
        "changes": {"type": "string"},
    }, required=["id", "title", "changes"])),
}, required=["success", "tasksUpdated", "message", "updatedTasks"])

# rebalanceWorkload

_LOAD_ROW = object_schema({
    "name": {"type": "string"},
    "load": {"type": "string"},
    "status": {"type": "string"},
}, required=["name", "load", "status"])

REBALANCE_WORKLOAD_INPUT = object_schema({
    "dryRun": {"type": "boolean",
               "description": "If true, only previews changes without applying them. Default: false"},
})
REBALANCE_WORKLOAD_OUTPUT = object_schema({
    "success": {"type": "boolean"},
    "rebalanced": {"type": "boolean"},
    "message": {"type": "string"},
    "beforeState": array_of(_LOAD_ROW),
    "reassignments": array_of(object_schema({
        "task": {"type": "string"},
        "from": {"type": "string"},
        "to": {"type": "string"},
        "points": {"type": "number"},
        "reason": {"type": "string"},
    }, required=["task", "from", "to", "points", "reason"])),
    "afterState": array_of(_LOAD_ROW),
}, required=["success", "rebalanced", "message", "beforeState", "reassignments", "afterState"])

# updateTaskWithSideEffects

UPDATE_TASK_WITH_SIDE_EFFECTS_INPUT = object_schema({
    "taskId": {"type": "string", "description": "Task ID to update (e.g., TAM-205)"},
    "newStatus": _described(STATUS_SCHEMA, "New status for the task"),
    "updateGoals": {"type": "boolean",
                    "description": "Whether to update related goal progress. Default: true"},
    "updateTeamLoad": {"type": "boolean",
                       "description": "Whether to update team load metrics. Default: true"},
    "addComment": {"type": "string", "description": "Optional comment to add to the task"},
}, required=["taskId", "newStatus"])
UPDATE_TASK_WITH_SIDE_EFFECTS_OUTPUT = object_schema({
    "success": {"type": "boolean"},
    "message": {"type": "string"},
    "taskUpdated": object_schema({
        "id": {"type": "string"},
        "title": {"type": "string"},
        "previousStatus": STATUS_SCHEMA,
        "newStatus": STATUS_SCHEMA,
    }, required=["id", "title", "previousStatus", "newStatus"]),
    "updates": array_of(object_schema({
        "component": {"type": "string"},
        "action": {"type": "string"},
        "details": {"type": "string"},
    }, required=["component", "action", "details"])),
    "summary": {"type": "string"},
}, required=["success", "message", "updates"])

# generateSprintSummary

GENERATE_SPRINT_SUMMARY_INPUT = object_schema({})
GENERATE_SPRINT_SUMMARY_OUTPUT = object_schema({
    "sprint": {"type": "string"},
    "dates": {"type": "string"},
    "progress": object_schema({
        "completed": {"type": "integer"},
        "inProgress": {"type": "integer"},
        "blocked": {"type": "integer"},
        "total": {"type": "integer"},
        "percentComplete": {"type": "number", "minimum": 0, "maximum": 100},
    }, required=["completed", "inProgress", "blocked", "total", "percentComplete"]),
    "velocity": object_schema({
        "current": {"type": "number"},
        "average": {"type": "number"},
        "trend": {"type": "string"},
    }, required=["current", "average", "trend"]),
    "teamHealth": object_schema({
        "score": {"type": "number"},
        "overloadedMembers": STRING_LIST_SCHEMA,
        "availableCapacity": STRING_LIST_SCHEMA,
    }, required=["score", "overloadedMembers", "availableCapacity"]),
    "blockers": array_of(object_schema({
        "id": {"type": "string"},
        "title": {"type": "string"},
        "reason": {"type": "string"},
    }, required=["id", "title", "reason"])),
    "recommendations": STRING_LIST_SCHEMA,
    "message": {"type": "string"},
}, required=["sprint", "dates", "progress", "velocity", "teamHealth", "blockers",
             "recommendations", "message"])

# listIssues_fallback / createIssue_fallback

LIST_ISSUES_FALLBACK_INPUT = object_schema({
    "status": {"type": "string", "enum": LINEAR_STATUSES, "description": "Filter issues by status"},
    "assignee": {"type": "string",
                 "description": "Filter issues by assignee name (e.g. 'Sarah', 'John')"},
    "priority": {"type": "string", "enum": LINEAR_PRIORITIES, "description": "Filter issues by priority"},
})
LIST_ISSUES_FALLBACK_OUTPUT = array_of(object_schema({
    "id": {"type": "string"},
    "title": {"type": "string"},
    "status": {"type": "string"},
    "priority": {"type": "string"},
    "assignee": {"type": "string"},
    "labels": STRING_LIST_SCHEMA,
    "points": {"type": "integer"},
}, required=["id", "title", "status", "priority", "assignee", "labels", "points"]))

CREATE_ISSUE_FALLBACK_INPUT = object_schema({
    "title": {"type": "string", "minLength": 1, "description": "Issue title"},
    "description": {"type": "string", "description": "Issue description"},
    "priority": {"type": "string", "enum": LINEAR_PRIORITIES, "description": "Priority level"},
    "assignee": {"type": "string", "description": "Assignee name"},
}, required=["title"])
CREATE_ISSUE_FALLBACK_OUTPUT = object_schema({
    "id": {"type": "string"},
    "title": {"type": "string"},
    "status": {"type": "string"},
    "priority": {"type": "string"},
    "assignee": {"type": "string"},
    "description": {"type": "string"},
}, required=["id", "title", "status", "priority", "assignee"])

# listTeamMembers / updateTaskStatus / reassignTask

LIST_TEAM_MEMBERS_INPUT = object_schema({})
LIST_TEAM_MEMBERS_OUTPUT = array_of(object_schema({
    "id": {"type": "string"},
    "name": {"type": "string"},
    "role": {"type": "string"},
    "capacity": {"type": "integer"},
}, required=["id", "name", "role", "capacity"]))

UPDATE_TASK_STATUS_INPUT = object_schema({
    "taskId": {"type": "string"},
    "status": STATUS_SCHEMA,
}, required=["taskId", "status"])

REASSIGN_TASK_INPUT = object_schema({
    "taskId": {"type": "string"},
    "assignee": {"type": "string", "minLength": 1},
}, required=["taskId", "assignee"])

# getProjectAnalytics

ANALYTICS_METRICS = ["completion", "blocked", "points", "velocity"]

GET_PROJECT_ANALYTICS_INPUT = object_schema({
    "metric": {"type": "string", "enum": ANALYTICS_METRICS,
               "description": "Metric to compute"},
}, required=["metric"])
GET_PROJECT_ANALYTICS_OUTPUT = object_schema({
    "metric": {"type": "string"},
    "value": {"type": "number"},
    "trend": {"type": "string"},
}, required=["metric", "value", "trend"])
