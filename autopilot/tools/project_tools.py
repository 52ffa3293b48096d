"""
Task management tools.
Bulk updates, workload rebalancing, linked cross-component updates and the
single-task helpers an orchestrator uses to change project state.
"""

import logging
from typing import Dict, Any, List, Optional, Sequence

from ..context.entity import Issue, IssueStatus, TeamMember, CapacitySnapshot
from ..context.fixtures import TEAM_ROSTER, REBALANCE_CAPACITY
from ..context.store import IssueStore
from ..context.views import to_goals, goals_for_issue, issues_for_member, round_half_up
from . import schemas

logger = logging.getLogger(__name__)

ARROW = "→"

OVERLOADED_AT = 0.8
AVAILABLE_BELOW = 0.6
LOW_LOAD_BELOW = 0.5
DEFAULT_MOVE_POINTS = 5

LINEAR_STATUS_MAP = {
    "Backlog": IssueStatus.BACKLOG,
    "Todo": IssueStatus.TODO,
    "In Progress": IssueStatus.IN_PROGRESS,
    "In Review": IssueStatus.IN_REVIEW,
    "Done": IssueStatus.DONE,
    "Canceled": None,
}

LINEAR_PRIORITY_MAP = {
    "No Priority": None,
    "Urgent": "urgent",
    "High": "high",
    "Medium": "medium",
    "Low": "low",
}


def register_project_tools(registry, store: IssueStore,
                           roster: Sequence[TeamMember] = TEAM_ROSTER,
                           capacity: Sequence[CapacitySnapshot] = REBALANCE_CAPACITY):
    """
    Register task management tools with a registry.

    Args:
        registry: Tool registry to register with
        store: Issue store the tools read and write
        roster: Team roster used to resolve assignee names
        capacity: Capacity snapshot used by rebalanceWorkload
    """
    registry.register_function(
        name="bulkUpdateTasks",
        description=(
            "Performs bulk operations on multiple tasks at once. Can change status, assignee, "
            "or priority for all matching tasks. Use when user says things like 'mark all todo "
            "tasks as in_progress', 'assign all John's tasks to Sarah', or 'set all blocked "
            "tasks to high priority'."
        ),
        func=lambda **kwargs: _bulk_update_tasks(store, roster, **kwargs),
        input_schema=schemas.BULK_UPDATE_TASKS_INPUT,
        output_schema=schemas.BULK_UPDATE_TASKS_OUTPUT,
    )

    registry.register_function(
        name="rebalanceWorkload",
        description=(
            "Rebalances team workload by moving a task from an overloaded member to one with "
            "available capacity. Use when user says 'rebalance team workload', 'help "
            "overloaded members', or 'redistribute tasks'. Set dryRun to preview."
        ),
        func=lambda **kwargs: _rebalance_workload(store, roster, capacity, **kwargs),
        input_schema=schemas.REBALANCE_WORKLOAD_INPUT,
        output_schema=schemas.REBALANCE_WORKLOAD_OUTPUT,
    )

    registry.register_function(
        name="updateTaskWithSideEffects",
        description=(
            "Updates a task and reports the linked updates across components, like goal "
            "progress when a task is completed or tasks unblocked by it. Use when user wants "
            "linked updates like 'mark TAM-205 done and update the goal progress'."
        ),
        func=lambda **kwargs: _update_task_with_side_effects(store, **kwargs),
        input_schema=schemas.UPDATE_TASK_WITH_SIDE_EFFECTS_INPUT,
        output_schema=schemas.UPDATE_TASK_WITH_SIDE_EFFECTS_OUTPUT,
    )

    registry.register_function(
        name="updateTaskStatus",
        description="Updates the status of a task",
        func=lambda **kwargs: _update_task_status(store, **kwargs),
        input_schema=schemas.UPDATE_TASK_STATUS_INPUT,
        output_schema=schemas.SIMPLE_RESULT,
    )

    registry.register_function(
        name="reassignTask",
        description="Reassigns a task to a different team member",
        func=lambda **kwargs: _reassign_task(store, roster, **kwargs),
        input_schema=schemas.REASSIGN_TASK_INPUT,
        output_schema=schemas.SIMPLE_RESULT,
    )

    registry.register_function(
        name="listTeamMembers",
        description="Lists all team members with their roles and capacity",
        func=lambda: [member.to_dict() for member in roster],
        input_schema=schemas.LIST_TEAM_MEMBERS_INPUT,
        output_schema=schemas.LIST_TEAM_MEMBERS_OUTPUT,
    )

    registry.register_function(
        name="listIssues_fallback",
        description=(
            "FALLBACK ONLY: Lists issues from the local project. Use this ONLY if the real "
            "'linear__list_issues' tool is unavailable or fails."
        ),
        func=lambda **kwargs: _list_issues(store, **kwargs),
        input_schema=schemas.LIST_ISSUES_FALLBACK_INPUT,
        output_schema=schemas.LIST_ISSUES_FALLBACK_OUTPUT,
        fallback_for="linear__list_issues",
    )

    registry.register_function(
        name="createIssue_fallback",
        description=(
            "FALLBACK ONLY: Creates an issue in the local project. Use this ONLY if the real "
            "'linear__create_issue' tool is unavailable or fails."
        ),
        func=lambda **kwargs: _create_issue(store, roster, **kwargs),
        input_schema=schemas.CREATE_ISSUE_FALLBACK_INPUT,
        output_schema=schemas.CREATE_ISSUE_FALLBACK_OUTPUT,
        fallback_for="linear__create_issue",
    )

    logger.info("Registered project management tools")


def resolve_member(roster: Sequence[TeamMember], name: Optional[str]) -> Optional[TeamMember]:
    """
    Find the roster entry for an assignee name.

    Matches the first or full name exactly, ignoring case.
    """
    for member in roster:
        if member.matches_name(name):
            return member
    return None


def _assignee_patch(roster: Sequence[TeamMember], name: str) -> Dict[str, Any]:
    member = resolve_member(roster, name)
    return {"assignee": name, "assignee_id": member.id if member else None}


# Tool implementation functions

def _matches_filter(issue: Issue, filter: Dict[str, Any]) -> bool:
    if filter.get("status") and issue.status != filter["status"]:
        return False
    if filter.get("assignee"):
        if not issue.assignee or issue.assignee.lower() != filter["assignee"].lower():
            return False
    if filter.get("priority") and issue.priority != filter["priority"]:
        return False
    return True


def _bulk_update_tasks(store: IssueStore, roster: Sequence[TeamMember],
                       filter: Dict[str, Any] = None,
                       update: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Apply the same change to every task matching a filter.

    Args:
        store: Issue store
        roster: Team roster for assignee resolution
        filter: Present fields must all match (status, assignee, priority)
        update: Fields to set (newStatus, newAssignee, newPriority)

    Returns:
        Bulk update report
    """
    filter = filter or {}
    update = update or {}

    patch = {}
    changes = []
    if update.get("newStatus"):
        patch["status"] = update["newStatus"]
        changes.append(f"status {ARROW} {update['newStatus']}")
    if update.get("newAssignee"):
        patch.update(_assignee_patch(roster, update["newAssignee"]))
        changes.append(f"assignee {ARROW} {update['newAssignee']}")
    if update.get("newPriority"):
        patch["priority"] = update["newPriority"]
        changes.append(f"priority {ARROW} {update['newPriority']}")
    changes_text = ", ".join(changes)

    # Selection and writes happen under one lock so overlapping bulk updates serialize
    with store.locked():
        matching = [issue for issue in store.list() if _matches_filter(issue, filter)]

        if not matching:
            return {
                "success": False,
                "tasksUpdated": 0,
                "message": "No tasks matched the filter criteria",
                "updatedTasks": [],
            }

        updated_tasks = []
        for issue in matching:
            updated = store.apply_update(issue.id, patch) if patch else issue
            updated_tasks.append({
                "id": issue.id,
                "title": issue.title,
                "changes": f"{issue.status} {ARROW} {updated.status}",
            })

    logger.info(f"Bulk update touched {len(updated_tasks)} task(s): {changes_text or 'no changes'}")

    return {
        "success": True,
        "tasksUpdated": len(updated_tasks),
        "changes": changes_text,
        "message": f"Successfully updated {len(updated_tasks)} task(s): {changes_text}",
        "updatedTasks": updated_tasks,
    }


def _load_text(assigned: int, capacity: int) -> str:
    pct = round_half_up(assigned / capacity * 100) if capacity else 0
    return f"{assigned}/{capacity} ({pct}%)"


def _load_status(load: float, middle: str) -> str:
    if load > OVERLOADED_AT:
        return "HIGH"
    if load < LOW_LOAD_BELOW:
        return "LOW"
    return middle


def _member_tasks(store: IssueStore, roster: Sequence[TeamMember], name: str) -> List[Issue]:
    issues = store.list()
    member = resolve_member(roster, name)
    if member is not None:
        member_issues = issues_for_member(member, issues)
    else:
        member_issues = [i for i in issues if i.assignee and i.assignee.lower() == name.lower()]
    return [i for i in member_issues if not i.is_done]


def _rebalance_workload(store: IssueStore, roster: Sequence[TeamMember],
                        capacity: Sequence[CapacitySnapshot],
                        dry_run: bool = False) -> Dict[str, Any]:
    """
    Move one open task from the first overloaded member to the first available one.

    Loads come from the capacity snapshot, not from the issue list.

    Args:
        store: Issue store
        roster: Team roster for assignee resolution
        capacity: Capacity snapshot, in priority order
        dry_run: Preview only; nothing is written

    Returns:
        Rebalance report
    """
    before_state = [
        {"name": m.name, "load": _load_text(m.assigned, m.capacity), "status": _load_status(m.load, "OK")}
        for m in capacity
    ]

    overloaded = [m for m in capacity if m.load > OVERLOADED_AT]
    available = [m for m in capacity if m.load < AVAILABLE_BELOW]

    if not overloaded:
        return {
            "success": True,
            "rebalanced": False,
            "message": "Team workload is already well balanced! No changes needed.",
            "beforeState": before_state,
            "reassignments": [],
            "afterState": [],
        }

    source = overloaded[0]
    reassignments = []

    with store.locked():
        source_tasks = _member_tasks(store, roster, source.name)
        if source_tasks and available:
            task = source_tasks[0]
            target = available[0]
            points = task.points or DEFAULT_MOVE_POINTS
            reassignments.append({
                "task": f"{task.id}: {task.title}",
                "from": source.name,
                "to": target.name,
                "points": points,
                "reason": (
                    f"{source.name} is at {round_half_up(source.load * 100)}% capacity, "
                    f"{target.name} has {100 - round_half_up(target.load * 100)}% available"
                ),
            })
            if not dry_run:
                store.apply_update(task.id, _assignee_patch(roster, target.name))
                logger.info(f"Rebalanced {task.id} from {source.name} to {target.name}")

    after_state = []
    for m in capacity:
        assigned = m.assigned
        for r in reassignments:
            if r["from"] == m.name:
                assigned -= r["points"]
            if r["to"] == m.name:
                assigned += r["points"]
        load = assigned / m.capacity if m.capacity else 0.0
        after_state.append({
            "name": m.name,
            "load": _load_text(assigned, m.capacity),
            "status": _load_status(load, "OPTIMAL"),
        })

    if not reassignments:
        if not source_tasks:
            message = f"No tasks moved: {source.name} has no open tasks to reassign."
        else:
            message = "No tasks moved: no team member has spare capacity."
    elif dry_run:
        message = f"Rebalance Preview: {len(reassignments)} task(s) would be moved to optimize team load."
    else:
        message = f"Rebalanced! Moved {len(reassignments)} task(s) to optimize team workload."

    return {
        "success": True,
        "rebalanced": not dry_run and bool(reassignments),
        "message": message,
        "beforeState": before_state,
        "reassignments": reassignments,
        "afterState": after_state,
    }


def _goal_updates(issues_before: List[Issue], issues_after: List[Issue],
                  task: Issue) -> List[Dict[str, str]]:
    before = {g["id"]: g for g in to_goals(issues_before)["goals"]}
    after = {g["id"]: g for g in to_goals(issues_after)["goals"]}

    updates = []
    for goal_id in goals_for_issue(task):
        old, new = before[goal_id], after[goal_id]
        updates.append({
            "component": "GoalsWidget",
            "action": "PROGRESS_UPDATED",
            "details": f"\"{new['title']}\" progress {old['progress']}% {ARROW} {new['progress']}%",
        })
        if new["progress"] >= 100 and old["progress"] < 100:
            updates.append({
                "component": "GoalsWidget",
                "action": "STATUS_CHANGED",
                "details": f"\"{new['title']}\" status {ARROW} COMPLETED",
            })
    return updates


def _team_load_update(task: Issue, previous_status: str, new_status: str) -> Dict[str, str]:
    assignee = task.assignee or "Unassigned"
    points = task.points or 0
    was_open = previous_status != IssueStatus.DONE
    is_open = new_status != IssueStatus.DONE

    if was_open and not is_open:
        action, details = "LOAD_DECREASED", f"{assignee}'s load reduced by {points} points"
    elif not was_open and is_open:
        action, details = "LOAD_INCREASED", f"{assignee}'s load increased by {points} points"
    else:
        action, details = "LOAD_UNCHANGED", f"{assignee}'s load unchanged"
    return {"component": "TeamLoadChart", "action": action, "details": details}


def _update_task_with_side_effects(store: IssueStore, task_id: str, new_status: str,
                                   update_goals: bool = True, update_team_load: bool = True,
                                   add_comment: str = None) -> Dict[str, Any]:
    """
    Change a task's status and report every linked update.

    Records come in a fixed order: the status change, goal progress, team
    load, comment, then tasks waiting on this one.

    Args:
        store: Issue store
        task_id: ID of the task to update
        new_status: Status to set
        update_goals: Report goal progress when the task is completed
        update_team_load: Report the team load change
        add_comment: Comment to attach

    Returns:
        Update report
    """
    with store.locked():
        task = store.get(task_id)
        if task is None:
            return {
                "success": False,
                "message": f"Task {task_id} not found",
                "updates": [],
            }

        issues_before = store.list()
        previous_status = task.status
        store.apply_update(task_id, {"status": new_status})

        updates = [{
            "component": "SprintBoard",
            "action": "STATUS_CHANGED",
            "details": f"{task.id}: {previous_status} {ARROW} {new_status}",
        }]

        if new_status == IssueStatus.DONE and update_goals is not False:
            updates.extend(_goal_updates(issues_before, store.list(), task))

        if update_team_load is not False:
            updates.append(_team_load_update(task, previous_status, new_status))

        if add_comment:
            updates.append({
                "component": "IssueCard",
                "action": "COMMENT_ADDED",
                "details": f"Comment: \"{add_comment}\"",
            })

        dependents = [
            i for i in store.list()
            if i.id != task_id and i.blocker_reason and task_id in i.blocker_reason
        ]
        if dependents:
            dependent_ids = ", ".join(i.id for i in dependents)
            # Dependents only leave the blocked state once this task is done
            if new_status == IssueStatus.DONE:
                for dependent in dependents:
                    store.apply_update(dependent.id, {"status": IssueStatus.TODO})
                details = f"{len(dependents)} task(s) are now unblocked: {dependent_ids}"
            else:
                details = f"{len(dependents)} task(s) still waiting on {task_id}: {dependent_ids}"
            updates.append({
                "component": "SprintBoard",
                "action": "TASKS_UNBLOCKED",
                "details": details,
            })

    logger.info(f"Updated {task_id} with {len(updates)} linked changes")

    return {
        "success": True,
        "message": f"Updated {task_id} with {len(updates)} linked changes",
        "taskUpdated": {
            "id": task.id,
            "title": task.title,
            "previousStatus": previous_status,
            "newStatus": new_status,
        },
        "updates": updates,
        "summary": f"Task marked as {new_status}. Updated: {', '.join(u['component'] for u in updates)}",
    }


def _update_task_status(store: IssueStore, task_id: str, status: str) -> Dict[str, Any]:
    """Set the status of a single task."""
    if store.get(task_id) is None:
        return {"success": False, "message": f"Task {task_id} not found"}

    store.apply_update(task_id, {"status": status})
    return {"success": True, "message": f"Updated {task_id} to {status}"}


def _reassign_task(store: IssueStore, roster: Sequence[TeamMember],
                   task_id: str, assignee: str) -> Dict[str, Any]:
    """Assign a single task to someone else."""
    if store.get(task_id) is None:
        return {"success": False, "message": f"Task {task_id} not found"}

    store.apply_update(task_id, _assignee_patch(roster, assignee))
    message = f"Reassigned {task_id} to {assignee}"
    if resolve_member(roster, assignee) is None:
        message += " (not on the team roster)"
    return {"success": True, "message": message}


def _list_issues(store: IssueStore, status: str = None, assignee: str = None,
                 priority: str = None) -> List[Dict[str, Any]]:
    """
    List issues using Linear display values for the filters.

    A display value with no local equivalent ("Canceled", "No Priority")
    matches nothing.
    """
    issues = store.list()

    if status:
        wanted = LINEAR_STATUS_MAP[status]
        issues = [i for i in issues if i.status == wanted]
    if assignee:
        needle = assignee.lower()
        issues = [i for i in issues if i.assignee and needle in i.assignee.lower()]
    if priority:
        wanted = LINEAR_PRIORITY_MAP[priority]
        issues = [i for i in issues if i.priority == wanted]

    return [
        {
            "id": i.id,
            "title": i.title,
            "status": i.status,
            "priority": i.priority,
            "assignee": i.assignee or "Unassigned",
            "labels": list(i.labels),
            "points": i.points or 0,
        }
        for i in issues
    ]


def _create_issue(store: IssueStore, roster: Sequence[TeamMember], title: str,
                  description: str = None, priority: str = None,
                  assignee: str = None) -> Dict[str, Any]:
    """
    Create a backlog issue with the next free ID.

    Issues without a priority are stored as low priority.
    """
    with store.locked():
        patch = _assignee_patch(roster, assignee) if assignee else {}
        issue = Issue(
            id=store.next_id("TAM"),
            title=title,
            status=IssueStatus.BACKLOG,
            priority=LINEAR_PRIORITY_MAP.get(priority) or "low",
            assignee=patch.get("assignee"),
            assignee_id=patch.get("assignee_id"),
        )
        store.add(issue)

    result = {
        "id": issue.id,
        "title": issue.title,
        "status": "Backlog",
        "priority": priority or "No Priority",
        "assignee": assignee or "Unassigned",
    }
    if description is not None:
        result["description"] = description
    return result
