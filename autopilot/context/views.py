"""
Derivation functions mapping the issue list into dashboard view models.

All functions here are pure: the same issues always produce the same output.
"""

import math
from typing import Dict, Any, List, Iterable, Sequence

from .entity import Issue, IssueStatus, GoalStatus, TeamMember, SprintInfo
from .fixtures import SPRINT_INFO

BOARD_STATUS_MAP = {
    IssueStatus.BACKLOG: "todo",
    IssueStatus.TODO: "todo",
    IssueStatus.IN_PROGRESS: "in_progress",
    # Blocked work shows as in progress on the board
    IssueStatus.BLOCKED: "in_progress",
    IssueStatus.IN_REVIEW: "in_review",
    IssueStatus.DONE: "done",
}

KANBAN_COLUMNS = (
    ("backlog", "Backlog", "#8b949e"),
    ("todo", "To Do", "#58a6ff"),
    ("in_progress", "In Progress", "#d29922"),
    ("in_review", "In Review", "#a371f7"),
    ("done", "Done", "#3fb950"),
)

AI_LABELS = ("ai", "llm")
INFRA_LABELS = ("devops", "infrastructure")

TEAM_TASKS_SHOWN = 3


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def percent(part: int, whole: int) -> int:
    return round_half_up(part / max(whole, 1) * 100)


def map_board_status(status: str) -> str:
    """Collapse an issue status into one of the four board columns."""
    return BOARD_STATUS_MAP.get(status, "todo")


def to_sprint_board(issues: Iterable[Issue], sprint: SprintInfo = SPRINT_INFO) -> Dict[str, Any]:
    """
    Build the sprint board view.

    Args:
        issues: Issues to show
        sprint: Sprint the board belongs to

    Returns:
        Sprint board view model
    """
    tasks = []
    for issue in issues:
        task = {
            "id": issue.id,
            "title": issue.title,
            "status": map_board_status(issue.status),
            "priority": issue.priority,
            "points": issue.points or 0,
        }
        if issue.assignee:
            task["assignee"] = issue.assignee
        tasks.append(task)

    return {
        "sprintName": sprint.name,
        "startDate": sprint.start_date,
        "endDate": sprint.end_date,
        "tasks": tasks,
    }


def to_kanban_board(issues: Iterable[Issue], title: str = None) -> Dict[str, Any]:
    """
    Group issues into kanban columns.

    Blocked issues sit in the In Progress column.
    """
    columns = {column_id: [] for column_id, _, _ in KANBAN_COLUMNS}
    for issue in issues:
        column_id = IssueStatus.IN_PROGRESS if issue.is_blocked else issue.status
        card = {"id": issue.id, "title": issue.title, "priority": issue.priority,
                "labels": list(issue.labels)}
        if issue.assignee:
            card["assignee"] = issue.assignee
        columns[column_id].append(card)

    board = {
        "columns": [
            {"id": column_id, "title": column_title, "color": color, "issues": columns[column_id]}
            for column_id, column_title, color in KANBAN_COLUMNS
        ]
    }
    if title:
        board["title"] = title
    return board


def issues_for_member(member: TeamMember, issues: Iterable[Issue]) -> List[Issue]:
    """
    Select the issues assigned to a team member.

    Issues carrying an assignee_id are joined on it. Issues without one fall
    back to a case-insensitive first-name substring match on the assignee name.
    """
    first_name = member.first_name.lower()
    matched = []
    for issue in issues:
        if issue.assignee_id is not None:
            if issue.assignee_id == member.id:
                matched.append(issue)
        elif issue.assignee and first_name in issue.assignee.lower():
            matched.append(issue)
    return matched


def to_team_load(members: Sequence[TeamMember], issues: Iterable[Issue]) -> Dict[str, Any]:
    """
    Build the team load view.

    Args:
        members: Team roster
        issues: Issues to attribute

    Returns:
        Team load view model; `assigned` counts points of open issues only
    """
    issues = list(issues)
    result = []
    for member in members:
        member_issues = issues_for_member(member, issues)
        assigned = sum(i.points or 0 for i in member_issues if not i.is_done)
        entry = member.to_dict()
        entry["assigned"] = assigned
        entry["tasks"] = [
            {"id": i.id, "title": i.title, "points": i.points or 0, "status": i.status}
            for i in member_issues[:TEAM_TASKS_SHOWN]
        ]
        result.append(entry)
    return {"members": result}


def _labelled(issues: List[Issue], labels: Sequence[str]) -> List[Issue]:
    return [i for i in issues if any(label in i.labels for label in labels)]


def _progress_status(progress: int, on_track_at: int) -> str:
    if progress >= 100:
        return GoalStatus.COMPLETED
    if progress >= on_track_at:
        return GoalStatus.ON_TRACK
    return GoalStatus.AT_RISK


def to_goals(issues: Iterable[Issue], sprint: SprintInfo = SPRINT_INFO) -> Dict[str, Any]:
    """
    Compute the sprint goals from issue completion.

    Args:
        issues: Issues of the sprint
        sprint: Sprint the goals belong to

    Returns:
        Goals view model with four goals, g1 to g4
    """
    issues = list(issues)

    ai_issues = _labelled(issues, AI_LABELS)
    ai_done = sum(1 for i in ai_issues if i.is_done)
    ai_progress = percent(ai_done, len(ai_issues))

    infra_issues = _labelled(issues, INFRA_LABELS)
    infra_done = sum(1 for i in infra_issues if i.is_done)
    infra_progress = percent(infra_done, len(infra_issues))

    total = len(issues)
    done = sum(1 for i in issues if i.is_done)
    overall_progress = percent(done, total)

    blocked = sum(1 for i in issues if i.is_blocked)

    return {
        "title": sprint.goals_title or f"{sprint.name} Goals",
        "goals": [
            {
                "id": "g1",
                "title": "Stabilize Neural Core",
                "description": f"{ai_done}/{len(ai_issues)} AI/LLM tasks completed",
                "progress": ai_progress,
                "target": "Zero Context Drifts",
                "status": _progress_status(ai_progress, 50),
                "dueDate": "2026-02-15",
            },
            {
                "id": "g2",
                "title": "Production Infrastructure",
                "description": f"{infra_done}/{len(infra_issues)} infra tasks completed",
                "progress": infra_progress,
                "target": "Fully Containerized",
                "status": _progress_status(infra_progress, 50),
                "dueDate": sprint.end_date,
            },
            {
                "id": "g3",
                "title": "Sprint Completion",
                "description": f"{done}/{total} total tasks done",
                "progress": overall_progress,
                "target": f"{total} tasks",
                "status": _progress_status(overall_progress, 40),
                "dueDate": sprint.end_date,
            },
            {
                "id": "g4",
                "title": "Resolved Blockers",
                "description": f"{blocked} critical blocker(s) active" if blocked else "All systems go!",
                "progress": 100 if blocked == 0 else max(0, 100 - blocked * 25),
                "target": "0 blockers",
                "status": GoalStatus.COMPLETED if blocked == 0 else GoalStatus.BLOCKED,
            },
        ],
    }


def goals_for_issue(issue: Issue) -> List[str]:
    """IDs of the completion goals an issue counts toward."""
    goal_ids = []
    if any(label in issue.labels for label in AI_LABELS):
        goal_ids.append("g1")
    if any(label in issue.labels for label in INFRA_LABELS):
        goal_ids.append("g2")
    goal_ids.append("g3")
    return goal_ids
