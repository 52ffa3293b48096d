"""
Sprint analysis tools.
Velocity, blocker triage, sprint health and the sprint summary.
"""

import logging
from typing import Dict, Any, List, Optional, Sequence

from ..context.entity import Issue, IssueStatus, Trend, CapacitySnapshot
from ..context.fixtures import (
    SPRINT_INFO,
    SPRINT_HISTORY,
    OVERLOAD_WATCHLIST,
    SUMMARY_VELOCITY,
    SUMMARY_TEAM_HEALTH,
    SUMMARY_RECOMMENDATIONS,
)
from ..context.store import IssueStore
from ..context.views import percent, round_half_up
from . import schemas

logger = logging.getLogger(__name__)

PROJECTION_FACTOR = 1.05
TREND_MARGIN = 0.1

BASE_HEALTH_SCORE = 80
BLOCKED_PENALTY = 8
ON_PACE_BONUS = 10
BEHIND_SCHEDULE_SLACK = 10
ON_TRACK_SCORE = 70

# Checked in order; the first keyword found in the reason wins
BLOCKER_SUGGESTIONS = (
    ("review", "Schedule urgent review meeting with stakeholders"),
    ("credentials", "Follow up with vendor support or escalate to manager"),
    ("dependency", "Check if dependency can be resolved or work on alternative"),
)
DEFAULT_SUGGESTION = "Discuss with team lead to identify resolution path"
UNKNOWN_BLOCKER_REASON = "Unknown blocker reason"


def register_analysis_tools(registry, store: IssueStore,
                            history: Sequence[Dict[str, Any]] = SPRINT_HISTORY,
                            watchlist: Sequence[CapacitySnapshot] = OVERLOAD_WATCHLIST):
    """
    Register sprint analysis tools with a registry.

    Args:
        registry: Tool registry to register with
        store: Issue store the tools read
        history: Sprint velocity history, oldest first
        watchlist: Capacity readings checked for members over capacity
    """
    registry.register_function(
        name="calculateVelocity",
        description=(
            "Calculates team velocity from sprint history data. Returns average velocity, "
            "trend, and projected capacity for next sprint. Use when user asks about team "
            "performance, velocity, or sprint planning."
        ),
        func=lambda sprints=None: _calculate_velocity(list(history) if sprints is None else sprints),
        input_schema=schemas.CALCULATE_VELOCITY_INPUT,
        output_schema=schemas.CALCULATE_VELOCITY_OUTPUT,
    )

    registry.register_function(
        name="findBlockers",
        description=(
            "Identifies blocked tasks and suggests resolution actions. Use when user asks "
            "about blockers, impediments, or what's slowing down the team."
        ),
        func=lambda tasks=None: _find_blockers(store.list() if tasks is None else tasks),
        input_schema=schemas.FIND_BLOCKERS_INPUT,
        output_schema=schemas.FIND_BLOCKERS_OUTPUT,
    )

    registry.register_function(
        name="analyzeSprintHealth",
        description=(
            "Analyzes overall sprint health including progress, risks, and recommendations. "
            "Use when user asks about sprint status, health check, or risk assessment."
        ),
        func=lambda **kwargs: _analyze_sprint_health(store.list(), watchlist, **kwargs),
        input_schema=schemas.ANALYZE_SPRINT_HEALTH_INPUT,
        output_schema=schemas.ANALYZE_SPRINT_HEALTH_OUTPUT,
    )

    registry.register_function(
        name="generateSprintSummary",
        description=(
            "Generates a complete sprint summary report with progress, team health, blockers, "
            "and recommendations. Use when user asks to 'generate sprint summary', 'create "
            "sprint report', or 'summarize the sprint'."
        ),
        func=lambda: _generate_sprint_summary(store),
        input_schema=schemas.GENERATE_SPRINT_SUMMARY_INPUT,
        output_schema=schemas.GENERATE_SPRINT_SUMMARY_OUTPUT,
    )

    registry.register_function(
        name="getProjectAnalytics",
        description="Gets a single project metric with its trend",
        func=lambda **kwargs: _get_project_analytics(store, history, **kwargs),
        input_schema=schemas.GET_PROJECT_ANALYTICS_INPUT,
        output_schema=schemas.GET_PROJECT_ANALYTICS_OUTPUT,
    )

    logger.info("Registered sprint analysis tools")


def velocity_trend(completed: List[float]) -> str:
    """
    Compare the last two sprints against the first two.

    A move of more than ten percent either way counts as a trend. Fewer
    than four sprints is always stable.
    """
    if len(completed) < 4:
        return Trend.STABLE
    first = sum(completed[:2]) / 2
    last = sum(completed[-2:]) / 2
    if last > first * (1 + TREND_MARGIN):
        return Trend.UP
    if last < first * (1 - TREND_MARGIN):
        return Trend.DOWN
    return Trend.STABLE


def _calculate_velocity(sprints: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Calculate velocity statistics from sprint history.

    Args:
        sprints: Sprint samples, oldest first

    Returns:
        Average velocity, trend and next-sprint projection
    """
    if not sprints:
        return {"averageVelocity": 0, "trend": Trend.STABLE, "projection": 0}

    completed = [s["completed"] for s in sprints]
    average = sum(completed) / len(completed)

    return {
        "averageVelocity": round_half_up(average * 10) / 10,
        "trend": velocity_trend(completed),
        "projection": round_half_up(average * PROJECTION_FACTOR),
    }


def suggest_action(reason: str) -> str:
    """Pick a resolution suggestion for a blocker reason."""
    lowered = reason.lower()
    for keyword, suggestion in BLOCKER_SUGGESTIONS:
        if keyword in lowered:
            return suggestion
    return DEFAULT_SUGGESTION


def _task_fields(task) -> Dict[str, Any]:
    if isinstance(task, Issue):
        return task.to_dict()
    return task


def _find_blockers(tasks: List[Any]) -> List[Dict[str, str]]:
    """
    List blocked tasks with a suggested next step for each.

    Args:
        tasks: Issues, or task dictionaries in wire form

    Returns:
        One entry per blocked task, in input order
    """
    blockers = []
    for task in map(_task_fields, tasks):
        if task["status"] != IssueStatus.BLOCKED:
            continue
        reason = task.get("blockerReason") or UNKNOWN_BLOCKER_REASON
        blockers.append({
            "issue": f"{task['id']}: {task['title']}",
            "reason": reason,
            "suggestedAction": suggest_action(reason),
        })
    return blockers


def _analyze_sprint_health(issues: List[Issue], watchlist: Sequence[CapacitySnapshot],
                           sprint_name: Optional[str] = None, days_elapsed: float = 7,
                           total_days: float = 14) -> Dict[str, Any]:
    """
    Score the sprint and list its risks.

    The score starts at 80, loses 8 per blocked task, then gains 10 when
    completion keeps pace with elapsed time or loses half the shortfall
    otherwise. It is rounded and clamped to 0-100.

    Args:
        issues: Issues of the sprint
        watchlist: Capacity readings checked for members over capacity
        sprint_name: Sprint being analyzed, for logging only
        days_elapsed: Days elapsed in the sprint
        total_days: Sprint length in days

    Returns:
        Health score, on-track flag, risks and recommendations
    """
    total = len(issues)
    done = sum(1 for i in issues if i.is_done)
    blocked = sum(1 for i in issues if i.is_blocked)

    completion_rate = done / total * 100 if total else 0.0
    expected_rate = days_elapsed / total_days * 100

    score = BASE_HEALTH_SCORE - blocked * BLOCKED_PENALTY
    if completion_rate >= expected_rate:
        score += ON_PACE_BONUS
    else:
        score -= (expected_rate - completion_rate) / 2
    score = max(0, min(100, round_half_up(score)))

    overloaded = [m for m in watchlist if m.assigned > m.capacity]

    risks = []
    if blocked > 0:
        risks.append(f"{blocked} blocked task(s)")
    if completion_rate < expected_rate - BEHIND_SCHEDULE_SLACK:
        risks.append("Behind schedule")
    if overloaded:
        risks.append(f"{len(overloaded)} team member(s) over capacity")

    recommendations = []
    if blocked > 0:
        recommendations.append("Prioritize blocker resolution - schedule sync with blockers owners")
    if overloaded:
        names = ", ".join(m.name for m in overloaded)
        recommendations.append(f"Reassign tasks from overloaded members ({names})")
    if completion_rate < expected_rate:
        recommendations.append("Consider reducing sprint scope or adding resources")
    if not recommendations:
        recommendations.append("Sprint is on track - continue current pace")

    logger.debug(f"Sprint health for {sprint_name or SPRINT_INFO.name}: {score} "
                 f"({done}/{total} done, {blocked} blocked)")

    return {
        "healthScore": score,
        "onTrack": score >= ON_TRACK_SCORE,
        "risks": risks,
        "recommendations": recommendations,
    }


def _generate_sprint_summary(store: IssueStore) -> Dict[str, Any]:
    """
    Build the sprint summary report.

    Progress and blockers come from the store; velocity, team health and
    recommendations come from the summary fixtures.
    """
    issues = store.list()
    done = sum(1 for i in issues if i.is_done)
    in_progress = sum(1 for i in issues if i.status == IssueStatus.IN_PROGRESS)
    blocked = [i for i in issues if i.is_blocked]

    return {
        "sprint": SPRINT_INFO.name,
        "dates": SPRINT_INFO.dates_label,
        "progress": {
            "completed": done,
            "inProgress": in_progress,
            "blocked": len(blocked),
            "total": len(issues),
            "percentComplete": percent(done, len(issues)),
        },
        "velocity": dict(SUMMARY_VELOCITY),
        "teamHealth": {
            "score": SUMMARY_TEAM_HEALTH["score"],
            "overloadedMembers": list(SUMMARY_TEAM_HEALTH["overloadedMembers"]),
            "availableCapacity": list(SUMMARY_TEAM_HEALTH["availableCapacity"]),
        },
        "blockers": [
            {"id": i.id, "title": i.title, "reason": i.blocker_reason or UNKNOWN_BLOCKER_REASON}
            for i in blocked
        ],
        "recommendations": list(SUMMARY_RECOMMENDATIONS),
        "message": (
            f"{SPRINT_INFO.name} Summary: {SUMMARY_TEAM_HEALTH['score']}% health score, "
            f"{len(blocked)} blockers, on track for delivery"
        ),
    }


def _get_project_analytics(store: IssueStore, history: Sequence[Dict[str, Any]],
                           metric: str) -> Dict[str, Any]:
    """
    Compute one project metric.

    completion is the percentage of done issues, points the sum of done
    story points, velocity the average completed points per sprint. These
    share the velocity trend. blocked counts blocked issues and trends up
    whenever any exist.

    Args:
        store: Issue store
        history: Sprint velocity history, oldest first
        metric: One of completion, blocked, points, velocity

    Returns:
        Metric name, value and trend
    """
    issues = store.list()
    completed = [s["completed"] for s in history]
    trend = velocity_trend(completed)

    if metric == "completion":
        value = percent(sum(1 for i in issues if i.is_done), len(issues))
    elif metric == "points":
        value = sum(i.points or 0 for i in issues if i.is_done)
    elif metric == "velocity":
        value = _calculate_velocity(list(history))["averageVelocity"]
    else:
        value = sum(1 for i in issues if i.is_blocked)
        trend = Trend.UP if value else Trend.STABLE

    return {"metric": metric, "value": value, "trend": trend}
