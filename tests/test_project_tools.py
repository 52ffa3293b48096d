"""Tests for autopilot.tools.project_tools module."""

import threading

import pytest

from autopilot.context.entity import CapacitySnapshot
from autopilot.context.fixtures import TEAM_ROSTER
from autopilot.context.store import MemoryIssueStore
from autopilot.context.views import to_team_load
from autopilot.core.exceptions import ValidationError
from autopilot.tools.project_tools import register_project_tools, resolve_member
from autopilot.tools.registry import ToolRegistry


def _registry_for(store, **kwargs):
    registry = ToolRegistry()
    register_project_tools(registry, store, **kwargs)
    return registry


class TestBulkUpdateTasks:
    """Test bulkUpdateTasks."""

    def test_status_filter_and_update(self, registry, store):
        result = registry.execute_tool("bulkUpdateTasks", {
            "filter": {"status": "todo"},
            "update": {"newStatus": "in_progress"},
        })
        assert result["success"] is True
        assert result["tasksUpdated"] == 2
        assert result["changes"] == "status → in_progress"
        assert result["updatedTasks"] == [
            {"id": "TAM-208", "title": "Integrate MCP with Local Shell", "changes": "todo → in_progress"},
            {"id": "TAM-209", "title": "Containerize Agent Runtime", "changes": "todo → in_progress"},
        ]
        assert store.get("TAM-208").status == "in_progress"
        assert store.get("TAM-209").status == "in_progress"

    def test_assignee_filter_ignores_case(self, registry):
        result = registry.execute_tool("bulkUpdateTasks", {
            "filter": {"assignee": "sarah"},
            "update": {"newPriority": "urgent"},
        })
        assert [t["id"] for t in result["updatedTasks"]] == ["TAM-205", "TAM-210", "TAM-202"]

    def test_filters_combine(self, registry):
        result = registry.execute_tool("bulkUpdateTasks", {
            "filter": {"assignee": "Mike", "status": "blocked"},
            "update": {"newPriority": "urgent"},
        })
        assert [t["id"] for t in result["updatedTasks"]] == ["TAM-215"]

    def test_reassignment_resolves_member(self, registry, store):
        result = registry.execute_tool("bulkUpdateTasks", {
            "filter": {"assignee": "John"},
            "update": {"newAssignee": "Emma", "newPriority": "low"},
        })
        assert result["changes"] == "assignee → Emma, priority → low"
        issue = store.get("TAM-208")
        assert issue.assignee == "Emma"
        assert issue.assignee_id == "4"
        assert issue.priority == "low"

    def test_no_matches_is_reported_not_raised(self, registry):
        result = registry.execute_tool("bulkUpdateTasks", {
            "filter": {"assignee": "Nobody"},
            "update": {"newStatus": "done"},
        })
        assert result == {
            "success": False,
            "tasksUpdated": 0,
            "message": "No tasks matched the filter criteria",
            "updatedTasks": [],
        }

    def test_empty_filter_matches_everything(self, registry, store):
        result = registry.execute_tool("bulkUpdateTasks", {"update": {"newPriority": "high"}})
        assert result["tasksUpdated"] == len(store.list())

    def test_rejects_unknown_status(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.execute_tool("bulkUpdateTasks", {"update": {"newStatus": "finished"}})
        assert exc_info.value.paths == ["update.newStatus"]

    def test_waits_for_store_lock(self, registry, store):
        results = []
        worker = threading.Thread(target=lambda: results.append(registry.execute_tool(
            "bulkUpdateTasks", {"filter": {"status": "todo"}, "update": {"newPriority": "low"}})))
        with store.locked():
            worker.start()
            worker.join(timeout=0.2)
            assert worker.is_alive()
            assert store.get("TAM-208").priority != "low"
        worker.join(timeout=5)
        assert not worker.is_alive()
        assert results[0]["tasksUpdated"] == 2
        assert store.get("TAM-208").priority == "low"

    def test_concurrent_updates_serialize(self, registry, store):
        results = {}

        def run(priority):
            results[priority] = registry.execute_tool("bulkUpdateTasks", {
                "filter": {"status": "todo"}, "update": {"newPriority": priority}})

        workers = [threading.Thread(target=run, args=(p,)) for p in ("low", "urgent")]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join(timeout=5)

        assert [results[p]["tasksUpdated"] for p in ("low", "urgent")] == [2, 2]
        assert ([t["id"] for t in results["low"]["updatedTasks"]]
                == [t["id"] for t in results["urgent"]["updatedTasks"]]
                == ["TAM-208", "TAM-209"])
        final = {store.get(i).priority for i in ("TAM-208", "TAM-209")}
        assert len(final) == 1
        assert final <= {"low", "urgent"}


class TestRebalanceWorkload:
    """Test rebalanceWorkload."""

    def test_dry_run_previews_without_writing(self, registry, store):
        result = registry.execute_tool("rebalanceWorkload", {"dryRun": True})
        assert result["success"] is True
        assert result["rebalanced"] is False
        assert result["message"].startswith("Rebalance Preview: 1 task(s)")
        assert result["reassignments"] == [{
            "task": "TAM-205: Implement Voice Command Interface",
            "from": "Sarah",
            "to": "John",
            "points": 8,
            "reason": "Sarah is at 90% capacity, John has 45% available",
        }]
        assert store.get("TAM-205").assignee == "Sarah"

    def test_before_and_after_state(self, registry):
        result = registry.execute_tool("rebalanceWorkload", {"dryRun": True})
        assert result["beforeState"] == [
            {"name": "John", "load": "11/20 (55%)", "status": "OK"},
            {"name": "Sarah", "load": "18/20 (90%)", "status": "HIGH"},
            {"name": "Mike", "load": "5/20 (25%)", "status": "LOW"},
            {"name": "Emma", "load": "8/20 (40%)", "status": "LOW"},
        ]
        assert result["afterState"] == [
            {"name": "John", "load": "19/20 (95%)", "status": "HIGH"},
            {"name": "Sarah", "load": "10/20 (50%)", "status": "OPTIMAL"},
            {"name": "Mike", "load": "5/20 (25%)", "status": "LOW"},
            {"name": "Emma", "load": "8/20 (40%)", "status": "LOW"},
        ]

    def test_apply_moves_task(self, registry, store):
        result = registry.execute_tool("rebalanceWorkload", {})
        assert result["rebalanced"] is True
        assert result["message"].startswith("Rebalanced! Moved 1 task(s)")
        moved = store.get("TAM-205")
        assert moved.assignee == "John"
        assert moved.assignee_id == "1"

    def test_balanced_team_needs_no_changes(self, store):
        balanced = tuple(CapacitySnapshot(name=n, capacity=20, assigned=10)
                         for n in ("John", "Sarah", "Mike", "Emma"))
        registry = _registry_for(store, capacity=balanced)
        result = registry.execute_tool("rebalanceWorkload", {})
        assert result["rebalanced"] is False
        assert result["reassignments"] == []
        assert result["afterState"] == []
        assert "already well balanced" in result["message"]

    def test_no_available_member_moves_nothing(self, store):
        busy = (CapacitySnapshot(name="Sarah", capacity=20, assigned=18),
                CapacitySnapshot(name="John", capacity=20, assigned=15))
        registry = _registry_for(store, capacity=busy)
        result = registry.execute_tool("rebalanceWorkload", {})
        assert result["reassignments"] == []
        assert result["rebalanced"] is False
        assert result["message"] == "No tasks moved: no team member has spare capacity."
        assert store.get("TAM-205").assignee == "Sarah"

    def test_exhausted_member_moves_nothing(self, registry, store):
        moved = [registry.execute_tool("rebalanceWorkload", {}) for _ in range(3)]
        assert [r["rebalanced"] for r in moved] == [True, True, False]
        last = moved[-1]
        assert last["reassignments"] == []
        assert last["message"] == "No tasks moved: Sarah has no open tasks to reassign."
        assert [s["load"] for s in last["afterState"]] == [s["load"] for s in last["beforeState"]]

    def test_dry_run_with_nothing_to_move(self, store):
        busy = (CapacitySnapshot(name="Sarah", capacity=20, assigned=18),)
        registry = _registry_for(store, capacity=busy)
        result = registry.execute_tool("rebalanceWorkload", {"dryRun": True})
        assert result["reassignments"] == []
        assert result["message"].startswith("No tasks moved")


class TestUpdateTaskWithSideEffects:
    """Test updateTaskWithSideEffects."""

    def test_completing_task_reports_linked_updates(self, registry, store):
        result = registry.execute_tool("updateTaskWithSideEffects", {
            "taskId": "TAM-210", "newStatus": "done"})
        assert result["success"] is True
        assert result["taskUpdated"] == {
            "id": "TAM-210", "title": "Neural Intent Parser v2",
            "previousStatus": "in_progress", "newStatus": "done",
        }
        assert result["updates"] == [
            {"component": "SprintBoard", "action": "STATUS_CHANGED",
             "details": "TAM-210: in_progress → done"},
            {"component": "GoalsWidget", "action": "PROGRESS_UPDATED",
             "details": "\"Stabilize Neural Core\" progress 0% → 50%"},
            {"component": "GoalsWidget", "action": "PROGRESS_UPDATED",
             "details": "\"Sprint Completion\" progress 20% → 30%"},
            {"component": "TeamLoadChart", "action": "LOAD_DECREASED",
             "details": "Sarah's load reduced by 13 points"},
        ]
        assert result["message"] == "Updated TAM-210 with 4 linked changes"
        assert result["summary"] == (
            "Task marked as done. Updated: SprintBoard, GoalsWidget, GoalsWidget, TeamLoadChart")
        assert store.get("TAM-210").status == "done"

    def test_team_load_view_follows_write(self, registry, store):
        registry.execute_tool("updateTaskWithSideEffects", {"taskId": "TAM-210", "newStatus": "done"})
        team = to_team_load(TEAM_ROSTER, store.list())
        sarah = next(m for m in team["members"] if m["id"] == "2")
        assert sarah["assigned"] == 8

    def test_unknown_task(self, registry):
        result = registry.execute_tool("updateTaskWithSideEffects", {
            "taskId": "TAM-999", "newStatus": "done"})
        assert result == {"success": False, "message": "Task TAM-999 not found", "updates": []}

    def test_optional_records(self, registry):
        result = registry.execute_tool("updateTaskWithSideEffects", {
            "taskId": "TAM-208", "newStatus": "done",
            "updateGoals": False, "updateTeamLoad": False, "addComment": "Shipped",
        })
        assert [u["action"] for u in result["updates"]] == ["STATUS_CHANGED", "COMMENT_ADDED"]
        assert result["updates"][1]["details"] == "Comment: \"Shipped\""

    def test_reopening_increases_load(self, registry):
        result = registry.execute_tool("updateTaskWithSideEffects", {
            "taskId": "TAM-201", "newStatus": "todo"})
        assert [u["component"] for u in result["updates"]] == ["SprintBoard", "TeamLoadChart"]
        assert result["updates"][1] == {
            "component": "TeamLoadChart", "action": "LOAD_INCREASED",
            "details": "Mike's load increased by 5 points",
        }

    def test_goal_completion_reported(self, make_issue):
        store = MemoryIssueStore([make_issue("T-1", status="in_review", labels=("ai",))])
        registry = _registry_for(store)
        result = registry.execute_tool("updateTaskWithSideEffects", {"taskId": "T-1", "newStatus": "done"})
        actions = [(u["component"], u["action"]) for u in result["updates"]]
        assert ("GoalsWidget", "STATUS_CHANGED") in actions
        assert "\"Stabilize Neural Core\" status → COMPLETED" in [u["details"] for u in result["updates"]]

    def test_completion_unblocks_dependents(self, make_issue):
        store = MemoryIssueStore([
            make_issue("T-1", status="in_progress"),
            make_issue("T-2", status="blocked", blocker_reason="Waiting on T-1 merge"),
            make_issue("T-3", status="blocked", blocker_reason="Vendor credentials"),
        ])
        registry = _registry_for(store)
        result = registry.execute_tool("updateTaskWithSideEffects", {
            "taskId": "T-1", "newStatus": "done", "updateGoals": False})
        assert result["updates"][-1] == {
            "component": "SprintBoard", "action": "TASKS_UNBLOCKED",
            "details": "1 task(s) are now unblocked: T-2",
        }
        assert store.get("T-2").status == "todo"
        assert store.get("T-2").blocker_reason is None
        assert store.get("T-3").status == "blocked"

    def test_dependents_stay_blocked_until_done(self, make_issue):
        store = MemoryIssueStore([
            make_issue("T-1", status="in_progress"),
            make_issue("T-2", status="blocked", blocker_reason="Needs T-1"),
        ])
        registry = _registry_for(store)
        result = registry.execute_tool("updateTaskWithSideEffects", {"taskId": "T-1", "newStatus": "in_review"})
        assert result["updates"][-1] == {
            "component": "SprintBoard", "action": "TASKS_UNBLOCKED",
            "details": "1 task(s) still waiting on T-1: T-2",
        }
        assert store.get("T-2").status == "blocked"

    def test_requires_task_id(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.execute_tool("updateTaskWithSideEffects", {"newStatus": "done"})
        assert exc_info.value.paths == ["taskId"]


class TestSingleTaskTools:
    """Test updateTaskStatus and reassignTask."""

    def test_update_status(self, registry, store):
        result = registry.execute_tool("updateTaskStatus", {"taskId": "TAM-204", "status": "todo"})
        assert result == {"success": True, "message": "Updated TAM-204 to todo"}
        assert store.get("TAM-204").status == "todo"

    def test_update_status_unknown_task(self, registry):
        result = registry.execute_tool("updateTaskStatus", {"taskId": "TAM-999", "status": "todo"})
        assert result == {"success": False, "message": "Task TAM-999 not found"}

    def test_reassign_to_roster_member(self, registry, store):
        result = registry.execute_tool("reassignTask", {"taskId": "TAM-204", "assignee": "Emma"})
        assert result == {"success": True, "message": "Reassigned TAM-204 to Emma"}
        assert store.get("TAM-204").assignee_id == "4"

    def test_reassign_outside_roster(self, registry, store):
        result = registry.execute_tool("reassignTask", {"taskId": "TAM-204", "assignee": "Zed"})
        assert result["success"] is True
        assert "not on the team roster" in result["message"]
        assert store.get("TAM-204").assignee_id is None

    def test_reassign_unknown_task(self, registry):
        result = registry.execute_tool("reassignTask", {"taskId": "TAM-999", "assignee": "Emma"})
        assert result["success"] is False


class TestTeamAndFallbackTools:
    """Test listTeamMembers and the Linear fallbacks."""

    def test_list_team_members(self, registry):
        members = registry.execute_tool("listTeamMembers", {})
        assert [m["name"] for m in members] == ["John Chen", "Sarah Miller", "Mike Johnson", "Emma Wilson"]

    def test_resolve_member(self):
        assert resolve_member(TEAM_ROSTER, "sarah miller").id == "2"
        assert resolve_member(TEAM_ROSTER, "Sar") is None
        assert resolve_member(TEAM_ROSTER, None) is None

    def test_list_issues_by_display_status(self, registry):
        issues = registry.execute_tool("listIssues_fallback", {"status": "In Progress"})
        assert [i["id"] for i in issues] == ["TAM-210"]

    def test_list_issues_canceled_matches_nothing(self, registry):
        assert registry.execute_tool("listIssues_fallback", {"status": "Canceled"}) == []

    def test_list_issues_by_assignee_substring(self, registry):
        issues = registry.execute_tool("listIssues_fallback", {"assignee": "sar"})
        assert [i["id"] for i in issues] == ["TAM-205", "TAM-210", "TAM-202"]

    def test_list_issues_by_priority(self, registry):
        issues = registry.execute_tool("listIssues_fallback", {"priority": "Urgent"})
        assert [i["id"] for i in issues] == ["TAM-211"]

    def test_unassigned_placeholder(self, registry):
        issues = registry.execute_tool("listIssues_fallback", {})
        assert issues[0]["id"] == "TAM-204"
        assert issues[0]["assignee"] == "Unassigned"

    def test_create_issue_defaults(self, registry, store):
        result = registry.execute_tool("createIssue_fallback", {"title": "Write docs"})
        assert result == {
            "id": "TAM-216", "title": "Write docs", "status": "Backlog",
            "priority": "No Priority", "assignee": "Unassigned",
        }
        created = store.get("TAM-216")
        assert created.status == "backlog"
        assert created.priority == "low"

    def test_create_issue_with_assignee(self, registry, store):
        result = registry.execute_tool("createIssue_fallback", {
            "title": "Tune alerts", "priority": "High", "assignee": "Mike",
            "description": "Page less often",
        })
        assert result["description"] == "Page less often"
        created = store.get(result["id"])
        assert created.priority == "high"
        assert created.assignee_id == "3"

    def test_create_issue_requires_title(self, registry):
        with pytest.raises(ValidationError):
            registry.execute_tool("createIssue_fallback", {"title": ""})

    def test_fallbacks_disabled_by_real_integration(self, registry):
        registry.set_external_tools(["linear__list_issues", "linear__create_issue"])
        names = [t.name for t in registry.get_all_tools()]
        assert "listIssues_fallback" not in names
        assert "createIssue_fallback" not in names
        assert "bulkUpdateTasks" in names
