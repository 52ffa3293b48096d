"""
Seed data for the demo project.

The issue list is the single source of truth for the board, team load and
goals views. The capacity tables below are reference fixtures read by specific
tools; they are intentionally not derived from the issue list.
"""

from .entity import Issue, TeamMember, CapacitySnapshot, SprintInfo

SPRINT_INFO = SprintInfo(
    name="Sprint 42",
    start_date="2026-02-05",
    end_date="2026-02-19",
    dates_label="Feb 5 - Feb 19, 2026",
    goals_title="Sprint 42 Goals",
)

TEAM_ROSTER = (
    TeamMember(id="1", name="John Chen", role="Systems Architect", capacity=20),
    TeamMember(id="2", name="Sarah Miller", role="Lead AI Engineer", capacity=20),
    TeamMember(id="3", name="Mike Johnson", role="DevOps Specialist", capacity=20),
    TeamMember(id="4", name="Emma Wilson", role="UX/UI Engineer", capacity=20),
)

SEED_ISSUES = (
    Issue(id="TAM-204", title="Optimize Vector DB Indexing", status="backlog",
          priority="low", labels=("optimization", "database"), points=5),
    Issue(id="TAM-205", title="Implement Voice Command Interface", status="backlog",
          priority="medium", assignee="Sarah", assignee_id="2",
          labels=("feature", "accessibility"), points=8),
    Issue(id="TAM-208", title="Integrate MCP with Local Shell", status="todo",
          priority="high", assignee="John", assignee_id="1",
          labels=("core", "mcp"), points=13),
    Issue(id="TAM-209", title="Containerize Agent Runtime", status="todo",
          priority="medium", assignee="Mike", assignee_id="3",
          labels=("devops", "infrastructure"), points=8),
    Issue(id="TAM-210", title="Neural Intent Parser v2", status="in_progress",
          priority="high", assignee="Sarah", assignee_id="2",
          labels=("ai", "core"), points=13),
    Issue(id="TAM-211", title="Fix Context Drifting", status="blocked",
          priority="urgent", assignee="John", assignee_id="1",
          blocker_reason="Waiting for API quota", labels=("bug", "llm"), points=8),
    Issue(id="TAM-212", title="Generative UI Streams", status="in_review",
          priority="high", assignee="Emma", assignee_id="4",
          labels=("frontend", "streaming"), points=8),
    Issue(id="TAM-201", title="Setup CI/CD Pipeline", status="done",
          priority="medium", assignee="Mike", assignee_id="3",
          labels=("devops",), points=5),
    Issue(id="TAM-202", title="Core Authentication Service", status="done",
          priority="high", assignee="Sarah", assignee_id="2",
          labels=("security",), points=8),
    Issue(id="TAM-215", title="Production DB Replica Sync", status="blocked",
          priority="high", assignee="Mike", assignee_id="3",
          blocker_reason="Access permissions pending", labels=("database", "ops"), points=5),
)

# Velocity samples, oldest first. The last entry is the sprint in flight.
SPRINT_HISTORY = (
    {"name": "Sprint 38", "planned": 45, "completed": 42},
    {"name": "Sprint 39", "planned": 48, "completed": 46},
    {"name": "Sprint 40", "planned": 50, "completed": 49},
    {"name": "Sprint 41", "planned": 52, "completed": 50},
    {"name": "Sprint 42", "planned": 55, "completed": 32},
)

# Capacity snapshot used by rebalanceWorkload
REBALANCE_CAPACITY = (
    CapacitySnapshot(name="John", capacity=20, assigned=11),
    CapacitySnapshot(name="Sarah", capacity=20, assigned=18),
    CapacitySnapshot(name="Mike", capacity=20, assigned=5),
    CapacitySnapshot(name="Emma", capacity=20, assigned=8),
)

# Members analyzeSprintHealth checks for over-capacity
OVERLOAD_WATCHLIST = (
    CapacitySnapshot(name="Mike", capacity=20, assigned=22),
)

SUMMARY_VELOCITY = {"current": 42, "average": 38, "trend": "up"}

SUMMARY_TEAM_HEALTH = {
    "score": 78,
    "overloadedMembers": ["Sarah (90%)"],
    "availableCapacity": ["Mike (25%)", "Emma (40%)"],
}

SUMMARY_RECOMMENDATIONS = (
    "Rebalance: Move 1 task from Sarah to Mike",
    "Unblock: TAM-211 needs API quota increase",
    "On track for sprint goals",
)
