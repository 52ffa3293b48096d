"""
Project context: entities, schemas, storage and derived views.
"""

from .entity import Issue, TeamMember, CapacitySnapshot, SprintInfo, IssueStatus, Priority, GoalStatus, Trend, PRStatus
from .schema import Schema, get_schema, register_schema, validate
from .store import IssueStore, MemoryIssueStore, create_store
from .views import to_sprint_board, to_kanban_board, to_team_load, to_goals, map_board_status
