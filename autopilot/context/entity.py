"""
Entity models for the project context.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, Tuple


class IssueStatus:
    """Constants for issue workflow states."""
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"
    BLOCKED = "blocked"

    ALL = (BACKLOG, TODO, IN_PROGRESS, IN_REVIEW, DONE, BLOCKED)


class Priority:
    """Constants for issue priority levels."""
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    ALL = (URGENT, HIGH, MEDIUM, LOW)


class GoalStatus:
    """Constants for derived goal states."""
    COMPLETED = "completed"
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    BLOCKED = "blocked"

    ALL = (COMPLETED, ON_TRACK, AT_RISK, BLOCKED)


class Trend:
    """Constants for velocity trend direction."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"

    ALL = (UP, DOWN, STABLE)


class PRStatus:
    """Constants for linked pull request states."""
    OPEN = "open"
    MERGED = "merged"
    CLOSED = "closed"

    ALL = (OPEN, MERGED, CLOSED)


# Python attribute name -> wire key
_WIRE_KEYS = {
    "assignee_id": "assigneeId",
    "blocker_reason": "blockerReason",
}


@dataclass(frozen=True)
class Issue:
    """
    A trackable unit of work.

    Attributes:
        id: Stable identifier in PREFIX-NNN form
        title: Issue title
        status: One of IssueStatus.ALL
        priority: One of Priority.ALL
        assignee: Display name of the assignee, if any
        assignee_id: Team member ID of the assignee, if known
        blocker_reason: Why the issue is blocked; only meaningful when blocked
        labels: Issue labels
        points: Story point estimate
    """
    id: str
    title: str
    status: str
    priority: str
    assignee: Optional[str] = None
    assignee_id: Optional[str] = None
    blocker_reason: Optional[str] = None
    labels: Tuple[str, ...] = ()
    points: int = 0

    @property
    def is_done(self) -> bool:
        return self.status == IssueStatus.DONE

    @property
    def is_blocked(self) -> bool:
        return self.status == IssueStatus.BLOCKED

    def with_updates(self, **changes) -> 'Issue':
        """
        Return a copy with the given fields replaced.

        Leaving the blocked state drops the blocker reason.
        """
        if "labels" in changes and changes["labels"] is not None:
            changes["labels"] = tuple(changes["labels"])
        updated = replace(self, **changes)
        if not updated.is_blocked and updated.blocker_reason is not None:
            updated = replace(updated, blocker_reason=None)
        return updated

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the issue to its wire dictionary, omitting unset optionals.

        Returns:
            Dictionary representation of the issue
        """
        result = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority,
        }
        for attr in ("assignee", "assignee_id", "blocker_reason"):
            value = getattr(self, attr)
            if value is not None:
                result[_WIRE_KEYS.get(attr, attr)] = value
        result["labels"] = list(self.labels)
        result["points"] = self.points
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Issue':
        """
        Create an issue from a wire dictionary.

        Args:
            data: Dictionary containing issue data

        Returns:
            Issue object
        """
        return cls(
            id=data["id"],
            title=data["title"],
            status=data["status"],
            priority=data["priority"],
            assignee=data.get("assignee"),
            assignee_id=data.get("assigneeId"),
            blocker_reason=data.get("blockerReason"),
            labels=tuple(data.get("labels") or ()),
            points=data.get("points") or 0,
        )


@dataclass(frozen=True)
class TeamMember:
    """
    A roster entry.

    Attributes:
        id: Team member ID
        name: Full display name
        role: Role on the team
        capacity: Story point budget per sprint
    """
    id: str
    name: str
    role: str
    capacity: int

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0]

    def matches_name(self, name: Optional[str]) -> bool:
        """Exact, case-insensitive match on first or full name."""
        if not name:
            return False
        candidate = name.strip().lower()
        return candidate in (self.first_name.lower(), self.name.lower())

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "role": self.role, "capacity": self.capacity}


@dataclass(frozen=True)
class CapacitySnapshot:
    """A point-in-time capacity reading for one team member."""
    name: str
    capacity: int
    assigned: int

    @property
    def load(self) -> float:
        return self.assigned / self.capacity if self.capacity else 0.0


@dataclass(frozen=True)
class SprintInfo:
    """Identifying data for the active sprint."""
    name: str
    start_date: str
    end_date: str
    dates_label: str = ""
    goals_title: str = field(default="")
