"""
Exception hierarchy for the Autopilot framework.
"""

from dataclasses import dataclass
from typing import List, Optional


class AutopilotError(Exception):
    """Base exception for Autopilot errors."""

    pass


@dataclass
class FieldError:
    """
    A single schema violation.

    Attributes:
        path: Dotted path to the offending field, or "(root)"
        message: Human-readable description of the violation
        expected: Expected type or allowed values, when known
    """
    path: str
    message: str
    expected: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.path}: {self.message}"
        if self.expected:
            text += f" (expected {self.expected})"
        return text


class ValidationError(AutopilotError):
    """Raised when a value does not conform to a registered schema."""

    def __init__(self, schema_name: str, errors: List[FieldError]):
        self.schema_name = schema_name
        self.errors = errors
        details = "; ".join(str(error) for error in errors)
        super().__init__(f"[{schema_name}] {details}")

    @property
    def paths(self) -> List[str]:
        return [error.path for error in self.errors]

    def to_dict(self):
        return {
            "schema": self.schema_name,
            "errors": [
                {"path": e.path, "message": e.message, "expected": e.expected}
                for e in self.errors
            ],
        }


class ToolNotFoundError(AutopilotError):
    """Raised when a tool name is not registered or is shadowed by a real integration."""

    def __init__(self, tool_name: str, reason: Optional[str] = None):
        self.tool_name = tool_name
        message = f"Tool not found: {tool_name}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class IssueNotFoundError(AutopilotError):
    """Raised by the store when an issue id is unknown."""

    def __init__(self, issue_id: str):
        self.issue_id = issue_id
        super().__init__(f"Issue not found: {issue_id}")


class DuplicateIssueError(AutopilotError):
    """Raised when adding an issue whose id is already taken."""

    def __init__(self, issue_id: str):
        self.issue_id = issue_id
        super().__init__(f"Issue already exists: {issue_id}")


class ConfigurationError(AutopilotError):
    """Exception raised for errors in the configuration."""

    pass
