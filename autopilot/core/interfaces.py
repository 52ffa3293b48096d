"""
Core interfaces and abstract base classes for the Autopilot framework.
These interfaces help break circular dependencies between modules.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional


class IssueStoreInterface(ABC):
    """Interface for issue storage to avoid circular dependencies."""

    @abstractmethod
    def list(self) -> List[Any]:
        """Return all issues in insertion order."""
        pass

    @abstractmethod
    def get(self, issue_id: str) -> Optional[Any]:
        """Get an issue by ID."""
        pass

    @abstractmethod
    def apply_update(self, issue_id: str, patch: Dict[str, Any]) -> Any:
        """Apply a field patch to an existing issue."""
        pass


class ToolInterface(ABC):
    """Interface for tools to avoid circular dependencies."""

    @abstractmethod
    def has_tool(self, tool_name: str) -> bool:
        """Check if a tool is registered."""
        pass

    @abstractmethod
    def execute_tool(self, tool_name: str, params: Dict[str, Any]) -> Any:
        """Execute a tool with the given parameters."""
        pass
