"""Shared fixtures for the autopilot tests."""

import pytest

from autopilot.context.entity import Issue
from autopilot.context.fixtures import SEED_ISSUES
from autopilot.context.store import MemoryIssueStore
from autopilot.tools.registry import ToolRegistry
from autopilot.tools.project_tools import register_project_tools
from autopilot.tools.analysis_tools import register_analysis_tools


@pytest.fixture
def store():
    """A store seeded with the demo sprint."""
    return MemoryIssueStore(SEED_ISSUES)


@pytest.fixture
def registry(store):
    """A registry with every tool registered against the seeded store."""
    registry = ToolRegistry()
    register_project_tools(registry, store)
    register_analysis_tools(registry, store)
    return registry


@pytest.fixture
def make_issue():
    """Factory for minimal issues, for tests that need their own store."""
    def _make(issue_id, status="todo", **fields):
        fields.setdefault("title", f"Task {issue_id}")
        fields.setdefault("priority", "medium")
        return Issue(id=issue_id, status=status, **fields)
    return _make
