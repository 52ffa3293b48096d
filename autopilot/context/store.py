"""
Issue Store - Storage implementation for project issues.
"""

import logging
import re
import threading
from abc import abstractmethod
from contextlib import contextmanager
from typing import Dict, List, Any, Optional, Iterable

from ..core.exceptions import IssueNotFoundError, DuplicateIssueError
from ..core.interfaces import IssueStoreInterface
from .entity import Issue
from .schema import validate

logger = logging.getLogger(__name__)

# Fields a patch may touch; "id" is immutable
PATCHABLE_FIELDS = ("title", "status", "priority", "assignee", "assignee_id",
                    "blocker_reason", "labels", "points")

_ID_PATTERN = re.compile(r"^(?P<prefix>[A-Z][A-Z0-9]*)-(?P<number>\d+)$")


class IssueStore(IssueStoreInterface):
    """Abstract base class for issue storage implementations."""

    @abstractmethod
    def add(self, issue: Issue) -> Issue:
        """
        Add a new issue.

        Args:
            issue: Issue to add

        Returns:
            The stored issue

        Raises:
            DuplicateIssueError: If the ID is already taken
        """
        pass

    @abstractmethod
    def next_id(self, prefix: str) -> str:
        """
        Get the next free ID for a prefix.

        Args:
            prefix: ID prefix (e.g., "TAM")

        Returns:
            ID in PREFIX-NNN form
        """
        pass

    @abstractmethod
    def locked(self):
        """Context manager holding the store's write lock."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Restore the store to its seed issues."""
        pass


class MemoryIssueStore(IssueStore):
    """
    In-memory implementation of the issue store.

    All writes go through a single re-entrant lock, so a multi-issue operation
    that holds `locked()` is never interleaved with another writer, and `list()`
    never observes half of an update.
    """

    def __init__(self, issues: Optional[Iterable[Issue]] = None):
        """
        Initialize the store.

        Args:
            issues: Seed issues, in display order
        """
        self._seed = tuple(issues or ())
        self._lock = threading.RLock()
        # Insertion-ordered: {issue_id -> Issue}
        self.issues: Dict[str, Issue] = {}
        self._load(self._seed)
        logger.info(f"Initialized in-memory issue store with {len(self.issues)} issues")

    def _load(self, issues: Iterable[Issue]) -> None:
        self.issues = {}
        for issue in issues:
            if issue.id in self.issues:
                raise DuplicateIssueError(issue.id)
            validate(issue.to_dict(), "issue")
            self.issues[issue.id] = issue

    def list(self) -> List[Issue]:
        with self._lock:
            return list(self.issues.values())

    def get(self, issue_id: str) -> Optional[Issue]:
        with self._lock:
            return self.issues.get(issue_id)

    def apply_update(self, issue_id: str, patch: Dict[str, Any]) -> Issue:
        """
        Apply a patch of snake_case fields to an existing issue.

        Args:
            issue_id: ID of the issue to update
            patch: Field values to replace

        Returns:
            The updated issue

        Raises:
            IssueNotFoundError: If the issue does not exist
            ValueError: If the patch names a field that cannot be changed
            ValidationError: If the updated issue fails the issue schema
        """
        unknown = set(patch) - set(PATCHABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot patch fields: {', '.join(sorted(unknown))}")

        with self._lock:
            current = self.issues.get(issue_id)
            if current is None:
                raise IssueNotFoundError(issue_id)

            updated = current.with_updates(**patch)
            validate(updated.to_dict(), "issue")
            self.issues[issue_id] = updated

        logger.debug(f"Updated issue {issue_id}: {sorted(patch)}")
        return updated

    def add(self, issue: Issue) -> Issue:
        validate(issue.to_dict(), "issue")
        with self._lock:
            if issue.id in self.issues:
                raise DuplicateIssueError(issue.id)
            self.issues[issue.id] = issue
        logger.info(f"Added issue {issue.id}")
        return issue

    def next_id(self, prefix: str) -> str:
        with self._lock:
            numbers = []
            for issue_id in self.issues:
                match = _ID_PATTERN.match(issue_id)
                if match and match.group("prefix") == prefix:
                    numbers.append(int(match.group("number")))
        next_number = max(numbers) + 1 if numbers else 1
        return f"{prefix}-{next_number:03d}"

    @contextmanager
    def locked(self):
        with self._lock:
            yield self

    def reset(self) -> None:
        with self._lock:
            self._load(self._seed)
        logger.info("Issue store reset to seed data")


def create_store(settings: Dict[str, Any]) -> IssueStore:
    """
    Create the issue store described by the settings.

    Args:
        settings: Framework settings

    Returns:
        Configured issue store
    """
    # Imported here so the store module does not pull in demo data on import
    from .fixtures import SEED_ISSUES

    store_settings = settings.get("store", {})
    store_type = store_settings.get("type", "memory")
    if store_type != "memory":
        logger.warning(f"Unsupported store type: {store_type}. Using memory store.")

    seed = store_settings.get("seed", "fixtures")
    if seed == "fixtures":
        return MemoryIssueStore(SEED_ISSUES)
    if seed != "empty":
        logger.warning(f"Unknown store seed: {seed}. Starting empty.")
    return MemoryIssueStore()
