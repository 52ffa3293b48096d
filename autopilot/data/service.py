"""
Data service for the dashboard views.

Switches between the local store and a live project source based on
configuration.
"""

import logging
from typing import Dict, Any, Optional

from ..config.settings import get_setting
from ..context.fixtures import TEAM_ROSTER
from ..context.store import IssueStore
from ..context.views import to_sprint_board, to_team_load, to_goals

logger = logging.getLogger(__name__)


class DataService:
    """
    Supplies view models for the sprint board, team load and goals widgets.

    With `data.use_mock_data` enabled every view is derived from the issue
    store. The live source is not connected yet, so otherwise each fetch logs
    a warning and returns None.
    """

    def __init__(self, store: IssueStore, settings: Optional[Dict[str, Any]] = None,
                 roster=TEAM_ROSTER):
        """
        Initialize the data service.

        Args:
            store: Issue store views are derived from
            settings: Framework settings
            roster: Team roster for the team load view
        """
        self.store = store
        self.roster = roster
        self.use_mock_data = bool(get_setting(settings or {}, "data.use_mock_data", True))
        logger.info(f"Data service using {'mock' if self.use_mock_data else 'live'} data")

    def is_using_mock_data(self) -> bool:
        return self.use_mock_data

    def fetch_sprint_data(self) -> Optional[Dict[str, Any]]:
        """
        Fetch the sprint board view.

        Returns:
            Sprint board view model, or None without a data source
        """
        if not self.use_mock_data:
            logger.warning("Live sprint data is not connected")
            return None
        return to_sprint_board(self.store.list())

    def fetch_team_data(self) -> Optional[Dict[str, Any]]:
        """
        Fetch the team load view.

        Returns:
            Team load view model, or None without a data source
        """
        if not self.use_mock_data:
            logger.warning("Live team data is not connected")
            return None
        return to_team_load(self.roster, self.store.list())

    def fetch_goals_data(self) -> Optional[Dict[str, Any]]:
        """
        Fetch the sprint goals view.

        Returns:
            Goals view model, or None without a data source
        """
        if not self.use_mock_data:
            logger.warning("Live goals data is not connected")
            return None
        return to_goals(self.store.list())
