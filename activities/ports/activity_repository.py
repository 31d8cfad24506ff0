"""
Activity repository port (interface).

This defines the contract for the append-only activity log.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from activities.domain.activity import ActivityEvent


class ActivityRepository(ABC):
    """
    Abstract repository for ActivityEvent entities.

    Events are only ever inserted and read.
    """

    @abstractmethod
    async def add(self, event: ActivityEvent) -> ActivityEvent:
        """
        Append an event.

        Args:
            event: ActivityEvent to store

        Returns:
            Stored event
        """
        pass

    @abstractmethod
    async def find_by_email(
        self,
        email: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ActivityEvent]:
        """
        Events for an email, optionally bounded in time (inclusive).

        Args:
            email: Normalized email
            start: Optional lower bound on created_at
            end: Optional upper bound on created_at

        Returns:
            Events, oldest first
        """
        pass

    @abstractmethod
    async def recent_for_email(self, email: str, limit: int = 20) -> List[ActivityEvent]:
        """Most recent events for an email, newest first."""
        pass

    @abstractmethod
    async def count_by_action_since(self, since: datetime) -> List[Dict]:
        """
        Event counts per action over every email since ``since``.

        Returns:
            [{"action", "count"}] sorted by action name
        """
        pass

    @abstractmethod
    async def daily_active_users_since(self, since: datetime) -> List[Dict]:
        """
        Distinct emails per UTC day since ``since``.

        Returns:
            [{"date": "YYYY-MM-DD", "active_users"}] oldest day first
        """
        pass
