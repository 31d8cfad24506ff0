"""
In-memory implementation of ActivityRepository port.

Used by unit tests. ``fail_with`` makes every insert raise, to
exercise best-effort recording.
"""
from datetime import datetime
from typing import Dict, List, Optional

from activities.domain import services
from activities.domain.activity import ActivityEvent
from activities.ports.activity_repository import ActivityRepository


class InMemoryActivityRepository(ActivityRepository):
    """List-backed activity log."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.events: List[ActivityEvent] = []
        self.fail_with = fail_with

    async def add(self, event: ActivityEvent) -> ActivityEvent:
        if self.fail_with:
            raise self.fail_with
        self.events.append(event)
        return event

    async def find_by_email(
        self,
        email: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ActivityEvent]:
        return sorted(
            (
                event
                for event in self.events
                if event.email == email
                and (start is None or event.created_at >= start)
                and (end is None or event.created_at <= end)
            ),
            key=lambda event: event.created_at,
        )

    async def recent_for_email(self, email: str, limit: int = 20) -> List[ActivityEvent]:
        events = [event for event in self.events if event.email == email]
        events.sort(key=lambda event: event.created_at, reverse=True)
        return events[:limit]

    def _since(self, since: datetime) -> List[ActivityEvent]:
        return [event for event in self.events if event.created_at >= since]

    async def count_by_action_since(self, since: datetime) -> List[Dict]:
        return services.count_by_action(self._since(since))

    async def daily_active_users_since(self, since: datetime) -> List[Dict]:
        return services.daily_active_users(self._since(since))
