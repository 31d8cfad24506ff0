"""
Unit tests for activity application handlers and the activity recorder.
"""

from datetime import datetime, timedelta, timezone

import pytest

from activities.application.commands.log_activity import LogActivityCommand
from activities.application.handlers.activity_stats_handlers import (
    GetActivitySummaryHandler,
    GetDashboardStatsHandler,
    GetUserStatsHandler,
)
from activities.application.handlers.log_activity_handler import LogActivityHandler
from activities.application.queries.activity_queries import (
    GetActivitySummaryQuery,
    GetDashboardStatsQuery,
    GetUserStatsQuery,
)
from activities.application.services.activity_recorder import ActivityRecorder
from activities.domain.activity import ActivityEvent
from activities.infrastructure.repositories.in_memory_activity_repository import (
    InMemoryActivityRepository,
)
from core.domain.exceptions import ActivityUnauthorizedError
from core.domain.value_objects import ActivityAction, ClientMetadata
from tests.factories import make_license


def _utcnow():
    return datetime.now(timezone.utc)


@pytest.fixture
def live_license(memory_license_repository):
    import asyncio

    return asyncio.run(memory_license_repository.add(make_license(now=_utcnow())))


@pytest.mark.asyncio
class TestActivityRecorder:
    """Tests for ActivityRecorder."""

    async def test_record(self, memory_activity_repository):
        event = await ActivityRecorder(memory_activity_repository).record(
            license_key="ABCD-1234-EF56-7890",
            email="user@example.com",
            action=ActivityAction.LICENSE_CHECKED,
        )
        assert memory_activity_repository.events == [event]

    async def test_failure_is_swallowed(self):
        """Test a failing store is logged and counted, never raised."""
        recorder = ActivityRecorder(InMemoryActivityRepository(fail_with=RuntimeError("db down")))

        event = await recorder.record(
            license_key="ABCD-1234-EF56-7890",
            email="user@example.com",
            action=ActivityAction.LICENSE_CHECKED,
        )

        assert event is None


@pytest.mark.asyncio
class TestLogActivityHandler:
    """Tests for LogActivityHandler."""

    async def test_log_activity(self, memory_license_repository, memory_activity_repository, live_license):
        handler = LogActivityHandler(memory_license_repository, memory_activity_repository)

        event = await handler.handle(
            LogActivityCommand(
                email="USER@example.com",
                action="posting_completed",
                data={"posted": 5},
                client=ClientMetadata(ip="198.51.100.1"),
            )
        )

        assert event.license_key == live_license.key
        assert event.data == {"posted": 5}
        assert event.client.ip == "198.51.100.1"
        updated = await memory_license_repository.find_by_key(live_license.key)
        assert updated.last_checked == event.created_at
        assert updated.check_count == live_license.check_count

    async def test_no_live_license(self, memory_license_repository, memory_activity_repository):
        handler = LogActivityHandler(memory_license_repository, memory_activity_repository)

        with pytest.raises(ActivityUnauthorizedError, match="No active license found"):
            await handler.handle(LogActivityCommand(email="ghost@example.com", action="license_checked"))
        assert memory_activity_repository.events == []

    async def test_store_failure_propagates(self, memory_license_repository, live_license):
        """Test the activity itself is not best effort."""
        handler = LogActivityHandler(
            memory_license_repository, InMemoryActivityRepository(fail_with=RuntimeError("db down"))
        )
        with pytest.raises(RuntimeError):
            await handler.handle(LogActivityCommand(email="user@example.com", action="license_checked"))


@pytest.mark.asyncio
class TestStatsHandlers:
    """Tests for the statistics handlers."""

    async def _seed(self, repository, key, when, action, **data):
        await repository.add(
            ActivityEvent.create(
                license_key=key, email="user@example.com", action=action, data=data, now=when
            )
        )

    async def test_user_stats(self, memory_license_repository, memory_activity_repository, live_license):
        now = _utcnow()
        for hours in range(3):
            await self._seed(
                memory_activity_repository,
                live_license.key,
                now - timedelta(hours=hours),
                ActivityAction.POSTING_COMPLETED,
                posted=10,
                failed=1,
            )
        await self._seed(
            memory_activity_repository, live_license.key, now - timedelta(days=10), ActivityAction.LICENSE_CHECKED
        )
        handler = GetUserStatsHandler(memory_license_repository, memory_activity_repository)

        stats = await handler.handle(GetUserStatsQuery(email="user@example.com", license_key=live_license.key))
        assert stats.general["total_activities"] == 4
        assert stats.posting["total_sessions"] == 3
        assert stats.posting["avg_threads_per_session"] == 10
        assert [e.action for e in stats.recent_activities][0] == ActivityAction.POSTING_COMPLETED

        ranged = await handler.handle(
            GetUserStatsQuery(
                email="user@example.com",
                license_key=live_license.key,
                start_date=now - timedelta(days=1),
            )
        )
        assert ranged.general["total_activities"] == 3
        assert len(ranged.recent_activities) == 4

    async def test_recent_activities_capped(self, memory_license_repository, memory_activity_repository, live_license):
        now = _utcnow()
        for minutes in range(25):
            await self._seed(
                memory_activity_repository, live_license.key, now - timedelta(minutes=minutes), ActivityAction.LICENSE_CHECKED
            )
        stats = await GetUserStatsHandler(memory_license_repository, memory_activity_repository).handle(
            GetUserStatsQuery(email="user@example.com", license_key=live_license.key)
        )
        assert len(stats.recent_activities) == 20
        assert stats.general["total_activities"] == 25

    async def test_stats_require_valid_license(self, memory_license_repository, memory_activity_repository, live_license):
        """Test a revoked license cannot read its statistics."""
        await memory_license_repository.save(live_license.revoke("fraud"))
        handler = GetUserStatsHandler(memory_license_repository, memory_activity_repository)

        with pytest.raises(ActivityUnauthorizedError) as excinfo:
            await handler.handle(GetUserStatsQuery(email="user@example.com", license_key=live_license.key))
        assert excinfo.value.code == "INVALID_OR_EXPIRED_LICENSE"

    async def test_summary_period(self, memory_license_repository, memory_activity_repository, live_license):
        now = _utcnow()
        await self._seed(memory_activity_repository, live_license.key, now - timedelta(hours=2), ActivityAction.LICENSE_CHECKED)
        await self._seed(memory_activity_repository, live_license.key, now - timedelta(days=3), ActivityAction.LICENSE_CHECKED)
        handler = GetActivitySummaryHandler(memory_license_repository, memory_activity_repository)

        day = await handler.handle(
            GetActivitySummaryQuery(email="user@example.com", license_key=live_license.key, period="24h")
        )
        assert day.period == "24h"
        assert sum(entry["total_activities"] for entry in day.summary) == 1

        fallback = await handler.handle(
            GetActivitySummaryQuery(email="user@example.com", license_key=live_license.key, period="1y")
        )
        assert fallback.period == "7d"
        assert fallback.end_date - fallback.start_date == timedelta(days=7)
        assert sum(entry["total_activities"] for entry in fallback.summary) == 2

    async def test_dashboard(self, memory_license_repository, memory_activity_repository, live_license):
        now = _utcnow()
        other = await memory_license_repository.add(make_license(email="other@example.com", now=now))
        await memory_license_repository.save(other.revoke("x"))
        await self._seed(memory_activity_repository, live_license.key, now - timedelta(days=1), ActivityAction.LICENSE_CHECKED)
        await self._seed(memory_activity_repository, live_license.key, now - timedelta(days=20), ActivityAction.POSTING_STARTED)
        await self._seed(memory_activity_repository, live_license.key, now - timedelta(days=40), ActivityAction.POSTING_STARTED)

        stats = await GetDashboardStatsHandler(memory_license_repository, memory_activity_repository).handle(
            GetDashboardStatsQuery()
        )

        assert stats.licenses == {"active": 1, "trial": 0, "expired": 0, "revoked": 1, "total": 2}
        assert stats.activities == [
            {"action": "license_checked", "count": 1},
            {"action": "posting_started", "count": 1},
        ]
        assert sum(day["active_users"] for day in stats.daily_active_users) == 1
