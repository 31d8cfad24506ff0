"""
Activity statistics handlers.

Handlers for per-user statistics, per-day summaries and the admin
dashboard. Per-user aggregation runs in the domain services over fetched
events; dashboard counts are computed by the repository.
"""
from datetime import datetime, timedelta, timezone

from activities.application.dto.activity_dto import (
    ActivitySummaryDTO,
    DashboardStatsDTO,
    UserStatsDTO,
)
from activities.application.queries.activity_queries import (
    GetActivitySummaryQuery,
    GetDashboardStatsQuery,
    GetUserStatsQuery,
)
from activities.domain import services
from activities.ports.activity_repository import ActivityRepository
from core.domain.exceptions import ActivityUnauthorizedError
from core.domain.value_objects import Email, LicenseStatus
from licenses.domain.license import License
from licenses.ports.license_repository import LicenseRepository

RECENT_ACTIVITY_LIMIT = 20


async def _authorize(
    license_repository: LicenseRepository, email: str, license_key: str, now: datetime
) -> License:
    """The pair must resolve to a license that is valid right now."""
    license = await license_repository.find_by_email_and_key(email, license_key)
    if not license or not license.is_valid(now):
        raise ActivityUnauthorizedError(
            "Invalid or expired license", code="INVALID_OR_EXPIRED_LICENSE"
        )
    return license


class GetUserStatsHandler:
    """Handler for GetUserStatsQuery."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activity_repository: ActivityRepository,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.activity_repository = activity_repository

    async def handle(self, query: GetUserStatsQuery) -> UserStatsDTO:
        """
        Handle get user stats query.

        Args:
            query: GetUserStatsQuery

        Returns:
            UserStatsDTO with general and posting statistics

        Raises:
            ActivityUnauthorizedError: If the license is missing or not valid
        """
        email = str(Email(query.email))
        await _authorize(self.license_repository, email, query.license_key, datetime.now(timezone.utc))

        events = await self.activity_repository.find_by_email(
            email, start=query.start_date, end=query.end_date
        )
        recent = await self.activity_repository.recent_for_email(email, RECENT_ACTIVITY_LIMIT)
        return UserStatsDTO(
            general=services.summarize_by_action(events),
            posting=services.posting_rollup(events),
            recent_activities=recent,
        )


class GetActivitySummaryHandler:
    """Handler for GetActivitySummaryQuery."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activity_repository: ActivityRepository,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.activity_repository = activity_repository

    async def handle(self, query: GetActivitySummaryQuery) -> ActivitySummaryDTO:
        """
        Handle get activity summary query.

        Unknown periods fall back to 7d.

        Raises:
            ActivityUnauthorizedError: If the license is missing or not valid
        """
        email = str(Email(query.email))
        now = datetime.now(timezone.utc)
        await _authorize(self.license_repository, email, query.license_key, now)

        period = services.normalize_period(query.period)
        start = services.period_start(period, now)
        events = await self.activity_repository.find_by_email(email, start=start, end=now)
        return ActivitySummaryDTO(
            period=period,
            start_date=start,
            end_date=now,
            summary=services.daily_breakdown(events),
        )


class GetDashboardStatsHandler:
    """Handler for GetDashboardStatsQuery."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activity_repository: ActivityRepository,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.activity_repository = activity_repository

    async def handle(self, query: GetDashboardStatsQuery) -> DashboardStatsDTO:
        """
        Handle dashboard stats query.

        Args:
            query: GetDashboardStatsQuery

        Returns:
            DashboardStatsDTO with license counts by status, activity
            counts by action and daily active users
        """
        now = datetime.now(timezone.utc)
        counts = await self.license_repository.count_by_status()
        licenses = {status.value: counts.get(status.value, 0) for status in LicenseStatus}
        licenses["total"] = sum(counts.values())

        return DashboardStatsDTO(
            licenses=licenses,
            activities=await self.activity_repository.count_by_action_since(
                now - timedelta(days=query.activity_days)
            ),
            daily_active_users=await self.activity_repository.daily_active_users_since(
                now - timedelta(days=query.active_user_days)
            ),
        )
