"""
Activity queries.

Queries for per-user statistics and the admin dashboard.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class GetUserStatsQuery:
    """Query for a user's activity statistics."""

    email: str
    license_key: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass
class GetActivitySummaryQuery:
    """Query for a user's per-day activity over a period."""

    email: str
    license_key: str
    period: str = "7d"


@dataclass
class GetDashboardStatsQuery:
    """Query for the admin dashboard."""

    activity_days: int = 30
    active_user_days: int = 7
