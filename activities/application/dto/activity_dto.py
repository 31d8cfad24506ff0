"""
Activity DTOs for API responses.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List

from activities.domain.activity import ActivityEvent


@dataclass
class UserStatsDTO:
    """DTO for user statistics."""

    general: Dict
    posting: Dict
    recent_activities: List[ActivityEvent]


@dataclass
class ActivitySummaryDTO:
    """DTO for a per-day activity summary."""

    period: str
    start_date: datetime
    end_date: datetime
    summary: List[Dict]


@dataclass
class DashboardStatsDTO:
    """DTO for admin dashboard statistics."""

    licenses: Dict[str, int]
    activities: List[Dict]
    daily_active_users: List[Dict]
