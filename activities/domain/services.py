"""
Activity domain services.

Pure aggregation helpers over lists of activity events. They never
touch storage and never look at license validity.
"""
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from activities.domain.activity import ActivityEvent
from core.domain.value_objects import ActivityAction

PERIODS = OrderedDict(
    [
        ("24h", timedelta(hours=24)),
        ("7d", timedelta(days=7)),
        ("30d", timedelta(days=30)),
    ]
)
DEFAULT_PERIOD = "7d"


def normalize_period(period: str) -> str:
    """Unknown periods fall back to the default."""
    return period if period in PERIODS else DEFAULT_PERIOD


def period_start(period: str, now: datetime) -> datetime:
    """Start of the window ending at ``now`` for a period name."""
    return now - PERIODS[normalize_period(period)]


def _day(event: ActivityEvent) -> str:
    return event.created_at.strftime("%Y-%m-%d")


def _count(value) -> int:
    # bool is an int subclass but is never a count
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def summarize_by_action(events: Iterable[ActivityEvent]) -> Dict:
    """
    Count events per action with the most recent occurrence of each.

    Args:
        events: Events to summarize

    Returns:
        {"total_activities": int, "activities": [{"action", "count", "last_occurrence"}]}
    """
    counts: Dict[ActivityAction, int] = {}
    last_seen: Dict[ActivityAction, datetime] = {}
    for event in events:
        counts[event.action] = counts.get(event.action, 0) + 1
        if event.action not in last_seen or event.created_at > last_seen[event.action]:
            last_seen[event.action] = event.created_at

    activities = [
        {"action": action.value, "count": counts[action], "last_occurrence": last_seen[action]}
        for action in sorted(counts, key=lambda a: a.value)
    ]
    return {"total_activities": sum(counts.values()), "activities": activities}


def posting_rollup(events: Iterable[ActivityEvent]) -> Dict:
    """
    Roll up completed posting sessions.

    Only ``posting_completed`` events count. ``data.posted`` and
    ``data.failed`` are summed as whole thread counts; missing,
    non-numeric or fractional values count as 0.
    """
    sessions = 0
    posted = 0
    failed = 0
    for event in events:
        if event.action is not ActivityAction.POSTING_COMPLETED:
            continue
        sessions += 1
        posted += _count(event.data.get("posted"))
        failed += _count(event.data.get("failed"))

    return {
        "total_sessions": sessions,
        "total_threads_posted": posted,
        "total_threads_failed": failed,
        "avg_threads_per_session": posted / sessions if sessions else 0,
    }


def count_by_action(events: Iterable[ActivityEvent]) -> List[Dict]:
    """[{"action", "count"}] sorted by action name."""
    counts: Dict[str, int] = {}
    for event in events:
        counts[event.action.value] = counts.get(event.action.value, 0) + 1
    return [{"action": action, "count": counts[action]} for action in sorted(counts)]


def daily_breakdown(events: Iterable[ActivityEvent]) -> List[Dict]:
    """
    Per-day action counts, oldest day first.

    Returns:
        [{"date": "YYYY-MM-DD", "activities": [{"action", "count"}], "total_activities"}]
    """
    by_day: Dict[str, List[ActivityEvent]] = {}
    for event in events:
        by_day.setdefault(_day(event), []).append(event)

    return [
        {
            "date": day,
            "activities": count_by_action(by_day[day]),
            "total_activities": len(by_day[day]),
        }
        for day in sorted(by_day)
    ]


def daily_active_users(events: Iterable[ActivityEvent]) -> List[Dict]:
    """Distinct emails per day, oldest day first."""
    seen: Dict[str, set] = {}
    for event in events:
        seen.setdefault(_day(event), set()).add(event.email)
    return [{"date": day, "active_users": len(seen[day])} for day in sorted(seen)]
