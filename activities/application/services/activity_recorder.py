"""
Activity recorder.

Best-effort writes to the activity log from the license handlers.
A failed write is logged and counted, never raised.
"""
import logging
from typing import Any, Dict, Optional

from activities.domain.activity import ActivityEvent
from activities.ports.activity_repository import ActivityRepository
from core.domain.value_objects import ActivityAction, ClientMetadata
from core.metrics import activity_events_total, activity_log_failures_total

logger = logging.getLogger(__name__)


class ActivityRecorder:
    """Writes activity events without failing the caller."""

    def __init__(self, activity_repository: ActivityRepository):
        """Initialize recorder with repository."""
        self.activity_repository = activity_repository

    async def record(
        self,
        license_key: str,
        email: str,
        action: ActivityAction,
        success: bool = True,
        data: Optional[Dict[str, Any]] = None,
        client: Optional[ClientMetadata] = None,
        error_message: Optional[str] = None,
    ) -> Optional[ActivityEvent]:
        """
        Record an activity event.

        Args:
            license_key: License key, or "unknown"
            email: Reporting email
            action: Activity action
            success: Whether the action succeeded
            data: Optional payload
            client: Caller details
            error_message: Failure detail

        Returns:
            Stored event, or None if the write failed
        """
        try:
            event = ActivityEvent.create(
                license_key=license_key,
                email=email,
                action=action,
                data=data,
                client=client,
                success=success,
                error_message=error_message,
            )
            stored = await self.activity_repository.add(event)
        except Exception as e:  # pylint: disable=broad-exception-caught
            activity_log_failures_total.inc()
            logger.error(
                "Failed to record %s activity for %s: %s",
                action.value,
                email,
                e,
                exc_info=True,
            )
            return None

        activity_events_total.labels(action=action.value).inc()
        return stored
