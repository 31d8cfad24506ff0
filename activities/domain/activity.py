"""
ActivityEvent domain entity.

An activity event is an immutable record of something a client
reported. Events are written once and never updated or deleted.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.domain.value_objects import ActivityAction, ClientMetadata

# Key recorded for attempts that did not resolve to a license
UNKNOWN_LICENSE_KEY = "unknown"


@dataclass(frozen=True)
class ActivityEvent:
    """
    ActivityEvent domain entity.

    ``data`` is an opaque client payload; only the aggregation helpers
    look inside it, and only for posting counters.
    """

    id: uuid.UUID
    license_key: str
    email: str
    action: ActivityAction
    created_at: datetime
    data: Dict[str, Any] = field(default_factory=dict)
    client: ClientMetadata = field(default_factory=ClientMetadata)
    success: bool = True
    error_message: Optional[str] = None

    def __post_init__(self):
        """Validate activity event."""
        if not isinstance(self.action, ActivityAction):
            object.__setattr__(self, "action", ActivityAction(self.action))
        if not self.license_key:
            raise ValueError("license_key cannot be empty")

    @classmethod
    def create(
        cls,
        license_key: str,
        email: str,
        action: ActivityAction,
        data: Optional[Dict[str, Any]] = None,
        client: Optional[ClientMetadata] = None,
        success: bool = True,
        error_message: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "ActivityEvent":
        """
        Create a new ActivityEvent.

        Args:
            license_key: Key of the license involved, or "unknown"
            email: Reporting email
            action: What happened
            data: Optional client payload
            client: Caller details
            success: Whether the action succeeded
            error_message: Failure detail when success is False
            now: Event time (defaults to current UTC time)

        Returns:
            ActivityEvent instance
        """
        return cls(
            id=uuid.uuid4(),
            license_key=license_key,
            email=(email or "").strip().lower(),
            action=ActivityAction(action),
            created_at=now or datetime.now(timezone.utc),
            data=dict(data or {}),
            client=client or ClientMetadata(),
            success=success,
            error_message=error_message,
        )
