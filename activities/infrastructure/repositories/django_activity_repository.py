"""
Django implementation of ActivityRepository port.

This adapter converts between domain entities and Django ORM models.
"""
from datetime import datetime
from typing import Dict, List, Optional

from asgiref.sync import sync_to_async
from django.db.models import Count
from django.db.models.functions import TruncDate

from activities.domain.activity import ActivityEvent
from activities.infrastructure.models import ActivityEvent as ActivityEventModel
from activities.ports.activity_repository import ActivityRepository
from core.domain.value_objects import ActivityAction, ClientMetadata


class DjangoActivityRepository(ActivityRepository):
    """Django ORM implementation of ActivityRepository."""

    def _to_domain(self, model: ActivityEventModel) -> ActivityEvent:
        """
        Convert Django model to domain entity.

        Args:
            model: Django ActivityEvent model

        Returns:
            ActivityEvent domain entity
        """
        metadata = model.metadata or {}
        return ActivityEvent(
            id=model.id,
            license_key=model.license_key,
            email=model.email,
            action=ActivityAction(model.action),
            created_at=model.created_at,
            data=model.data or {},
            client=ClientMetadata(
                ip=metadata.get("ip"),
                user_agent=metadata.get("user_agent"),
                client_version=metadata.get("client_version"),
            ),
            success=model.success,
            error_message=model.error_message,
        )

    @sync_to_async
    def add(self, event: ActivityEvent) -> ActivityEvent:
        metadata = {
            "ip": event.client.ip,
            "user_agent": event.client.user_agent,
            "client_version": event.client.client_version,
            "timestamp": event.created_at.isoformat(),
        }
        # pylint: disable=no-member
        model = ActivityEventModel.objects.create(
            id=event.id,
            license_key=event.license_key,
            email=event.email,
            action=event.action.value,
            data=event.data,
            metadata={k: v for k, v in metadata.items() if v is not None},
            success=event.success,
            error_message=event.error_message,
            created_at=event.created_at,
        )
        return self._to_domain(model)

    @sync_to_async
    def find_by_email(
        self,
        email: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ActivityEvent]:
        # pylint: disable=no-member
        queryset = ActivityEventModel.objects.filter(email=email)
        if start:
            queryset = queryset.filter(created_at__gte=start)
        if end:
            queryset = queryset.filter(created_at__lte=end)
        return [self._to_domain(model) for model in queryset.order_by("created_at")]

    @sync_to_async
    def recent_for_email(self, email: str, limit: int = 20) -> List[ActivityEvent]:
        # pylint: disable=no-member
        queryset = ActivityEventModel.objects.filter(email=email).order_by("-created_at")[:limit]
        return [self._to_domain(model) for model in queryset]

    @sync_to_async
    def count_by_action_since(self, since: datetime) -> List[Dict]:
        # pylint: disable=no-member
        rows = (
            ActivityEventModel.objects.filter(created_at__gte=since)
            .order_by()
            .values("action")
            .annotate(count=Count("id"))
            .order_by("action")
        )
        return [{"action": row["action"], "count": row["count"]} for row in rows]

    @sync_to_async
    def daily_active_users_since(self, since: datetime) -> List[Dict]:
        # pylint: disable=no-member
        rows = (
            ActivityEventModel.objects.filter(created_at__gte=since)
            .annotate(day=TruncDate("created_at"))
            .order_by()
            .values("day")
            .annotate(active_users=Count("email", distinct=True))
            .order_by("day")
        )
        return [
            {"date": row["day"].isoformat(), "active_users": row["active_users"]} for row in rows
        ]
