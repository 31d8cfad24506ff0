"""
Event handlers for domain events.

These handlers process domain events for side effects
like audit logging and metrics.
"""

import logging

from core.domain.events import DomainEvent, EventHandler
from core.metrics import licenses_issued_total, license_transitions_total
from licenses.domain.events import (
    LicenseExpired,
    LicenseExtended,
    LicenseIssued,
    LicenseReactivated,
    LicenseRevoked,
)

logger = logging.getLogger(__name__)

LICENSE_EVENTS = [
    LicenseIssued,
    LicenseRevoked,
    LicenseReactivated,
    LicenseExtended,
    LicenseExpired,
]

_TRANSITIONS = {
    LicenseRevoked: "revoke",
    LicenseReactivated: "reactivate",
    LicenseExtended: "extend",
    LicenseExpired: "expire",
}


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Writes every license event to the ``core.audit`` logger.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        extra = event.to_dict()
        reason = getattr(event, "reason", None)
        if reason:
            extra["reason"] = reason
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra=extra,
        )


class LicenseMetricsEventHandler(EventHandler):
    """Counts issued licenses and lifecycle transitions."""

    async def handle(self, event: DomainEvent) -> None:
        if isinstance(event, LicenseIssued):
            licenses_issued_total.labels(type=event.license_type).inc()
            return
        transition = _TRANSITIONS.get(type(event))
        if transition:
            license_transitions_total.labels(transition=transition).inc()


def register_event_handlers():
    """Register all event handlers with the event bus."""
    from core.infrastructure.events import event_bus

    audit_handler = AuditLogEventHandler()
    metrics_handler = LicenseMetricsEventHandler()

    for event_type in LICENSE_EVENTS:
        event_bus.subscribe(event_type, audit_handler)
        event_bus.subscribe(event_type, metrics_handler)

    logger.debug("Event handlers registered")
