"""
Model registry for the activities app.
"""
from activities.infrastructure.models import ActivityEvent

__all__ = ["ActivityEvent"]
