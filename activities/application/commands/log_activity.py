"""
LogActivityCommand.

Command to append a client-reported activity.
"""
from dataclasses import dataclass, field
from typing import Any, Dict

from core.domain.value_objects import ClientMetadata


@dataclass
class LogActivityCommand:
    """Command to log an activity for the live license of an email."""

    email: str
    action: str
    data: Dict[str, Any] = field(default_factory=dict)
    client: ClientMetadata = field(default_factory=ClientMetadata)
