"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True, eq=False)
class Email(ValueObject):
    """Email value object, normalized to lowercase without surrounding spaces."""

    value: str

    def __post_init__(self):
        """Normalize and validate email format."""
        normalized = (self.value or "").strip().lower()
        if not normalized or "@" not in normalized:
            raise ValueError(f"Invalid email address: {self.value}")
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


class LicenseStatus(Enum):
    """License status value object."""

    ACTIVE = "active"
    TRIAL = "trial"
    EXPIRED = "expired"
    REVOKED = "revoked"

    @property
    def is_live(self) -> bool:
        """Active and trial licenses are live."""
        return self in LIVE_STATUSES

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


LIVE_STATUSES = frozenset({LicenseStatus.ACTIVE, LicenseStatus.TRIAL})


class LicenseType(Enum):
    """License type value object."""

    TRIAL = "trial"
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"
    CUSTOM = "custom"

    def __str__(self) -> str:
        """Return type as string."""
        return self.value


class Priority(Enum):
    """Support/processing priority granted by a license."""

    NORMAL = "normal"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class FeatureSet(ValueObject):
    """Entitlements unlocked by a license."""

    max_threads: int
    custom_delays: bool
    advanced_mode: bool
    priority: Priority

    def __post_init__(self):
        """Validate feature values."""
        # bool is an int subclass
        if not isinstance(self.max_threads, int) or isinstance(self.max_threads, bool):
            raise ValueError("max_threads must be an integer")
        if self.max_threads < 0:
            raise ValueError("max_threads cannot be negative")
        for name in ("custom_delays", "advanced_mode"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be a boolean")
        if not isinstance(self.priority, Priority):
            object.__setattr__(self, "priority", Priority(self.priority))

    def with_overrides(self, overrides: dict) -> "FeatureSet":
        """
        Return a copy with the supplied fields replaced.

        Keys may be given either in snake_case or in the client's camelCase.
        """
        if not overrides:
            return self
        values = self.to_dict()
        for name, value in overrides.items():
            field_name = _FEATURE_ALIASES.get(name, name)
            if field_name not in values:
                raise ValueError(f"Unknown feature: {name}")
            values[field_name] = value
        return FeatureSet(**values)

    def to_dict(self) -> dict:
        """Return features keyed by field name."""
        return {
            "max_threads": self.max_threads,
            "custom_delays": self.custom_delays,
            "advanced_mode": self.advanced_mode,
            "priority": self.priority.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeatureSet":
        """Build a FeatureSet from a dict produced by to_dict()."""
        return cls(
            max_threads=int(data["max_threads"]),
            custom_delays=bool(data["custom_delays"]),
            advanced_mode=bool(data["advanced_mode"]),
            priority=Priority(data["priority"]),
        )


_FEATURE_ALIASES = {
    "maxThreads": "max_threads",
    "customDelays": "custom_delays",
    "advancedMode": "advanced_mode",
}


class ActivityAction(Enum):
    """Actions a client can report to the activity log."""

    LICENSE_ACTIVATED = "license_activated"
    LICENSE_CHECKED = "license_checked"
    LICENSE_DEACTIVATED = "license_deactivated"
    THREADS_EXTRACTED = "threads_extracted"
    POSTING_STARTED = "posting_started"
    POSTING_COMPLETED = "posting_completed"
    POSTING_STOPPED = "posting_stopped"
    SETTINGS_UPDATED = "settings_updated"
    ERROR_OCCURRED = "error_occurred"

    def __str__(self) -> str:
        """Return action as string."""
        return self.value


@dataclass(frozen=True, eq=False)
class ClientMetadata(ValueObject):
    """What a client request tells us about the caller."""

    ip: Optional[str] = None
    user_agent: Optional[str] = None
    client_version: Optional[str] = None
