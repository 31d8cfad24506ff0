"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity: the issuance policy table and the
extension policy.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from core.domain.exceptions import InvalidTransitionError
from core.domain.value_objects import FeatureSet, LicenseType, Priority
from licenses.domain.license import License, utcnow


@dataclass(frozen=True)
class LicenseTypePolicy:
    """Defaults applied when a license of a given type is issued."""

    license_type: LicenseType
    name: str
    duration_days: int
    features: FeatureSet
    description: str = ""


def _features(max_threads: int, priority: Priority) -> FeatureSet:
    return FeatureSet(
        max_threads=max_threads,
        custom_delays=True,
        advanced_mode=True,
        priority=priority,
    )


POLICY_TABLE: Dict[LicenseType, LicenseTypePolicy] = {
    LicenseType.TRIAL: LicenseTypePolicy(
        LicenseType.TRIAL,
        "Trial",
        7,
        _features(20, Priority.NORMAL),
        "Perfect for testing the extension",
    ),
    LicenseType.BASIC: LicenseTypePolicy(
        LicenseType.BASIC,
        "Basic",
        30,
        _features(100, Priority.NORMAL),
        "Great for personal use",
    ),
    LicenseType.PRO: LicenseTypePolicy(
        LicenseType.PRO,
        "Pro",
        365,
        _features(500, Priority.HIGH),
        "For power users and small businesses",
    ),
    LicenseType.ENTERPRISE: LicenseTypePolicy(
        LicenseType.ENTERPRISE,
        "Enterprise",
        365,
        _features(1000, Priority.HIGH),
        "For agencies and large teams",
    ),
    LicenseType.CUSTOM: LicenseTypePolicy(
        LicenseType.CUSTOM,
        "Custom",
        30,
        _features(100, Priority.NORMAL),
        "Operator-defined terms",
    ),
}

# Types offered for self-service and listed in the public catalogue
PUBLIC_TYPES = [LicenseType.TRIAL, LicenseType.BASIC, LicenseType.PRO, LicenseType.ENTERPRISE]


class IssuancePolicy:
    """Resolves duration and features for a new license."""

    def __init__(self, trial_days: int = 7, default_days: int = 30):
        """
        Initialize issuance policy.

        Args:
            trial_days: Duration of trial licenses
            default_days: Duration of basic licenses
        """
        self._durations = {t: p.duration_days for t, p in POLICY_TABLE.items()}
        self._durations[LicenseType.TRIAL] = trial_days
        self._durations[LicenseType.BASIC] = default_days

    @classmethod
    def from_settings(cls, settings) -> "IssuancePolicy":
        return cls(
            trial_days=getattr(settings, "LICENSE_TRIAL_DAYS", 7),
            default_days=getattr(settings, "LICENSE_DEFAULT_DAYS", 30),
        )

    def duration_for(self, license_type: LicenseType, days: Optional[int] = None) -> int:
        """Explicit days win over the type default."""
        return days if days else self._durations[license_type]

    def features_for(
        self, license_type: LicenseType, overrides: Optional[dict] = None
    ) -> FeatureSet:
        """
        Resolve the feature set for a type.

        Args:
            license_type: License type
            overrides: Optional partial feature overrides

        Returns:
            Resolved FeatureSet
        """
        return POLICY_TABLE[license_type].features.with_overrides(overrides or {})

    def catalogue(self) -> List[LicenseTypePolicy]:
        """Public license types with their effective durations."""
        return [
            LicenseTypePolicy(
                license_type=t,
                name=POLICY_TABLE[t].name,
                duration_days=self._durations[t],
                features=POLICY_TABLE[t].features,
                description=POLICY_TABLE[t].description,
            )
            for t in PUBLIC_TYPES
        ]


class ExtensionMode(Enum):
    """Whether extensions are always allowed or only close to expiry."""

    UNCONDITIONAL = "unconditional"
    NEAR_EXPIRY = "near_expiry"


class ExtensionPolicy:
    """Decides whether a license may be extended right now."""

    def __init__(self, mode: ExtensionMode = ExtensionMode.UNCONDITIONAL, window_days: int = 7):
        self.mode = ExtensionMode(mode)
        self.window_days = window_days

    @classmethod
    def from_settings(cls, settings) -> "ExtensionPolicy":
        return cls(
            mode=ExtensionMode(getattr(settings, "LICENSE_EXTENSION_POLICY", "unconditional")),
            window_days=getattr(settings, "LICENSE_EXTENSION_WINDOW_DAYS", 7),
        )

    def apply(self, license: License, days: int, now: Optional[datetime] = None) -> License:
        """
        Extend a license if the policy allows it.

        Args:
            license: License to extend
            days: Days to add
            now: Current time (defaults to utcnow)

        Returns:
            Extended license

        Raises:
            InvalidTransitionError: If the policy refuses or days is not positive
        """
        now = now or utcnow()
        if self.mode is ExtensionMode.NEAR_EXPIRY:
            remaining = license.whole_days_left(now)
            if remaining > self.window_days:
                raise InvalidTransitionError(
                    f"License has {remaining} days remaining; "
                    f"extensions are allowed within {self.window_days} days of expiry"
                )
        return license.extend(days, now)
