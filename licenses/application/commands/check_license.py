"""
Validity check commands.

Both commands run a validity check, which bumps the license counters,
so they are commands rather than queries.
"""
from dataclasses import dataclass, field

from core.domain.value_objects import ClientMetadata


@dataclass
class ValidateLicenseCommand:
    """Command to validate and activate a license on a client."""

    email: str
    license_key: str
    client: ClientMetadata = field(default_factory=ClientMetadata)


@dataclass
class CheckLicenseCommand:
    """Command for a periodic license check from a client."""

    email: str
    license_key: str
    client: ClientMetadata = field(default_factory=ClientMetadata)
