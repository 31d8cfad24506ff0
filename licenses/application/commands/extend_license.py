"""
ExtendLicenseCommand.

Command to push a license expiry forward.
"""
from dataclasses import dataclass


@dataclass
class ExtendLicenseCommand:
    """Command to extend a license."""

    license_key: str
    days: int
