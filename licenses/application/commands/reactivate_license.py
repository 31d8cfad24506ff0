"""
ReactivateLicenseCommand.

Command to bring a revoked license back.
"""
from dataclasses import dataclass


@dataclass
class ReactivateLicenseCommand:
    """Command to reactivate a license."""

    license_key: str
