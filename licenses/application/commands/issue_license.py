"""
IssueLicenseCommand.

Command to issue a new license to an email address.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class IssueLicenseCommand:
    """Command to issue a license."""

    email: str
    license_type: str
    days: Optional[int] = None
    feature_overrides: Optional[dict] = None
    notes: Optional[str] = None
