"""
GetLicenseInfoQuery.

Read-only query for license details.
"""
from dataclasses import dataclass


@dataclass
class GetLicenseInfoQuery:
    """Query to get license details for an email + key pair."""

    email: str
    license_key: str
