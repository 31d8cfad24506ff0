"""
ListLicensesQuery.

Query to page through licenses for the admin surface.
"""
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class ListLicensesQuery:
    """Query to list licenses."""

    statuses: Optional[List[str]] = None
    license_type: Optional[str] = None
    page: int = 1
    limit: int = 20
