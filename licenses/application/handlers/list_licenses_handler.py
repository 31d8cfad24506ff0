"""
ListLicensesHandler.

Pages through licenses for the admin surface.
"""
from core.domain.value_objects import LicenseStatus, LicenseType
from licenses.application.dto.license_dto import LicenseDTO, LicensePageDTO
from licenses.application.queries.list_licenses import ListLicensesQuery
from licenses.ports.license_repository import LicenseRepository

MAX_PAGE_SIZE = 100


class ListLicensesHandler:
    """Handler for ListLicensesQuery."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repository."""
        self.license_repository = license_repository

    async def handle(self, query: ListLicensesQuery) -> LicensePageDTO:
        """
        Handle list licenses query.

        Args:
            query: ListLicensesQuery

        Returns:
            LicensePageDTO, newest licenses first
        """
        page = max(1, query.page)
        limit = min(max(1, query.limit), MAX_PAGE_SIZE)
        statuses = [LicenseStatus(s) for s in query.statuses] if query.statuses else None
        license_type = LicenseType(query.license_type) if query.license_type else None

        licenses, total = await self.license_repository.list(
            statuses=statuses,
            license_type=license_type,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return LicensePageDTO(
            licenses=[LicenseDTO.from_entity(license) for license in licenses],
            page=page,
            limit=limit,
            total=total,
        )
