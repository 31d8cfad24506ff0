"""
Celery tasks for background processing.

Tasks for periodic license maintenance.
"""
import asyncio
import logging

from LicenseService.celery import app

logger = logging.getLogger(__name__)


@app.task(name="core.tasks.expire_licenses_task")
def expire_licenses_task():
    """
    Celery task for the expiry sweep.

    Returns:
        Number of licenses moved to expired
    """
    from licenses.application.services.expiry_sweeper import ExpirySweeper
    from licenses.infrastructure.repositories.django_license_repository import (
        DjangoLicenseRepository,
    )

    expired = asyncio.run(ExpirySweeper(DjangoLicenseRepository()).sweep())
    logger.info("Expiry task finished: %d license(s) expired", len(expired))
    return len(expired)
