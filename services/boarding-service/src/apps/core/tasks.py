# services/boarding-service/src/apps/core/tasks.py
"""
Boarding Service Celery Tasks

Periodic maintenance for capacity holds.
"""

import logging
from celery import shared_task

from .services import HoldService


logger = logging.getLogger(__name__)


@shared_task(name='boarding.purge_expired_holds')
def purge_expired_holds():
    """
    Delete capacity holds past their expiry.

    Readers already ignore expired holds, so this only keeps the table small.

    Returns:
        Dict with the number of rows deleted
    """
    deleted = HoldService().purge_expired_holds()
    logger.info(f"purge_expired_holds removed {deleted} hold(s)")
    return {'deleted': deleted}
