# services/boarding-service/src/apps/core/services/holds.py
"""
Capacity Hold Service

Short-lived capacity claims taken while a customer is in checkout.

Default reservations check then create without a lock, so two concurrent
checkouts can both pass. Strict reservations serialise on per-day lock
rows and verify again after writing.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from django.db import transaction
from django.utils import timezone

from shared.common.utils import to_date

from apps.core.models import CapacityHold
from apps.core.policy import BoardingPolicy, get_policy
from apps.core.repositories import (
    BookingRepository,
    CapacityLockRepository,
    HoldRepository,
)
from .capacity import capacity_for_day, capacity_pool

logger = logging.getLogger(__name__)


class HoldService:
    """
    Service for temporary capacity holds.

    Handles:
    - Reserve / release
    - Session cleanup after checkout
    - Expired hold sweep
    """

    def __init__(
        self,
        repository: BookingRepository = None,
        hold_repository: HoldRepository = None,
        lock_repository: CapacityLockRepository = None,
        policy: BoardingPolicy = None
    ):
        self.repository = repository or BookingRepository()
        self.hold_repository = hold_repository or HoldRepository()
        self.lock_repository = lock_repository or CapacityLockRepository()
        self.policy = policy or get_policy()

    # ==========================================================================
    # Reserve
    # ==========================================================================

    def reserve_hold(
        self,
        dates: Sequence,
        quantity: int,
        session_id: str,
        service_id=None,
        *,
        now: Optional[datetime] = None,
        strict: Optional[bool] = None
    ) -> CapacityHold:
        """
        Hold ``quantity`` slots on every listed day for ``hold_ttl_minutes``.

        Raises CapacityConflictError without creating anything when any day
        lacks room.
        """
        from . import BookingValidationError

        days = self._parse_dates(dates)
        if quantity is None or int(quantity) < 1:
            raise BookingValidationError("quantity must be at least 1")
        if not session_id:
            raise BookingValidationError("session_id is required")
        quantity = int(quantity)
        now = now or timezone.now()
        strict = self.policy.strict_holds if strict is None else strict

        if strict:
            hold = self._reserve_strict(days, quantity, session_id, service_id, now)
        else:
            self._ensure_room(days, quantity, service_id, now)
            hold = self._create_hold(days, quantity, session_id, service_id, now)

        logger.info(
            f"Capacity held for session {session_id}: {quantity} x {len(days)} days",
            extra={
                'hold_id': str(hold.id),
                'session_id': session_id,
                'dates': hold.dates,
                'quantity': quantity,
                'strict': strict,
            }
        )
        return hold

    def _reserve_strict(
        self,
        days: List[date],
        quantity: int,
        session_id: str,
        service_id,
        now: datetime
    ) -> CapacityHold:
        with transaction.atomic():
            self.lock_repository.lock_days(capacity_pool(service_id), days)
            self._ensure_room(days, quantity, service_id, now)
            hold = self._create_hold(days, quantity, session_id, service_id, now)
            # Verify again with the new hold counted
            self._ensure_room(days, 0, service_id, now)
        return hold

    def _ensure_room(self, days: List[date], quantity: int, service_id, now: datetime):
        """Raise CapacityConflictError when any day has fewer than ``quantity`` free slots."""
        from . import CapacityConflictError

        start, end = days[0], days[-1]
        bookings = self.repository.find_bookings_in_range(start, end)
        holds = self.hold_repository.find_active_in_range(start, end, now)

        shortfall = []
        for day in days:
            capacity = capacity_for_day(
                bookings, day,
                policy=self.policy,
                service_id=service_id,
                holds=holds,
                now=now,
            )
            if capacity.slots_available < quantity:
                shortfall.append({
                    'date': day.isoformat(),
                    'available': capacity.slots_available,
                    'requested': quantity,
                })

        if shortfall:
            logger.warning(
                f"Capacity conflict on {len(shortfall)} day(s)",
                extra={'shortfall': shortfall, 'service_id': service_id}
            )
            raise CapacityConflictError(
                f"Capacity not available on {shortfall[0]['date']}",
                shortfall=shortfall,
            )

    def _create_hold(
        self,
        days: List[date],
        quantity: int,
        session_id: str,
        service_id,
        now: datetime
    ) -> CapacityHold:
        return self.hold_repository.create(
            session_id=session_id,
            service_id=service_id or '',
            dates=[d.isoformat() for d in days],
            quantity=quantity,
            expires_at=now + timedelta(minutes=self.policy.hold_ttl_minutes),
        )

    # ==========================================================================
    # Release
    # ==========================================================================

    def release_hold(self, hold_id) -> bool:
        """Idempotent: unknown, expired or malformed ids succeed silently."""
        deleted = self.hold_repository.delete(hold_id)
        if deleted:
            logger.info(f"Capacity hold released: {hold_id}", extra={'hold_id': str(hold_id)})
        return True

    def release_session_holds(self, session_id: str) -> int:
        if not session_id:
            return 0
        deleted = self.hold_repository.delete_for_session(session_id)
        if deleted:
            logger.info(
                f"Released {deleted} hold(s) for session {session_id}",
                extra={'session_id': session_id}
            )
        return deleted

    def purge_expired_holds(self, now: Optional[datetime] = None) -> int:
        """Delete holds past their expiry. Readers already ignore them."""
        now = now or timezone.now()
        deleted = self.hold_repository.delete_expired(now)
        logger.info(f"Purged {deleted} expired capacity hold(s)")
        return deleted

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _parse_dates(self, dates: Sequence) -> List[date]:
        from . import BookingValidationError

        if not dates:
            raise BookingValidationError("dates are required")
        if isinstance(dates, (str, date)):
            dates = [dates]
        try:
            return sorted({to_date(d) for d in dates})
        except (TypeError, ValueError) as e:
            raise BookingValidationError(f"Invalid dates: {e}")
