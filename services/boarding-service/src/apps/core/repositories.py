# services/boarding-service/src/apps/core/repositories.py
"""
Boarding Repositories

ORM-backed persistence for bookings and capacity holds. Services read and
write through these classes only.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from apps.core.models import Booking, CapacityHold, CapacityLock

logger = logging.getLogger(__name__)


class BookingRepository:
    """Booking persistence."""

    def get(self, booking_id) -> Optional[Booking]:
        """Fresh read of one booking; None when unknown or malformed."""
        try:
            return Booking.objects.get(id=uuid.UUID(str(booking_id)))
        except (Booking.DoesNotExist, ValueError):
            return None

    def create(self, **fields) -> Booking:
        return Booking.objects.create(**fields)

    def save(self, booking: Booking, fields: Sequence[str]) -> Booking:
        """Write only the named columns of one row."""
        update_fields = list(dict.fromkeys(list(fields) + ['updated_at']))
        booking.save(update_fields=update_fields)
        return booking

    def find_bookings_by_date(
        self,
        day: date,
        statuses: Iterable[str] = Booking.ACTIVE_STATUSES
    ) -> List[Booking]:
        """Bookings whose stay includes ``day``."""
        return self.find_bookings_in_range(day, day, statuses)

    def find_bookings_in_range(
        self,
        start: date,
        end: date,
        statuses: Iterable[str] = Booking.ACTIVE_STATUSES
    ) -> List[Booking]:
        """Bookings whose ``[date, end_date]`` overlaps ``[start, end]``."""
        return list(
            Booking.objects.filter(
                status__in=list(statuses),
                date__lte=end,
                end_date__gte=start,
            )
        )

    def find_by_email(self, email: str, limit: int = 20) -> List[Booking]:
        return list(
            Booking.objects.filter(
                contact_email=email.strip().lower()
            ).order_by('-created_at')[:limit]
        )


class HoldRepository:
    """Capacity hold persistence."""

    def create(self, **fields) -> CapacityHold:
        return CapacityHold.objects.create(**fields)

    def delete(self, hold_id) -> int:
        """Delete one hold; unknown or malformed ids delete nothing."""
        try:
            key = uuid.UUID(str(hold_id))
        except ValueError:
            return 0
        deleted, _ = CapacityHold.objects.filter(id=key).delete()
        return deleted

    def find_active_in_range(
        self,
        start: date,
        end: date,
        now: datetime,
        exclude_session_id: Optional[str] = None
    ) -> List[CapacityHold]:
        """Unexpired holds whose day span overlaps ``[start, end]``."""
        queryset = CapacityHold.objects.filter(
            first_date__lte=end,
            last_date__gte=start,
            expires_at__gt=now,
        )
        if exclude_session_id:
            queryset = queryset.exclude(session_id=exclude_session_id)
        return list(queryset)

    def delete_expired(self, now: datetime) -> int:
        deleted, _ = CapacityHold.objects.filter(expires_at__lte=now).delete()
        return deleted

    def delete_for_session(self, session_id: str) -> int:
        deleted, _ = CapacityHold.objects.filter(session_id=session_id).delete()
        return deleted


class CapacityLockRepository:
    """Per-day lock rows for strict reservations."""

    def lock_days(self, pool: str, days: Iterable[date]) -> List[CapacityLock]:
        """
        Lock one row per day, creating missing rows first.

        Must run inside a transaction. Days are locked in sorted order.
        """
        ordered = sorted(set(days))
        for day in ordered:
            CapacityLock.objects.get_or_create(pool=pool, date=day)
        return list(
            CapacityLock.objects.select_for_update()
            .filter(pool=pool, date__in=ordered)
            .order_by('date')
        )
