# services/boarding-service/src/apps/core/services/availability.py
"""
Availability Service

Answers "can these animals stay on these days?" and builds the monthly
occupancy calendar.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from django.utils import timezone

from shared.common.utils import start_of_day, to_date

from apps.core.policy import BoardingPolicy, get_policy
from apps.core.repositories import BookingRepository, HoldRepository
from .capacity import (
    DayCapacity,
    FELIN_POOL,
    capacity_for_range,
    capacity_pool,
    pool_ceiling,
)

logger = logging.getLogger(__name__)


class AvailabilityCode:
    TOO_LATE = 'TOO_LATE'
    CAPACITY_EXCEEDED = 'CAPACITY_EXCEEDED'
    LARGE_DOG_LIMIT = 'LARGE_DOG_LIMIT'


@dataclass
class AvailabilityResult:
    available: bool
    code: Optional[str] = None
    reason: Optional[str] = None
    per_day: List[DayCapacity] = field(default_factory=list)
    unavailable_dates: List[Dict[str, Any]] = field(default_factory=list)
    large_animal_unavailable_dates: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'available': self.available,
            'code': self.code,
            'reason': self.reason,
            'capacity_by_day': [day.to_dict() for day in self.per_day],
            'unavailable_dates': self.unavailable_dates,
            'large_animal_unavailable_dates': self.large_animal_unavailable_dates,
        }


class AvailabilityService:
    """
    Service for capacity queries.

    Handles:
    - Range availability checks
    - Monthly calendar
    """

    def __init__(
        self,
        repository: BookingRepository = None,
        hold_repository: HoldRepository = None,
        policy: BoardingPolicy = None
    ):
        self.repository = repository or BookingRepository()
        self.hold_repository = hold_repository or HoldRepository()
        self.policy = policy or get_policy()

    # ==========================================================================
    # Availability Check
    # ==========================================================================

    def check_availability(
        self,
        start_date,
        end_date=None,
        quantity: int = 1,
        has_large_animal: bool = False,
        service_id=None,
        *,
        now: Optional[datetime] = None,
        exclude_session_id: Optional[str] = None
    ) -> AvailabilityResult:
        """Check every day of ``[start_date, end_date]`` for room."""
        from . import BookingValidationError

        start, end = self._parse_range(start_date, end_date)
        if quantity is None or int(quantity) < 1:
            raise BookingValidationError("quantity must be at least 1")
        quantity = int(quantity)
        now = now or timezone.now()

        min_lead = timedelta(hours=self.policy.min_lead_hours)
        if start_of_day(start) - now < min_lead:
            return AvailabilityResult(
                available=False,
                code=AvailabilityCode.TOO_LATE,
                reason=(
                    f"Bookings must be made at least "
                    f"{self.policy.min_lead_hours} hours in advance"
                ),
            )

        per_day = self.capacity_by_day(
            start, end,
            service_id=service_id,
            now=now,
            exclude_session_id=exclude_session_id,
        )

        unavailable = [
            {
                'date': day.date.isoformat(),
                'available': day.slots_available,
                'requested': quantity,
            }
            for day in per_day
            if day.slots_available < quantity
        ]

        large_unavailable = []
        if has_large_animal and capacity_pool(service_id) != FELIN_POOL:
            large_unavailable = [
                day.date.isoformat()
                for day in per_day
                if day.large_category_slots_available < 1
            ]

        if unavailable:
            code = AvailabilityCode.CAPACITY_EXCEEDED
            reason = 'Insufficient capacity on some dates'
        elif large_unavailable:
            code = AvailabilityCode.LARGE_DOG_LIMIT
            reason = 'No room for large dogs on some dates'
        else:
            code = None
            reason = None

        return AvailabilityResult(
            available=code is None,
            code=code,
            reason=reason,
            per_day=per_day,
            unavailable_dates=unavailable,
            large_animal_unavailable_dates=large_unavailable,
        )

    def capacity_by_day(
        self,
        start: date,
        end: date,
        service_id=None,
        *,
        now: Optional[datetime] = None,
        exclude_session_id: Optional[str] = None
    ) -> List[DayCapacity]:
        """Read bookings and active holds for the range and fold them per day."""
        now = now or timezone.now()
        if start == end:
            bookings = self.repository.find_bookings_by_date(start)
        else:
            bookings = self.repository.find_bookings_in_range(start, end)
        holds = self.hold_repository.find_active_in_range(
            start, end, now, exclude_session_id=exclude_session_id
        )
        return capacity_for_range(
            bookings, start, end,
            policy=self.policy,
            service_id=service_id,
            holds=holds,
            now=now,
        )

    # ==========================================================================
    # Calendar
    # ==========================================================================

    def get_calendar(
        self,
        month,
        year,
        service_id=None,
        *,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Per-day occupancy for one month with a full/limited/available status."""
        from . import BookingValidationError

        try:
            month = int(month)
            year = int(year)
        except (TypeError, ValueError):
            raise BookingValidationError("month and year are required")
        if not 1 <= month <= 12:
            raise BookingValidationError("month must be between 1 and 12")

        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])
        per_day = self.capacity_by_day(first, last, service_id=service_id, now=now)

        days = []
        for day in per_day:
            entry = day.to_dict()
            # 0 = Sunday
            entry['day_of_week'] = (day.date.weekday() + 1) % 7
            entry['status'] = self._day_status(day.slots_available)
            days.append(entry)

        return {
            'month': month,
            'year': year,
            'max_capacity': pool_ceiling(capacity_pool(service_id), self.policy),
            'calendar': days,
        }

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _day_status(self, slots_available: int) -> str:
        if slots_available <= 0:
            return 'full'
        if slots_available <= self.policy.limited_threshold:
            return 'limited'
        return 'available'

    def _parse_range(self, start_date, end_date):
        from . import BookingValidationError

        try:
            start = to_date(start_date)
            end = to_date(end_date) or start
        except ValueError as e:
            raise BookingValidationError(str(e))

        if start is None:
            raise BookingValidationError("start_date is required")
        if end < start:
            raise BookingValidationError("end_date cannot be before start_date")
        return start, end
