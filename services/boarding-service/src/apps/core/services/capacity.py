# services/boarding-service/src/apps/core/services/capacity.py
"""
Capacity Calculator

Folds bookings and active holds into per-day occupancy. Pure: callers
pass in everything it reads, nothing is mutated.
"""

from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from django.utils import timezone

from shared.common.utils import iter_days

from apps.core.models.booking import Booking, normalize_service_id
from apps.core.policy import BoardingPolicy

FELIN_POOL = 'felin'
DOG_POOL = 'dog'


def capacity_pool(service_id) -> str:
    """Cats share one pool; every other service shares the dog pool."""
    if normalize_service_id(service_id) == Booking.Service.FELIN:
        return FELIN_POOL
    return DOG_POOL


def pool_ceiling(pool: str, policy: BoardingPolicy) -> int:
    if pool == FELIN_POOL:
        return policy.capacity.felin_max
    return policy.capacity.daily_max


@dataclass(frozen=True)
class DayCapacity:
    date: date
    total_requested: int
    large_category_count: int
    pending_count: int
    confirmed_count: int
    held_count: int
    slots_available: int
    large_category_slots_available: int
    ceiling: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['date'] = self.date.isoformat()
        return data


def _is_large(booking, large_tags) -> bool:
    return any(size in large_tags for size in (booking.sizes or ()))


def capacity_for_day(
    bookings: Iterable,
    day: date,
    *,
    policy: BoardingPolicy,
    service_id=None,
    holds: Iterable = (),
    now: Optional[datetime] = None
) -> DayCapacity:
    """
    Occupancy of one pool on one day.

    Unscoped queries (``service_id=None``) describe the dog pool.
    Large-category count is the number of bookings carrying a large tag,
    not the number of large animals.
    """
    now = now or timezone.now()
    pool = capacity_pool(service_id)
    large_tags = policy.capacity.large_size_tags

    total = 0
    large = 0
    pending = 0
    confirmed = 0

    for booking in bookings:
        if booking.status not in Booking.ACTIVE_STATUSES:
            continue
        if capacity_pool(booking.service_id) != pool:
            continue
        if not booking.covers(day):
            continue

        qty = booking.quantity or 1
        total += qty
        if booking.status == Booking.Status.PENDING:
            pending += qty
        else:
            confirmed += qty

        if _is_large(booking, large_tags):
            large += 1

    held = 0
    for hold in holds:
        if not hold.is_active(now):
            continue
        if capacity_pool(hold.service_id) != pool:
            continue
        if hold.holds_day(day):
            held += hold.quantity or 1

    ceiling = pool_ceiling(pool, policy)

    return DayCapacity(
        date=day,
        total_requested=total,
        large_category_count=large,
        pending_count=pending,
        confirmed_count=confirmed,
        held_count=held,
        slots_available=ceiling - total - held,
        large_category_slots_available=policy.capacity.large_category_max - large,
        ceiling=ceiling,
    )


def capacity_for_range(
    bookings: Iterable,
    start: date,
    end: date,
    *,
    policy: BoardingPolicy,
    service_id=None,
    holds: Iterable = (),
    now: Optional[datetime] = None
) -> List[DayCapacity]:
    """capacity_for_day over every day of ``[start, end]``."""
    now = now or timezone.now()
    bookings = list(bookings)
    holds = list(holds)
    return [
        capacity_for_day(
            bookings, day,
            policy=policy,
            service_id=service_id,
            holds=holds,
            now=now,
        )
        for day in iter_days(start, end)
    ]
