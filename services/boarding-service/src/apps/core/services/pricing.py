# services/boarding-service/src/apps/core/services/pricing.py
"""
Pricing Engine

Quotes a stay from the service, dates, animal count, visit times and
size tags. Pure: reads nothing but its arguments.
"""

from dataclasses import dataclass, asdict
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from shared.common.utils import (
    clock_delta,
    format_currency,
    parse_clock,
    round_decimal,
    to_date,
)

from apps.core.models.booking import Booking, normalize_service_id
from apps.core.policy import Tariffs

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class PriceQuote:
    total: Decimal
    rate_per_unit: Decimal
    days: int
    surcharge_note: Optional[str] = None
    surcharge: Decimal = ZERO
    discount: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_price(
    service_id,
    start_date,
    end_date=None,
    quantity: int = 1,
    arrival_time=None,
    departure_time=None,
    sizes: Sequence[str] = (),
    *,
    tariffs: Tariffs,
    assume_full_day: bool = False
) -> PriceQuote:
    """
    Price a stay.

    - flash: half-day rate up to ``flash_half_day_max_hours``, full-day beyond.
      Both visit times are required unless ``assume_full_day`` is set.
    - sejour: day rate, minus a multi-animal discount on one animal's cost,
      plus a late-departure surcharge.
    - felin: day rate plus its own late-departure surcharge.
    - anything else: large or standard day rate from the size tags.
    """
    from . import BookingValidationError

    start, end = _parse_range(start_date, end_date)
    if quantity is None or int(quantity) < 1:
        raise BookingValidationError("quantity must be at least 1")
    quantity = int(quantity)

    days = (end - start).days + 1
    service = normalize_service_id(service_id)
    arrival = _parse_time(arrival_time, 'arrival_time')
    departure = _parse_time(departure_time, 'departure_time')

    if service == Booking.Service.FLASH:
        rate = _flash_rate(arrival, departure, tariffs, assume_full_day)
        return PriceQuote(
            total=round_decimal(rate * days * quantity),
            rate_per_unit=rate,
            days=days,
        )

    if service == Booking.Service.SEJOUR:
        rate = tariffs.sejour_day
        base = rate * days * quantity
        discount = ZERO
        if quantity >= 2:
            discount = round_decimal(
                rate * days * Decimal(tariffs.sejour_multi_animal_discount_percent) / 100
            )
        surcharge = _late_surcharge(arrival, departure, tariffs, tariffs.sejour_late_surcharge)
        return PriceQuote(
            total=round_decimal(base - discount + surcharge),
            rate_per_unit=rate,
            days=days,
            surcharge_note=_surcharge_note(surcharge),
            surcharge=surcharge,
            discount=discount,
        )

    if service == Booking.Service.FELIN:
        rate = tariffs.felin_day
        surcharge = _late_surcharge(arrival, departure, tariffs, tariffs.felin_late_surcharge)
        return PriceQuote(
            total=round_decimal(rate * days * quantity + surcharge),
            rate_per_unit=rate,
            days=days,
            surcharge_note=_surcharge_note(surcharge),
            surcharge=surcharge,
        )

    has_large = any(size in tariffs.large_size_tags for size in (sizes or ()))
    rate = tariffs.default_large_day if has_large else tariffs.default_day
    return PriceQuote(
        total=round_decimal(rate * days * quantity),
        rate_per_unit=rate,
        days=days,
    )


def _parse_range(start_date, end_date):
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


def _parse_time(value, field_name: str):
    from . import BookingValidationError

    try:
        return parse_clock(value)
    except ValueError:
        raise BookingValidationError(
            f"{field_name} must be HH:MM",
            extra_data={'field': field_name}
        )


def _flash_rate(arrival, departure, tariffs: Tariffs, assume_full_day: bool) -> Decimal:
    from . import BookingValidationError

    if arrival is None or departure is None:
        if assume_full_day:
            return tariffs.flash_full_day
        raise BookingValidationError(
            "arrival_time and departure_time are required for the flash service",
            error_code='TIMES_REQUIRED'
        )

    duration = clock_delta(arrival, departure)
    if duration <= timedelta(0):
        raise BookingValidationError("departure_time must be after arrival_time")

    if duration <= timedelta(hours=tariffs.flash_half_day_max_hours):
        return tariffs.flash_half_day
    return tariffs.flash_full_day


def _late_surcharge(arrival, departure, tariffs: Tariffs, amount: Decimal) -> Decimal:
    if arrival is None or departure is None:
        return ZERO
    if clock_delta(arrival, departure) > timedelta(hours=tariffs.late_departure_threshold_hours):
        return amount
    return ZERO


def _surcharge_note(surcharge: Decimal) -> Optional[str]:
    if surcharge > 0:
        return f"Late departure surcharge (+{format_currency(surcharge)})"
    return None
