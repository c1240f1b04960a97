# shared/common/utils.py
"""
Common Utility Functions and Classes
"""

import secrets
from datetime import datetime, date, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, Optional, Union
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.core.validators import validate_email
from django.core.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# STRING UTILITIES
# =============================================================================

def generate_code(prefix: str = '', length: int = 8) -> str:
    """Generate a unique code with optional prefix"""
    code = secrets.token_hex(length // 2).upper()
    return f"{prefix}{code}" if prefix else code


def mask_email(email: str) -> str:
    """Mask an email address for privacy"""
    if not email or '@' not in email:
        return email
    local, domain = email.split('@', 1)
    if len(local) <= 2:
        return f"{local[0]}{'*' * (len(local) - 1)}@{domain}"
    return f"{local[0]}{'*' * (len(local) - 2)}{local[-1]}@{domain}"


def is_valid_email(email: str) -> bool:
    """Validate email address"""
    try:
        validate_email(email)
        return True
    except ValidationError:
        return False


# =============================================================================
# DATE/TIME UTILITIES
# =============================================================================

def to_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Coerce an ISO string, date or datetime into a date.

    Raises ValueError for strings that are not ``YYYY-MM-DD``.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value).strip()[:10])
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


def start_of_day(d: date) -> datetime:
    """Midnight of ``d`` in the current timezone, as an aware datetime"""
    return timezone.make_aware(
        datetime.combine(d, time.min),
        timezone.get_current_timezone()
    )


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day in the inclusive range ``[start, end]``"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def ceil_timedelta(delta: timedelta, unit: timedelta) -> int:
    """Exact ceiling of ``delta / unit`` using integer timedelta arithmetic"""
    return -((-delta) // unit)


def parse_clock(value: Union[str, time, None]) -> Optional[time]:
    """Parse an ``HH:MM`` clock string; returns None when missing"""
    if value is None or value == '':
        return None
    if isinstance(value, time):
        return value
    try:
        hours, minutes = str(value).strip().split(':')[:2]
        return time(int(hours), int(minutes))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid time: {value!r}")


def clock_delta(start: time, end: time) -> timedelta:
    """Duration between two clock times on the same day"""
    return (
        datetime.combine(date.min, end) - datetime.combine(date.min, start)
    )


# =============================================================================
# NUMBER UTILITIES
# =============================================================================

def round_decimal(value: Union[Decimal, float, int], places: int = 2) -> Decimal:
    """Round half-up to specified decimal places"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)


def format_currency(amount: Union[Decimal, float], currency: str = 'EUR') -> str:
    """Format amount as currency string"""
    symbols = {
        'USD': '$',
        'EUR': '€',
        'GBP': '£',
    }
    symbol = symbols.get(currency.upper(), currency.upper() + ' ')
    return f"{amount:,.2f}{symbol}" if currency.upper() == 'EUR' else f"{symbol}{amount:,.2f}"
