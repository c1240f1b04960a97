# services/boarding-service/src/apps/core/services/__init__.py
"""
Boarding Service Business Logic
"""

from apps.core.exceptions import (
    BoardingServiceError,
    BookingValidationError,
    BookingNotFoundError,
    InvalidStateTransition,
    InvalidTokenError,
    AccessDenied,
    CapacityConflictError,
    PaymentGatewayError,
    PaymentCaptureFailed,
    PaymentRefundFailed,
    NotificationFailed,
    validation_error,
)

from .pricing import PriceQuote, compute_price
from .capacity import DayCapacity, capacity_for_day, capacity_for_range, capacity_pool
from .refunds import refund_for, describe_refund, describe_policy
from .availability import AvailabilityService, AvailabilityResult, AvailabilityCode
from .holds import HoldService
from .bookings import BookingService


__all__ = [
    # Services
    'BookingService',
    'AvailabilityService',
    'HoldService',

    # Pure functions and results
    'compute_price',
    'PriceQuote',
    'capacity_for_day',
    'capacity_for_range',
    'capacity_pool',
    'DayCapacity',
    'refund_for',
    'describe_refund',
    'describe_policy',
    'AvailabilityResult',
    'AvailabilityCode',

    # Exceptions
    'BoardingServiceError',
    'BookingValidationError',
    'BookingNotFoundError',
    'InvalidStateTransition',
    'InvalidTokenError',
    'AccessDenied',
    'CapacityConflictError',
    'PaymentGatewayError',
    'PaymentCaptureFailed',
    'PaymentRefundFailed',
    'NotificationFailed',
    'validation_error',
]
