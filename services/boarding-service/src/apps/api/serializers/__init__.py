# services/boarding-service/src/apps/api/serializers/__init__.py
"""
Boarding API Serializers
"""

from .booking_serializers import (
    BookingSerializer,
    BookingPublicSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    BookingRejectSerializer,
    BookingCancelSerializer,
    AnimalDetailSerializer,
)
from .capacity_serializers import (
    CapacityCheckQuerySerializer,
    CalendarQuerySerializer,
    HoldCreateSerializer,
    CapacityHoldSerializer,
    PriceQuoteRequestSerializer,
)

__all__ = [
    # Booking
    'BookingSerializer',
    'BookingPublicSerializer',
    'BookingListSerializer',
    'BookingCreateSerializer',
    'BookingRejectSerializer',
    'BookingCancelSerializer',
    'AnimalDetailSerializer',
    # Capacity
    'CapacityCheckQuerySerializer',
    'CalendarQuerySerializer',
    'HoldCreateSerializer',
    'CapacityHoldSerializer',
    'PriceQuoteRequestSerializer',
]
