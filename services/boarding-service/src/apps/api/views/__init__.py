# services/boarding-service/src/apps/api/views/__init__.py
"""
Boarding API Views
"""

from .booking_views import BookingViewSet
from .capacity_views import (
    CapacityCheckView,
    CapacityCalendarView,
    CapacityHoldView,
    CapacityHoldDetailView,
    PriceQuoteView,
)

__all__ = [
    'BookingViewSet',
    'CapacityCheckView',
    'CapacityCalendarView',
    'CapacityHoldView',
    'CapacityHoldDetailView',
    'PriceQuoteView',
]
