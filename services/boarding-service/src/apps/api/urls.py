# services/boarding-service/src/apps/api/urls.py
"""
Boarding API URL Configuration

Defines all API routes for the boarding service.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    # Booking
    BookingViewSet,
    # Capacity
    CapacityCheckView,
    CapacityCalendarView,
    CapacityHoldView,
    CapacityHoldDetailView,
    # Pricing
    PriceQuoteView,
)

app_name = 'api'

# Create router and register viewsets
router = DefaultRouter()
router.register(r'bookings', BookingViewSet, basename='booking')

urlpatterns = [
    path('capacity/check/', CapacityCheckView.as_view(), name='capacity-check'),
    path('capacity/calendar/', CapacityCalendarView.as_view(), name='capacity-calendar'),
    path('capacity/holds/', CapacityHoldView.as_view(), name='capacity-holds'),
    path('capacity/holds/<str:hold_id>/', CapacityHoldDetailView.as_view(), name='capacity-hold-detail'),
    path('pricing/quote/', PriceQuoteView.as_view(), name='pricing-quote'),
    path('', include(router.urls)),
]
