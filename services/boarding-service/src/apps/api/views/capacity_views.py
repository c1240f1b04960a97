# services/boarding-service/src/apps/api/views/capacity_views.py
"""
Capacity API Views

Availability checks, the occupancy calendar, checkout holds and price
quotes. All public: the checkout calls them before the customer pays.
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.services import (
    AvailabilityService,
    HoldService,
    compute_price,
)
from apps.core.policy import get_policy
from apps.api.serializers import (
    CapacityCheckQuerySerializer,
    CalendarQuerySerializer,
    HoldCreateSerializer,
    CapacityHoldSerializer,
    PriceQuoteRequestSerializer,
)

logger = logging.getLogger(__name__)


class CapacityCheckView(APIView):
    """
    Check availability for a date range.

    GET /api/v1/capacity/check/?start_date=&end_date=&quantity=&has_large_animal=&service_id=
    """

    permission_classes = [AllowAny]

    def get(self, request):
        serializer = CapacityCheckQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = AvailabilityService().check_availability(
            start_date=data['start_date'],
            end_date=data.get('end_date'),
            quantity=data['quantity'],
            has_large_animal=data['has_large_animal'],
            service_id=data.get('service_id') or None,
            exclude_session_id=data.get('session_id') or None,
        )

        return Response(result.to_dict())


class CapacityCalendarView(APIView):
    """
    Monthly occupancy calendar.

    GET /api/v1/capacity/calendar/?month=&year=&service_id=
    """

    permission_classes = [AllowAny]

    def get(self, request):
        serializer = CalendarQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        calendar = AvailabilityService().get_calendar(
            month=data['month'],
            year=data['year'],
            service_id=data.get('service_id') or None,
        )

        return Response(calendar)


class CapacityHoldView(APIView):
    """
    Hold capacity during checkout.

    POST /api/v1/capacity/holds/
    """

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = HoldCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        hold = HoldService().reserve_hold(
            dates=data['dates'],
            quantity=data['quantity'],
            session_id=data['session_id'],
            service_id=data.get('service_id') or None,
        )

        payload = CapacityHoldSerializer(hold).data
        payload.update({
            'success': True,
            'message': f"Capacity held for {get_policy().hold_ttl_minutes} minutes",
        })
        return Response(payload, status=status.HTTP_201_CREATED)


class CapacityHoldDetailView(APIView):
    """
    Release a hold. Unknown or already released ids succeed.

    DELETE /api/v1/capacity/holds/<hold_id>/
    """

    permission_classes = [AllowAny]

    def delete(self, request, hold_id):
        HoldService().release_hold(hold_id)
        return Response({'success': True})


class PriceQuoteView(APIView):
    """
    Quote a stay without booking it.

    POST /api/v1/pricing/quote/
    """

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PriceQuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        quote = compute_price(
            data['service_id'],
            data['start_date'],
            data.get('end_date'),
            data['quantity'],
            data.get('arrival_time') or None,
            data.get('departure_time') or None,
            data.get('sizes') or [],
            tariffs=get_policy().tariffs,
            assume_full_day=data['assume_full_day'],
        )

        result = quote.to_dict()
        for key in ('total', 'rate_per_unit', 'surcharge', 'discount'):
            result[key] = str(result[key])
        result['currency'] = get_policy().currency
        return Response(result)
