# services/boarding-service/src/apps/api/views/booking_views.py
"""
Booking API Views

Checkout, customer self-service and operator decisions.
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from shared.common.permissions import HasAdminAPIKey, has_valid_api_key

from apps.core.services import BookingService, PaymentRefundFailed, describe_refund
from apps.api.serializers import (
    BookingSerializer,
    BookingPublicSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    BookingRejectSerializer,
    BookingCancelSerializer,
)

logger = logging.getLogger(__name__)


class BookingViewSet(viewsets.ViewSet):
    """
    ViewSet for the booking lifecycle.

    Checkout and customer lookups are public; confirm, reject and lookups
    by e-mail need the admin API key. Cancel accepts either a customer
    token or the admin key.

    Confirm and cancel move money and share the "payments" rate limit.
    """

    ADMIN_ACTIONS = ('confirm', 'reject', 'by_email')
    PAYMENT_ACTIONS = ('confirm', 'cancel')

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def get_permissions(self):
        if self.action in self.ADMIN_ACTIONS:
            return [HasAdminAPIKey()]
        return [AllowAny()]

    def get_throttles(self):
        throttles = super().get_throttles()
        if self.action in self.PAYMENT_ACTIONS:
            self.throttle_scope = 'payments'
            throttles.append(ScopedRateThrottle())
        return throttles

    def create(self, request):
        """Create a pending booking from the checkout."""
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = self.booking_service.create_booking(
            service_id=data['service_id'],
            start_date=data['start_date'],
            end_date=data.get('end_date'),
            quantity=data['quantity'],
            contact_name=data['contact_name'],
            contact_email=data['contact_email'],
            contact_phone=data.get('contact_phone') or None,
            sizes=data.get('sizes') or [],
            details=[dict(item) for item in data.get('details') or []],
            arrival_time=data.get('arrival_time') or None,
            departure_time=data.get('departure_time') or None,
            is_sterilized=data['is_sterilized'],
            payment_method_id=data.get('payment_method_id') or None,
            session_id=data.get('session_id') or None,
        )

        return Response(
            {'success': True, 'booking': BookingPublicSerializer(booking).data},
            status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        """Customer view of one booking; requires ?email= or ?token=."""
        booking = self.booking_service.get_booking_for_client(
            pk,
            email=request.query_params.get('email'),
            token=request.query_params.get('token'),
        )
        return Response({'booking': BookingPublicSerializer(booking).data})

    @action(detail=False, methods=['get'], url_path=r'by-email/(?P<email>[^/]+)')
    def by_email(self, request, email=None):
        """Most recent bookings for a customer e-mail."""
        bookings = self.booking_service.list_by_email(email)
        return Response({'bookings': BookingListSerializer(bookings, many=True).data})

    @action(detail=False, methods=['get'], url_path='cancel-policy')
    def cancel_policy(self, request):
        """Cancellation rules shown before checkout."""
        return Response(self.booking_service.cancellation_policy())

    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        """Capture payment and confirm."""
        booking = self.booking_service.confirm(pk)
        return Response({
            'success': True,
            'booking': BookingSerializer(booking).data,
        })

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """Reject a pending booking."""
        serializer = BookingRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.booking_service.reject(
            pk,
            reason=serializer.validated_data.get('reason') or None,
        )
        return Response({
            'success': True,
            'booking': BookingSerializer(booking).data,
        })

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel with a customer token, or as an operator with the admin key."""
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        token = serializer.validated_data.get('token') or None

        if token is None and not has_valid_api_key(request):
            raise PermissionDenied('A cancellation token or admin API key is required.')

        booking = self.booking_service.cancel(
            pk,
            token=token,
            reason=serializer.validated_data.get('reason') or None,
        )

        refund_amount = booking.refund_amount
        return Response({
            'success': True,
            'booking': {
                'id': str(booking.id),
                'status': booking.status,
            },
            'refund': {
                'amount': str(refund_amount) if refund_amount is not None else None,
                'id': booking.refund_id,
                'error': (
                    {'code': PaymentRefundFailed.error_code, 'message': booking.refund_error}
                    if booking.refund_error else None
                ),
                'message': describe_refund(
                    refund_amount or 0,
                    booking.total,
                    self.booking_service.policy,
                ),
            },
        })
