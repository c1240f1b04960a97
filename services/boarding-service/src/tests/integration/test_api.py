# services/boarding-service/src/tests/integration/test_api.py
"""
Integration Tests for Boarding API

Tests API endpoints with full request/response cycle.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch, MagicMock

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.gateways import CancellationTokenSigner
from apps.core.models import Booking, CapacityHold


@pytest.mark.django_db
class TestCapacityAPI:
    """Integration tests for capacity endpoints."""

    def setup_method(self):
        """Set up test client."""
        self.client = APIClient()

    def test_check_available(self, future_date):
        response = self.client.get('/api/v1/capacity/check/', {
            'start_date': future_date.isoformat(),
            'end_date': (future_date + timedelta(days=1)).isoformat(),
            'quantity': 2,
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['available'] is True
        assert len(response.data['capacity_by_day']) == 2
        assert response.data['capacity_by_day'][0]['slots_available'] == 5

    def test_check_capacity_exceeded(self, create_booking, future_date):
        create_booking(date=future_date, quantity=4)

        response = self.client.get('/api/v1/capacity/check/', {
            'start_date': future_date.isoformat(),
            'quantity': 2,
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['available'] is False
        assert response.data['code'] == 'CAPACITY_EXCEEDED'
        assert response.data['unavailable_dates'][0]['available'] == 1

    def test_check_large_animal(self, create_booking, future_date):
        create_booking(date=future_date, sizes=['Gros chien'])
        create_booking(date=future_date, sizes=['Gros chien'])

        response = self.client.get('/api/v1/capacity/check/', {
            'start_date': future_date.isoformat(),
            'has_large_animal': 'true',
        })

        assert response.data['code'] == 'LARGE_DOG_LIMIT'

    def test_check_validation_error(self):
        response = self.client.get('/api/v1/capacity/check/', {'start_date': 'soon'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert response.data['error']['code'] == 'VALIDATION_ERROR'
        assert 'start_date' in response.data['error']['details']

    def test_calendar(self, create_booking, future_date):
        create_booking(date=future_date, quantity=5)

        response = self.client.get('/api/v1/capacity/calendar/', {
            'month': future_date.month,
            'year': future_date.year,
        })

        assert response.status_code == status.HTTP_200_OK
        by_date = {entry['date']: entry for entry in response.data['calendar']}
        assert by_date[future_date.isoformat()]['status'] == 'full'
        assert response.data['max_capacity'] == 5

    def test_calendar_requires_month(self):
        response = self.client.get('/api/v1/capacity/calendar/', {'year': 2030})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reserve_and_release_hold(self, future_date, session_id):
        response = self.client.post('/api/v1/capacity/holds/', {
            'dates': [future_date.isoformat()],
            'quantity': 2,
            'session_id': session_id,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        assert response.data['dates'] == [future_date.isoformat()]
        assert 0 < response.data['expires_in'] <= 15 * 60
        hold_id = response.data['reservation_id']

        response = self.client.delete(f'/api/v1/capacity/holds/{hold_id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True}
        assert CapacityHold.objects.count() == 0

    def test_release_unknown_hold_succeeds(self):
        response = self.client.delete('/api/v1/capacity/holds/not-a-real-id/')

        assert response.status_code == status.HTTP_200_OK

    def test_reserve_hold_conflict(self, create_booking, future_date, session_id):
        create_booking(date=future_date, quantity=5)

        response = self.client.post('/api/v1/capacity/holds/', {
            'dates': [future_date.isoformat()],
            'quantity': 1,
            'session_id': session_id,
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'CAPACITY_CONFLICT'
        assert response.data['error']['details']['unavailable_dates'][0]['available'] == 0

    def test_price_quote(self, future_date):
        response = self.client.post('/api/v1/pricing/quote/', {
            'service_id': 'sejour',
            'start_date': future_date.isoformat(),
            'end_date': (future_date + timedelta(days=2)).isoformat(),
            'quantity': 2,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == '142.50'
        assert response.data['discount'] == '7.50'
        assert response.data['currency'] == 'eur'

    def test_price_quote_flash_needs_times(self, future_date):
        response = self.client.post('/api/v1/pricing/quote/', {
            'service_id': 'flash',
            'start_date': future_date.isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'TIMES_REQUIRED'


@pytest.mark.django_db
class TestBookingAPI:
    """Integration tests for booking endpoints."""

    def setup_method(self):
        """Set up test client."""
        self.client = APIClient()

    def test_create_booking(self, sample_booking_data):
        response = self.client.post('/api/v1/bookings/', sample_booking_data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        booking = response.data['booking']
        assert booking['status'] == 'pending'
        assert booking['total'] == '75.00'
        assert booking['contact'] == {'name': 'Claire Martin', 'email': 'claire.martin@example.com'}
        assert booking['booking_number'].startswith('PB-')
        assert 'payment_method_id' not in booking
        assert Booking.objects.count() == 1

    def test_create_booking_releases_session_hold(self, sample_booking_data, future_date):
        self.client.post('/api/v1/capacity/holds/', {
            'dates': [future_date.isoformat()],
            'quantity': 5,
            'session_id': sample_booking_data['session_id'],
        }, format='json')

        response = self.client.post('/api/v1/bookings/', sample_booking_data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert CapacityHold.objects.count() == 0

    def test_create_booking_blocked_by_other_hold(self, sample_booking_data, future_date):
        self.client.post('/api/v1/capacity/holds/', {
            'dates': [future_date.isoformat()],
            'quantity': 5,
            'session_id': 'sess_someone_else',
        }, format='json')

        response = self.client.post('/api/v1/bookings/', sample_booking_data, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['details']['code'] == 'CAPACITY_EXCEEDED'

    def test_create_booking_validation_error(self, sample_booking_data):
        sample_booking_data['contact_email'] = 'not-an-email'

        response = self.client.post('/api/v1/bookings/', sample_booking_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'contact_email' in response.data['error']['details']

    def test_retrieve_by_email(self, create_booking, future_date):
        booking = create_booking(date=future_date)

        response = self.client.get(f'/api/v1/bookings/{booking.id}/', {'email': 'OWNER@example.com'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booking']['id'] == str(booking.id)

    def test_retrieve_wrong_email_forbidden(self, create_booking, future_date):
        booking = create_booking(date=future_date)

        response = self.client.get(f'/api/v1/bookings/{booking.id}/', {'email': 'intruder@example.com'})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error']['code'] == 'FORBIDDEN'

    def test_retrieve_unknown_booking(self):
        response = self.client.get(
            '/api/v1/bookings/00000000-0000-0000-0000-000000000000/',
            {'email': 'owner@example.com'}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_cancel_policy(self):
        response = self.client.get('/api/v1/bookings/cancel-policy/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['policy']['free_cancellation_days'] == 3
        assert 'fr' in response.data['description']

    def test_by_email_requires_admin_key(self, create_booking):
        create_booking()

        response = self.client.get('/api/v1/bookings/by-email/owner@example.com/')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_by_email(self, create_booking, admin_headers):
        create_booking()
        create_booking()

        response = self.client.get('/api/v1/bookings/by-email/owner@example.com/', **admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['bookings']) == 2


@pytest.mark.django_db
class TestBookingDecisionAPI:
    """Integration tests for operator decisions and cancellation."""

    def setup_method(self):
        """Set up test client."""
        self.client = APIClient()

    def test_confirm_requires_admin_key(self, create_booking):
        booking = create_booking()

        response = self.client.post(f'/api/v1/bookings/{booking.id}/confirm/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Booking.objects.get(id=booking.id).status == Booking.Status.PENDING

    def test_confirm_wrong_admin_key(self, create_booking):
        booking = create_booking()

        response = self.client.post(f'/api/v1/bookings/{booking.id}/confirm/', HTTP_X_API_KEY='wrong')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @patch('stripe.PaymentIntent.create')
    def test_confirm(self, mock_create, create_booking, admin_headers):
        mock_create.return_value = MagicMock(id='pi_live_1', status='succeeded')
        booking = create_booking(total=Decimal('75.00'))

        response = self.client.post(f'/api/v1/bookings/{booking.id}/confirm/', **admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booking']['status'] == 'confirmed'
        assert response.data['booking']['payment_status'] == 'paid'
        assert mock_create.call_args.kwargs['amount'] == 7500

        booking.refresh_from_db()
        assert booking.payment_id == 'pi_live_1'
        assert booking.cancel_token

    @patch('stripe.PaymentIntent.create')
    def test_confirm_declined(self, mock_create, create_booking, admin_headers):
        import stripe

        mock_create.side_effect = stripe.CardError('Your card was declined.', 'payment_method', 'card_declined')
        booking = create_booking()

        response = self.client.post(f'/api/v1/bookings/{booking.id}/confirm/', **admin_headers)

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
        assert response.data['error']['code'] == 'PAYMENT_CAPTURE_FAILED'
        booking.refresh_from_db()
        assert booking.status == Booking.Status.PENDING
        assert booking.payment_error

    def test_confirm_already_confirmed(self, create_paid_booking, admin_headers):
        booking = create_paid_booking()

        response = self.client.post(f'/api/v1/bookings/{booking.id}/confirm/', **admin_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'INVALID_STATE_TRANSITION'

    def test_reject(self, create_booking, admin_headers):
        booking = create_booking()

        response = self.client.post(
            f'/api/v1/bookings/{booking.id}/reject/',
            {'reason': 'No room for a second husky'},
            format='json',
            **admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booking']['status'] == 'rejected'
        assert response.data['booking']['rejection_reason'] == 'No room for a second husky'

    @patch('stripe.Refund.create')
    def test_cancel_with_token(self, mock_refund, create_paid_booking, future_date):
        mock_refund.return_value = MagicMock(id='re_live_1', status='succeeded')
        booking = create_paid_booking(date=future_date)
        token = CancellationTokenSigner().mint_cancel_token(booking.id)

        response = self.client.post(
            f'/api/v1/bookings/{booking.id}/cancel/',
            {'token': token},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booking']['status'] == 'cancelled'
        assert response.data['refund'] == {
            'amount': '100.00',
            'id': 're_live_1',
            'error': None,
            'message': 'Full refund processed',
        }
        assert mock_refund.call_args.kwargs['amount'] == 10000

    def test_cancel_with_invalid_token(self, create_paid_booking, future_date):
        booking = create_paid_booking(date=future_date)

        response = self.client.post(
            f'/api/v1/bookings/{booking.id}/cancel/',
            {'token': 'garbage'},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error']['code'] == 'INVALID_TOKEN'
        assert Booking.objects.get(id=booking.id).status == Booking.Status.CONFIRMED

    def test_cancel_without_token_or_key(self, create_booking, future_date):
        booking = create_booking(date=future_date)

        response = self.client.post(f'/api/v1/bookings/{booking.id}/cancel/', {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_operator_cancel_unpaid(self, create_booking, admin_headers, future_date):
        booking = create_booking(date=future_date)

        response = self.client.post(
            f'/api/v1/bookings/{booking.id}/cancel/',
            {'reason': 'Owner called'},
            format='json',
            **admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['refund']['amount'] is None
        assert response.data['refund']['message'] == 'No refund according to the cancellation policy'

    def test_cancel_twice_conflicts(self, create_booking, admin_headers, future_date):
        booking = create_booking(date=future_date)
        self.client.post(f'/api/v1/bookings/{booking.id}/cancel/', {}, format='json', **admin_headers)

        response = self.client.post(f'/api/v1/bookings/{booking.id}/cancel/', {}, format='json', **admin_headers)

        assert response.status_code == status.HTTP_409_CONFLICT

    @patch('stripe.Refund.create')
    def test_cancel_refund_failure_reports_code(self, mock_refund, create_paid_booking, admin_headers, future_date):
        import stripe

        mock_refund.side_effect = stripe.InvalidRequestError('Charge already refunded', 'charge')
        booking = create_paid_booking(date=future_date)

        response = self.client.post(f'/api/v1/bookings/{booking.id}/cancel/', {}, format='json', **admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booking']['status'] == 'cancelled'
        assert response.data['refund']['id'] is None
        assert response.data['refund']['error']['code'] == 'PAYMENT_REFUND_FAILED'
        assert 'Charge already refunded' in response.data['refund']['error']['message']


@pytest.mark.django_db
class TestRateLimiting:
    """Confirm and cancel share a 10 per hour limit per client."""

    def setup_method(self):
        """Set up test client."""
        self.client = APIClient()

    def test_payment_actions_are_throttled(self, admin_headers):
        unknown = '00000000-0000-0000-0000-000000000000'

        statuses = [
            self.client.post(f'/api/v1/bookings/{unknown}/confirm/', **admin_headers).status_code
            for _ in range(5)
        ] + [
            self.client.post(f'/api/v1/bookings/{unknown}/cancel/', {}, format='json', **admin_headers).status_code
            for _ in range(5)
        ]
        response = self.client.post(f'/api/v1/bookings/{unknown}/confirm/', **admin_headers)

        assert statuses == [status.HTTP_404_NOT_FOUND] * 10
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.data['error']['code'] == 'RATE_LIMITED'

    def test_other_endpoints_keep_working(self, admin_headers):
        unknown = '00000000-0000-0000-0000-000000000000'
        for _ in range(11):
            self.client.post(f'/api/v1/bookings/{unknown}/confirm/', **admin_headers)

        response = self.client.get('/api/v1/bookings/cancel-policy/')

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestHealthAndMiddleware:
    """Tests for the health probe and request tracing."""

    def test_health(self):
        response = APIClient().get('/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'ok'

    def test_request_id_echoed(self):
        response = APIClient().get('/api/v1/bookings/cancel-policy/', HTTP_X_REQUEST_ID='req-abc')

        assert response['X-Request-ID'] == 'req-abc'
        assert 'X-Response-Time' in response

    def test_malformed_request_id_replaced(self):
        response = APIClient().get('/api/v1/bookings/cancel-policy/', HTTP_X_REQUEST_ID='bad id\nInjected: 1')

        assert response['X-Request-ID'] != 'bad id\nInjected: 1'
        assert len(response['X-Request-ID']) == 36
