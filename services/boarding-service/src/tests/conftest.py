# services/boarding-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for boarding service tests.
"""

import uuid
from datetime import datetime, date, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from apps.core.gateways import CancellationTokenSigner
from apps.core.policy import BoardingPolicy

from tests.fakes import FakePaymentGateway, RecordingNotifier


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def clear_throttle_cache():
    """Start every test with empty rate-limit counters."""
    cache.clear()
    yield


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


@pytest.fixture
def admin_headers():
    """Provide the operator API key header."""
    return {'HTTP_X_API_KEY': 'test-admin-key'}


@pytest.fixture
def policy():
    """Default boarding policy: 5 dogs, 2 large, 8 cats."""
    return BoardingPolicy()


@pytest.fixture
def now():
    """A fixed instant well before every test stay."""
    return datetime(2030, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def stay_date():
    """First day of the default test stay, nine days after ``now``."""
    return date(2030, 6, 10)


@pytest.fixture
def future_date():
    """A stay date far enough ahead of the real clock for API tests."""
    return timezone.now().date() + timedelta(days=30)


@pytest.fixture
def session_id():
    """Provide a checkout session ID."""
    return f"sess_{uuid.uuid4().hex[:12]}"


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def token_signer():
    return CancellationTokenSigner(
        secret='test-cancel-token-secret-for-testing-only',
        ttl=timedelta(days=7),
    )


@pytest.fixture
def booking_service(payment_gateway, notifier, token_signer, policy):
    """BookingService wired to in-memory collaborators."""
    from apps.core.services import BookingService

    return BookingService(
        payment_gateway=payment_gateway,
        token_signer=token_signer,
        notifier=notifier,
        policy=policy,
    )


@pytest.fixture
def sample_booking_data(future_date, session_id):
    """Provide sample checkout data."""
    return {
        'service_id': 'sejour',
        'start_date': future_date.isoformat(),
        'end_date': (future_date + timedelta(days=2)).isoformat(),
        'quantity': 1,
        'sizes': ['Moyen chien'],
        'details': [{'name': 'Rex', 'breed': 'Labrador', 'age': 4}],
        'contact_name': 'Claire Martin',
        'contact_email': 'Claire.Martin@example.com',
        'contact_phone': '+33 6 12 34 56 78',
        'arrival_time': '09:00',
        'departure_time': '10:00',
        'is_sterilized': True,
        'payment_method_id': 'pm_card_visa',
        'session_id': session_id,
    }


# =============================================================================
# FACTORY FIXTURES
# =============================================================================

@pytest.fixture
def create_booking(stay_date):
    """Factory fixture for creating bookings."""
    from apps.core.models import Booking

    def _create_booking(**kwargs):
        defaults = {
            'service_id': Booking.Service.SEJOUR,
            'date': stay_date,
            'quantity': 1,
            'sizes': [],
            'details': [],
            'contact_name': 'Test Owner',
            'contact_email': 'owner@example.com',
            'total': Decimal('25.00'),
            'payment_method_id': 'pm_card_visa',
            'status': Booking.Status.PENDING,
        }
        defaults.update(kwargs)
        defaults.setdefault('end_date', defaults['date'])

        return Booking.objects.create(**defaults)

    return _create_booking


@pytest.fixture
def create_paid_booking(create_booking):
    """Factory fixture for confirmed, captured bookings."""
    from apps.core.models import Booking

    def _create_paid_booking(**kwargs):
        defaults = {
            'status': Booking.Status.CONFIRMED,
            'payment_status': Booking.PaymentStatus.PAID,
            'payment_id': 'pi_existing',
            'total': Decimal('100.00'),
            'confirmed_at': timezone.now(),
        }
        defaults.update(kwargs)
        return create_booking(**defaults)

    return _create_paid_booking


@pytest.fixture
def create_hold(stay_date, now):
    """Factory fixture for creating capacity holds."""
    from apps.core.models import CapacityHold

    def _create_hold(**kwargs):
        defaults = {
            'session_id': f"sess_{uuid.uuid4().hex[:12]}",
            'service_id': '',
            'dates': [stay_date.isoformat()],
            'quantity': 1,
            'expires_at': now + timedelta(minutes=15),
        }
        defaults.update(kwargs)

        return CapacityHold.objects.create(**defaults)

    return _create_hold
