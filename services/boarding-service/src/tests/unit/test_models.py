# services/boarding-service/src/tests/unit/test_models.py
"""
Unit Tests for Boarding Models
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from apps.core.exceptions import InvalidStateTransition
from apps.core.models import Booking, CapacityHold, normalize_service_id


class TestNormalizeServiceId:
    """Tests for service identifier aliases."""

    @pytest.mark.parametrize('value, expected', [
        ('1', 'flash'),
        (2, 'sejour'),
        ('3', 'felin'),
        ('Séjour', 'sejour'),
        ('FÉLIN', 'felin'),
        (' flash ', 'flash'),
        ('garde', 'garde'),
        (None, ''),
    ])
    def test_aliases(self, value, expected):
        assert normalize_service_id(value) == expected


@pytest.mark.django_db
class TestBookingModel:
    """Tests for Booking model."""

    def test_booking_creation(self, create_booking, stay_date):
        booking = create_booking(service_id='2', contact_email='Owner@Example.COM')

        assert booking.id is not None
        assert booking.booking_number.startswith('PB-')
        assert len(booking.booking_number) == len('PB-20300610-') + 6
        assert booking.service_id == 'sejour'
        assert booking.contact_email == 'owner@example.com'
        assert booking.end_date == stay_date

    def test_string_dates_are_coerced(self, create_booking):
        booking = create_booking(date='2030-07-01', end_date='2030-07-03')

        assert booking.date == date(2030, 7, 1)
        assert booking.days == 3

    def test_covers(self, create_booking, stay_date):
        booking = create_booking(end_date=stay_date + timedelta(days=1))

        assert booking.covers(stay_date)
        assert booking.covers(stay_date + timedelta(days=1))
        assert not booking.covers(stay_date - timedelta(days=1))
        assert not booking.covers(stay_date + timedelta(days=2))

    def test_service_name(self, create_booking):
        assert create_booking(service_id='felin').service_name == 'Formule Félin'
        assert create_booking(service_id='garde').service_name == 'garde'

    def test_is_paid_needs_payment_id(self, create_booking):
        assert not create_booking(payment_status=Booking.PaymentStatus.PAID).is_paid
        assert create_booking(payment_status=Booking.PaymentStatus.PAID, payment_id='pi_1').is_paid

    def test_total_is_immutable(self, create_booking):
        booking = create_booking(total=Decimal('50.00'))
        booking.total = Decimal('10.00')

        with pytest.raises(ValueError):
            booking.save()

    def test_other_fields_can_change(self, create_booking):
        booking = create_booking()
        booking.contact_phone = '+33 1 23 45 67 89'
        booking.save()

        booking.refresh_from_db()
        assert booking.contact_phone == '+33 1 23 45 67 89'


@pytest.mark.django_db
class TestBookingTransitions:
    """Tests for the status workflow."""

    @pytest.mark.parametrize('current, target, allowed', [
        (Booking.Status.PENDING, Booking.Status.CONFIRMED, True),
        (Booking.Status.PENDING, Booking.Status.REJECTED, True),
        (Booking.Status.PENDING, Booking.Status.CANCELLED, True),
        (Booking.Status.CONFIRMED, Booking.Status.CANCELLED, True),
        (Booking.Status.CONFIRMED, Booking.Status.REJECTED, False),
        (Booking.Status.CONFIRMED, Booking.Status.PENDING, False),
        (Booking.Status.REJECTED, Booking.Status.CONFIRMED, False),
        (Booking.Status.CANCELLED, Booking.Status.CONFIRMED, False),
        (Booking.Status.CANCELLED, Booking.Status.CANCELLED, False),
    ])
    def test_can_transition_to(self, create_booking, current, target, allowed):
        booking = create_booking(status=current)

        assert booking.can_transition_to(target) is allowed

    def test_transition_stamps_timestamp(self, create_booking):
        booking = create_booking()

        fields = booking.transition_to(Booking.Status.CONFIRMED)

        assert booking.status == Booking.Status.CONFIRMED
        assert booking.confirmed_at is not None
        assert fields == ['status', 'confirmed_at', 'updated_at']

    def test_transition_does_not_save(self, create_booking):
        booking = create_booking()
        booking.transition_to(Booking.Status.REJECTED)

        assert Booking.objects.get(id=booking.id).status == Booking.Status.PENDING

    def test_illegal_transition_raises(self, create_booking):
        booking = create_booking(status=Booking.Status.REJECTED)

        with pytest.raises(InvalidStateTransition) as exc_info:
            booking.transition_to(Booking.Status.CONFIRMED)

        assert exc_info.value.current_status == Booking.Status.REJECTED
        assert booking.status == Booking.Status.REJECTED

    def test_can_cancel(self, create_booking):
        assert create_booking(status=Booking.Status.CONFIRMED).can_cancel
        assert not create_booking(status=Booking.Status.CANCELLED).can_cancel


@pytest.mark.django_db
class TestCapacityHoldModel:
    """Tests for CapacityHold model."""

    def test_dates_sorted_with_span(self, create_hold):
        hold = create_hold(dates=['2030-06-12', '2030-06-10', '2030-06-12'], service_id='3')

        assert hold.dates == ['2030-06-10', '2030-06-12']
        assert hold.first_date == date(2030, 6, 10)
        assert hold.last_date == date(2030, 6, 12)
        assert hold.service_id == 'felin'
        assert hold.holds_day(date(2030, 6, 12))
        assert not hold.holds_day(date(2030, 6, 11))

    def test_is_active(self, create_hold, now):
        hold = create_hold(expires_at=now + timedelta(minutes=1))

        assert hold.is_active(now)
        assert not hold.is_active(now + timedelta(minutes=1))

    def test_default_status(self, create_hold):
        assert create_hold().status == CapacityHold.Status.TEMPORARY
