# services/boarding-service/src/apps/core/models/booking.py
"""
Booking Model

Boarding reservations for dogs and cats, with the status workflow
and payment/refund bookkeeping.
"""

import uuid
from typing import Dict, FrozenSet

from django.db import models
from django.utils import timezone

from shared.common.utils import generate_code, to_date


SERVICE_ALIASES = {
    '1': 'flash',
    '2': 'sejour',
    '3': 'felin',
    'séjour': 'sejour',
    'félin': 'felin',
}


def normalize_service_id(value) -> str:
    """Normalise a service identifier: numeric aliases map to their names."""
    if value is None:
        return ''
    key = str(value).strip().lower()
    return SERVICE_ALIASES.get(key, key)


class Booking(models.Model):
    """
    Boarding reservation covering every day in ``[date, end_date]``.

    A single-day booking has ``end_date == date``.
    """

    class Service(models.TextChoices):
        FLASH = 'flash', 'Formule Flash'
        SEJOUR = 'sejour', 'Formule Séjour'
        FELIN = 'felin', 'Formule Félin'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        REJECTED = 'rejected', 'Rejected'
        CANCELLED = 'cancelled', 'Cancelled'

    class PaymentStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PAID = 'paid', 'Paid'
        REFUNDED = 'refunded', 'Refunded'

    TRANSITIONS: Dict[str, FrozenSet[str]] = {
        Status.PENDING: frozenset({Status.CONFIRMED, Status.REJECTED, Status.CANCELLED}),
        Status.CONFIRMED: frozenset({Status.CANCELLED}),
        Status.REJECTED: frozenset(),
        Status.CANCELLED: frozenset(),
    }

    # Statuses that consume capacity
    ACTIVE_STATUSES = (Status.PENDING, Status.CONFIRMED)

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Booking Number
    booking_number = models.CharField(max_length=20, unique=True, db_index=True)

    # Service
    service_id = models.CharField(max_length=50, db_index=True)

    # Stay
    date = models.DateField(db_index=True)
    end_date = models.DateField(db_index=True)
    quantity = models.PositiveIntegerField(default=1)
    arrival_time = models.CharField(max_length=5, blank=True, null=True)
    departure_time = models.CharField(max_length=5, blank=True, null=True)

    # Animals
    sizes = models.JSONField(default=list, blank=True)
    details = models.JSONField(default=list, blank=True)
    is_sterilized = models.BooleanField(default=False)

    # Contact
    contact_name = models.CharField(max_length=255)
    contact_email = models.EmailField(db_index=True)
    contact_phone = models.CharField(max_length=50, blank=True, null=True)

    # Pricing
    total = models.DecimalField(max_digits=10, decimal_places=2)

    # Payment
    payment_method_id = models.CharField(max_length=255, blank=True, null=True)
    payment_id = models.CharField(max_length=255, blank=True, null=True)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    payment_error = models.TextField(blank=True, null=True)
    payment_error_at = models.DateTimeField(blank=True, null=True)

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    confirmed_at = models.DateTimeField(blank=True, null=True)
    rejected_at = models.DateTimeField(blank=True, null=True)
    rejection_reason = models.TextField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancellation_reason = models.TextField(blank=True, null=True)

    # Refund
    refund_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True
    )
    refund_id = models.CharField(max_length=255, blank=True, null=True)
    refund_error = models.TextField(blank=True, null=True)

    # Self-service
    cancel_token = models.TextField(blank=True, null=True)
    session_id = models.CharField(max_length=255, blank=True, null=True, db_index=True)

    # Audit
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['date', 'created_at']
        indexes = [
            models.Index(fields=['status', 'date', 'end_date']),
            models.Index(fields=['contact_email', 'created_at']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F('date')),
                name='valid_booking_dates'
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name='booking_quantity_positive'
            ),
        ]

    def __str__(self):
        return f"{self.booking_number}: {self.date} → {self.end_date} ({self.status})"

    def save(self, *args, **kwargs):
        # Generate booking number
        if not self.booking_number:
            self.booking_number = self._generate_booking_number()

        self.service_id = normalize_service_id(self.service_id)
        self.date = to_date(self.date)
        self.end_date = to_date(self.end_date) or self.date
        if self.contact_email:
            self.contact_email = self.contact_email.strip().lower()

        # Total is fixed at creation
        if not self._state.adding:
            stored = (
                Booking.objects.filter(pk=self.pk)
                .values_list('total', flat=True)
                .first()
            )
            if stored is not None and stored != self.total:
                raise ValueError("Booking total cannot be changed after creation")

        super().save(*args, **kwargs)

    def _generate_booking_number(self) -> str:
        """Generate a unique booking number."""
        date_str = timezone.now().strftime('%Y%m%d')
        return generate_code(prefix=f"PB-{date_str}-", length=6)

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def days(self) -> int:
        """Number of covered days, inclusive."""
        return (self.end_date - self.date).days + 1

    @property
    def service_name(self) -> str:
        if self.service_id in self.Service.values:
            return self.Service(self.service_id).label
        return self.service_id

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PaymentStatus.PAID and bool(self.payment_id)

    @property
    def can_cancel(self) -> bool:
        """Check if booking can be cancelled."""
        return self.Status.CANCELLED in self.TRANSITIONS.get(self.status, ())

    def covers(self, day) -> bool:
        """Check if the stay includes ``day``."""
        return self.date <= day <= (self.end_date or self.date)

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, ())

    def transition_to(self, new_status: str):
        """
        Move to ``new_status`` and stamp the matching timestamp.

        Does not save; the caller persists the changed fields.
        """
        from apps.core.exceptions import InvalidStateTransition

        if not self.can_transition_to(new_status):
            raise InvalidStateTransition(self.status, new_status)

        now = timezone.now()
        self.status = new_status
        if new_status == self.Status.CONFIRMED:
            self.confirmed_at = now
        elif new_status == self.Status.REJECTED:
            self.rejected_at = now
        elif new_status == self.Status.CANCELLED:
            self.cancelled_at = now

        return ['status', f"{new_status}_at", 'updated_at']
