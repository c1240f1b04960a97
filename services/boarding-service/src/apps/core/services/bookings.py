# services/boarding-service/src/apps/core/services/bookings.py
"""
Booking Service

Checkout, operator decisions and customer cancellation for boarding
bookings.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from django.db import transaction
from django.utils import timezone

from shared.common.utils import is_valid_email, iter_days, mask_email, to_date

from apps.core.events import EventType
from apps.core.gateways import (
    CancellationTokenSigner,
    PaymentGateway,
    StripePaymentGateway,
)
from apps.core.models import Booking
from apps.core.notifications import BookingNotifier, EventPublisherNotifier
from apps.core.policy import BoardingPolicy, get_policy
from apps.core.repositories import BookingRepository, CapacityLockRepository
from .availability import AvailabilityCode, AvailabilityService
from .capacity import capacity_pool
from .holds import HoldService
from .pricing import compute_price
from .refunds import describe_policy, refund_for

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = 'Capacity not available'
DEFAULT_CANCELLATION_REASON = 'Cancelled by customer'


class BookingService:
    """
    Service for the booking lifecycle.

    Handles:
    - Checkout (create)
    - Confirm with payment capture
    - Reject
    - Cancel with refund
    - Customer lookups
    """

    def __init__(
        self,
        repository: BookingRepository = None,
        payment_gateway: PaymentGateway = None,
        token_signer: CancellationTokenSigner = None,
        notifier: BookingNotifier = None,
        availability_service: AvailabilityService = None,
        hold_service: HoldService = None,
        policy: BoardingPolicy = None
    ):
        self.policy = policy or get_policy()
        self.repository = repository or BookingRepository()
        self.payment_gateway = payment_gateway or StripePaymentGateway()
        self.token_signer = token_signer or CancellationTokenSigner()
        self.notifier = notifier or EventPublisherNotifier()
        self.availability_service = availability_service or AvailabilityService(
            repository=self.repository,
            policy=self.policy,
        )
        self.hold_service = hold_service or HoldService(
            repository=self.repository,
            policy=self.policy,
        )
        self.lock_repository = CapacityLockRepository()

    # ==========================================================================
    # Checkout
    # ==========================================================================

    def create_booking(
        self,
        service_id,
        start_date,
        end_date=None,
        quantity: int = 1,
        contact_name: str = None,
        contact_email: str = None,
        contact_phone: str = None,
        sizes: Sequence[str] = (),
        details: Sequence[Dict[str, Any]] = (),
        arrival_time: str = None,
        departure_time: str = None,
        is_sterilized: bool = False,
        payment_method_id: str = None,
        session_id: str = None,
        *,
        now: Optional[datetime] = None,
        strict: Optional[bool] = None
    ) -> Booking:
        """Price, re-check capacity and persist a pending booking."""
        from . import BookingValidationError

        # 1. Contact validation
        if not contact_name or not str(contact_name).strip():
            raise BookingValidationError("contact_name is required", extra_data={'field': 'contact_name'})
        if not contact_email or not is_valid_email(contact_email):
            raise BookingValidationError("A valid contact_email is required", extra_data={'field': 'contact_email'})

        # 2. Price (validates dates, quantity and visit times)
        quote = compute_price(
            service_id,
            start_date,
            end_date,
            quantity,
            arrival_time,
            departure_time,
            sizes,
            tariffs=self.policy.tariffs,
        )
        start = to_date(start_date)
        end = to_date(end_date) or start
        quantity = int(quantity)
        now = now or timezone.now()
        strict = self.policy.strict_holds if strict is None else strict

        fields = dict(
            service_id=service_id,
            date=start,
            end_date=end,
            quantity=quantity,
            sizes=list(sizes or []),
            details=list(details or []),
            contact_name=str(contact_name).strip(),
            contact_email=contact_email.strip().lower(),
            contact_phone=contact_phone,
            arrival_time=arrival_time or None,
            departure_time=departure_time or None,
            is_sterilized=bool(is_sterilized),
            total=quote.total,
            payment_method_id=payment_method_id,
            payment_status=Booking.PaymentStatus.PENDING,
            status=Booking.Status.PENDING,
            session_id=session_id,
        )

        # 3. Re-check capacity and insert
        if strict:
            with transaction.atomic():
                self.lock_repository.lock_days(
                    capacity_pool(service_id),
                    iter_days(start, end),
                )
                self._ensure_available(start, end, quantity, service_id, sizes, now, session_id)
                booking = self.repository.create(**fields)
        else:
            self._ensure_available(start, end, quantity, service_id, sizes, now, session_id)
            booking = self.repository.create(**fields)

        # 4. The booking now carries the capacity the hold was protecting
        self.hold_service.release_session_holds(session_id)

        logger.info(
            f"Created booking {booking.booking_number} for {booking.date} → {booking.end_date}",
            extra={
                'booking_id': str(booking.id),
                'service_id': booking.service_id,
                'quantity': booking.quantity,
                'total': str(booking.total),
                'contact_email': mask_email(booking.contact_email),
            }
        )

        self._notify(EventType.BOOKING_RECEIVED, booking)
        return booking

    def _ensure_available(self, start, end, quantity, service_id, sizes, now, session_id):
        from . import CapacityConflictError, validation_error

        large_tags = self.policy.capacity.large_size_tags
        result = self.availability_service.check_availability(
            start,
            end,
            quantity,
            has_large_animal=any(size in large_tags for size in (sizes or ())),
            service_id=service_id,
            now=now,
            exclude_session_id=session_id,
        )
        if result.available:
            return

        if result.code == AvailabilityCode.TOO_LATE:
            raise validation_error(result.reason, code=AvailabilityCode.TOO_LATE)

        error = CapacityConflictError(
            result.reason,
            shortfall=result.unavailable_dates or result.large_animal_unavailable_dates,
        )
        error.extra_data['code'] = result.code
        raise error

    # ==========================================================================
    # Operator Decisions
    # ==========================================================================

    def confirm(self, booking_id) -> Booking:
        """
        Capture payment and confirm a pending booking.

        Safe to retry: a booking whose payment was already captured is not
        charged again.
        """
        from . import (
            InvalidStateTransition,
            PaymentCaptureFailed,
            PaymentGatewayError,
            validation_error,
        )

        booking = self.get_booking(booking_id)
        if booking.status != Booking.Status.PENDING:
            raise InvalidStateTransition(booking.status, Booking.Status.CONFIRMED)

        if not booking.is_paid:
            if not booking.payment_method_id:
                raise validation_error(
                    "This booking has no payment method",
                    code='PAYMENT_METHOD_REQUIRED',
                    booking_id=str(booking.id),
                )

            try:
                result = self.payment_gateway.capture(
                    booking.payment_method_id,
                    booking.total,
                    self.policy.currency,
                    metadata={
                        'booking_id': str(booking.id),
                        'booking_number': booking.booking_number,
                        'service_id': booking.service_id,
                    },
                    idempotency_key=f"booking-{booking.id}-capture",
                )
            except PaymentGatewayError as e:
                booking.payment_error = e.message
                booking.payment_error_at = timezone.now()
                self.repository.save(booking, ['payment_error', 'payment_error_at'])
                logger.error(
                    f"Payment capture failed for booking {booking.booking_number}: {e.message}",
                    extra={'booking_id': str(booking.id)}
                )
                raise PaymentCaptureFailed(
                    e.message,
                    extra_data={'booking_id': str(booking.id), **e.extra_data}
                )

            # Persist the capture before anything else can fail
            booking.payment_id = result.payment_id
            booking.payment_status = Booking.PaymentStatus.PAID
            booking.payment_error = None
            self.repository.save(booking, ['payment_id', 'payment_status', 'payment_error'])
            logger.info(
                f"Payment captured for booking {booking.booking_number}",
                extra={
                    'booking_id': str(booking.id),
                    'payment_id': result.payment_id,
                    'amount_minor': result.amount_minor,
                }
            )
        else:
            logger.info(
                f"Payment already captured for booking {booking.booking_number}, skipping capture",
                extra={'booking_id': str(booking.id), 'payment_id': booking.payment_id}
            )

        fields = booking.transition_to(Booking.Status.CONFIRMED)
        booking.cancel_token = self.token_signer.mint_cancel_token(booking.id)
        self.repository.save(booking, fields + ['cancel_token'])

        logger.info(
            f"Confirmed booking {booking.booking_number}",
            extra={'booking_id': str(booking.id)}
        )

        self._notify(EventType.BOOKING_CONFIRMED, booking)
        return booking

    def reject(self, booking_id, reason: str = None) -> Booking:
        """Reject a pending booking. No payment was taken, none is returned."""
        from . import InvalidStateTransition

        booking = self.get_booking(booking_id)
        if booking.status != Booking.Status.PENDING:
            raise InvalidStateTransition(booking.status, Booking.Status.REJECTED)

        fields = booking.transition_to(Booking.Status.REJECTED)
        booking.rejection_reason = reason or DEFAULT_REJECTION_REASON
        self.repository.save(booking, fields + ['rejection_reason'])

        logger.info(
            f"Rejected booking {booking.booking_number}: {booking.rejection_reason}",
            extra={'booking_id': str(booking.id)}
        )

        self._notify(EventType.BOOKING_REJECTED, booking)
        return booking

    # ==========================================================================
    # Cancellation
    # ==========================================================================

    def cancel(
        self,
        booking_id,
        token: str = None,
        reason: str = None,
        *,
        now: Optional[datetime] = None
    ) -> Booking:
        """
        Cancel a pending or confirmed booking, refunding per policy.

        A failed refund is recorded on the booking and does not block the
        cancellation.
        """
        from . import (
            InvalidStateTransition,
            InvalidTokenError,
            PaymentGatewayError,
            PaymentRefundFailed,
        )

        booking = self.get_booking(booking_id)

        if token is not None and not self.token_signer.verify_cancel_token(token, booking.id):
            logger.warning(
                f"Rejected cancellation token for booking {booking.booking_number}",
                extra={'booking_id': str(booking.id)}
            )
            raise InvalidTokenError()

        if not booking.can_transition_to(Booking.Status.CANCELLED):
            raise InvalidStateTransition(booking.status, Booking.Status.CANCELLED)

        now = now or timezone.now()
        changed = ['cancellation_reason']

        if booking.is_paid:
            refund_amount = refund_for(booking.total, booking.date, now, policy=self.policy)
            booking.refund_amount = refund_amount
            booking.refund_id = None
            booking.refund_error = None

            if refund_amount > 0:
                try:
                    result = self.payment_gateway.refund(
                        booking.payment_id,
                        refund_amount,
                        metadata={
                            'booking_id': str(booking.id),
                            'refund_percent': str(round(refund_amount / booking.total * 100)),
                        },
                    )
                    booking.refund_id = result.refund_id
                    logger.info(
                        f"Refund processed for booking {booking.booking_number}: {refund_amount}",
                        extra={'booking_id': str(booking.id), 'refund_id': result.refund_id}
                    )
                except PaymentGatewayError as e:
                    failure = PaymentRefundFailed(e.message)
                    booking.refund_error = failure.message
                    logger.error(
                        f"{failure.error_code} for booking {booking.booking_number}: {failure.message}",
                        extra={
                            'booking_id': str(booking.id),
                            'error_code': failure.error_code,
                            'refund_amount': str(refund_amount),
                        }
                    )
                booking.payment_status = Booking.PaymentStatus.REFUNDED
                changed.append('payment_status')

            changed += ['refund_amount', 'refund_id', 'refund_error']

        fields = booking.transition_to(Booking.Status.CANCELLED)
        booking.cancellation_reason = reason or DEFAULT_CANCELLATION_REASON
        self.repository.save(booking, fields + changed)

        logger.info(
            f"Cancelled booking {booking.booking_number}",
            extra={
                'booking_id': str(booking.id),
                'refund_amount': str(booking.refund_amount) if booking.refund_amount is not None else None,
                'self_service': token is not None,
            }
        )

        self._notify(EventType.BOOKING_CANCELLED, booking)
        return booking

    def cancellation_policy(self) -> Dict[str, Any]:
        return describe_policy(self.policy)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    def get_booking(self, booking_id) -> Booking:
        """Get booking by ID."""
        from . import BookingNotFoundError

        booking = self.repository.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    def get_booking_for_client(self, booking_id, email: str = None, token: str = None) -> Booking:
        """Return the booking when the caller proves ownership by e-mail or token."""
        from . import AccessDenied

        booking = self.get_booking(booking_id)

        if email and booking.contact_email == email.strip().lower():
            return booking
        if token and self.token_signer.verify_cancel_token(token, booking.id):
            return booking

        raise AccessDenied()

    def list_by_email(self, email: str, limit: int = 20) -> List[Booking]:
        from . import BookingValidationError

        if not email:
            raise BookingValidationError("email is required")
        return self.repository.find_by_email(email, limit=limit)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _notify(self, event_type: str, booking: Booking):
        """Send a notification; failures are logged and never raised."""
        try:
            self.notifier.notify(event_type, booking)
        except Exception as e:
            logger.warning(
                f"NOTIFICATION_FAILED {event_type} for booking {booking.booking_number}: {e}",
                extra={'booking_id': str(booking.id), 'event_type': event_type}
            )
