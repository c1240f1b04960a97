# services/boarding-service/src/apps/core/notifications.py
"""
Booking Notifications

Port through which the booking service announces lifecycle changes
(received, confirmed, rejected, cancelled). Templates and delivery live
downstream of the published event.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from apps.core.events import EventPublisher
from apps.core.exceptions import NotificationFailed

logger = logging.getLogger(__name__)


def serialize_booking(booking) -> Dict[str, Any]:
    """Full booking snapshot for downstream templates."""
    return {
        'id': booking.id,
        'booking_number': booking.booking_number,
        'service_id': booking.service_id,
        'status': booking.status,
        'date': booking.date,
        'end_date': booking.end_date,
        'quantity': booking.quantity,
        'sizes': booking.sizes,
        'details': booking.details,
        'arrival_time': booking.arrival_time,
        'departure_time': booking.departure_time,
        'contact': {
            'name': booking.contact_name,
            'email': booking.contact_email,
            'phone': booking.contact_phone,
        },
        'total': booking.total,
        'payment_status': booking.payment_status,
        'rejection_reason': booking.rejection_reason,
        'cancellation_reason': booking.cancellation_reason,
        'refund_amount': booking.refund_amount,
        'refund_error': booking.refund_error,
        'cancel_token': booking.cancel_token,
    }


class BookingNotifier(ABC):
    """Notification port. Implementations may raise; callers swallow."""

    @abstractmethod
    def notify(self, event_type: str, booking) -> None:
        ...


class EventPublisherNotifier(BookingNotifier):
    """Publishes each lifecycle change through the event publisher."""

    def __init__(self, publisher: Optional[EventPublisher] = None):
        self.publisher = publisher or EventPublisher()

    def notify(self, event_type: str, booking) -> None:
        published = self.publisher.publish(
            event_type,
            payload=serialize_booking(booking),
        )
        if not published and self.publisher.enabled:
            raise NotificationFailed(
                f"Could not publish {event_type} for booking {booking.id}"
            )
