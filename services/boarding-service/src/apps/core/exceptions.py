# services/boarding-service/src/apps/core/exceptions.py
"""
Boarding Service Exceptions

Domain errors raised by the service layer. Each carries a stable
``error_code`` and the HTTP status the API maps it to.
"""

from typing import Any, Dict, Optional

from rest_framework import status

from shared.common.exceptions import BaseServiceException


class BoardingServiceError(BaseServiceException):
    """Base exception for boarding service errors."""
    pass


class BookingValidationError(BoardingServiceError):
    """Missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid booking request.'
    error_code = 'VALIDATION_ERROR'


class BookingNotFoundError(BoardingServiceError):
    """Booking not found."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Booking not found.'
    error_code = 'NOT_FOUND'


class InvalidStateTransition(BoardingServiceError):
    """The booking lifecycle does not allow the requested move."""
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Invalid booking state transition.'
    error_code = 'INVALID_STATE_TRANSITION'

    def __init__(self, current_status: str, requested_status: str, message: Optional[str] = None):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            message or f"Booking is {current_status}, cannot move to {requested_status}",
            extra_data={
                'current_status': current_status,
                'requested_status': requested_status,
            }
        )


class InvalidTokenError(BoardingServiceError):
    """Cancellation token is invalid, expired or for another booking."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'The cancellation link is invalid or has expired.'
    error_code = 'INVALID_TOKEN'


class AccessDenied(BoardingServiceError):
    """Caller may not read this booking."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have permission to view this booking.'
    error_code = 'FORBIDDEN'


class CapacityConflictError(BoardingServiceError):
    """Requested quantity does not fit on one or more days."""
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Capacity not available.'
    error_code = 'CAPACITY_CONFLICT'

    def __init__(self, message: Optional[str] = None, shortfall: Optional[list] = None):
        self.shortfall = shortfall or []
        super().__init__(message, extra_data={'unavailable_dates': self.shortfall})


class PaymentGatewayError(BoardingServiceError):
    """Payment provider call failed."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Payment provider error.'
    error_code = 'PAYMENT_GATEWAY_ERROR'


class PaymentCaptureFailed(BoardingServiceError):
    """Capture was declined or errored; the booking stays pending."""
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = 'Payment capture failed.'
    error_code = 'PAYMENT_CAPTURE_FAILED'


class PaymentRefundFailed(BoardingServiceError):
    """Refund call failed; recorded on the booking."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Refund failed.'
    error_code = 'PAYMENT_REFUND_FAILED'


class NotificationFailed(BoardingServiceError):
    """Notifier failed; logged, never propagated."""
    default_message = 'Notification failed.'
    error_code = 'NOTIFICATION_FAILED'


def validation_error(message: str, code: str = 'VALIDATION_ERROR', **details: Any) -> BookingValidationError:
    """Build a BookingValidationError with a specific sub-code."""
    extra: Dict[str, Any] = dict(details)
    return BookingValidationError(message, error_code=code, extra_data=extra)
