# services/boarding-service/src/apps/core/gateways/payments.py
"""
Payment Gateway

Port used by the booking service to capture and refund payments, and the
Stripe adapter behind it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import stripe
from django.conf import settings

from apps.core.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to integer cents, rounding half-up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CaptureResult:
    payment_id: str
    status: str
    amount_minor: int


@dataclass(frozen=True)
class RefundResult:
    refund_id: str
    status: str
    amount_minor: int


class PaymentGateway(ABC):
    """
    Payment port.

    Implementations raise PaymentGatewayError on any provider failure.
    """

    @abstractmethod
    def capture(
        self,
        payment_method_ref: str,
        amount: Decimal,
        currency: str,
        metadata: Dict[str, Any] = None,
        idempotency_key: str = None
    ) -> CaptureResult:
        """Charge the payment method; return the provider payment id."""

    @abstractmethod
    def refund(
        self,
        payment_id: str,
        amount: Decimal,
        metadata: Dict[str, Any] = None
    ) -> RefundResult:
        """Refund ``amount`` of a captured payment."""


class StripePaymentGateway(PaymentGateway):
    """Stripe adapter: PaymentIntents for capture, Refunds for refunds."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or getattr(settings, 'STRIPE_SECRET_KEY', '')

    def capture(
        self,
        payment_method_ref: str,
        amount: Decimal,
        currency: str,
        metadata: Dict[str, Any] = None,
        idempotency_key: str = None
    ) -> CaptureResult:
        """Create and confirm a PaymentIntent in one call."""
        stripe.api_key = self.api_key
        amount_cents = to_minor_units(amount)

        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_cents,
                currency=currency.lower(),
                payment_method=payment_method_ref,
                confirm=True,
                automatic_payment_methods={
                    'enabled': True,
                    'allow_redirects': 'never',
                },
                metadata=metadata or {},
                idempotency_key=idempotency_key
            )
        except stripe.StripeError as e:
            logger.error(
                f"Stripe charge failed: {e}",
                extra={'idempotency_key': idempotency_key, 'amount_minor': amount_cents}
            )
            raise PaymentGatewayError(
                getattr(e, 'user_message', None) or str(e),
                extra_data={'provider_code': getattr(e, 'code', None)}
            )

        if intent.status not in ('succeeded', 'requires_capture', 'processing'):
            logger.warning(
                f"Stripe PaymentIntent {intent.id} ended in status {intent.status}"
            )
            raise PaymentGatewayError(
                f"Payment not completed (status: {intent.status})",
                extra_data={'payment_id': intent.id, 'status': intent.status}
            )

        return CaptureResult(
            payment_id=intent.id,
            status=intent.status,
            amount_minor=amount_cents,
        )

    def refund(
        self,
        payment_id: str,
        amount: Decimal,
        metadata: Dict[str, Any] = None
    ) -> RefundResult:
        """Refund part or all of a PaymentIntent."""
        stripe.api_key = self.api_key
        amount_cents = to_minor_units(amount)

        try:
            refund = stripe.Refund.create(
                payment_intent=payment_id,
                amount=amount_cents,
                reason='requested_by_customer',
                metadata=metadata or {}
            )
        except stripe.StripeError as e:
            logger.error(
                f"Stripe refund failed: {e}",
                extra={'payment_id': payment_id, 'amount_minor': amount_cents}
            )
            raise PaymentGatewayError(
                f"Stripe refund failed: {e}",
                extra_data={'provider_code': getattr(e, 'code', None)}
            )

        return RefundResult(
            refund_id=refund.id,
            status=refund.status,
            amount_minor=amount_cents,
        )
