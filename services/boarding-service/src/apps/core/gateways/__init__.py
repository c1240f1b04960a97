# services/boarding-service/src/apps/core/gateways/__init__.py
"""
External collaborators: payment provider and token signing.
"""

from .payments import (
    PaymentGateway,
    StripePaymentGateway,
    CaptureResult,
    RefundResult,
    to_minor_units,
)
from .tokens import CancellationTokenSigner

__all__ = [
    'PaymentGateway',
    'StripePaymentGateway',
    'CaptureResult',
    'RefundResult',
    'to_minor_units',
    'CancellationTokenSigner',
]
