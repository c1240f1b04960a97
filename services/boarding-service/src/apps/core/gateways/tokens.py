# services/boarding-service/src/apps/core/gateways/tokens.py
"""
Cancellation Tokens

Signed JWTs (HS256) that let a customer cancel or view their own booking
from an e-mailed link.
"""

import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Dict, Optional

import jwt
from django.conf import settings

logger = logging.getLogger(__name__)

CANCEL_TOKEN_TYPE = 'cancel'


class CancellationTokenSigner:
    """
    Sign and verify self-service tokens.

    ``verify`` never raises: bad signature, expiry and malformed input all
    return None.
    """

    algorithm = 'HS256'
    issuer = 'boarding-service'

    def __init__(self, secret: Optional[str] = None, ttl: Optional[timedelta] = None):
        self.secret = secret or getattr(settings, 'CANCEL_TOKEN_SECRET', None) or settings.SECRET_KEY
        if ttl is None:
            from apps.core.policy import get_policy
            ttl = timedelta(days=get_policy().cancel_token_ttl_days)
        self.ttl = ttl

    def sign(self, payload: Dict[str, Any], ttl: Optional[timedelta] = None) -> str:
        now = datetime.now(dt_timezone.utc)
        claims = dict(payload)
        claims.update({
            'iat': now,
            'exp': now + (self.ttl if ttl is None else ttl),
            'iss': self.issuer,
        })
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        if not token:
            return None
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
            )
        except jwt.ExpiredSignatureError:
            logger.info("Expired cancellation token presented")
            return None
        except jwt.PyJWTError as e:
            logger.warning(f"Invalid cancellation token: {e}")
            return None

    def mint_cancel_token(self, booking_id) -> str:
        return self.sign({'bookingId': str(booking_id), 'type': CANCEL_TOKEN_TYPE})

    def verify_cancel_token(self, token: str, booking_id) -> bool:
        """True when the token is valid, of type cancel, and names this booking."""
        payload = self.verify(token)
        if not payload:
            return False
        return (
            payload.get('type') == CANCEL_TOKEN_TYPE
            and payload.get('bookingId') == str(booking_id)
        )
