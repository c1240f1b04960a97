# services/boarding-service/src/apps/core/events.py
"""
Boarding Service Events

Event definitions and publishing for the boarding service.
"""

import json
import logging
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for boarding service."""

    # Booking lifecycle events
    BOOKING_RECEIVED = 'booking.received'
    BOOKING_CONFIRMED = 'booking.confirmed'
    BOOKING_REJECTED = 'booking.rejected'
    BOOKING_CANCELLED = 'booking.cancelled'


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for boarding service.

    Publishes events to the configured backend: ``log`` (default) or
    ``webhook``.
    """

    def __init__(self, backend: Optional[str] = None, webhook_url: Optional[str] = None):
        self.service_name = 'boarding-service'
        self.enabled = getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)
        self.backend = backend or getattr(settings, 'EVENT_BACKEND', 'log')
        self.webhook_url = webhook_url or getattr(settings, 'EVENT_WEBHOOK_URL', None)
        self.timeout = httpx.Timeout(5.0, connect=2.0)

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        correlation_id: str = None,
        metadata: Dict[str, Any] = None
    ) -> bool:
        """
        Publish an event.

        Args:
            event_type: Type of event (e.g., 'booking.confirmed')
            payload: Event data
            correlation_id: Optional correlation ID for tracing
            metadata: Additional metadata

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug(f"Event publishing disabled, skipping: {event_type}")
            return False

        event = {
            'event_type': event_type,
            'service': self.service_name,
            'timestamp': datetime.now(dt_timezone.utc).isoformat(),
            'correlation_id': correlation_id,
            'payload': payload,
            'metadata': metadata or {},
        }

        try:
            event_json = json.dumps(event, cls=JSONEncoder)

            logger.info(f"Publishing event: {event_type}", extra={
                'event_type': event_type,
                'booking_id': str(payload.get('id')) if payload.get('id') else None,
            })

            self._publish_to_backend(event_type, event_json)

            return True

        except (TypeError, ValueError, httpx.HTTPError) as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    def _publish_to_backend(self, event_type: str, event_json: str):
        """Publish to the configured message backend."""
        if self.backend == 'webhook':
            self._publish_webhook(event_type, event_json)
        else:
            # Default: just log
            logger.debug(f"Event payload: {event_json[:500]}...")

    def _publish_webhook(self, event_type: str, event_json: str):
        """Publish via webhook."""
        if not self.webhook_url:
            logger.warning(f"EVENT_WEBHOOK_URL not set, dropping {event_type}")
            return

        response = httpx.post(
            self.webhook_url,
            content=event_json,
            headers={
                'Content-Type': 'application/json',
                'X-Event-Type': event_type,
            },
            timeout=self.timeout
        )
        response.raise_for_status()
