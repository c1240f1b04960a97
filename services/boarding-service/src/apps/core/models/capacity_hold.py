# services/boarding-service/src/apps/core/models/capacity_hold.py
"""
Capacity Hold Models

Short-lived placeholder reservations taken during checkout, and the
per-day lock rows used to serialise strict reservations.
"""

import uuid
from datetime import datetime

from django.db import models
from django.utils import timezone

from shared.common.utils import to_date
from .booking import normalize_service_id


class CapacityHold(models.Model):
    """
    Temporary claim on capacity for a checkout session.

    Counts against capacity until ``expires_at``; expired rows are ignored
    by every reader and swept by a periodic task.
    """

    class Status(models.TextChoices):
        TEMPORARY = 'temporary', 'Temporary'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session_id = models.CharField(max_length=255, db_index=True)
    service_id = models.CharField(max_length=50, blank=True, default='')

    # Held days as ISO strings
    dates = models.JSONField(default=list)
    first_date = models.DateField(db_index=True)
    last_date = models.DateField(db_index=True)

    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.TEMPORARY
    )

    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        db_table = 'capacity_holds'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['first_date', 'last_date', 'expires_at']),
        ]

    def __str__(self):
        return f"Hold {self.id} ({self.session_id}): {self.quantity} x {len(self.dates)} days"

    def save(self, *args, **kwargs):
        self.service_id = normalize_service_id(self.service_id)
        days = sorted({to_date(d) for d in self.dates})
        self.dates = [d.isoformat() for d in days]
        if days:
            self.first_date = days[0]
            self.last_date = days[-1]
        super().save(*args, **kwargs)

    def is_active(self, now: datetime = None) -> bool:
        """Check if the hold still counts against capacity."""
        now = now or timezone.now()
        return self.expires_at > now

    def holds_day(self, day) -> bool:
        return day.isoformat() in self.dates


class CapacityLock(models.Model):
    """One row per (pool, day); locked with select_for_update in strict mode."""

    pool = models.CharField(max_length=20)
    date = models.DateField()

    class Meta:
        db_table = 'capacity_locks'
        constraints = [
            models.UniqueConstraint(fields=['pool', 'date'], name='unique_capacity_lock'),
        ]

    def __str__(self):
        return f"{self.pool}:{self.date}"
