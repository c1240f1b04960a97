# services/boarding-service/src/apps/api/serializers/capacity_serializers.py
"""
Capacity Serializers

Request validation for availability checks, the calendar, capacity holds
and price quotes.
"""

from rest_framework import serializers
from django.utils import timezone

from apps.core.models import CapacityHold


class CapacityCheckQuerySerializer(serializers.Serializer):
    """Query parameters for an availability check."""

    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    has_large_animal = serializers.BooleanField(default=False)
    service_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    session_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        end_date = attrs.get('end_date')
        if end_date and end_date < attrs['start_date']:
            raise serializers.ValidationError({
                'end_date': 'end_date cannot be before start_date'
            })
        return attrs


class CalendarQuerySerializer(serializers.Serializer):
    """Query parameters for the monthly calendar."""

    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    service_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class HoldCreateSerializer(serializers.Serializer):
    """Request body for a capacity hold."""

    dates = serializers.ListField(
        child=serializers.DateField(),
        min_length=1,
        max_length=60
    )
    quantity = serializers.IntegerField(min_value=1)
    session_id = serializers.CharField(max_length=255)
    service_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CapacityHoldSerializer(serializers.ModelSerializer):
    """Hold as returned to the checkout."""

    reservation_id = serializers.UUIDField(source='id', read_only=True)
    expires_in = serializers.SerializerMethodField()

    class Meta:
        model = CapacityHold
        fields = [
            'reservation_id', 'session_id', 'service_id',
            'dates', 'quantity', 'status',
            'created_at', 'expires_at', 'expires_in',
        ]

    def get_expires_in(self, obj) -> int:
        """Seconds until the hold lapses."""
        remaining = (obj.expires_at - timezone.now()).total_seconds()
        return max(0, int(round(remaining)))


class PriceQuoteRequestSerializer(serializers.Serializer):
    """Request body for a price quote."""

    service_id = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    arrival_time = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    departure_time = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    sizes = serializers.ListField(
        child=serializers.CharField(),
        required=False,
        default=list
    )
    assume_full_day = serializers.BooleanField(default=False)
