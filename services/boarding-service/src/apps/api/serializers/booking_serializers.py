# services/boarding-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers

Serializers for checkout, operator views and customer lookups.
"""

from rest_framework import serializers

from apps.core.models import Booking


class BookingSerializer(serializers.ModelSerializer):
    """Full booking, for operators."""

    service_name = serializers.CharField(read_only=True)
    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    payment_status_display = serializers.CharField(
        source='get_payment_status_display',
        read_only=True
    )
    days = serializers.IntegerField(read_only=True)
    can_cancel = serializers.BooleanField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'booking_number',
            'service_id', 'service_name',
            'date', 'end_date', 'days', 'quantity',
            'arrival_time', 'departure_time',
            'sizes', 'details', 'is_sterilized',
            'contact_name', 'contact_email', 'contact_phone',
            'total',
            'payment_method_id', 'payment_id',
            'payment_status', 'payment_status_display',
            'payment_error', 'payment_error_at',
            'status', 'status_display', 'can_cancel',
            'confirmed_at', 'rejected_at', 'rejection_reason',
            'cancelled_at', 'cancellation_reason',
            'refund_amount', 'refund_id', 'refund_error',
            'session_id',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class BookingPublicSerializer(serializers.ModelSerializer):
    """Booking as shown to its customer; no payment or token data."""

    service_name = serializers.CharField(read_only=True)
    contact = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            'id', 'booking_number', 'status',
            'date', 'end_date',
            'service_id', 'service_name',
            'quantity', 'total',
            'arrival_time', 'departure_time',
            'details', 'contact',
            'created_at', 'confirmed_at', 'cancelled_at',
            'refund_amount',
        ]
        read_only_fields = fields

    def get_contact(self, obj) -> dict:
        return {'name': obj.contact_name, 'email': obj.contact_email}


class BookingListSerializer(serializers.ModelSerializer):
    """Compact booking for lists."""

    service_name = serializers.CharField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'booking_number', 'status',
            'date', 'end_date',
            'service_id', 'service_name',
            'quantity', 'total', 'created_at',
        ]
        read_only_fields = fields


class AnimalDetailSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    breed = serializers.CharField(max_length=100, required=False, allow_blank=True)
    age = serializers.CharField(max_length=20, required=False, allow_blank=True)


class BookingCreateSerializer(serializers.Serializer):
    """Checkout request."""

    service_id = serializers.CharField(max_length=50)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, max_value=20, default=1)
    sizes = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
        default=list
    )
    details = AnimalDetailSerializer(many=True, required=False, default=list)
    contact_name = serializers.CharField(max_length=255)
    contact_email = serializers.EmailField()
    contact_phone = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    arrival_time = serializers.CharField(max_length=5, required=False, allow_blank=True, allow_null=True)
    departure_time = serializers.CharField(max_length=5, required=False, allow_blank=True, allow_null=True)
    is_sterilized = serializers.BooleanField(default=False)
    payment_method_id = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    session_id = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        end_date = attrs.get('end_date')
        if end_date and end_date < attrs['start_date']:
            raise serializers.ValidationError({
                'end_date': 'end_date cannot be before start_date'
            })
        return attrs


class BookingRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class BookingCancelSerializer(serializers.Serializer):
    token = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
