from django.contrib import admin
from .models import Booking, CapacityHold

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['booking_number', 'service_id', 'date', 'end_date', 'quantity', 'status', 'payment_status', 'total']
    list_filter = ['status', 'payment_status', 'service_id']
    search_fields = ['booking_number', 'contact_email', 'contact_name']
    readonly_fields = ['total', 'payment_id', 'refund_id', 'cancel_token']

@admin.register(CapacityHold)
class CapacityHoldAdmin(admin.ModelAdmin):
    list_display = ['id', 'session_id', 'first_date', 'last_date', 'quantity', 'expires_at']
