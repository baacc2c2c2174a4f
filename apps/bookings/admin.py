"""
Booking admin configuration
"""
from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'property', 'user', 'agent', 'booking_type', 'status', 'date', 'payment_status', 'is_active']
    list_filter = ['booking_type', 'status', 'payment_status', 'is_active', 'date']
    search_fields = ['user__email', 'agent__email', 'property__title']
    readonly_fields = ['created_at', 'updated_at', 'cancelled_at']

    def get_queryset(self, request):
        return Booking.all_objects.select_related('property', 'user', 'agent')
