"""
Payment app admin interface.
"""
from django.contrib import admin
from .models import Payment, WebhookLog


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['reference', 'user', 'payment_type', 'amount', 'currency', 'status', 'paid_at', 'created_at']
    list_filter = ['status', 'payment_type', 'provider', 'created_at']
    search_fields = ['reference', 'user__email', 'booking__property__title']
    readonly_fields = [
        'booking', 'user', 'amount', 'currency', 'provider', 'payment_type',
        'reference', 'authorization_url', 'paid_at', 'raw_response',
        'created_at', 'updated_at'
    ]
    ordering = ['-created_at']


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    """Admin interface for webhook logs (read-only)."""
    list_display = [
        'source', 'event_type', 'event_id', 'processed',
        'retry_count', 'created_at'
    ]
    list_filter = ['source', 'processed', 'event_type', 'created_at']
    search_fields = ['event_id', 'event_type', 'error_message']
    readonly_fields = [
        'source', 'event_type', 'event_id', 'payload',
        'processed', 'error_message', 'processing_time',
        'retry_count', 'last_retry_at', 'created_at', 'updated_at'
    ]
    ordering = ['-created_at']

    def has_add_permission(self, request):
        """Webhooks are created automatically."""
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser

    fieldsets = (
        ('Webhook Details', {
            'fields': ('source', 'event_type', 'event_id')
        }),
        ('Processing', {
            'fields': ('processed', 'error_message', 'processing_time', 'retry_count', 'last_retry_at')
        }),
        ('Payload', {
            'fields': ('payload',),
            'classes': ('collapse',)
        }),
    )
