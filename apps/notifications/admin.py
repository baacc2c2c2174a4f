"""
Admin configuration for notifications app.
"""
from django.contrib import admin
from apps.notifications.models import Notification, EmailNotificationLog


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """Admin for in-app notifications."""
    list_display = [
        'id', 'user', 'title', 'notification_type',
        'is_read', 'is_important', 'created_at'
    ]
    list_filter = ['notification_type', 'is_read', 'is_important', 'created_at']
    search_fields = ['user__email', 'title', 'message']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']


@admin.register(EmailNotificationLog)
class EmailNotificationLogAdmin(admin.ModelAdmin):
    """Admin for email notification logs."""
    list_display = [
        'id', 'email_type', 'recipient_email', 'status',
        'sent_at', 'created_at'
    ]
    list_filter = ['email_type', 'status', 'created_at']
    search_fields = ['recipient_email', 'subject']
    readonly_fields = ['created_at', 'updated_at', 'sent_at']
    ordering = ['-created_at']

    fieldsets = (
        ('Email Details', {
            'fields': ('email_type', 'recipient_email', 'recipient_name', 'subject')
        }),
        ('Status', {
            'fields': ('status', 'error_message', 'retry_count', 'sent_at')
        }),
        ('Related Objects', {
            'fields': ('booking',),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
