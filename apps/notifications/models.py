"""
Notification models for EstateHub.
Includes in-app notifications and email delivery logs.
"""
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


class NotificationType(models.TextChoices):
    """Types of notifications"""
    BOOKING = 'booking', 'Booking'
    PROPERTY = 'property', 'Property'
    MESSAGE = 'message', 'Message'
    REVIEW = 'review', 'Review'
    ALERT = 'alert', 'Alert'
    SYSTEM = 'system', 'System'
    REMINDER = 'reminder', 'Reminder'


class RelatedObjectType(models.TextChoices):
    PROPERTY = 'Property', 'Property'
    BOOKING = 'Booking', 'Booking'
    REVIEW = 'Review', 'Review'
    USER = 'User', 'User'


class EmailStatus(models.TextChoices):
    """Status of email notifications"""
    PENDING = 'pending', 'Pending'
    SENT = 'sent', 'Sent'
    FAILED = 'failed', 'Failed'


class Notification(BaseModel):
    """
    In-app notification model for user notifications.
    These are displayed in the app's notification center.
    """
    user = models.ForeignKey(
        'authentication.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )

    title = models.CharField(max_length=100)
    message = models.CharField(max_length=500)

    # Type
    notification_type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.SYSTEM
    )

    # Status
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    is_important = models.BooleanField(default=False)

    # Related objects (optional)
    related_object_type = models.CharField(max_length=20, choices=RelatedObjectType.choices, blank=True)
    related_object_id = models.UUIDField(null=True, blank=True)
    action_url = models.CharField(max_length=255, blank=True)
    icon = models.CharField(max_length=50, default='bell')

    email_sent = models.BooleanField(default=False)

    # Metadata
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'notifications'
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read']),
            models.Index(fields=['notification_type']),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.title}"

    def mark_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=['is_read', 'read_at', 'updated_at'])


class EmailNotificationLog(BaseModel):
    """
    Tracks sent email notifications for auditing and reminder deduplication.
    """
    email_type = models.CharField(max_length=50, db_index=True)
    recipient_email = models.EmailField(db_index=True)
    recipient_name = models.CharField(max_length=255, blank=True)
    subject = models.CharField(max_length=255)

    status = models.CharField(
        max_length=20,
        choices=EmailStatus.choices,
        default=EmailStatus.PENDING,
        db_index=True
    )
    error_message = models.TextField(blank=True)
    retry_count = models.PositiveSmallIntegerField(default=0)
    sent_at = models.DateTimeField(null=True, blank=True)

    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.CASCADE,
        related_name='email_logs',
        null=True,
        blank=True
    )

    class Meta:
        db_table = 'email_notification_logs'
        verbose_name = 'Email Notification Log'
        verbose_name_plural = 'Email Notification Logs'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['booking', 'email_type', 'recipient_email'],
                name='unique_booking_reminder_email',
                condition=models.Q(booking__isnull=False, email_type='booking_reminder')
            )
        ]

    def __str__(self):
        return f"{self.email_type} to {self.recipient_email} - {self.status}"
