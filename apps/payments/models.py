"""
Payment models: provider transactions and the webhook audit log.
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel
from apps.core.utils.constants import (
    PAYMENT_PROVIDER_PAYSTACK,
    PAYMENT_PROVIDERS,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_SUCCESS,
    PAYMENT_STATUSES,
    PAYMENT_TYPES,
)


class Payment(BaseModel):
    """
    One attempt to pay for a rental or purchase booking.

    The reference is generated locally and sent to the provider, so webhook
    events are matched back to this row by reference.
    """
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.PROTECT,
        related_name='payments'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(0)]
    )
    currency = models.CharField(max_length=3, default='NGN')
    provider = models.CharField(
        max_length=20,
        choices=PAYMENT_PROVIDERS,
        default=PAYMENT_PROVIDER_PAYSTACK
    )
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPES)
    reference = models.CharField(max_length=100, unique=True)
    status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUSES,
        default=PAYMENT_STATUS_PENDING,
        db_index=True
    )
    authorization_url = models.URLField(max_length=500, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    raw_response = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'payments'
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['booking', 'status']),
            models.Index(fields=['user', '-created_at']),
        ]

    def __str__(self):
        return f"{self.reference} - {self.status}"

    @property
    def is_successful(self):
        return self.status == PAYMENT_STATUS_SUCCESS


class WebhookLog(BaseModel):
    """
    Logs every webhook event received from the payment provider.

    Used for debugging, audit trail, and detecting processing failures.
    """
    source = models.CharField(
        max_length=20,
        db_index=True,
        default=PAYMENT_PROVIDER_PAYSTACK,
        help_text="Webhook source, e.g. 'paystack'"
    )
    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Event type (e.g., 'charge.success')"
    )
    event_id = models.CharField(
        max_length=255,
        blank=True,
        db_index=True,
        help_text="Provider event id or transaction reference"
    )
    payload = models.JSONField(
        default=dict,
        help_text="Full webhook payload (for debugging)"
    )
    processed = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether webhook was successfully processed"
    )
    error_message = models.TextField(
        blank=True,
        help_text="Error message if processing failed"
    )
    processing_time = models.FloatField(
        null=True,
        blank=True,
        help_text="Processing time in seconds"
    )
    retry_count = models.IntegerField(default=0)
    last_retry_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'webhook_logs'
        verbose_name = 'Webhook Log'
        verbose_name_plural = 'Webhook Logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['source', 'event_type']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        state = "ok" if self.processed else "pending"
        return f"[{state}] {self.source} - {self.event_type} - {self.created_at}"

    def mark_processed(self, processing_time=None):
        """Mark webhook as successfully processed."""
        self.processed = True
        self.processing_time = processing_time
        self.save(update_fields=['processed', 'processing_time', 'updated_at'])

    def mark_failed(self, error_message):
        """Record a processing failure and bump the retry count."""
        self.processed = False
        self.error_message = error_message
        self.retry_count += 1
        self.last_retry_at = timezone.now()
        self.save(update_fields=['processed', 'error_message', 'retry_count', 'last_retry_at', 'updated_at'])
