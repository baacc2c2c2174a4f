"""
Booking model
"""
from datetime import datetime, time, timedelta

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.models import SoftDeleteModel
from apps.core.utils.constants import (
    BOOKING_PAYMENT_STATUSES,
    BOOKING_PAYMENT_UNPAID,
    BOOKING_STATUS_PENDING,
    BOOKING_STATUSES,
    BOOKING_TYPE_VIEWING,
    BOOKING_TYPES,
    CONTACT_PREFERENCES,
    SLOT_HOLDING_STATUSES,
)
from apps.core.validators import validate_duration

# A booking starting less than this far ahead can no longer be cancelled by its requester
CANCELLATION_NOTICE = timedelta(hours=24)


class Booking(SoftDeleteModel):
    """
    A user's request against a property: a viewing, an inquiry, or a
    rental/purchase that ends in payment.
    """
    property = models.ForeignKey(
        'properties.Property',
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='bookings'
    )
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_bookings'
    )

    booking_type = models.CharField(max_length=20, choices=BOOKING_TYPES, default=BOOKING_TYPE_VIEWING)
    status = models.CharField(
        max_length=20,
        choices=BOOKING_STATUSES,
        default=BOOKING_STATUS_PENDING,
        db_index=True
    )

    # Schedule (viewings)
    date = models.DateField(null=True, blank=True, db_index=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    duration = models.PositiveSmallIntegerField(default=60, validators=[validate_duration])

    # Request details
    message = models.CharField(max_length=500, blank=True)
    contact_preference = models.CharField(max_length=20, choices=CONTACT_PREFERENCES, default='email')
    number_of_persons = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(10)]
    )
    special_requirements = models.TextField(blank=True)

    # Pricing
    price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    payment_status = models.CharField(
        max_length=20,
        choices=BOOKING_PAYMENT_STATUSES,
        default=BOOKING_PAYMENT_UNPAID
    )

    # Lifecycle
    cancellation_reason = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True)
    reminder_sent = models.BooleanField(default=False)

    class Meta:
        db_table = 'bookings'
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        ordering = ['-date', '-start_time', '-created_at']
        indexes = [
            models.Index(fields=['property', 'date', 'status']),
            models.Index(fields=['user', 'status']),
            models.Index(fields=['agent', 'date']),
        ]
        constraints = [
            # Storage-level guard against two live bookings for the same viewing slot
            models.UniqueConstraint(
                fields=['property', 'date', 'start_time', 'end_time'],
                condition=models.Q(
                    booking_type=BOOKING_TYPE_VIEWING,
                    status__in=SLOT_HOLDING_STATUSES,
                    is_active=True,
                ),
                name='unique_live_viewing_slot',
            ),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.property.title} - {self.booking_type} ({self.status})"

    def get_scheduled_start(self):
        """Aware datetime of the booking start, or None when undated."""
        if not self.date:
            return None
        naive = datetime.combine(self.date, self.start_time or time.min)
        return timezone.make_aware(naive, timezone.get_current_timezone())

    def get_time_slot(self):
        if self.start_time is None or self.end_time is None:
            return None
        return {
            'start': self.start_time.strftime('%H:%M'),
            'end': self.end_time.strftime('%H:%M'),
        }

    def can_be_cancelled(self, now=None):
        """
        Whether the requester may still cancel.

        Pending or undated bookings always qualify. Anything else must
        start more than 24 hours from `now`.
        """
        if self.status == BOOKING_STATUS_PENDING:
            return True
        start = self.get_scheduled_start()
        if start is None:
            return True
        now = now or timezone.now()
        return start - now > CANCELLATION_NOTICE
