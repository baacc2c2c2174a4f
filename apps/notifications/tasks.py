"""
Celery tasks for email notifications.
Handles async email sending and scheduled booking reminders.
"""
import logging
from datetime import timedelta

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_booking_email_task(self, booking_id: str, kind: str, audience: str = 'requester'):
    """
    Send one recipient's email for a booking event ('new', 'confirmed', ...).

    Args:
        booking_id: UUID of the booking
        kind: booking event kind
        audience: 'requester' or 'agent'
    """
    from apps.bookings.models import Booking
    from apps.notifications.models import Notification
    from apps.notifications.services.email_service import AUDIENCE_AGENT, EmailNotificationService

    try:
        booking = Booking.all_objects.select_related('property', 'user', 'agent').get(id=booking_id)
    except Booking.DoesNotExist:
        logger.warning(f"Booking {booking_id} not found for {kind} email")
        return

    try:
        log = EmailNotificationService.send_booking_email_to(booking, kind, audience)
        if log:
            recipient_id = booking.agent_id if audience == AUDIENCE_AGENT else booking.user_id
            Notification.objects.filter(
                user_id=recipient_id,
                related_object_id=booking.id,
                metadata__kind=kind,
                email_sent=False,
            ).update(email_sent=True)
            logger.info(f"Sent {kind} email to {audience} for booking {booking_id}")
    except Exception as e:
        logger.error(f"Failed to send {kind} email to {audience} for booking {booking_id}: {e}")
        raise self.retry(exc=e)


@shared_task(bind=True, max_retries=3, default_retry_delay=300)
def send_booking_reminders_task(self):
    """
    Periodic task to send booking reminders.
    Runs hourly via Celery Beat.

    Picks confirmed bookings that start within the next 24 hours and have
    not been reminded yet.
    """
    from apps.bookings.models import Booking
    from apps.core.utils.constants import BOOKING_STATUS_CONFIRMED
    from apps.notifications.services.dispatcher import notification_dispatcher
    from apps.notifications.services.email_service import EmailNotificationService

    now = timezone.now()
    window_end = now + timedelta(hours=24)

    logger.info(f"Running booking reminders check at {now}")

    candidates = Booking.objects.filter(
        status=BOOKING_STATUS_CONFIRMED,
        reminder_sent=False,
        date__gte=now.date(),
        date__lte=window_end.date(),
    ).select_related('property', 'user', 'agent')

    sent_count = 0
    for booking in candidates:
        start = booking.get_scheduled_start()
        if start is None or not (now <= start <= window_end):
            continue

        notification_dispatcher.notify_booking(booking, 'reminder')
        try:
            EmailNotificationService.send_booking_email(booking, 'reminder')
        except Exception as e:
            logger.error(f"Failed to send reminder email for booking {booking.id}: {e}")

        booking.reminder_sent = True
        booking.save(update_fields=['reminder_sent', 'updated_at'])
        sent_count += 1

    logger.info(f"Booking reminders completed: {sent_count} sent")
    return sent_count
