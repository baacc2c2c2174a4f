"""
Email notification service for EstateHub.
Sends plain-text emails through Django's configured email backend.
"""
import logging
from typing import List, Optional

from django.conf import settings
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.notifications.models import EmailNotificationLog, EmailStatus

logger = logging.getLogger(__name__)

AUDIENCE_REQUESTER = 'requester'
AUDIENCE_AGENT = 'agent'


class EmailNotificationService:
    """
    Service class for sending email notifications.
    """

    SUBJECT_MAP = {
        'booking_new': 'Booking request received - {title}',
        'booking_new_agent': 'New booking request - {title}',
        'booking_confirmed': 'Your booking is confirmed - {title}',
        'booking_cancelled': 'Booking cancelled - {title}',
        'booking_rejected': 'Booking request declined - {title}',
        'booking_paid': 'Payment received - {title}',
        'booking_reminder': 'Reminder: upcoming {booking_type} - {title}',
    }

    BODY_MAP = {
        'booking_new': (
            'Hi {name},\n\nYour {booking_type} request for "{title}" has been received. '
            'The agent will get back to you shortly.'
        ),
        'booking_new_agent': (
            'Hi {name},\n\n{requester} has requested a {booking_type} for "{title}"{when}. '
            'Please confirm or reject it from your dashboard.'
        ),
        'booking_confirmed': 'Hi {name},\n\nYour {booking_type} for "{title}"{when} has been confirmed.',
        'booking_cancelled': 'Hi {name},\n\nThe {booking_type} for "{title}"{when} has been cancelled.',
        'booking_rejected': (
            'Hi {name},\n\nUnfortunately your {booking_type} request for "{title}" was declined.{reason}'
        ),
        'booking_paid': 'Hi {name},\n\nWe received your payment of {currency} {amount} for "{title}".',
        'booking_reminder': 'Hi {name},\n\nThis is a reminder of your {booking_type} for "{title}"{when}.',
    }

    @classmethod
    def send_email(
        cls,
        recipient_email: str,
        recipient_name: str,
        email_type: str,
        context: dict,
        booking=None,
    ) -> Optional[EmailNotificationLog]:
        """
        Render and send one email, recording the attempt in EmailNotificationLog.

        Returns None when skipped (no recipient, unknown type, duplicate reminder).
        Raises the backend's exception after logging the failure so Celery can retry.
        """
        if not recipient_email:
            logger.warning(f"Skipping email {email_type}: no recipient email")
            return None

        subject_template = cls.SUBJECT_MAP.get(email_type)
        body_template = cls.BODY_MAP.get(email_type)
        if not subject_template or not body_template:
            logger.error(f"No template found for email type: {email_type}")
            return None

        context = {**context, 'name': recipient_name or recipient_email}
        subject = subject_template.format(**context)
        body = body_template.format(**context)

        try:
            with transaction.atomic():
                email_log = EmailNotificationLog.objects.create(
                    email_type=email_type,
                    recipient_email=recipient_email,
                    recipient_name=recipient_name,
                    subject=subject,
                    booking=booking,
                )
        except IntegrityError:
            logger.info(f"Duplicate email prevented: {email_type} for {recipient_email}")
            return None

        try:
            send_mail(
                subject=subject,
                message=body,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient_email],
                fail_silently=False,
            )
        except Exception as e:
            email_log.status = EmailStatus.FAILED
            email_log.error_message = str(e)
            email_log.retry_count += 1
            email_log.save()
            logger.error(f"Failed to send email {email_type} to {recipient_email}: {e}")
            raise

        email_log.status = EmailStatus.SENT
        email_log.sent_at = timezone.now()
        email_log.save()
        logger.info(f"Email sent successfully: {email_type} to {recipient_email}")
        return email_log

    @classmethod
    def build_booking_context(cls, booking) -> dict:
        when = ''
        if booking.date:
            when = f" on {booking.date.strftime('%B %d, %Y')}"
            if booking.start_time:
                when += f" at {booking.start_time.strftime('%H:%M')}"
        reason = f"\n\nReason: {booking.rejection_reason}" if booking.rejection_reason else ''
        return {
            'title': booking.property.title,
            'booking_type': booking.get_booking_type_display().lower(),
            'requester': booking.user.full_name,
            'when': when,
            'reason': reason,
            'currency': settings.PAYMENT_CURRENCY,
            'amount': booking.price or '',
        }

    @classmethod
    def booking_audiences(cls, booking, kind: str) -> List[str]:
        """
        `new` goes to both requester and agent; every other kind goes to the
        requester only.
        """
        audiences = [AUDIENCE_REQUESTER]
        if kind == 'new' and booking.agent_id and booking.agent_id != booking.user_id:
            audiences.append(AUDIENCE_AGENT)
        return audiences

    @classmethod
    def send_booking_email_to(cls, booking, kind: str, audience: str) -> Optional[EmailNotificationLog]:
        """Send one booking event email to one recipient."""
        context = cls.build_booking_context(booking)
        if audience == AUDIENCE_AGENT:
            return cls.send_email(
                recipient_email=booking.agent.email,
                recipient_name=booking.agent.full_name,
                email_type=f'booking_{kind}_agent',
                context=context,
                booking=booking,
            )
        return cls.send_email(
            recipient_email=booking.user.email,
            recipient_name=booking.user.full_name,
            email_type=f'booking_{kind}',
            context=context,
            booking=booking,
        )

    @classmethod
    def send_booking_email(cls, booking, kind: str) -> List[EmailNotificationLog]:
        """Send the emails for a booking event to every recipient in turn."""
        logs = []
        for audience in cls.booking_audiences(booking, kind):
            log = cls.send_booking_email_to(booking, kind, audience)
            if log:
                logs.append(log)
        return logs

    @classmethod
    def queue_booking_email(cls, booking, kind: str) -> bool:
        """
        Fire-and-forget: enqueue one email task per recipient, so a retry
        never resends to a recipient that was already served. Enqueue
        failures are logged and reported as False, never raised.
        """
        from apps.notifications.tasks import send_booking_email_task

        queued = True
        for audience in cls.booking_audiences(booking, kind):
            try:
                send_booking_email_task.delay(str(booking.id), kind, audience)
            except Exception as e:
                logger.error(f"Failed to queue {kind} email to {audience} for booking {booking.id}: {e}")
                queued = False
        return queued
