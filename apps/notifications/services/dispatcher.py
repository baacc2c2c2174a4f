"""
In-app notification dispatcher.

Domain code calls these helpers after a state change; a failure to record a
notification is logged and never propagated to the caller.
"""
import logging
from typing import List, Optional

from django.db import DatabaseError, transaction

from apps.notifications.models import Notification, NotificationType, RelatedObjectType

logger = logging.getLogger(__name__)


BOOKING_MESSAGES = {
    'new': {
        'requester': ('Booking request sent', 'Your {booking_type} request for "{title}" has been sent to the agent.'),
        'agent': ('New booking request', 'You have a new {booking_type} request for "{title}".'),
        'icon': 'calendar-plus',
    },
    'confirmed': {
        'requester': ('Booking confirmed', 'Your {booking_type} for "{title}" has been confirmed.'),
        'agent': ('Booking confirmed', 'You confirmed the {booking_type} for "{title}".'),
        'icon': 'calendar-check',
    },
    'cancelled': {
        'requester': ('Booking cancelled', 'Your {booking_type} for "{title}" has been cancelled.'),
        'agent': ('Booking cancelled', 'The {booking_type} for "{title}" has been cancelled.'),
        'icon': 'calendar-x',
    },
    'rejected': {
        'requester': ('Booking rejected', 'Your {booking_type} request for "{title}" was rejected.'),
        'agent': ('Booking rejected', 'You rejected the {booking_type} request for "{title}".'),
        'icon': 'calendar-x',
    },
    'completed': {
        'requester': ('Booking completed', 'Your {booking_type} for "{title}" is complete.'),
        'agent': ('Booking completed', 'The {booking_type} for "{title}" is complete.'),
        'icon': 'check-circle',
    },
    'paid': {
        'requester': ('Payment received', 'We received your payment for "{title}".'),
        'agent': ('Payment received', 'Payment for "{title}" has been received.'),
        'icon': 'credit-card',
    },
    'reminder': {
        'requester': ('Booking reminder', 'Reminder: your {booking_type} for "{title}" is coming up on {date}.'),
        'agent': ('Booking reminder', 'Reminder: {booking_type} for "{title}" on {date}.'),
        'icon': 'clock',
    },
}

PROPERTY_MESSAGES = {
    'new': ('New property listed', '"{title}" has been listed.'),
    'updated': ('Property updated', '"{title}" has been updated.'),
    'price_change': ('Price changed', 'The price of "{title}" is now {price}.'),
    'sold': ('Property sold', '"{title}" has been sold.'),
    'rented': ('Property rented', '"{title}" has been rented.'),
}


class NotificationDispatcher:
    """
    Creates one notification per relevant recipient.
    """

    @staticmethod
    def notify_user(
        user,
        title: str,
        message: str,
        notification_type: str = NotificationType.SYSTEM,
        related_object=None,
        action_url: str = '',
        icon: str = 'bell',
        is_important: bool = False,
        metadata: Optional[dict] = None,
    ) -> Optional[Notification]:
        """
        Record a single notification. Returns None if it could not be saved.
        """
        related_type = ''
        related_id = None
        if related_object is not None:
            related_type = related_object.__class__.__name__
            if related_type not in RelatedObjectType.values:
                related_type = ''
            related_id = related_object.pk

        try:
            # Savepoint so a failure here cannot poison the caller's transaction
            with transaction.atomic():
                return Notification.objects.create(
                    user=user,
                    title=title[:100],
                    message=message[:500],
                    notification_type=notification_type,
                    related_object_type=related_type,
                    related_object_id=related_id,
                    action_url=action_url,
                    icon=icon,
                    is_important=is_important,
                    metadata=metadata or {},
                )
        except DatabaseError as e:
            logger.error(f"Failed to create notification '{title}' for {user.pk}: {e}")
            return None

    @classmethod
    def notify_booking(cls, booking, kind: str) -> List[Notification]:
        """
        Notify the requester and, when it is a different account, the agent.
        """
        templates = BOOKING_MESSAGES.get(kind)
        if templates is None:
            logger.warning(f"Unknown booking notification kind: {kind}")
            return []

        context = {
            'booking_type': booking.get_booking_type_display().lower(),
            'title': booking.property.title,
            'date': booking.date.isoformat() if booking.date else 'the scheduled date',
        }
        notification_type = NotificationType.REMINDER if kind == 'reminder' else NotificationType.BOOKING
        action_url = f"/bookings/{booking.id}"
        metadata = {'booking_id': str(booking.id), 'kind': kind, 'status': booking.status}

        created = []
        title, message = templates['requester']
        notification = cls.notify_user(
            booking.user,
            title=title,
            message=message.format(**context),
            notification_type=notification_type,
            related_object=booking,
            action_url=action_url,
            icon=templates['icon'],
            metadata=metadata,
        )
        if notification:
            created.append(notification)

        if booking.agent_id and booking.agent_id != booking.user_id:
            title, message = templates['agent']
            notification = cls.notify_user(
                booking.agent,
                title=title,
                message=message.format(**context),
                notification_type=notification_type,
                related_object=booking,
                action_url=action_url,
                icon=templates['icon'],
                is_important=kind == 'new',
                metadata=metadata,
            )
            if notification:
                created.append(notification)

        return created

    @classmethod
    def notify_property(cls, prop, actor, kind: str) -> List[Notification]:
        """
        Notify the owner and the agent of a property, skipping the actor
        and never notifying the same account twice.
        """
        template = PROPERTY_MESSAGES.get(kind)
        if template is None:
            logger.warning(f"Unknown property notification kind: {kind}")
            return []

        title, message = template
        message = message.format(title=prop.title, price=prop.price)
        actor_id = actor.pk if actor is not None else None

        recipients = []
        for user in (prop.owner, prop.agent):
            if user is None or user.pk == actor_id:
                continue
            if any(existing.pk == user.pk for existing in recipients):
                continue
            recipients.append(user)

        created = []
        for user in recipients:
            notification = cls.notify_user(
                user,
                title=title,
                message=message,
                notification_type=NotificationType.PROPERTY,
                related_object=prop,
                action_url=f"/properties/{prop.slug}",
                icon='home',
                metadata={'property_id': str(prop.id), 'kind': kind},
            )
            if notification:
                created.append(notification)
        return created


# Singleton instance
notification_dispatcher = NotificationDispatcher()
