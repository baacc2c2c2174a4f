"""
Booking lifecycle service.

Every status change runs inside a transaction holding a row lock on the
booking and is checked against the transition table before anything is
written. Notifications and emails run after the change and never fail it.
"""
import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.services.availability import TimeSlot, availability_service
from apps.bookings.transitions import assert_transition, filter_updatable
from apps.core.exceptions import Conflict, Forbidden, InvalidState, NotFound, ValidationFailed
from apps.core.utils.constants import (
    BOOKING_PAYMENT_PAID,
    BOOKING_PAYMENT_UNPAID,
    BOOKING_STATUS_AGENT_CONFIRMED,
    BOOKING_STATUS_CANCELLED,
    BOOKING_STATUS_COMPLETED,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PAID,
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_REJECTED,
    BOOKING_TYPE_PURCHASE,
    BOOKING_TYPE_RENTAL,
    BOOKING_TYPE_VIEWING,
    PROPERTY_STATUS_AVAILABLE,
    SLOT_HOLDING_STATUSES,
    USER_ROLE_ADMIN,
    USER_ROLE_AGENT,
    USER_ROLE_USER,
)
from apps.notifications.services.dispatcher import notification_dispatcher
from apps.notifications.services.email_service import EmailNotificationService
from apps.properties.models import Property

logger = logging.getLogger(__name__)

# status reached -> notification/email kind
STATUS_EVENT_KINDS = {
    BOOKING_STATUS_CONFIRMED: 'confirmed',
    BOOKING_STATUS_AGENT_CONFIRMED: 'confirmed',
    BOOKING_STATUS_CANCELLED: 'cancelled',
    BOOKING_STATUS_REJECTED: 'rejected',
    BOOKING_STATUS_COMPLETED: 'completed',
    BOOKING_STATUS_PAID: 'paid',
}

EMAIL_KINDS = {'new', 'confirmed', 'cancelled', 'rejected', 'paid'}

SLOT_TAKEN_MESSAGE = 'This time slot is already booked. Please choose another time.'


class BookingService:
    """
    Booking creation and role-gated state changes.
    """

    # ----- helpers -----

    @staticmethod
    def _lock(booking):
        return Booking.objects.select_for_update().get(pk=booking.pk)

    @staticmethod
    def _require_staff(actor, booking):
        """Agents must be the assigned agent; plain users are refused."""
        if actor.role == USER_ROLE_ADMIN:
            return
        if actor.role == USER_ROLE_AGENT and booking.agent_id == actor.id:
            return
        if actor.role == USER_ROLE_AGENT:
            raise Forbidden('You are not the agent assigned to this booking.')
        raise Forbidden('Only the assigned agent or an administrator can perform this action.')

    @staticmethod
    def _require_participant(actor, booking):
        if actor.role == USER_ROLE_ADMIN:
            return
        if actor.role == USER_ROLE_AGENT and booking.agent_id == actor.id:
            return
        if booking.user_id == actor.id:
            return
        raise Forbidden('You do not have permission to modify this booking.')

    @staticmethod
    def _side_effects(booking, kind):
        try:
            notification_dispatcher.notify_booking(booking, kind)
        except Exception as e:
            logger.error(f"Failed to create {kind} notifications for booking {booking.id}: {e}")
        if kind in EMAIL_KINDS:
            EmailNotificationService.queue_booking_email(booking, kind)

    @staticmethod
    def serialize_reason(reason):
        """Free text is kept as is; structured reasons are stored as JSON."""
        if reason is None:
            return ''
        if isinstance(reason, str):
            return reason
        return json.dumps(reason, cls=DjangoJSONEncoder)

    # ----- creation -----

    @classmethod
    def create_booking(cls, requester, validated_data) -> Booking:
        """
        Create a booking for `requester`.

        Raises:
            NotFound: property does not exist
            InvalidState: property is not available
            Conflict: viewing slot overlaps a pending/confirmed booking
        """
        booking_type = validated_data['booking_type']
        slot = validated_data.get('time_slot')
        booking_date = validated_data.get('date')

        with transaction.atomic():
            # Row lock serializes concurrent requests for the same property
            try:
                prop = Property.objects.select_for_update().get(pk=validated_data['property'])
            except Property.DoesNotExist:
                raise NotFound('No property found with that ID.')

            if prop.status != PROPERTY_STATUS_AVAILABLE:
                raise InvalidState('This property is not available for booking.')

            if booking_type == BOOKING_TYPE_VIEWING and not availability_service.check_availability(
                prop.id, booking_date, slot
            ):
                raise Conflict(SLOT_TAKEN_MESSAGE)

            fields = {
                'property': prop,
                'user': requester,
                'agent': validated_data.get('agent') or prop.agent,
                'booking_type': booking_type,
                'status': BOOKING_STATUS_PENDING,
                'date': booking_date,
                'start_time': slot.start if slot else None,
                'end_time': slot.end if slot else None,
                'duration': validated_data.get('duration', 60),
                'message': validated_data.get('message', ''),
                'contact_preference': validated_data.get('contact_preference', 'email'),
                'number_of_persons': validated_data.get('number_of_persons', 1),
                'special_requirements': validated_data.get('special_requirements', ''),
            }
            if booking_type in (BOOKING_TYPE_PURCHASE, BOOKING_TYPE_RENTAL):
                fields['price'] = prop.price
                fields['payment_status'] = BOOKING_PAYMENT_UNPAID

            try:
                with transaction.atomic():
                    booking = Booking.objects.create(**fields)
            except IntegrityError:
                logger.warning(f"Viewing slot race lost on property {prop.id} for {booking_date} {slot}")
                raise Conflict(SLOT_TAKEN_MESSAGE)

        logger.info(f"Booking {booking.id} ({booking_type}) created by {requester.email} for property {prop.id}")
        cls._side_effects(booking, 'new')
        return booking

    # ----- generic update -----

    @classmethod
    def update_booking(cls, actor, booking, validated_data) -> Booking:
        """
        Apply the subset of `validated_data` the actor's role may change.
        Status changes must follow the transition table.
        """
        cls._require_participant(actor, booking)
        changes = filter_updatable(actor.role, validated_data)
        if not changes:
            return booking

        with transaction.atomic():
            locked = cls._lock(booking)
            previous_status = locked.status

            new_status = changes.pop('status', None)
            if new_status is not None and new_status != locked.status:
                assert_transition(actor.role, locked.status, new_status, Forbidden)
                locked.status = new_status
                if new_status == BOOKING_STATUS_CANCELLED:
                    locked.cancelled_at = timezone.now()

            new_agent = changes.pop('agent', None)
            if new_agent is not None:
                if new_agent.role != USER_ROLE_AGENT:
                    raise ValidationFailed('Bookings can only be assigned to agents.')
                locked.agent = new_agent

            schedule_changed = 'time_slot' in changes or 'date' in changes
            if previous_status not in SLOT_HOLDING_STATUSES and locked.status in SLOT_HOLDING_STATUSES:
                schedule_changed = True
            slot = changes.pop('time_slot', None)
            if slot is not None:
                locked.start_time, locked.end_time = slot.start, slot.end
            if 'date' in changes:
                locked.date = changes.pop('date')

            for field, value in changes.items():
                setattr(locked, field, value)

            if (locked.booking_type == BOOKING_TYPE_VIEWING and schedule_changed
                    and locked.status in SLOT_HOLDING_STATUSES):
                if locked.date is None or locked.start_time is None:
                    raise ValidationFailed('Viewing bookings need a date and a time slot.')
                if not availability_service.check_availability(
                    locked.property_id,
                    locked.date,
                    TimeSlot(locked.start_time, locked.end_time),
                    exclude_booking_id=locked.id,
                ):
                    raise Conflict(SLOT_TAKEN_MESSAGE)

            try:
                with transaction.atomic():
                    locked.save()
            except IntegrityError:
                raise Conflict(SLOT_TAKEN_MESSAGE)

        if locked.status != previous_status and locked.status in STATUS_EVENT_KINDS:
            logger.info(f"Booking {locked.id} moved {previous_status} -> {locked.status} by {actor.email}")
            cls._side_effects(locked, STATUS_EVENT_KINDS[locked.status])
        return locked

    @staticmethod
    def delete_booking(actor, booking):
        """
        Owners may hard-delete a pending booking; admins soft-delete anything.
        """
        if actor.role == USER_ROLE_ADMIN:
            booking.soft_delete()
            logger.info(f"Booking {booking.id} deactivated by admin {actor.email}")
            return

        if actor.role == USER_ROLE_USER and booking.user_id == actor.id:
            if booking.status != BOOKING_STATUS_PENDING:
                raise Forbidden('You can only delete bookings that are still pending.')
            booking_id = booking.id
            booking.delete()
            logger.info(f"Booking {booking_id} deleted by its owner {actor.email}")
            return

        raise Forbidden('You do not have permission to delete this booking.')

    # ----- named transitions -----

    @classmethod
    def confirm_booking(cls, actor, booking) -> Booking:
        """Viewings and inquiries become confirmed; rentals and purchases agent_confirmed."""
        cls._require_staff(actor, booking)
        if booking.booking_type in (BOOKING_TYPE_RENTAL, BOOKING_TYPE_PURCHASE):
            target = BOOKING_STATUS_AGENT_CONFIRMED
        else:
            target = BOOKING_STATUS_CONFIRMED

        with transaction.atomic():
            locked = cls._lock(booking)
            assert_transition(actor.role, locked.status, target, InvalidState)
            locked.status = target
            locked.save(update_fields=['status', 'updated_at'])

        logger.info(f"Booking {locked.id} confirmed ({target}) by {actor.email}")
        cls._side_effects(locked, 'confirmed')
        return locked

    @classmethod
    def cancel_booking(cls, actor, booking, reason=None, now=None) -> Booking:
        """
        Users may cancel only their own bookings and only while
        `can_be_cancelled` holds. Agents and admins skip the notice period.
        """
        if actor.role == USER_ROLE_USER:
            if booking.user_id != actor.id:
                raise Forbidden('You can only cancel your own bookings.')
        elif actor.role == USER_ROLE_AGENT:
            if booking.agent_id != actor.id:
                raise Forbidden('You are not the agent assigned to this booking.')
        elif actor.role != USER_ROLE_ADMIN:
            raise Forbidden('You do not have permission to cancel this booking.')

        now = now or timezone.now()
        with transaction.atomic():
            locked = cls._lock(booking)
            assert_transition(actor.role, locked.status, BOOKING_STATUS_CANCELLED, InvalidState)
            if actor.role == USER_ROLE_USER and not locked.can_be_cancelled(now):
                raise InvalidState('Bookings can only be cancelled more than 24 hours before the scheduled time.')

            locked.status = BOOKING_STATUS_CANCELLED
            locked.cancellation_reason = cls.serialize_reason(reason)
            locked.cancelled_at = now
            locked.save(update_fields=['status', 'cancellation_reason', 'cancelled_at', 'updated_at'])

        logger.info(f"Booking {locked.id} cancelled by {actor.email}")
        cls._side_effects(locked, 'cancelled')
        return locked

    @classmethod
    def reject_booking(cls, actor, booking, reason='') -> Booking:
        cls._require_staff(actor, booking)
        with transaction.atomic():
            locked = cls._lock(booking)
            assert_transition(actor.role, locked.status, BOOKING_STATUS_REJECTED, InvalidState)
            locked.status = BOOKING_STATUS_REJECTED
            locked.rejection_reason = (reason or '')[:500]
            locked.save(update_fields=['status', 'rejection_reason', 'updated_at'])

        logger.info(f"Booking {locked.id} rejected by {actor.email}")
        cls._side_effects(locked, 'rejected')
        return locked

    @classmethod
    def complete_booking(cls, actor, booking) -> Booking:
        cls._require_staff(actor, booking)
        with transaction.atomic():
            locked = cls._lock(booking)
            assert_transition(actor.role, locked.status, BOOKING_STATUS_COMPLETED, InvalidState)
            locked.status = BOOKING_STATUS_COMPLETED
            locked.save(update_fields=['status', 'updated_at'])

        logger.info(f"Booking {locked.id} completed by {actor.email}")
        cls._side_effects(locked, 'completed')
        return locked

    @classmethod
    def confirm_payment(cls, actor, booking) -> Booking:
        """Record an offline payment confirmed by the agent or an admin."""
        cls._require_staff(actor, booking)
        with transaction.atomic():
            locked = cls._lock(booking)
            assert_transition(actor.role, locked.status, BOOKING_STATUS_PAID, InvalidState)
            locked.status = BOOKING_STATUS_PAID
            locked.payment_status = BOOKING_PAYMENT_PAID
            locked.save(update_fields=['status', 'payment_status', 'updated_at'])

        logger.info(f"Payment for booking {locked.id} confirmed manually by {actor.email}")
        cls._side_effects(locked, 'paid')
        return locked


# Singleton instance
booking_service = BookingService()
