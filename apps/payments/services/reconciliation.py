"""
Payment reconciliation.

Initialization creates a pending Payment and hands the payer to Paystack's
hosted checkout. The signed webhook is the only thing that marks a payment
successful; it completes the booking and takes the property off the market
in one transaction, and replays of the same event change nothing.
"""
import hashlib
import hmac
import logging
import time
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.transitions import can_transition
from apps.core.exceptions import (
    ExternalProviderError,
    Forbidden,
    InvalidState,
    NotFound,
    ServiceUnavailable,
    ValidationFailed,
)
from apps.core.utils.constants import (
    BOOKING_PAYMENT_PAID,
    BOOKING_STATUS_AGENT_CONFIRMED,
    BOOKING_STATUS_COMPLETED,
    PAYMENT_PROVIDER_PAYSTACK,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_SUCCESS,
    PAYMENT_TYPE_PURCHASE,
    PAYMENT_TYPE_RENTAL,
    PAYMENT_TYPES,
    PROPERTY_STATUS_RENTED,
    PROPERTY_STATUS_SOLD,
    ROLE_SYSTEM,
)
from apps.core.utils.helpers import generate_payment_reference
from apps.notifications.services.dispatcher import notification_dispatcher
from apps.notifications.services.email_service import EmailNotificationService
from apps.payments.amounts import apply_test_mode_scaling, calculate_amount, to_minor_units
from apps.payments.models import Payment, WebhookLog
from apps.payments.services.paystack_client import paystack_client
from apps.properties.models import Property

logger = logging.getLogger(__name__)

PAYMENT_TYPE_VALUES = {value for value, _ in PAYMENT_TYPES}

PROPERTY_STATUS_AFTER_PAYMENT = {
    PAYMENT_TYPE_PURCHASE: PROPERTY_STATUS_SOLD,
    PAYMENT_TYPE_RENTAL: PROPERTY_STATUS_RENTED,
}

EVENT_CHARGE_SUCCESS = 'charge.success'
EVENT_CHARGE_FAILED = 'charge.failed'


class PaymentReconciliationService:
    """
    Paystack payment flow for rental and purchase bookings.
    """

    # ----- initialization -----

    @staticmethod
    def _get_booking(booking_id) -> Booking:
        try:
            return Booking.objects.select_related('property', 'user').get(id=booking_id)
        except (Booking.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound('Booking not found.')

    @staticmethod
    def check_can_pay(actor, booking, payment_type: str):
        if booking.user_id != actor.id:
            raise Forbidden('You are not allowed to pay for this booking.')
        if payment_type not in PAYMENT_TYPE_VALUES:
            raise ValidationFailed(f"Invalid payment type '{payment_type}'.")
        if booking.booking_type != payment_type:
            raise ValidationFailed('Payment type mismatch.')
        if booking.payment_status == BOOKING_PAYMENT_PAID:
            raise InvalidState('Booking already paid.')
        if booking.status != BOOKING_STATUS_AGENT_CONFIRMED:
            raise InvalidState('Booking not confirmed by agent.')

    @classmethod
    def initialize_payment(cls, actor, booking_id, payment_type: str = PAYMENT_TYPE_PURCHASE) -> Dict[str, Any]:
        """
        Create a pending payment and start a Paystack checkout for it.

        Returns:
            {authorizationUrl, reference, amount, type, currency}
        """
        booking = cls._get_booking(booking_id)
        cls.check_can_pay(actor, booking, payment_type)

        amount = calculate_amount(booking, payment_type)
        scaled = apply_test_mode_scaling(amount)
        if scaled != amount:
            logger.info(f"Test mode: amount for booking {booking.id} scaled from {amount} to {scaled}")
            amount = scaled
        if amount <= 0:
            raise ValidationFailed('Invalid payment amount.')

        reference = generate_payment_reference()

        # Committed before the provider call so a webhook can always find it
        with transaction.atomic():
            payment = Payment.objects.create(
                booking=booking,
                user=actor,
                amount=amount,
                currency=settings.PAYMENT_CURRENCY,
                provider=PAYMENT_PROVIDER_PAYSTACK,
                payment_type=payment_type,
                reference=reference,
                status=PAYMENT_STATUS_PENDING,
            )

        callback_url = (
            f"{settings.FRONTEND_URL.rstrip('/')}/payment/callback?type={payment_type}&ref={reference}"
        )
        metadata = {
            'bookingId': str(booking.id),
            'paymentId': str(payment.id),
            'type': payment_type,
            'propertyId': str(booking.property_id),
            'userId': str(actor.id),
        }

        try:
            data = paystack_client.initialize_transaction(
                email=actor.email,
                amount_minor=to_minor_units(amount),
                reference=reference,
                callback_url=callback_url,
                metadata=metadata,
            )
        except (ServiceUnavailable, ExternalProviderError, ValidationFailed) as e:
            payment.status = PAYMENT_STATUS_FAILED
            payment.raw_response = {'error': str(e.detail)}
            payment.save(update_fields=['status', 'raw_response', 'updated_at'])
            raise

        payment.authorization_url = data['authorization_url']
        payment.save(update_fields=['authorization_url', 'updated_at'])
        logger.info(f"Initialized {payment_type} payment {reference} for booking {booking.id}")

        return {
            'authorizationUrl': payment.authorization_url,
            'reference': payment.reference,
            'amount': payment.amount,
            'type': payment_type,
            'currency': payment.currency,
        }

    # ----- webhook -----

    @staticmethod
    def verify_signature(body: bytes, signature: Optional[str]) -> bool:
        """HMAC-SHA512 of the raw body, hex encoded, compared in constant time."""
        secret = settings.PAYSTACK_SECRET_KEY
        if not signature or not secret:
            return False
        expected = hmac.new(secret.encode('utf-8'), body, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected, signature)

    @staticmethod
    def _log_event(event: Dict[str, Any]) -> Optional[WebhookLog]:
        data = event.get('data') or {}
        try:
            return WebhookLog.objects.create(
                source=PAYMENT_PROVIDER_PAYSTACK,
                event_type=str(event.get('event', ''))[:100],
                event_id=str(data.get('id') or data.get('reference') or '')[:255],
                payload=event,
            )
        except Exception as e:
            logger.error(f"Failed to log webhook event: {e}")
            return None

    @classmethod
    def handle_webhook_event(cls, event: Dict[str, Any]) -> str:
        """
        Apply a verified Paystack event. Never raises; the outcome is
        returned as a short description and recorded on the WebhookLog.
        """
        start = time.time()
        webhook_log = cls._log_event(event)
        event_type = event.get('event')
        data = event.get('data') or {}

        try:
            if event_type == EVENT_CHARGE_SUCCESS:
                outcome = cls.handle_charge_success(data.get('reference'), event)
            elif event_type == EVENT_CHARGE_FAILED:
                outcome = cls.handle_charge_failed(data.get('reference'), event)
            else:
                outcome = f'ignored {event_type}'
        except Exception as e:
            logger.error(f"Error processing Paystack event {event_type}: {e}", exc_info=True)
            if webhook_log:
                webhook_log.mark_failed(str(e))
            return 'error'

        logger.info(f"Paystack event {event_type}: {outcome}")
        if webhook_log:
            webhook_log.mark_processed(processing_time=time.time() - start)
        return outcome

    @staticmethod
    def handle_charge_failed(reference: Optional[str], event: Dict[str, Any]) -> str:
        if not reference:
            return 'missing reference'
        updated = Payment.objects.filter(
            reference=reference,
            status=PAYMENT_STATUS_PENDING,
        ).update(status=PAYMENT_STATUS_FAILED, raw_response=event, updated_at=timezone.now())
        return 'marked failed' if updated else 'no pending payment'

    @classmethod
    def handle_charge_success(cls, reference: Optional[str], event: Dict[str, Any]) -> str:
        if not reference:
            logger.error("charge.success event without a reference")
            return 'missing reference'

        with transaction.atomic():
            payment = Payment.objects.select_for_update().filter(reference=reference).first()
            if payment is None:
                logger.error(f"No payment found for reference {reference}")
                return 'unmatched reference'
            if payment.status == PAYMENT_STATUS_SUCCESS:
                return 'already processed'

            payment.status = PAYMENT_STATUS_SUCCESS
            payment.paid_at = timezone.now()
            payment.raw_response = event
            payment.save(update_fields=['status', 'paid_at', 'raw_response', 'updated_at'])

            booking = Booking.all_objects.select_for_update().get(pk=payment.booking_id)
            if not can_transition(ROLE_SYSTEM, booking.status, BOOKING_STATUS_COMPLETED):
                logger.error(
                    f"Payment {reference} succeeded but booking {booking.id} is '{booking.status}'; "
                    f"booking left unchanged"
                )
                return 'paid, booking not completable'

            booking.payment_status = BOOKING_PAYMENT_PAID
            booking.status = BOOKING_STATUS_COMPLETED
            booking.save(update_fields=['payment_status', 'status', 'updated_at'])

            prop = Property.all_objects.select_for_update().get(pk=booking.property_id)
            prop.status = PROPERTY_STATUS_AFTER_PAYMENT[payment.payment_type]
            prop.save(update_fields=['status', 'updated_at'])

        cls._notify_paid(booking, prop)
        return 'completed'

    @staticmethod
    def _notify_paid(booking, prop):
        try:
            booking = Booking.all_objects.select_related('property', 'user', 'agent').get(pk=booking.pk)
            notification_dispatcher.notify_booking(booking, 'paid')
            notification_dispatcher.notify_property(prop, booking.user, prop.status)
            EmailNotificationService.queue_booking_email(booking, 'paid')
        except Exception as e:
            logger.error(f"Failed to send payment notifications for booking {booking.pk}: {e}")

    # ----- queries -----

    @staticmethod
    def verify_payment(actor, reference: str) -> Dict[str, Any]:
        try:
            payment = Payment.objects.select_related('booking').get(reference=reference)
        except Payment.DoesNotExist:
            raise NotFound('Payment not found.')
        if payment.user_id != actor.id:
            raise Forbidden('Not authorized to view this payment.')
        return {
            'paymentStatus': payment.status,
            'bookingStatus': payment.booking.status if payment.booking_id else None,
            'paymentType': payment.payment_type,
            'amount': payment.amount,
            'paidAt': payment.paid_at,
        }


payment_reconciliation_service = PaymentReconciliationService()
