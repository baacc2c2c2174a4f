import hashlib
import hmac
import json
from decimal import Decimal
from unittest import mock

import pytest
import requests
from django.conf import settings
from django.test import override_settings

from apps.core.exceptions import ExternalProviderError, Forbidden, InvalidState, ValidationFailed
from apps.payments.amounts import apply_test_mode_scaling, calculate_amount, rental_amount, to_minor_units
from apps.payments.models import Payment, WebhookLog
from apps.payments.services.reconciliation import payment_reconciliation_service
from apps.properties.models import Property

WEBHOOK_URL = '/api/v1/payments/webhook/paystack/'
POST_PATH = 'apps.payments.services.paystack_client.requests.post'


def provider_response(body, ok=True, status_code=200):
    response = mock.Mock(ok=ok, status_code=status_code)
    response.json.return_value = body
    return response


def checkout_ok(reference='ignored'):
    return provider_response({
        'status': True,
        'message': 'Authorization URL created',
        'data': {
            'authorization_url': 'https://checkout.paystack.test/abc123',
            'access_code': 'abc123',
            'reference': reference,
        },
    })


def sign(body):
    return hmac.new(settings.PAYSTACK_SECRET_KEY.encode('utf-8'), body, hashlib.sha512).hexdigest()


def post_event(client, event, signature=None):
    body = json.dumps(event).encode('utf-8')
    return client.post(
        WEBHOOK_URL,
        data=body,
        content_type='application/json',
        HTTP_X_PAYSTACK_SIGNATURE=signature if signature is not None else sign(body),
    )


def charge_event(reference, event_type='charge.success'):
    return {'event': event_type, 'data': {'id': 991, 'reference': reference, 'status': 'success'}}


@pytest.fixture
def purchase_booking(make_booking, listing):
    return make_booking(
        booking_type='purchase', status='agent_confirmed', price=listing.price,
        date=None, start_time=None, end_time=None,
    )


@pytest.fixture
def rental_listing(make_property):
    return make_property(listing_type='rent', price=Decimal('100000'))


@pytest.fixture
def rental_booking(make_booking, rental_listing):
    return make_booking(
        property=rental_listing, booking_type='rental', status='agent_confirmed',
        date=None, start_time=None, end_time=None,
    )


@pytest.fixture
def pending_payment(purchase_booking, user):
    return Payment.objects.create(
        booking=purchase_booking,
        user=user,
        amount=purchase_booking.price,
        payment_type='purchase',
        reference='ESTATE_1700000000000_deadbeef',
    )


# ----- amounts -----

def test_rental_amount_adds_deposit_and_fee():
    assert rental_amount(Decimal('100000')) == Decimal('260000')


def test_rental_amount_rounds_half_up():
    assert rental_amount(Decimal('1.01')) == Decimal('10003')


def test_calculate_amount_uses_listing_price_for_rentals(rental_booking):
    assert calculate_amount(rental_booking, 'rental') == Decimal('260000')


def test_calculate_amount_rejects_unknown_type(purchase_booking):
    with pytest.raises(ValidationFailed):
        calculate_amount(purchase_booking, 'lease')


@override_settings(PAYMENTS_TEST_MODE=True, PAYMENTS_TEST_MODE_MAX_AMOUNT=5000)
@pytest.mark.parametrize('amount,expected', [
    ('260000', '2600'),
    ('1000000', '5000'),
    ('9000', '9000'),
    ('10000', '10000'),
])
def test_test_mode_scaling(amount, expected):
    assert apply_test_mode_scaling(Decimal(amount)) == Decimal(expected)


def test_scaling_disabled_outside_test_mode():
    assert apply_test_mode_scaling(Decimal('260000')) == Decimal('260000')


def test_minor_units():
    assert to_minor_units(Decimal('2600')) == 260000


# ----- initialization -----

def test_initialize_creates_pending_payment(user, rental_booking):
    with mock.patch(POST_PATH, return_value=checkout_ok()) as post:
        result = payment_reconciliation_service.initialize_payment(user, rental_booking.id, 'rental')

    payment = Payment.objects.get(reference=result['reference'])
    assert payment.status == 'pending'
    assert payment.amount == Decimal('260000')
    assert payment.authorization_url == result['authorizationUrl']
    assert result['currency'] == 'NGN'

    sent = post.call_args.kwargs['json']
    assert sent['amount'] == 26000000
    assert sent['metadata']['bookingId'] == str(rental_booking.id)
    assert sent['callback_url'].endswith(f'/payment/callback?type=rental&ref={payment.reference}')
    assert post.call_args.kwargs['headers']['Authorization'] == 'Bearer sk_test_estatehub'


def test_initialize_does_not_change_booking(user, purchase_booking):
    with mock.patch(POST_PATH, return_value=checkout_ok()):
        payment_reconciliation_service.initialize_payment(user, purchase_booking.id, 'purchase')

    purchase_booking.refresh_from_db()
    assert purchase_booking.status == 'agent_confirmed'
    assert purchase_booking.payment_status == 'unpaid'


def test_initialize_by_non_owner_forbidden(other_user, purchase_booking):
    with mock.patch(POST_PATH) as post, pytest.raises(Forbidden):
        payment_reconciliation_service.initialize_payment(other_user, purchase_booking.id, 'purchase')
    post.assert_not_called()


def test_initialize_type_mismatch(user, purchase_booking):
    with pytest.raises(ValidationFailed):
        payment_reconciliation_service.initialize_payment(user, purchase_booking.id, 'rental')


@pytest.mark.parametrize('status', ['pending', 'completed', 'cancelled'])
def test_initialize_requires_agent_confirmation(user, purchase_booking, status):
    purchase_booking.status = status
    purchase_booking.save()

    with pytest.raises(InvalidState):
        payment_reconciliation_service.initialize_payment(user, purchase_booking.id, 'purchase')


def test_initialize_already_paid(user, purchase_booking):
    purchase_booking.payment_status = 'paid'
    purchase_booking.save()

    with pytest.raises(InvalidState):
        payment_reconciliation_service.initialize_payment(user, purchase_booking.id, 'purchase')


def test_provider_error_marks_payment_failed(user, purchase_booking):
    refused = provider_response({'status': False, 'message': 'Invalid key'}, ok=False, status_code=401)

    with mock.patch(POST_PATH, return_value=refused), pytest.raises(ExternalProviderError):
        payment_reconciliation_service.initialize_payment(user, purchase_booking.id, 'purchase')

    payment = Payment.objects.get(booking=purchase_booking)
    assert payment.status == 'failed'
    assert payment.raw_response == {'error': 'Invalid key'}


def test_test_limit_message_is_validation_error(user, purchase_booking):
    refused = provider_response({'status': False, 'message': 'Watch your spending'}, ok=False, status_code=400)

    with mock.patch(POST_PATH, return_value=refused), pytest.raises(ValidationFailed):
        payment_reconciliation_service.initialize_payment(user, purchase_booking.id, 'purchase')


def test_initialize_api_timeout_returns_503(auth_client, user, purchase_booking):
    with mock.patch(POST_PATH, side_effect=requests.Timeout('slow')):
        response = auth_client(user).post(
            f'/api/v1/payments/initialize/{purchase_booking.id}/', {'type': 'purchase'}, format='json'
        )

    assert response.status_code == 503
    assert response.data['status'] == 'error'
    assert Payment.objects.get(booking=purchase_booking).status == 'failed'


def test_initialize_api_provider_error_returns_502(auth_client, user, purchase_booking):
    refused = provider_response({}, ok=False, status_code=500)

    with mock.patch(POST_PATH, return_value=refused):
        response = auth_client(user).post(
            f'/api/v1/payments/initialize/{purchase_booking.id}/', {'type': 'purchase'}, format='json'
        )

    assert response.status_code == 502


def test_initialize_api_unknown_booking(auth_client, user):
    response = auth_client(user).post('/api/v1/payments/initialize/not-a-uuid/', {}, format='json')

    assert response.status_code == 404


# ----- webhook -----

def test_signature_verification():
    body = b'{"event": "charge.success"}'

    assert payment_reconciliation_service.verify_signature(body, sign(body))
    assert not payment_reconciliation_service.verify_signature(body, sign(b'{}'))
    assert not payment_reconciliation_service.verify_signature(body, None)


def test_charge_success_completes_booking_and_sells_property(api_client, pending_payment, purchase_booking):
    response = post_event(api_client, charge_event(pending_payment.reference))

    assert response.status_code == 200
    assert response.json() == {'received': True}

    pending_payment.refresh_from_db()
    purchase_booking.refresh_from_db()
    prop = Property.all_objects.get(pk=purchase_booking.property_id)
    assert pending_payment.status == 'success'
    assert pending_payment.paid_at is not None
    assert purchase_booking.status == 'completed'
    assert purchase_booking.payment_status == 'paid'
    assert prop.status == 'sold'
    assert WebhookLog.objects.get().processed


def test_rental_charge_success_marks_property_rented(api_client, user, rental_booking, rental_listing):
    payment = Payment.objects.create(
        booking=rental_booking, user=user, amount=Decimal('260000'),
        payment_type='rental', reference='ESTATE_rental_ref',
    )

    post_event(api_client, charge_event(payment.reference))

    rental_listing.refresh_from_db()
    assert rental_listing.status == 'rented'


def test_replayed_event_is_idempotent(api_client, pending_payment):
    event = charge_event(pending_payment.reference)
    post_event(api_client, event)
    pending_payment.refresh_from_db()
    first_paid_at = pending_payment.paid_at

    response = post_event(api_client, event)

    pending_payment.refresh_from_db()
    assert response.status_code == 200
    assert pending_payment.paid_at == first_paid_at
    assert WebhookLog.objects.count() == 2


def test_invalid_signature_changes_nothing(api_client, pending_payment, purchase_booking):
    response = post_event(api_client, charge_event(pending_payment.reference), signature='0' * 128)

    assert response.status_code == 401
    assert response.json() == {'received': False, 'message': 'Invalid signature'}
    pending_payment.refresh_from_db()
    purchase_booking.refresh_from_db()
    assert pending_payment.status == 'pending'
    assert purchase_booking.status == 'agent_confirmed'
    assert not WebhookLog.objects.exists()


def test_missing_signature_rejected(api_client, pending_payment):
    response = api_client.post(WEBHOOK_URL, data=b'{}', content_type='application/json')

    assert response.status_code == 401


def test_charge_failed_marks_pending_payment(api_client, pending_payment, purchase_booking):
    post_event(api_client, charge_event(pending_payment.reference, 'charge.failed'))

    pending_payment.refresh_from_db()
    purchase_booking.refresh_from_db()
    assert pending_payment.status == 'failed'
    assert purchase_booking.status == 'agent_confirmed'


def test_unmatched_reference_is_acknowledged(api_client, pending_payment):
    response = post_event(api_client, charge_event('ESTATE_unknown'))

    assert response.status_code == 200
    pending_payment.refresh_from_db()
    assert pending_payment.status == 'pending'


def test_unknown_event_is_ignored(db, api_client):
    response = post_event(api_client, {'event': 'transfer.success', 'data': {}})

    assert response.status_code == 200
    assert WebhookLog.objects.get().event_type == 'transfer.success'


def test_malformed_json_with_valid_signature_is_acknowledged(db, api_client):
    body = b'not json'
    response = api_client.post(
        WEBHOOK_URL, data=body, content_type='application/json', HTTP_X_PAYSTACK_SIGNATURE=sign(body)
    )

    assert response.status_code == 200


def test_success_for_cancelled_booking_leaves_booking(api_client, pending_payment, purchase_booking, listing):
    purchase_booking.status = 'cancelled'
    purchase_booking.save()

    post_event(api_client, charge_event(pending_payment.reference))

    pending_payment.refresh_from_db()
    purchase_booking.refresh_from_db()
    listing.refresh_from_db()
    assert pending_payment.status == 'success'
    assert purchase_booking.status == 'cancelled'
    assert listing.status == 'available'


# ----- end to end -----

def test_purchase_flow(auth_client, user, agent, listing):
    client = auth_client(user)
    booking_id = client.post('/api/v1/bookings/', {
        'property': str(listing.id), 'booking_type': 'purchase',
    }, format='json').data['booking']['id']

    confirmed = auth_client(agent).patch(f'/api/v1/bookings/{booking_id}/confirm/')
    assert confirmed.data['status'] == 'agent_confirmed'

    with mock.patch(POST_PATH, return_value=checkout_ok()):
        init = client.post(f'/api/v1/payments/initialize/{booking_id}/', {'type': 'purchase'}, format='json')
    assert init.status_code == 200
    assert init.data['amount'] == '50000000.00'
    reference = init.data['reference']

    before = client.get(f'/api/v1/payments/verify/{reference}/')
    assert before.status_code == 200
    assert before.data['paymentStatus'] == 'pending'
    assert before.data['bookingStatus'] == 'agent_confirmed'
    assert before.data['paidAt'] is None

    post_event(auth_client(agent), charge_event(reference))

    verify = client.get(f'/api/v1/payments/verify/{reference}/')
    assert verify.status_code == 200
    assert verify.data['paymentStatus'] == 'success'
    assert verify.data['bookingStatus'] == 'completed'
    assert verify.data['paymentType'] == 'purchase'

    other = auth_client(agent).get(f'/api/v1/payments/verify/{reference}/')
    assert other.status_code == 403

    listing.refresh_from_db()
    assert listing.status == 'sold'
    assert client.get('/api/v1/payments/').data['count'] == 1
