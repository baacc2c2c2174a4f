from datetime import time, timedelta

from django.utils import timezone

from apps.bookings.models import Booking

BOOKINGS_URL = '/api/v1/bookings/'


def detail_url(booking, suffix=''):
    return f'{BOOKINGS_URL}{booking.id}/{suffix}'


def test_create_viewing_returns_wrapped_booking(auth_client, user, listing, viewing_date):
    response = auth_client(user).post(BOOKINGS_URL, {
        'property': str(listing.id),
        'booking_type': 'viewing',
        'date': viewing_date.isoformat(),
        'time_slot': {'start': '10:00', 'end': '11:00'},
    }, format='json')

    assert response.status_code == 201
    assert response.data['booking']['status'] == 'pending'
    assert response.data['booking']['time_slot'] == {'start': '10:00', 'end': '11:00'}


def test_create_overlapping_viewing_returns_409(auth_client, user, other_user, listing, make_booking, viewing_date):
    make_booking(user=other_user)

    response = auth_client(user).post(BOOKINGS_URL, {
        'property': str(listing.id),
        'date': viewing_date.isoformat(),
        'time_slot': {'start': '10:30', 'end': '11:30'},
    }, format='json')

    assert response.status_code == 409
    assert response.data['status'] == 'fail'


def test_create_viewing_requires_slot(auth_client, user, listing, viewing_date):
    response = auth_client(user).post(BOOKINGS_URL, {
        'property': str(listing.id),
        'date': viewing_date.isoformat(),
    }, format='json')

    assert response.status_code == 400
    assert 'time_slot' in response.data['errors']


def test_create_in_the_past_rejected(auth_client, user, listing):
    response = auth_client(user).post(BOOKINGS_URL, {
        'property': str(listing.id),
        'date': (timezone.localdate() - timedelta(days=1)).isoformat(),
        'time_slot': {'start': '10:00', 'end': '11:00'},
    }, format='json')

    assert response.status_code == 400


def test_create_with_supplied_agent(auth_client, user, agent, other_agent, listing):
    response = auth_client(user).post(BOOKINGS_URL, {
        'property': str(listing.id),
        'booking_type': 'inquiry',
        'agent': str(other_agent.id),
    }, format='json')

    assert response.status_code == 201
    assert response.data['booking']['agent'] == other_agent.id


def test_create_with_non_agent_as_agent_rejected(auth_client, user, other_user, listing):
    response = auth_client(user).post(BOOKINGS_URL, {
        'property': str(listing.id),
        'booking_type': 'inquiry',
        'agent': str(other_user.id),
    }, format='json')

    assert response.status_code == 400
    assert 'agent' in response.data['errors']


def test_anonymous_cannot_list(api_client):
    response = api_client.get(BOOKINGS_URL)

    assert response.status_code == 401


def test_list_is_scoped_by_role(auth_client, make_booking, user, other_user, agent, other_agent,
                                admin_user, make_property, viewing_date):
    own = make_booking()
    other_listing = make_property(agent=other_agent, owner=other_agent)
    make_booking(user=other_user, property=other_listing, agent=other_agent)

    user_ids = [row['id'] for row in auth_client(user).get(BOOKINGS_URL).data['results']]
    agent_ids = [row['id'] for row in auth_client(agent).get(BOOKINGS_URL).data['results']]
    admin_count = auth_client(admin_user).get(BOOKINGS_URL).data['count']

    assert user_ids == [str(own.id)]
    assert agent_ids == [str(own.id)]
    assert admin_count == 2


def test_retrieve_by_non_participant_forbidden(auth_client, make_booking, other_user):
    booking = make_booking()

    response = auth_client(other_user).get(detail_url(booking))

    assert response.status_code == 403


def test_cancel_by_non_owner_forbidden_and_unchanged(auth_client, make_booking, other_user):
    booking = make_booking()

    response = auth_client(other_user).patch(detail_url(booking, 'cancel/'), {}, format='json')

    assert response.status_code == 403
    booking.refresh_from_db()
    assert booking.status == 'pending'


def test_cancel_accepts_reason_aliases(auth_client, make_booking, user):
    booking = make_booking()

    response = auth_client(user).patch(detail_url(booking, 'cancel/'), {'reason': 'Found another place'},
                                       format='json')

    assert response.status_code == 200
    assert response.data['status'] == 'cancelled'
    assert response.data['cancellation_reason'] == 'Found another place'


def test_agent_confirms_then_completes(auth_client, make_booking, agent):
    booking = make_booking()
    client = auth_client(agent)

    assert client.patch(detail_url(booking, 'confirm/')).data['status'] == 'confirmed'
    assert client.patch(detail_url(booking, 'complete/')).data['status'] == 'completed'


def test_user_cannot_confirm(auth_client, make_booking, user):
    booking = make_booking()

    response = auth_client(user).patch(detail_url(booking, 'confirm/'))

    assert response.status_code == 403


def test_reject_invalid_state_returns_400(auth_client, make_booking, agent):
    booking = make_booking(status='completed')

    response = auth_client(agent).patch(detail_url(booking, 'reject/'), {'reason': 'no'}, format='json')

    assert response.status_code == 400


def test_user_patch_cannot_change_status(auth_client, make_booking, user):
    booking = make_booking()

    response = auth_client(user).patch(detail_url(booking), {'status': 'confirmed', 'message': 'See you'},
                                       format='json')

    assert response.status_code == 200
    assert response.data['status'] == 'pending'
    assert response.data['message'] == 'See you'


def test_patch_cannot_move_viewing_into_the_past(auth_client, make_booking, user):
    booking = make_booking()

    response = auth_client(user).patch(detail_url(booking), {
        'date': (timezone.localdate() - timedelta(days=1)).isoformat(),
    }, format='json')

    assert response.status_code == 400
    assert 'date' in response.data['errors']
    booking.refresh_from_db()
    assert booking.date >= timezone.localdate()


def test_owner_deletes_pending(auth_client, make_booking, user):
    booking = make_booking()

    response = auth_client(user).delete(detail_url(booking))

    assert response.status_code == 204
    assert not Booking.all_objects.filter(id=booking.id).exists()


def test_agent_schedule_for_day(auth_client, make_booking, agent, other_user, viewing_date):
    make_booking()
    make_booking(user=other_user, start_time=time(13, 0), end_time=time(14, 0))
    make_booking(user=other_user, date=viewing_date + timedelta(days=1))

    response = auth_client(agent).get(f'{BOOKINGS_URL}agent/schedule/', {'date': viewing_date.isoformat()})

    assert response.status_code == 200
    assert len(response.data) == 2


def test_agent_schedule_bad_date(auth_client, agent):
    response = auth_client(agent).get(f'{BOOKINGS_URL}agent/schedule/', {'date': 'tomorrow'})

    assert response.status_code == 400


def test_agent_cannot_view_other_agent_schedule(auth_client, agent, other_agent):
    response = auth_client(agent).get(f'{BOOKINGS_URL}agent/{other_agent.id}/schedule/')

    assert response.status_code == 403


def test_admin_views_agent_schedule(auth_client, admin_user, agent, make_booking):
    make_booking()

    response = auth_client(admin_user).get(f'{BOOKINGS_URL}agent/{agent.id}/schedule/')

    assert response.status_code == 200
    assert len(response.data) == 1


def test_stats_summary(auth_client, make_booking, agent, other_user, listing, viewing_date):
    make_booking()
    make_booking(user=other_user, status='confirmed', start_time=time(12, 0), end_time=time(13, 0))
    make_booking(booking_type='purchase', status='completed', payment_status='paid', price=listing.price,
                 date=None, start_time=None, end_time=None)

    response = auth_client(agent).get(f'{BOOKINGS_URL}stats/summary/')

    assert response.status_code == 200
    assert response.data['total_bookings'] == 3
    assert response.data['by_status']['pending'] == 1
    assert response.data['by_status']['rejected'] == 0
    assert response.data['upcoming_confirmed'] == 1
    assert response.data['total_revenue'] == '50000000.00'


def test_stats_forbidden_for_users(auth_client, user):
    response = auth_client(user).get(f'{BOOKINGS_URL}stats/summary/')

    assert response.status_code == 403


def test_monthly_stats(auth_client, make_booking, admin_user):
    make_booking()
    year = timezone.localtime().year

    response = auth_client(admin_user).get(f'{BOOKINGS_URL}stats/monthly/{year}/')

    assert response.status_code == 200
    assert response.data[0]['bookings'] == 1
    assert response.data[0]['month'] == timezone.localtime().month
