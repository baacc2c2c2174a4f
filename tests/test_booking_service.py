from datetime import time, timedelta

import pytest
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.services.availability import TimeSlot
from apps.bookings.services.booking_service import booking_service
from apps.core.exceptions import Conflict, Forbidden, InvalidState, NotFound
from apps.notifications.models import Notification


def viewing_data(listing, day, start=time(10, 0), end=time(11, 0)):
    return {
        'property': listing.id,
        'booking_type': 'viewing',
        'date': day,
        'time_slot': TimeSlot(start, end),
    }


def scheduled(make_booking, start, status='confirmed'):
    """Booking starting at the aware datetime `start`."""
    local = timezone.localtime(start)
    return make_booking(
        status=status,
        date=local.date(),
        start_time=local.time(),
        end_time=(local + timedelta(minutes=30)).time(),
    )


@pytest.fixture
def now():
    return timezone.localtime().replace(second=0, microsecond=0)


def test_create_viewing_assigns_listing_agent_and_notifies(user, agent, listing, viewing_date):
    booking = booking_service.create_booking(user, viewing_data(listing, viewing_date))

    assert booking.status == 'pending'
    assert booking.agent == agent
    assert booking.start_time == time(10, 0)
    assert Notification.objects.filter(user=user, related_object_id=booking.id).exists()
    assert Notification.objects.filter(user=agent, related_object_id=booking.id, is_important=True).exists()


def test_create_overlapping_viewing_conflicts(user, other_user, listing, viewing_date):
    booking_service.create_booking(user, viewing_data(listing, viewing_date))

    with pytest.raises(Conflict):
        booking_service.create_booking(
            other_user, viewing_data(listing, viewing_date, time(10, 30), time(11, 30))
        )
    assert Booking.objects.count() == 1


def test_create_back_to_back_viewing_succeeds(user, other_user, listing, viewing_date):
    booking_service.create_booking(user, viewing_data(listing, viewing_date))
    second = booking_service.create_booking(
        other_user, viewing_data(listing, viewing_date, time(11, 0), time(12, 0))
    )

    assert second.status == 'pending'


def test_slot_freed_by_cancellation(user, other_user, listing, viewing_date):
    first = booking_service.create_booking(user, viewing_data(listing, viewing_date))
    booking_service.cancel_booking(user, first)

    second = booking_service.create_booking(other_user, viewing_data(listing, viewing_date))
    assert second.status == 'pending'


def test_create_on_unavailable_property(user, make_property, viewing_date):
    sold = make_property(status='sold')

    with pytest.raises(InvalidState):
        booking_service.create_booking(user, viewing_data(sold, viewing_date))


def test_create_on_missing_property(user, listing, viewing_date):
    data = viewing_data(listing, viewing_date)
    listing.delete()

    with pytest.raises(NotFound):
        booking_service.create_booking(user, data)


def test_purchase_copies_listing_price(user, listing):
    booking = booking_service.create_booking(user, {'property': listing.id, 'booking_type': 'purchase'})

    assert booking.price == listing.price
    assert booking.payment_status == 'unpaid'
    assert booking.date is None



def test_create_keeps_supplied_agent(user, agent, other_agent, listing, viewing_date):
    data = {**viewing_data(listing, viewing_date), 'agent': other_agent}

    booking = booking_service.create_booking(user, data)

    assert booking.agent == other_agent
    assert listing.agent == agent


@pytest.mark.parametrize('booking_type,expected', [
    ('viewing', 'confirmed'),
    ('inquiry', 'confirmed'),
    ('rental', 'agent_confirmed'),
    ('purchase', 'agent_confirmed'),
])
def test_confirm_target_depends_on_type(make_booking, agent, booking_type, expected):
    booking = make_booking(booking_type=booking_type)

    assert booking_service.confirm_booking(agent, booking).status == expected


def test_confirm_by_other_agent_forbidden(make_booking, other_agent):
    booking = make_booking()

    with pytest.raises(Forbidden):
        booking_service.confirm_booking(other_agent, booking)


def test_confirm_twice_is_invalid_state(make_booking, agent):
    booking = make_booking()
    booking_service.confirm_booking(agent, booking)

    with pytest.raises(InvalidState):
        booking_service.confirm_booking(agent, booking)


def test_user_cancel_just_outside_notice_period(make_booking, user, now):
    booking = scheduled(make_booking, now + timedelta(hours=24, minutes=1))

    cancelled = booking_service.cancel_booking(user, booking, reason='Change of plans', now=now)

    assert cancelled.status == 'cancelled'
    assert cancelled.cancellation_reason == 'Change of plans'
    assert cancelled.cancelled_at == now


def test_user_cancel_inside_notice_period_rejected(make_booking, user, now):
    booking = scheduled(make_booking, now + timedelta(hours=23, minutes=59))

    with pytest.raises(InvalidState):
        booking_service.cancel_booking(user, booking, now=now)

    booking.refresh_from_db()
    assert booking.status == 'confirmed'


def test_pending_booking_cancellable_any_time(make_booking, user, now):
    booking = scheduled(make_booking, now + timedelta(hours=1), status='pending')

    assert booking_service.cancel_booking(user, booking, now=now).status == 'cancelled'


def test_agent_skips_notice_period(make_booking, agent, now):
    booking = scheduled(make_booking, now + timedelta(hours=2))

    assert booking_service.cancel_booking(agent, booking, now=now).status == 'cancelled'


def test_structured_cancellation_reason_stored_as_json(make_booking, user):
    booking = make_booking()

    cancelled = booking_service.cancel_booking(user, booking, reason={'code': 'moved', 'note': 'relocating'})

    assert cancelled.cancellation_reason == '{"code": "moved", "note": "relocating"}'


def test_non_owner_cancel_forbidden_and_unchanged(make_booking, other_user):
    booking = make_booking()

    with pytest.raises(Forbidden):
        booking_service.cancel_booking(other_user, booking)

    booking.refresh_from_db()
    assert booking.status == 'pending'
    assert booking.cancelled_at is None


def test_cancel_completed_booking_invalid(make_booking, admin_user):
    booking = make_booking(status='completed')

    with pytest.raises(InvalidState):
        booking_service.cancel_booking(admin_user, booking)


def test_reject_stores_reason(make_booking, agent):
    booking = make_booking()

    rejected = booking_service.reject_booking(agent, booking, reason='Listing under offer')

    assert rejected.status == 'rejected'
    assert rejected.rejection_reason == 'Listing under offer'


def test_complete_requires_confirmed(make_booking, agent):
    booking = make_booking()

    with pytest.raises(InvalidState):
        booking_service.complete_booking(agent, booking)

    booking_service.confirm_booking(agent, booking)
    assert booking_service.complete_booking(agent, booking).status == 'completed'


def test_manual_payment_confirmation(make_booking, agent, listing):
    booking = make_booking(booking_type='purchase', status='agent_confirmed', date=None,
                           start_time=None, end_time=None, price=listing.price)

    paid = booking_service.confirm_payment(agent, booking)

    assert paid.status == 'paid'
    assert paid.payment_status == 'paid'


def test_user_update_drops_disallowed_fields(make_booking, user):
    booking = make_booking()

    updated = booking_service.update_booking(user, booking, {'message': 'Bring keys', 'status': 'confirmed'})

    assert updated.message == 'Bring keys'
    assert updated.status == 'pending'


def test_agent_update_illegal_transition_forbidden(make_booking, agent):
    booking = make_booking()

    with pytest.raises(Forbidden):
        booking_service.update_booking(agent, booking, {'status': 'paid'})


def test_reschedule_into_taken_slot_conflicts(make_booking, user, other_user, viewing_date):
    make_booking(user=other_user, start_time=time(14, 0), end_time=time(15, 0))
    booking = make_booking()

    with pytest.raises(Conflict):
        booking_service.update_booking(user, booking, {'time_slot': TimeSlot(time(14, 30), time(15, 30))})


def test_owner_deletes_pending_booking(make_booking, user):
    booking = make_booking()

    booking_service.delete_booking(user, booking)

    assert not Booking.all_objects.filter(id=booking.id).exists()


def test_admin_delete_is_soft(make_booking, admin_user):
    booking = make_booking(status='confirmed')

    booking_service.delete_booking(admin_user, booking)

    assert not Booking.objects.filter(id=booking.id).exists()
    assert Booking.all_objects.filter(id=booking.id).exists()


def test_owner_cannot_delete_confirmed_booking(make_booking, user):
    booking = make_booking(status='confirmed')

    with pytest.raises(Forbidden):
        booking_service.delete_booking(user, booking)


def test_update_compares_against_locked_status(make_booking, agent, user):
    booking = make_booking()
    stale = Booking.objects.get(pk=booking.pk)
    stale.status = 'confirmed'

    updated = booking_service.update_booking(agent, stale, {'status': 'confirmed'})

    assert updated.status == 'confirmed'
    assert Notification.objects.filter(
        user=user, related_object_id=booking.id, metadata__kind='confirmed'
    ).exists()
