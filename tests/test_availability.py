from datetime import time, timedelta

import pytest

from apps.bookings.services.availability import TimeSlot, availability_service
from apps.core.exceptions import ValidationFailed


def slot(start_hour, end_hour, start_minute=0, end_minute=0):
    return TimeSlot(time(start_hour, start_minute), time(end_hour, end_minute))


def test_time_slot_requires_end_after_start():
    with pytest.raises(ValidationFailed):
        TimeSlot(time(11, 0), time(10, 0))
    with pytest.raises(ValidationFailed):
        TimeSlot(time(10, 0), time(10, 0))


def test_time_slot_overlap_is_half_open():
    assert slot(10, 11).overlaps(slot(10, 12, 30))
    assert not slot(10, 11).overlaps(slot(11, 12))
    assert not slot(11, 12).overlaps(slot(10, 11))


def test_free_when_no_bookings(listing, viewing_date):
    assert availability_service.check_availability(listing.id, viewing_date, slot(10, 11))


def test_overlapping_pending_booking_blocks(make_booking, listing, viewing_date):
    make_booking(start_time=time(10, 0), end_time=time(11, 0))

    assert not availability_service.check_availability(listing.id, viewing_date, slot(10, 11, 30))
    assert not availability_service.check_availability(listing.id, viewing_date, slot(9, 10, end_minute=30))


def test_back_to_back_slots_do_not_conflict(make_booking, listing, viewing_date):
    make_booking(start_time=time(10, 0), end_time=time(11, 0))

    assert availability_service.check_availability(listing.id, viewing_date, slot(11, 12))
    assert availability_service.check_availability(listing.id, viewing_date, slot(9, 10))


@pytest.mark.parametrize('status', ['cancelled', 'rejected', 'completed'])
def test_released_statuses_free_the_slot(make_booking, listing, viewing_date, status):
    make_booking(status=status)

    assert availability_service.check_availability(listing.id, viewing_date, slot(10, 11))


def test_confirmed_booking_blocks(make_booking, listing, viewing_date):
    make_booking(status='confirmed')

    assert not availability_service.check_availability(listing.id, viewing_date, slot(10, 11))


def test_other_date_or_property_is_free(make_booking, make_property, listing, viewing_date):
    make_booking()
    other_listing = make_property()

    assert availability_service.check_availability(other_listing.id, viewing_date, slot(10, 11))
    assert availability_service.check_availability(
        listing.id, viewing_date + timedelta(days=1), slot(10, 11)
    )


def test_excluded_booking_does_not_conflict_with_itself(make_booking, listing, viewing_date):
    booking = make_booking()

    assert availability_service.check_availability(
        listing.id, viewing_date, slot(10, 11), exclude_booking_id=booking.id
    )


def test_check_availability_endpoint_is_public(api_client, make_booking, listing, viewing_date):
    make_booking()

    response = api_client.post('/api/v1/bookings/check-availability/', {
        'propertyId': str(listing.id),
        'date': viewing_date.isoformat(),
        'startTime': '10:30',
        'endTime': '11:30',
    }, format='json')

    assert response.status_code == 200
    assert response.data == {'available': False}


def test_check_availability_endpoint_validates_input(api_client, listing):
    response = api_client.post('/api/v1/bookings/check-availability/', {
        'propertyId': str(listing.id),
    }, format='json')

    assert response.status_code == 400
    assert response.data['status'] == 'fail'
