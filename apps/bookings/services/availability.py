"""
Viewing slot availability.

A slot is free when no pending or confirmed booking for the same property
and date overlaps it. Intervals are half-open, so back-to-back slots
(10:00-11:00 then 11:00-12:00) do not conflict.
"""
from dataclasses import dataclass
from datetime import date, time
from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from apps.bookings.models import Booking
from apps.core.exceptions import ValidationFailed
from apps.core.utils.constants import SLOT_HOLDING_STATUSES


@dataclass(frozen=True)
class TimeSlot:
    """A [start, end) window within one day."""
    start: time
    end: time

    def __post_init__(self):
        if self.end <= self.start:
            raise ValidationFailed('Time slot end must be after its start.')

    def overlaps(self, other: 'TimeSlot') -> bool:
        return self.start < other.end and other.start < self.end


class AvailabilityService:
    """
    Read-only availability queries.

    Example usage:
        slot = TimeSlot(time(10, 0), time(11, 0))
        AvailabilityService.check_availability(property_id, date(2026, 1, 5), slot)
    """

    @staticmethod
    def conflicting_bookings(
        property_id: UUID,
        target_date: date,
        slot: TimeSlot,
        exclude_booking_id: Optional[UUID] = None,
    ) -> QuerySet:
        queryset = Booking.objects.filter(
            property_id=property_id,
            date=target_date,
            status__in=SLOT_HOLDING_STATUSES,
            start_time__lt=slot.end,
            end_time__gt=slot.start,
        )
        if exclude_booking_id is not None:
            queryset = queryset.exclude(id=exclude_booking_id)
        return queryset

    @classmethod
    def check_availability(
        cls,
        property_id: UUID,
        target_date: date,
        slot: TimeSlot,
        exclude_booking_id: Optional[UUID] = None,
    ) -> bool:
        return not cls.conflicting_bookings(
            property_id, target_date, slot, exclude_booking_id
        ).exists()


availability_service = AvailabilityService()
