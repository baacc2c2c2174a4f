"""
Booking serializers
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from apps.core.utils.constants import (
    AGENT_STATUS_APPROVED,
    BOOKING_PAYMENT_STATUSES,
    BOOKING_STATUSES,
    BOOKING_TYPE_VIEWING,
    BOOKING_TYPES,
    CONTACT_PREFERENCES,
    USER_ROLE_AGENT,
)
from .models import Booking
from .services.availability import TimeSlot

TIME_INPUT_FORMATS = ['%H:%M', '%H:%M:%S']


def validate_not_past(value):
    if value < timezone.localdate():
        raise serializers.ValidationError("Cannot book a date in the past")
    return value


class TimeSlotSerializer(serializers.Serializer):
    """`{"start": "HH:MM", "end": "HH:MM"}`"""
    start = serializers.TimeField(format='%H:%M', input_formats=TIME_INPUT_FORMATS)
    end = serializers.TimeField(format='%H:%M', input_formats=TIME_INPUT_FORMATS)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if value['end'] <= value['start']:
            raise serializers.ValidationError({'end': "Time slot end must be after its start"})
        return TimeSlot(value['start'], value['end'])


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking serializer for output"""
    property_title = serializers.CharField(source='property.title', read_only=True)
    user_name = serializers.CharField(source='user.name', read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True)
    agent_name = serializers.CharField(source='agent.name', read_only=True, default=None)
    time_slot = serializers.SerializerMethodField()

    @extend_schema_field(TimeSlotSerializer(allow_null=True))
    def get_time_slot(self, obj):
        return obj.get_time_slot()

    class Meta:
        model = Booking
        fields = [
            'id', 'property', 'property_title', 'user', 'user_name', 'user_email',
            'agent', 'agent_name', 'booking_type', 'status', 'date', 'time_slot',
            'duration', 'message', 'contact_preference', 'number_of_persons',
            'special_requirements', 'price', 'payment_status',
            'cancellation_reason', 'cancelled_at', 'rejection_reason',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class BookingListSerializer(serializers.ModelSerializer):
    """Simplified booking serializer for lists"""
    property_title = serializers.CharField(source='property.title', read_only=True)
    user_name = serializers.CharField(source='user.name', read_only=True)
    time_slot = serializers.SerializerMethodField()

    @extend_schema_field(TimeSlotSerializer(allow_null=True))
    def get_time_slot(self, obj):
        return obj.get_time_slot()

    class Meta:
        model = Booking
        fields = [
            'id', 'property', 'property_title', 'user_name', 'booking_type',
            'status', 'date', 'time_slot', 'price', 'payment_status', 'created_at'
        ]


class BookingCreateSerializer(serializers.Serializer):
    """Input serializer for creating bookings"""
    property = serializers.UUIDField()
    agent = serializers.PrimaryKeyRelatedField(
        queryset=get_user_model().objects.filter(role=USER_ROLE_AGENT, agent_status=AGENT_STATUS_APPROVED),
        required=False,
        help_text="Defaults to the listing agent",
    )
    booking_type = serializers.ChoiceField(choices=BOOKING_TYPES, default=BOOKING_TYPE_VIEWING)
    date = serializers.DateField(required=False, validators=[validate_not_past])
    time_slot = TimeSlotSerializer(required=False)
    duration = serializers.IntegerField(min_value=15, max_value=240, default=60)
    message = serializers.CharField(required=False, allow_blank=True, max_length=500)
    contact_preference = serializers.ChoiceField(choices=CONTACT_PREFERENCES, default='email')
    number_of_persons = serializers.IntegerField(min_value=1, max_value=10, default=1)
    special_requirements = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        if data['booking_type'] == BOOKING_TYPE_VIEWING:
            errors = {}
            if not data.get('date'):
                errors['date'] = "A date is required for viewings"
            if not data.get('time_slot'):
                errors['time_slot'] = "A time slot is required for viewings"
            if errors:
                raise serializers.ValidationError(errors)
        return data


class BookingUpdateSerializer(serializers.Serializer):
    """
    Every field any role may change. The service drops the ones the
    caller's role is not allowed to touch.
    """
    status = serializers.ChoiceField(choices=BOOKING_STATUSES, required=False)
    agent = serializers.PrimaryKeyRelatedField(queryset=get_user_model().objects.all(), required=False)
    date = serializers.DateField(required=False, validators=[validate_not_past])
    time_slot = TimeSlotSerializer(required=False)
    message = serializers.CharField(required=False, allow_blank=True, max_length=500)
    contact_preference = serializers.ChoiceField(choices=CONTACT_PREFERENCES, required=False)
    number_of_persons = serializers.IntegerField(min_value=1, max_value=10, required=False)
    price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    payment_status = serializers.ChoiceField(choices=BOOKING_PAYMENT_STATUSES, required=False)


class BookingCancelSerializer(serializers.Serializer):
    """Reason may be free text or any JSON value"""
    cancellation_reason = serializers.JSONField(required=False)


class BookingRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class AvailabilityCheckSerializer(serializers.Serializer):
    propertyId = serializers.UUIDField()
    date = serializers.DateField()
    startTime = serializers.TimeField(input_formats=TIME_INPUT_FORMATS)
    endTime = serializers.TimeField(input_formats=TIME_INPUT_FORMATS)

    def validate(self, data):
        if data['endTime'] <= data['startTime']:
            raise serializers.ValidationError({'endTime': "End time must be after start time"})
        return data


class AvailabilityResponseSerializer(serializers.Serializer):
    available = serializers.BooleanField()


class BookingStatsSerializer(serializers.Serializer):
    """Output serializer for booking statistics"""
    total_bookings = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    upcoming_confirmed = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=16, decimal_places=2)


class MonthlyBookingSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    bookings = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    total_price = serializers.DecimalField(max_digits=16, decimal_places=2)
