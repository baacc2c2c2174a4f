"""
Payment serializers
"""
from rest_framework import serializers

from apps.core.utils.constants import PAYMENT_TYPE_PURCHASE, PAYMENT_TYPES
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    booking_type = serializers.CharField(source='booking.booking_type', read_only=True)
    property_title = serializers.CharField(source='booking.property.title', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'booking', 'booking_type', 'property_title', 'user', 'amount',
            'currency', 'provider', 'payment_type', 'reference', 'status',
            'authorization_url', 'paid_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PaymentInitializeSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=PAYMENT_TYPES, default=PAYMENT_TYPE_PURCHASE)


class PaymentInitializeResponseSerializer(serializers.Serializer):
    authorizationUrl = serializers.URLField()
    reference = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    type = serializers.CharField()
    currency = serializers.CharField()


class PaymentVerifySerializer(serializers.Serializer):
    paymentStatus = serializers.CharField()
    bookingStatus = serializers.CharField(allow_null=True)
    paymentType = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    paidAt = serializers.DateTimeField(allow_null=True)


class WebhookAckSerializer(serializers.Serializer):
    received = serializers.BooleanField()
    message = serializers.CharField(required=False)
