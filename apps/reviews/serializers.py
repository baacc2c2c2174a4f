"""
Review serializers
"""
from decimal import Decimal, ROUND_HALF_UP

from rest_framework import serializers

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.name', read_only=True)
    user_photo = serializers.CharField(source='user.photo', read_only=True)

    class Meta:
        model = Review
        fields = [
            'id', 'property', 'user', 'user_name', 'user_photo', 'rating',
            'comment', 'is_verified_purchase', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ReviewWriteSerializer(serializers.Serializer):
    rating = serializers.FloatField(min_value=1, max_value=5)
    comment = serializers.CharField(max_length=2000)

    def validate_rating(self, value):
        return Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)

    def validate_comment(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("A review must have a comment")
        return value


class ReviewCreateSerializer(ReviewWriteSerializer):
    property = serializers.UUIDField()


class ReviewStatsSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    average = serializers.DecimalField(max_digits=2, decimal_places=1, allow_null=True)
    distribution = serializers.DictField(child=serializers.IntegerField())
