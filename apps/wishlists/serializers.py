"""
Wishlist serializers
"""
from rest_framework import serializers

from apps.core.utils.constants import WISHLIST_TAGS
from .models import WishlistItem


class WishlistPropertySerializer(serializers.Serializer):
    """Summary of the saved property"""
    id = serializers.UUIDField()
    title = serializers.CharField()
    slug = serializers.CharField()
    price = serializers.DecimalField(max_digits=14, decimal_places=2)
    images = serializers.ListField(child=serializers.CharField())
    status = serializers.CharField()
    property_type = serializers.CharField()
    listing_type = serializers.CharField()
    bedrooms = serializers.IntegerField()
    bathrooms = serializers.IntegerField()
    area = serializers.DecimalField(max_digits=10, decimal_places=2)
    city = serializers.CharField()


class WishlistItemSerializer(serializers.ModelSerializer):
    property_details = WishlistPropertySerializer(source='property', read_only=True)

    class Meta:
        model = WishlistItem
        fields = [
            'id', 'property', 'property_details', 'notes', 'tags', 'priority',
            'reminder_date', 'custom_name', 'views', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class WishlistItemWriteSerializer(serializers.Serializer):
    """Shared validation for adding and updating items"""
    notes = serializers.CharField(max_length=200, required=False, allow_blank=True)
    tags = serializers.ListField(
        child=serializers.ChoiceField(choices=WISHLIST_TAGS),
        required=False,
    )
    priority = serializers.IntegerField(min_value=1, max_value=5, required=False)
    reminder_date = serializers.DateTimeField(required=False, allow_null=True)
    custom_name = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def validate_tags(self, value):
        # keep order, drop repeats
        return list(dict.fromkeys(value))


class WishlistAddSerializer(WishlistItemWriteSerializer):
    property = serializers.UUIDField()


class WishlistToggleSerializer(serializers.Serializer):
    property = serializers.UUIDField()


class WishlistBulkAddSerializer(serializers.Serializer):
    property_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class WishlistCheckSerializer(serializers.Serializer):
    in_wishlist = serializers.BooleanField()
    property_id = serializers.UUIDField()


class WishlistStatsSerializer(serializers.Serializer):
    total_items = serializers.IntegerField()
    total_value = serializers.DecimalField(max_digits=16, decimal_places=2)
    average_priority = serializers.FloatField(allow_null=True)
    property_type_breakdown = serializers.DictField(child=serializers.IntegerField())
    status_breakdown = serializers.DictField(child=serializers.IntegerField())
