"""
Property serializers
"""
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .models import Property


class AddressSerializer(serializers.Serializer):
    """Structured address output"""
    street = serializers.CharField()
    city = serializers.CharField()
    state = serializers.CharField()
    zip_code = serializers.CharField(allow_blank=True)
    country = serializers.CharField()


class PropertySerializer(serializers.ModelSerializer):
    """Property listing serializer"""
    agent_name = serializers.CharField(source='agent.name', read_only=True)
    address = serializers.SerializerMethodField()

    @extend_schema_field(AddressSerializer)
    def get_address(self, obj):
        return obj.address

    class Meta:
        model = Property
        fields = [
            'id', 'title', 'slug', 'description', 'price', 'price_discount',
            'status', 'property_type', 'listing_type', 'bedrooms', 'bathrooms',
            'area', 'year_built', 'amenities', 'images', 'address',
            'latitude', 'longitude', 'agent', 'agent_name', 'owner',
            'rating_average', 'rating_quantity', 'wishlist_count',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PropertyCreateUpdateSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating listings"""

    class Meta:
        model = Property
        fields = [
            'title', 'description', 'price', 'price_discount', 'status',
            'property_type', 'listing_type', 'bedrooms', 'bathrooms', 'area',
            'year_built', 'amenities', 'images', 'street', 'city', 'state',
            'zip_code', 'country', 'latitude', 'longitude'
        ]

    def validate_amenities(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Amenities must be an object of flags")
        return value

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Images must be a list of URLs")
        return value

    def validate(self, data):
        price = data.get('price', getattr(self.instance, 'price', None))
        discount = data.get('price_discount', getattr(self.instance, 'price_discount', None))
        if discount is not None and price is not None and discount >= price:
            raise serializers.ValidationError(
                {'price_discount': f"Discount price ({discount}) should be below regular price"}
            )
        return data


class CityStatsSerializer(serializers.Serializer):
    city = serializers.CharField()
    total = serializers.IntegerField()
    available = serializers.IntegerField()
    average_price = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_rating = serializers.DecimalField(max_digits=3, decimal_places=2)
