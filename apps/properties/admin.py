"""
Property admin configuration
"""
from django.contrib import admin
from .models import Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ['title', 'city', 'price', 'status', 'listing_type', 'agent', 'is_active', 'created_at']
    list_filter = ['status', 'property_type', 'listing_type', 'is_active', 'city']
    search_fields = ['title', 'city', 'agent__email']
    readonly_fields = ['slug', 'rating_average', 'rating_quantity', 'wishlist_count', 'created_at', 'updated_at']

    def get_queryset(self, request):
        return Property.all_objects.select_related('agent')
