from django.contrib import admin
from .models import WishlistItem


@admin.register(WishlistItem)
class WishlistItemAdmin(admin.ModelAdmin):
    list_display = ['user', 'property', 'priority', 'is_active', 'created_at']
    list_filter = ['is_active', 'priority']
    search_fields = ['user__email', 'property__title', 'custom_name']

    def get_queryset(self, request):
        return WishlistItem.all_objects.select_related('user', 'property')
