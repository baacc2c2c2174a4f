from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['property', 'user', 'rating', 'is_verified_purchase', 'created_at']
    list_filter = ['is_verified_purchase', 'rating']
    search_fields = ['property__title', 'user__email', 'comment']
