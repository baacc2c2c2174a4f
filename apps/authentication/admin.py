"""
Authentication admin configuration
"""
from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """
    Admin configuration for User model
    """
    list_display = ['email', 'name', 'role', 'agent_status', 'is_active', 'created_at']
    list_filter = ['role', 'agent_status', 'is_active', 'email_verified', 'created_at']
    search_fields = ['email', 'name', 'agency']
    ordering = ['-created_at']

    fieldsets = (
        ('Account', {
            'fields': ('id', 'email', 'email_verified', 'password_changed_at')
        }),
        ('Personal Info', {
            'fields': ('name', 'phone', 'photo', 'bio')
        }),
        ('Agent Profile', {
            'fields': ('agency', 'specialization', 'agent_status')
        }),
        ('Role & Status', {
            'fields': ('role', 'is_active', 'is_staff', 'is_superuser')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    readonly_fields = ['id', 'password_changed_at', 'created_at', 'updated_at']
