"""
URL configuration for core system endpoints.
"""
from django.urls import path
from apps.core.views import health_check

urlpatterns = [
    path('', health_check, name='health_check'),
]
