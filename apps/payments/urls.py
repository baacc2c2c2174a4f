"""
Payment app URLs.
"""
from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import PaymentViewSet, paystack_webhook

app_name = 'payments'

router = DefaultRouter()
router.register(r'', PaymentViewSet, basename='payment')

urlpatterns = [
    path('webhook/paystack/', paystack_webhook, name='paystack-webhook'),
] + router.urls
