"""
Payment views
"""
import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from drf_spectacular.utils import extend_schema, OpenApiResponse
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.serializers import ErrorResponseSerializer
from apps.core.utils.constants import USER_ROLE_ADMIN
from .models import Payment
from .serializers import (
    PaymentInitializeResponseSerializer,
    PaymentInitializeSerializer,
    PaymentSerializer,
    PaymentVerifySerializer,
)
from .services.reconciliation import payment_reconciliation_service

logger = logging.getLogger(__name__)


class PaymentViewSet(viewsets.GenericViewSet, mixins.ListModelMixin):
    """
    Payments for rental and purchase bookings.
    """
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Payment.objects.none()

        queryset = Payment.objects.select_related('booking', 'booking__property')
        if self.request.user.role == USER_ROLE_ADMIN:
            return queryset
        return queryset.filter(user=self.request.user)

    @extend_schema(summary="List payments", responses={200: PaymentSerializer(many=True)})
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Initialize payment",
        description=(
            "Start a Paystack checkout for an agent-confirmed rental or purchase booking. "
            "Redirect the payer to the returned authorizationUrl."
        ),
        request=PaymentInitializeSerializer,
        responses={
            200: PaymentInitializeResponseSerializer,
            400: OpenApiResponse(description="Booking cannot be paid"),
            403: OpenApiResponse(description="Not the booking owner"),
            502: OpenApiResponse(ErrorResponseSerializer, description="Payment provider error"),
            503: OpenApiResponse(ErrorResponseSerializer, description="Payment provider unavailable"),
        },
    )
    @action(detail=False, methods=['post'], url_path=r'initialize/(?P<booking_id>[^/.]+)')
    def initialize(self, request, booking_id=None):
        serializer = PaymentInitializeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = payment_reconciliation_service.initialize_payment(
            request.user, booking_id, serializer.validated_data['type']
        )
        return Response(PaymentInitializeResponseSerializer(data).data)

    @extend_schema(
        summary="Verify payment",
        responses={200: PaymentVerifySerializer, 403: OpenApiResponse(description="Forbidden")},
    )
    @action(detail=False, methods=['get'], url_path=r'verify/(?P<reference>[^/]+)')
    def verify(self, request, reference=None):
        data = payment_reconciliation_service.verify_payment(request.user, reference)
        return Response(PaymentVerifySerializer(data).data)


@csrf_exempt
@require_http_methods(["POST"])
def paystack_webhook(request):
    """
    Handle incoming Paystack webhooks.

    Verifies the signature against the raw body, then acknowledges every
    event so Paystack stops retrying.
    """
    payload = request.body
    signature = request.META.get('HTTP_X_PAYSTACK_SIGNATURE')

    if not payment_reconciliation_service.verify_signature(payload, signature):
        logger.warning("Invalid Paystack webhook signature")
        return JsonResponse({'received': False, 'message': 'Invalid signature'}, status=401)

    try:
        event = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.error("Invalid JSON in Paystack webhook")
        return JsonResponse({'received': True})

    if not isinstance(event, dict):
        logger.error("Unexpected Paystack webhook payload")
        return JsonResponse({'received': True})

    payment_reconciliation_service.handle_webhook_event(event)
    return JsonResponse({'received': True})
