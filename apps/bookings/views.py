"""
Booking views
"""
import logging
from datetime import date as date_cls

from django.db.models import Count, Q, Sum
from django.db.models.functions import ExtractMonth
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter, OpenApiResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.core.exceptions import Forbidden, ValidationFailed
from apps.core.permissions import IsAgent, IsAgentOrAdmin, IsBookingParticipant
from apps.core.serializers import ErrorResponseSerializer
from apps.core.utils.constants import (
    BOOKING_PAYMENT_PAID,
    BOOKING_STATUS_COMPLETED,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PAID,
    BOOKING_STATUSES,
    USER_ROLE_ADMIN,
    USER_ROLE_AGENT,
)
from .models import Booking
from .serializers import (
    AvailabilityCheckSerializer,
    AvailabilityResponseSerializer,
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingListSerializer,
    BookingRejectSerializer,
    BookingSerializer,
    BookingStatsSerializer,
    BookingUpdateSerializer,
    MonthlyBookingSerializer,
)
from .services.availability import TimeSlot, availability_service
from .services.booking_service import booking_service

logger = logging.getLogger(__name__)


class BookingViewSet(viewsets.GenericViewSet,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin):
    """
    ViewSet for managing bookings.

    Lists are scoped by role (users see their own bookings, agents the ones
    assigned to them, admins everything). Status changes go through the
    named actions or the role-filtered PATCH.
    """
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['status', 'property', 'booking_type', 'date']
    ordering_fields = ['date', 'created_at', 'price']
    ordering = ['-created_at']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action == 'list':
            return BookingListSerializer
        elif self.action == 'create':
            return BookingCreateSerializer
        elif self.action == 'partial_update':
            return BookingUpdateSerializer
        return BookingSerializer

    def get_queryset(self):
        # Handle schema generation
        if getattr(self, 'swagger_fake_view', False):
            return Booking.objects.none()

        user = self.request.user
        queryset = Booking.objects.select_related('property', 'user', 'agent')

        if self.action != 'list':
            return queryset

        if user.role == USER_ROLE_AGENT:
            return queryset.filter(agent=user)
        elif user.role == USER_ROLE_ADMIN:
            return queryset
        return queryset.filter(user=user)

    def get_permissions(self):
        """Set permissions based on action"""
        if self.action == 'check_availability':
            return [AllowAny()]
        elif self.action == 'retrieve':
            return [IsAuthenticated(), IsBookingParticipant()]
        elif self.action in ['agent_schedule']:
            return [IsAuthenticated(), IsAgent()]
        elif self.action in ['agent_schedule_for', 'stats_summary', 'stats_monthly']:
            return [IsAuthenticated(), IsAgentOrAdmin()]
        return super().get_permissions()

    @extend_schema(
        summary="List bookings",
        description="Users see their bookings, agents see bookings assigned to them, admins see all.",
        parameters=[
            OpenApiParameter('status', str, description='Filter by status'),
            OpenApiParameter('property', str, description='Filter by property UUID'),
            OpenApiParameter('booking_type', str, description='Filter by booking type'),
        ],
        responses={200: BookingListSerializer(many=True)},
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Get booking details",
        responses={
            200: BookingSerializer,
            403: OpenApiResponse(description="Forbidden"),
            404: OpenApiResponse(description="Booking not found")
        },
    )
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(
        summary="Create booking",
        description="Request a viewing, inquiry, rental or purchase. Viewings need a date and a free time slot.",
        request=BookingCreateSerializer,
        examples=[
            OpenApiExample(
                'Viewing',
                value={
                    'property': 'd241ec69-f739-4040-94a0-b46286742dbe',
                    'booking_type': 'viewing',
                    'date': '2026-12-10',
                    'time_slot': {'start': '10:00', 'end': '11:00'},
                    'message': 'Is parking available?'
                },
                request_only=True
            )
        ],
        responses={
            201: BookingSerializer,
            400: OpenApiResponse(ErrorResponseSerializer, description="Invalid data or property unavailable"),
            404: OpenApiResponse(ErrorResponseSerializer, description="Property not found"),
            409: OpenApiResponse(ErrorResponseSerializer, description="Time slot already booked"),
        },
    )
    def create(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_service.create_booking(request.user, serializer.validated_data)
        return Response({'booking': BookingSerializer(booking).data}, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update booking",
        description="Fields the caller's role may not change are ignored. Status changes follow the transition table.",
        request=BookingUpdateSerializer,
        responses={200: BookingSerializer, 403: OpenApiResponse(description="Forbidden")},
    )
    def partial_update(self, request, pk=None):
        booking = self.get_object()
        serializer = BookingUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        booking = booking_service.update_booking(request.user, booking, serializer.validated_data)
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Delete booking",
        description="Owners may delete pending bookings; admins deactivate any booking.",
        responses={204: OpenApiResponse(description="Deleted"), 403: OpenApiResponse(description="Forbidden")},
    )
    def destroy(self, request, pk=None):
        booking = self.get_object()
        booking_service.delete_booking(request.user, booking)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Check availability",
        description="Whether a viewing slot is free for a property on a date.",
        request=AvailabilityCheckSerializer,
        responses={200: AvailabilityResponseSerializer, 400: OpenApiResponse(description="Missing fields")},
    )
    @action(detail=False, methods=['post'], url_path='check-availability')
    def check_availability(self, request):
        serializer = AvailabilityCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        available = availability_service.check_availability(
            data['propertyId'],
            data['date'],
            TimeSlot(data['startTime'], data['endTime']),
        )
        return Response({'available': available})

    @extend_schema(summary="Confirm booking", request=None, responses={200: BookingSerializer})
    @action(detail=True, methods=['patch'])
    def confirm(self, request, pk=None):
        booking = booking_service.confirm_booking(request.user, self.get_object())
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Cancel booking",
        description="Users may cancel their own bookings up to 24 hours before the scheduled time.",
        request=BookingCancelSerializer,
        responses={
            200: BookingSerializer,
            400: OpenApiResponse(description="Booking can no longer be cancelled"),
            403: OpenApiResponse(description="Forbidden"),
        },
    )
    @action(detail=True, methods=['patch'])
    def cancel(self, request, pk=None):
        booking = self.get_object()
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reason = serializer.validated_data.get('cancellation_reason')
        if reason is None:
            reason = request.data.get('cancellationReason', request.data.get('reason'))
        booking = booking_service.cancel_booking(request.user, booking, reason)
        return Response(BookingSerializer(booking).data)

    @extend_schema(summary="Reject booking", request=BookingRejectSerializer, responses={200: BookingSerializer})
    @action(detail=True, methods=['patch'])
    def reject(self, request, pk=None):
        booking = self.get_object()
        serializer = BookingRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_service.reject_booking(request.user, booking, serializer.validated_data.get('reason', ''))
        return Response(BookingSerializer(booking).data)

    @extend_schema(summary="Complete booking", request=None, responses={200: BookingSerializer})
    @action(detail=True, methods=['patch'])
    def complete(self, request, pk=None):
        booking = booking_service.complete_booking(request.user, self.get_object())
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Confirm offline payment",
        description="Mark an agent-confirmed rental or purchase as paid.",
        request=None,
        responses={200: BookingSerializer},
    )
    @action(detail=True, methods=['patch'], url_path='confirm-payment')
    def confirm_payment(self, request, pk=None):
        booking = booking_service.confirm_payment(request.user, self.get_object())
        return Response(BookingSerializer(booking).data)

    def _schedule_response(self, request, agent_id):
        bookings = Booking.objects.filter(agent_id=agent_id).select_related('property', 'user', 'agent')

        target_date = request.query_params.get('date')
        if target_date:
            try:
                bookings = bookings.filter(date=date_cls.fromisoformat(target_date))
            except ValueError:
                raise ValidationFailed('date must be in YYYY-MM-DD format.')
        else:
            bookings = bookings.filter(date__gte=timezone.localdate())

        bookings = bookings.order_by('date', 'start_time')
        return Response(BookingListSerializer(bookings, many=True).data)

    @extend_schema(
        summary="My schedule",
        description="Bookings assigned to the calling agent for a date, or from today on.",
        parameters=[OpenApiParameter('date', str, description='YYYY-MM-DD')],
        responses={200: BookingListSerializer(many=True)},
    )
    @action(detail=False, methods=['get'], url_path='agent/schedule')
    def agent_schedule(self, request):
        return self._schedule_response(request, request.user.id)

    @extend_schema(
        summary="Agent schedule",
        parameters=[OpenApiParameter('date', str, description='YYYY-MM-DD')],
        responses={200: BookingListSerializer(many=True)},
    )
    @action(detail=False, methods=['get'], url_path=r'agent/(?P<agent_id>[0-9a-f-]+)/schedule')
    def agent_schedule_for(self, request, agent_id=None):
        if request.user.role != USER_ROLE_ADMIN and str(request.user.id) != agent_id:
            raise Forbidden('You can only view your own schedule.')
        return self._schedule_response(request, agent_id)

    def _stats_queryset(self, request):
        queryset = Booking.objects.all()
        if request.user.role == USER_ROLE_AGENT:
            queryset = queryset.filter(agent=request.user)
        return queryset

    @extend_schema(summary="Booking statistics", responses={200: BookingStatsSerializer})
    @action(detail=False, methods=['get'], url_path='stats/summary')
    def stats_summary(self, request):
        bookings = self._stats_queryset(request)

        counts = {row['status']: row['total'] for row in bookings.values('status').annotate(total=Count('id')).order_by()}
        by_status = {value: counts.get(value, 0) for value, _ in BOOKING_STATUSES}

        upcoming_confirmed = bookings.filter(
            status=BOOKING_STATUS_CONFIRMED,
            date__gte=timezone.localdate(),
        ).count()

        total_revenue = bookings.filter(
            status__in=[BOOKING_STATUS_PAID, BOOKING_STATUS_COMPLETED],
            payment_status=BOOKING_PAYMENT_PAID,
        ).aggregate(total=Sum('price'))['total'] or 0

        return Response(BookingStatsSerializer({
            'total_bookings': sum(counts.values()),
            'by_status': by_status,
            'upcoming_confirmed': upcoming_confirmed,
            'total_revenue': total_revenue,
        }).data)

    @extend_schema(summary="Monthly bookings", responses={200: MonthlyBookingSerializer(many=True)})
    @action(detail=False, methods=['get'], url_path=r'stats/monthly/(?P<year>\d{4})')
    def stats_monthly(self, request, year=None):
        rows = (
            self._stats_queryset(request)
            .filter(created_at__year=int(year))
            .annotate(month=ExtractMonth('created_at'))
            .values('month')
            .annotate(
                bookings=Count('id'),
                confirmed=Count('id', filter=Q(status=BOOKING_STATUS_CONFIRMED)),
                total_price=Sum('price'),
            )
            .order_by('month')
        )
        data = [
            {**row, 'total_price': row['total_price'] or 0}
            for row in rows
        ]
        return Response(MonthlyBookingSerializer(data, many=True).data)
