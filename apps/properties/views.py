"""
Property views
"""
import logging

from django.db.models import Avg, Count, Q
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.core.permissions import IsAgent, IsListingAgentOrAdmin
from apps.core.utils.constants import PROPERTY_STATUS_AVAILABLE
from apps.notifications.services.dispatcher import notification_dispatcher
from infrastructure.cache.redis_client import redis_client
from .filters import PropertyFilter
from .models import Property
from .serializers import CityStatsSerializer, PropertyCreateUpdateSerializer, PropertySerializer

logger = logging.getLogger(__name__)

CITY_STATS_CACHE_KEY = redis_client.make_key('properties', 'city_stats')


class PropertyViewSet(viewsets.ModelViewSet):
    """ViewSet for property listings"""
    queryset = Property.objects.select_related('agent', 'owner')
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = PropertyFilter
    search_fields = ['title', 'description', 'city', 'street']
    ordering_fields = ['price', 'created_at', 'rating_average', 'area']
    ordering = ['-created_at']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action in ['create', 'partial_update']:
            return PropertyCreateUpdateSerializer
        return PropertySerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'city_stats']:
            return [AllowAny()]
        if self.action == 'create':
            return [IsAuthenticated(), IsAgent()]
        return [IsAuthenticated(), IsListingAgentOrAdmin()]

    @extend_schema(
        summary="List properties",
        description="Active listings with filtering, search and ordering",
        parameters=[
            OpenApiParameter('min_price', float, description='Minimum price'),
            OpenApiParameter('max_price', float, description='Maximum price'),
            OpenApiParameter('search', str, description='Search in title, description, city, street'),
        ],
        responses={200: PropertySerializer(many=True)},
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Create property",
        description="List a new property (agents only). The caller becomes agent and owner.",
        request=PropertyCreateUpdateSerializer,
        responses={
            201: PropertySerializer,
            400: OpenApiResponse(description="Bad Request"),
            403: OpenApiResponse(description="Only agents can list properties")
        },
    )
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prop = serializer.save(agent=request.user, owner=request.user)
        logger.info(f"Property {prop.id} listed by {request.user.email}")
        redis_client.delete(CITY_STATS_CACHE_KEY)
        return Response(PropertySerializer(prop).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update property",
        request=PropertyCreateUpdateSerializer,
        responses={200: PropertySerializer, 403: OpenApiResponse(description="Forbidden")},
    )
    def partial_update(self, request, *args, **kwargs):
        prop = self.get_object()
        previous_price = prop.price
        serializer = self.get_serializer(prop, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        prop = serializer.save()
        redis_client.delete(CITY_STATS_CACHE_KEY)

        kind = 'price_change' if prop.price != previous_price else 'updated'
        notification_dispatcher.notify_property(prop, actor=request.user, kind=kind)
        return Response(PropertySerializer(prop).data)

    @extend_schema(
        summary="Delete property",
        description="Deactivate a listing (listing agent or admin)",
        responses={204: OpenApiResponse(description="Property deactivated")},
    )
    def destroy(self, request, *args, **kwargs):
        prop = self.get_object()
        prop.soft_delete()
        logger.info(f"Property {prop.id} deactivated by {request.user.email}")
        redis_client.delete(CITY_STATS_CACHE_KEY)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Property stats by city",
        responses={200: CityStatsSerializer(many=True)},
        tags=['Properties - Public']
    )
    @action(detail=False, methods=['get'], url_path='stats/cities')
    def city_stats(self, request):
        def compute():
            rows = (
                Property.objects.values('city')
                .annotate(
                    total=Count('id'),
                    available=Count('id', filter=Q(status=PROPERTY_STATUS_AVAILABLE)),
                    average_price=Avg('price'),
                    average_rating=Avg('rating_average'),
                )
                .order_by('-total')
            )
            return [dict(row) for row in CityStatsSerializer(rows, many=True).data]

        return Response(redis_client.get_or_set(CITY_STATS_CACHE_KEY, compute))
