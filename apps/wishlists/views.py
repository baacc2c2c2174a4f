"""
Wishlist views
"""
import logging

from django.db.models import Q
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.serializers import MessageSerializer
from apps.core.utils.constants import WISHLIST_TAGS
from .models import WishlistItem
from .serializers import (
    WishlistAddSerializer,
    WishlistBulkAddSerializer,
    WishlistCheckSerializer,
    WishlistItemSerializer,
    WishlistItemWriteSerializer,
    WishlistStatsSerializer,
    WishlistToggleSerializer,
)
from .services.wishlist_service import wishlist_service

logger = logging.getLogger(__name__)

SORT_ORDERING = {
    'newest': ['-created_at'],
    'oldest': ['created_at'],
    'priority': ['-priority', '-created_at'],
}


class WishlistViewSet(mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      viewsets.GenericViewSet):
    """
    The caller's saved properties.
    """
    serializer_class = WishlistItemSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filter_backends = []

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return WishlistItem.objects.none()

        queryset = WishlistItem.objects.filter(user=self.request.user).select_related('property')

        if self.action == 'list':
            params = self.request.query_params
            tags = [tag for tag in params.get('tags', '').split(',') if tag in WISHLIST_TAGS]
            if tags:
                # tags are stored as a JSON list, match any of the quoted values
                condition = Q()
                for tag in tags:
                    condition |= Q(tags__icontains=f'"{tag}"')
                queryset = queryset.filter(condition)
            priority = params.get('priority')
            if priority and priority.isdigit():
                queryset = queryset.filter(priority=int(priority))
            queryset = queryset.order_by(*SORT_ORDERING.get(params.get('sort'), SORT_ORDERING['newest']))
        return queryset

    @extend_schema(
        summary='List wishlist',
        parameters=[
            OpenApiParameter('tags', str, description='Comma separated tags'),
            OpenApiParameter('priority', int, description='Exact priority'),
            OpenApiParameter('sort', str, description="'newest', 'oldest' or 'priority'"),
        ],
    )
    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data['wishlist_count'] = WishlistItem.objects.filter(user=request.user).count()
        return response

    @extend_schema(summary='Get wishlist item')
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(
        summary='Add to wishlist',
        request=WishlistAddSerializer,
        responses={
            201: WishlistItemSerializer,
            200: WishlistItemSerializer,
            400: OpenApiResponse(description='Already in wishlist'),
            404: OpenApiResponse(description='Property not found'),
        },
    )
    def create(self, request):
        serializer = WishlistAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        property_id = data.pop('property')

        item, created = wishlist_service.add_item(request.user, property_id, **data)
        return Response(
            WishlistItemSerializer(item).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(summary='Update wishlist item', request=WishlistItemWriteSerializer,
                   responses={200: WishlistItemSerializer})
    def partial_update(self, request, pk=None):
        item = self.get_object()
        serializer = WishlistItemWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        for key, value in serializer.validated_data.items():
            setattr(item, key, value)
        item.save()
        return Response(WishlistItemSerializer(item).data)

    @extend_schema(summary='Delete wishlist item', responses={204: OpenApiResponse(description='Deleted')})
    def destroy(self, request, pk=None):
        wishlist_service.delete_item(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(summary='Remove a property from the wishlist', responses={200: MessageSerializer})
    @action(detail=False, methods=['delete'], url_path=r'property/(?P<property_id>[^/.]+)')
    def remove_property(self, request, property_id=None):
        wishlist_service.remove_property(request.user, property_id)
        return Response({'message': 'Property removed from wishlist'})

    @extend_schema(summary='Is a property saved?', responses={200: WishlistCheckSerializer})
    @action(detail=False, methods=['get'], url_path=r'check/(?P<property_id>[^/.]+)')
    def check(self, request, property_id=None):
        prop = wishlist_service.get_property(property_id)
        in_wishlist = WishlistItem.objects.filter(user=request.user, property=prop).exists()
        return Response({'in_wishlist': in_wishlist, 'property_id': prop.pk})

    @extend_schema(summary='Toggle a property', request=WishlistToggleSerializer,
                   responses={200: WishlistItemSerializer, 201: WishlistItemSerializer})
    @action(detail=False, methods=['post'])
    def toggle(self, request):
        serializer = WishlistToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item, created = wishlist_service.toggle(request.user, serializer.validated_data['property'])
        message = 'Property added to wishlist' if item.is_active else 'Property removed from wishlist'
        return Response(
            {'message': message, 'wishlist': WishlistItemSerializer(item).data},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(summary='Save several properties', request=WishlistBulkAddSerializer)
    @action(detail=False, methods=['post'], url_path='bulk-add')
    def bulk_add(self, request):
        serializer = WishlistBulkAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = wishlist_service.bulk_add(request.user, serializer.validated_data['property_ids'])
        created = result['created']
        return Response({
            'message': f'{len(created)} properties added to wishlist',
            'skipped': result['skipped'],
            'wishlist': WishlistItemSerializer(created, many=True).data,
        }, status=status.HTTP_201_CREATED)

    @extend_schema(summary='Clear wishlist', request=None, responses={200: MessageSerializer})
    @action(detail=False, methods=['delete'])
    def clear(self, request):
        count = wishlist_service.clear(request.user)
        logger.info(f"Cleared {count} wishlist items for user {request.user.id}")
        return Response({'message': 'Wishlist cleared successfully'})

    @extend_schema(summary='Wishlist statistics', responses={200: WishlistStatsSerializer})
    @action(detail=False, methods=['get'], url_path='stats/summary')
    def stats_summary(self, request):
        return Response(WishlistStatsSerializer(wishlist_service.stats(request.user)).data)
