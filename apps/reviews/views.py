"""
Review views
"""
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .models import Review
from .serializers import ReviewCreateSerializer, ReviewSerializer, ReviewStatsSerializer, ReviewWriteSerializer
from .services.review_service import review_service


class ReviewViewSet(mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    viewsets.GenericViewSet):
    """
    Public property reviews; authors manage their own.
    """
    queryset = Review.objects.select_related('user', 'property')
    serializer_class = ReviewSerializer
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['property', 'user', 'is_verified_purchase']
    ordering_fields = ['rating', 'created_at']
    ordering = ['-created_at']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'property_stats']:
            return [AllowAny()]
        return [IsAuthenticated()]

    @extend_schema(
        summary='List reviews',
        parameters=[
            OpenApiParameter('property', str, description='Filter by property UUID'),
            OpenApiParameter('ordering', str, description="e.g. '-rating'"),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary='Write a review',
        request=ReviewCreateSerializer,
        responses={
            201: ReviewSerializer,
            400: OpenApiResponse(description='Already reviewed'),
            404: OpenApiResponse(description='Property not found'),
        },
    )
    def create(self, request):
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        review = review_service.create_review(request.user, data['property'], data['rating'], data['comment'])
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary='Edit a review', request=ReviewWriteSerializer, responses={200: ReviewSerializer})
    def partial_update(self, request, pk=None):
        review = self.get_object()
        serializer = ReviewWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        review = review_service.update_review(request.user, review, serializer.validated_data)
        return Response(ReviewSerializer(review).data)

    @extend_schema(summary='Delete a review', responses={204: OpenApiResponse(description='Deleted')})
    def destroy(self, request, pk=None):
        review_service.delete_review(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(summary='Rating summary for a property', responses={200: ReviewStatsSerializer})
    @action(detail=False, methods=['get'], url_path=r'property/(?P<property_id>[^/.]+)/stats')
    def property_stats(self, request, property_id=None):
        return Response(ReviewStatsSerializer(review_service.property_stats(property_id)).data)
