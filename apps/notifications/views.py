"""
API views for notifications management.
"""
import logging

from django.db.models import Count, Q
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.exceptions import Forbidden
from apps.core.utils.constants import USER_ROLE_ADMIN
from apps.notifications.models import Notification
from apps.notifications.serializers import (
    BulkUpdateResponseSerializer,
    NOTIFICATION_TYPE_VALUES,
    NotificationCountSerializer,
    NotificationCreateSerializer,
    NotificationSerializer,
    NotificationSummarySerializer,
    NotificationUpdateSerializer,
)

logger = logging.getLogger(__name__)


class NotificationViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.CreateModelMixin,
                          mixins.UpdateModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    """
    The caller's own notifications.
    """
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filter_backends = []

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Notification.objects.none()

        queryset = Notification.objects.filter(user=self.request.user)

        if self.action == 'list':
            params = self.request.query_params
            read = params.get('read')
            if read in ('true', 'false'):
                queryset = queryset.filter(is_read=read == 'true')
            notification_type = params.get('type')
            if notification_type in NOTIFICATION_TYPE_VALUES:
                queryset = queryset.filter(notification_type=notification_type)
            if params.get('important') == 'true':
                queryset = queryset.filter(is_important=True)
            if params.get('sort') == 'oldest':
                queryset = queryset.order_by('created_at')
        return queryset

    def get_serializer_class(self):
        if self.action == 'create':
            return NotificationCreateSerializer
        if self.action == 'partial_update':
            return NotificationUpdateSerializer
        return NotificationSerializer

    @extend_schema(
        tags=['Notifications'],
        summary='List notifications',
        parameters=[
            OpenApiParameter('read', bool, description='Filter by read state'),
            OpenApiParameter('type', str, description='Filter by notification type'),
            OpenApiParameter('important', bool, description='Only important notifications'),
            OpenApiParameter('sort', str, description="'oldest' for ascending order"),
        ],
    )
    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data['unread_count'] = Notification.objects.filter(
            user=request.user, is_read=False
        ).count()
        return response

    @extend_schema(tags=['Notifications'], summary='Get notification (marks it read)')
    def retrieve(self, request, *args, **kwargs):
        notification = self.get_object()
        notification.mark_read()
        return Response(NotificationSerializer(notification).data)

    @extend_schema(
        tags=['Notifications'],
        summary='Create notification',
        responses={201: NotificationSerializer, 403: OpenApiResponse(description='Forbidden')},
    )
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        recipient = serializer.validated_data.get('user', request.user)
        if recipient.pk != request.user.pk and request.user.role != USER_ROLE_ADMIN:
            raise Forbidden('You can only create notifications for yourself.')

        notification = serializer.save(user=recipient)
        return Response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=['Notifications'], summary='Update notification', responses={200: NotificationSerializer})
    def partial_update(self, request, *args, **kwargs):
        notification = self.get_object()
        serializer = self.get_serializer(notification, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        if 'is_important' in serializer.validated_data and request.user.role != USER_ROLE_ADMIN:
            raise Forbidden('Only administrators can change the importance of a notification.')

        is_read = serializer.validated_data.get('is_read')
        if is_read is not None:
            notification.read_at = timezone.now() if is_read else None
        serializer.save(read_at=notification.read_at)
        return Response(NotificationSerializer(notification).data)

    @extend_schema(tags=['Notifications'], summary='Delete notification')
    def destroy(self, request, *args, **kwargs):
        return super().destroy(request, *args, **kwargs)

    @extend_schema(tags=['Notifications'], summary='Mark notification read', request=None,
                   responses={200: NotificationSerializer})
    @action(detail=True, methods=['patch'])
    def read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_read()
        return Response(NotificationSerializer(notification).data)

    @extend_schema(tags=['Notifications'], summary='Mark all notifications read', request=None,
                   responses={200: BulkUpdateResponseSerializer})
    @action(detail=False, methods=['patch'], url_path='mark-all-read')
    def mark_all_read(self, request):
        count = Notification.objects.filter(user=request.user, is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
        return Response({'message': 'All notifications marked as read', 'count': count})

    @extend_schema(tags=['Notifications'], summary='Delete read notifications',
                   responses={200: BulkUpdateResponseSerializer})
    @action(detail=False, methods=['delete'], url_path='delete-read')
    def delete_read(self, request):
        count, _ = Notification.objects.filter(user=request.user, is_read=True).delete()
        return Response({'message': 'Read notifications deleted', 'count': count})

    @extend_schema(tags=['Notifications'], summary='Notification counts',
                   responses={200: NotificationCountSerializer})
    @action(detail=False, methods=['get'], url_path='stats/count')
    def count(self, request):
        queryset = Notification.objects.filter(user=request.user)
        return Response({
            'total': queryset.count(),
            'unread': queryset.filter(is_read=False).count(),
        })

    @extend_schema(tags=['Notifications'], summary='Notification summary',
                   responses={200: NotificationSummarySerializer})
    @action(detail=False, methods=['get'], url_path='stats/summary')
    def summary(self, request):
        queryset = Notification.objects.filter(user=request.user)
        by_type = {
            row['notification_type']: {'total': row['total'], 'unread': row['unread']}
            for row in queryset.values('notification_type').annotate(
                total=Count('id'),
                unread=Count('id', filter=Q(is_read=False)),
            ).order_by()
        }
        total = queryset.count()
        unread = queryset.filter(is_read=False).count()
        return Response({
            'total': total,
            'unread': unread,
            'read': total - unread,
            'by_type': by_type,
        })
