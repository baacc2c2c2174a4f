"""
Serializers for notifications API.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.notifications.models import Notification, NotificationType


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for in-app notifications."""

    notification_type_display = serializers.CharField(
        source='get_notification_type_display',
        read_only=True,
        help_text='Human-readable notification type'
    )

    class Meta:
        model = Notification
        fields = [
            'id',
            'user',
            'title',
            'message',
            'notification_type',
            'notification_type_display',
            'is_read',
            'read_at',
            'is_important',
            'related_object_type',
            'related_object_id',
            'action_url',
            'icon',
            'email_sent',
            'metadata',
            'created_at',
        ]
        read_only_fields = fields


class NotificationCreateSerializer(serializers.ModelSerializer):
    """Input serializer for creating a notification by hand."""

    user = serializers.PrimaryKeyRelatedField(
        queryset=get_user_model().objects.all(),
        required=False,
        help_text='Recipient. Defaults to the caller; only admins may target other users.'
    )

    class Meta:
        model = Notification
        fields = [
            'user', 'title', 'message', 'notification_type', 'is_important',
            'related_object_type', 'related_object_id', 'action_url', 'icon', 'metadata',
        ]


class NotificationUpdateSerializer(serializers.ModelSerializer):
    """Recipients may flip is_read; is_important is admin only (enforced in the view)."""

    class Meta:
        model = Notification
        fields = ['is_read', 'is_important']


class NotificationCountSerializer(serializers.Serializer):
    """Serializer for notification counts."""

    total = serializers.IntegerField(help_text='Total number of notifications')
    unread = serializers.IntegerField(help_text='Number of unread notifications')


class NotificationSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    unread = serializers.IntegerField()
    read = serializers.IntegerField()
    by_type = serializers.DictField(child=serializers.DictField())


class BulkUpdateResponseSerializer(serializers.Serializer):
    message = serializers.CharField(help_text='Success message')
    count = serializers.IntegerField(help_text='Number of notifications affected')


NOTIFICATION_TYPE_VALUES = NotificationType.values
