"""
Core serializers
"""
from rest_framework import serializers


class MessageSerializer(serializers.Serializer):
    """Simple message response"""
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""
    status = serializers.CharField()
    message = serializers.CharField()
    status_code = serializers.IntegerField()
