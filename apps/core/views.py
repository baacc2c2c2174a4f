"""
System views.
"""
import logging

from django.core.cache import cache
from django.db import connection
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


@extend_schema(
    summary="Health check",
    description="Reports database and cache connectivity.",
    tags=['System'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    checks = {}

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        checks['database'] = 'ok'
    except Exception as e:
        logger.error(f"Health check database failure: {str(e)}")
        checks['database'] = 'unavailable'

    try:
        cache.set('health_check', 'ok', 10)
        checks['cache'] = 'ok' if cache.get('health_check') == 'ok' else 'unavailable'
    except Exception as e:
        logger.error(f"Health check cache failure: {str(e)}")
        checks['cache'] = 'unavailable'

    healthy = all(value == 'ok' for value in checks.values())
    return Response(
        {
            'status': 'healthy' if healthy else 'degraded',
            'checks': checks,
            'timestamp': timezone.now().isoformat(),
        },
        status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
