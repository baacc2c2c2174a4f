"""
Custom exceptions and exception handler
"""
import logging
import traceback

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class Unauthorized(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'You are not logged in. Please log in to get access.'
    default_code = 'unauthorized'


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'


class InvalidState(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Operation not allowed in the current state.'
    default_code = 'invalid_state'


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource conflict.'
    default_code = 'conflict'


class ValidationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'validation_failed'


class ExternalProviderError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Payment provider returned an error.'
    default_code = 'external_provider_error'


class ServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Service temporarily unavailable, try again later.'
    default_code = 'service_unavailable'


def _first_message(data):
    """Pull a human readable message out of DRF's error payload."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        for key, value in data.items():
            if isinstance(value, (list, tuple)) and value:
                return f'{key}: {value[0]}'
            return f'{key}: {value}'
    if isinstance(data, (list, tuple)) and data:
        return str(data[0])
    return str(data)


def custom_exception_handler(exc, context):
    """
    Render every error as {status, message, status_code[, errors]}.

    Operational errors (APIException and Django's Http404/PermissionDenied)
    keep their message. Anything else is logged and rendered as a generic
    500, with the traceback attached only when DEBUG is on.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
            exc_info=exc,
        )
        data = {
            'status': 'error',
            'message': 'Something went very wrong!',
            'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR,
        }
        if settings.DEBUG:
            data['error_type'] = exc.__class__.__name__
            data['stack'] = ''.join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        return Response(data, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    custom_response_data = {
        'status': 'fail' if response.status_code < 500 else 'error',
        'message': _first_message(response.data),
        'status_code': response.status_code,
    }

    # Add field errors if present
    if isinstance(response.data, dict) and 'detail' not in response.data:
        custom_response_data['errors'] = response.data
    elif isinstance(response.data, list):
        custom_response_data['errors'] = response.data

    response.data = custom_response_data
    return response
