"""
Bearer token authentication for DRF
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import authentication, exceptions

from .models import User
from .services.token_service import TokenError, token_service


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Authenticates `Authorization: Bearer <jwt>` requests.

    Returns None when no bearer header is present so anonymous access to
    public endpoints keeps working.
    """

    def authenticate(self, request):
        token = token_service.extract_bearer(request.META.get('HTTP_AUTHORIZATION', ''))
        if not token:
            return None

        try:
            payload = token_service.decode_token(token)
        except TokenError as e:
            raise exceptions.AuthenticationFailed(str(e))

        try:
            user = User.objects.get(id=payload['sub'])
        except (User.DoesNotExist, ValueError, DjangoValidationError):
            raise exceptions.AuthenticationFailed('The user belonging to this token no longer exists.')

        if not user.is_active:
            raise exceptions.AuthenticationFailed('This account has been deactivated.')

        if user.changed_password_after(payload['iat']):
            raise exceptions.AuthenticationFailed('User recently changed password. Please log in again.')

        return (user, token)

    def authenticate_header(self, request):
        return 'Bearer realm="api"'
