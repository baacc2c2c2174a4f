"""
JWT issuing and validation service
"""
from datetime import timedelta
import logging

import jwt
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


class TokenService:
    """
    Service for issuing and validating HS256 access tokens
    """

    @staticmethod
    def issue_token(user) -> str:
        """
        Sign a token for `user` with sub/iat/exp claims.
        """
        now = timezone.now()
        payload = {
            'sub': str(user.id),
            'iat': int(now.timestamp()),
            'exp': int((now + timedelta(days=settings.JWT_EXPIRES_IN_DAYS)).timestamp()),
        }
        return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> dict:
        """
        Verify signature and expiry.

        Raises:
            TokenError: if the token is expired, malformed or badly signed
        """
        try:
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
                options={'require': ['sub', 'iat', 'exp']},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError('Your token has expired. Please log in again.')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected bearer token: {str(e)}")
            raise TokenError('Invalid token. Please log in again.')

    @staticmethod
    def extract_bearer(auth_header: str):
        """
        Return the token from an `Authorization: Bearer <token>` header, or None.
        """
        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return None
        return parts[1]


# Singleton instance
token_service = TokenService()
