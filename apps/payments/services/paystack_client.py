"""
Paystack API client wrapper
"""
import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from apps.core.exceptions import ExternalProviderError, ServiceUnavailable, ValidationFailed

logger = logging.getLogger(__name__)

# Paystack rejects sandbox charges above its test limit with these messages
TEST_LIMIT_MARKERS = ('Watch your spending', 'Amount cannot be processed')


class PaystackClient:
    """
    Thin wrapper around the Paystack REST API.
    """

    @staticmethod
    def _headers() -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {settings.PAYSTACK_SECRET_KEY}',
            'Content-Type': 'application/json',
        }

    @classmethod
    def initialize_transaction(
        cls,
        email: str,
        amount_minor: int,
        reference: str,
        callback_url: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Start a hosted checkout.

        Args:
            email: Payer email
            amount_minor: Amount in kobo
            reference: Our unique reference
            callback_url: Where Paystack redirects after checkout
            metadata: Echoed back on webhook events

        Returns:
            Paystack `data` object (authorization_url, access_code, reference)

        Raises:
            ServiceUnavailable: provider unreachable or timed out
            ExternalProviderError: provider refused the request
        """
        url = f"{settings.PAYSTACK_BASE_URL.rstrip('/')}/transaction/initialize"
        payload = {
            'email': email,
            'amount': amount_minor,
            'reference': reference,
            'callback_url': callback_url,
            'metadata': metadata or {},
        }

        try:
            response = requests.post(
                url,
                json=payload,
                headers=cls._headers(),
                timeout=settings.PAYSTACK_TIMEOUT_SECONDS,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            logger.error(f"Paystack unreachable while initializing {reference}: {e}")
            raise ServiceUnavailable('Payment provider is unavailable. Please try again.')

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok or not body.get('status'):
            message = body.get('message') or f'Paystack returned HTTP {response.status_code}'
            logger.error(f"Paystack initialize failed for {reference}: {message}")
            if any(marker in message for marker in TEST_LIMIT_MARKERS):
                raise ValidationFailed('Amount too high for test mode. Please use smaller amounts for testing.')
            raise ExternalProviderError(message)

        data = body.get('data') or {}
        if not data.get('authorization_url'):
            raise ExternalProviderError('Payment provider did not return an authorization URL.')
        return data


paystack_client = PaystackClient()
