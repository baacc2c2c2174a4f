import itertools
from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from apps.authentication.models import User
from apps.authentication.services.token_service import token_service
from apps.bookings.models import Booking
from apps.core.utils.constants import (
    AGENT_STATUS_APPROVED,
    USER_ROLE_ADMIN,
    USER_ROLE_AGENT,
    USER_ROLE_USER,
)
from apps.properties.models import Property

PASSWORD = 'password1234'

DESCRIPTION = (
    'Bright and airy home close to schools and markets, with reliable power, '
    'water and a gated compound.'
)


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count()

    def _make(role=USER_ROLE_USER, **extra):
        n = next(counter)
        if role == USER_ROLE_AGENT:
            extra.setdefault('agent_status', AGENT_STATUS_APPROVED)
        return User.objects.create_user(
            email=f'{role}{n}@example.com',
            password=PASSWORD,
            name=f'{role.title()} {n}',
            role=role,
            **extra
        )
    return _make


@pytest.fixture
def user_password():
    return PASSWORD


@pytest.fixture
def user(make_user):
    return make_user(USER_ROLE_USER)


@pytest.fixture
def other_user(make_user):
    return make_user(USER_ROLE_USER)


@pytest.fixture
def agent(make_user):
    return make_user(USER_ROLE_AGENT)


@pytest.fixture
def other_agent(make_user):
    return make_user(USER_ROLE_AGENT)


@pytest.fixture
def admin_user(make_user):
    return make_user(USER_ROLE_ADMIN, is_staff=True)


@pytest.fixture
def make_property(db, agent):
    counter = itertools.count()

    def _make(**overrides):
        n = next(counter)
        data = {
            'title': f'Spacious Family Home Number {n}',
            'description': DESCRIPTION,
            'price': Decimal('50000000'),
            'property_type': 'house',
            'listing_type': 'sale',
            'bedrooms': 3,
            'bathrooms': 2,
            'area': 200,
            'street': f'{n} Adeola Odeku Street',
            'city': 'Lagos',
            'state': 'Lagos',
            'agent': agent,
            'owner': agent,
        }
        data.update(overrides)
        return Property.objects.create(**data)
    return _make


@pytest.fixture
def listing(make_property):
    return make_property()


@pytest.fixture
def viewing_date():
    return timezone.localdate() + timedelta(days=7)


@pytest.fixture
def make_booking(db, user, listing, viewing_date):
    def _make(**overrides):
        data = {
            'property': listing,
            'user': user,
            'agent': listing.agent,
            'booking_type': 'viewing',
            'status': 'pending',
            'date': viewing_date,
            'start_time': time(10, 0),
            'end_time': time(11, 0),
        }
        data.update(overrides)
        return Booking.objects.create(**data)
    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    def _client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token_service.issue_token(user)}')
        return client
    return _client


@pytest.fixture
def listing_payload():
    return {
        'title': 'Three Bedroom Terrace in Yaba',
        'description': DESCRIPTION,
        'price': '35000000.00',
        'property_type': 'house',
        'listing_type': 'sale',
        'bedrooms': 3,
        'bathrooms': 3,
        'area': 180,
        'street': '12 Herbert Macaulay Way',
        'city': 'Lagos',
        'state': 'Lagos',
    }
