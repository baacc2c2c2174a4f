"""
Seed database with sample data for development
"""
import os
import django
from datetime import timedelta
from decimal import Decimal

# Setup Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')
django.setup()

from django.utils import timezone

from apps.authentication.models import User
from apps.bookings.models import Booking
from apps.core.utils.constants import (
    AGENT_STATUS_APPROVED,
    BOOKING_TYPE_VIEWING,
    LISTING_TYPE_RENT,
    LISTING_TYPE_SALE,
    USER_ROLE_ADMIN,
    USER_ROLE_AGENT,
    USER_ROLE_USER,
)
from apps.properties.models import Property

SAMPLE_PASSWORD = 'password1234'

SAMPLE_PROPERTIES = [
    {
        'title': 'Four Bedroom Duplex in Lekki Phase 1',
        'property_type': 'duplex',
        'listing_type': LISTING_TYPE_SALE,
        'price': Decimal('185000000'),
        'bedrooms': 4,
        'bathrooms': 5,
        'area': 420,
        'street': '12 Admiralty Way',
        'city': 'Lagos',
        'state': 'Lagos',
        'amenities': {'parking': True, 'pool': False, 'security': True, 'generator': True},
    },
    {
        'title': 'Serviced Two Bedroom Apartment, Wuse 2',
        'property_type': 'apartment',
        'listing_type': LISTING_TYPE_RENT,
        'price': Decimal('4500000'),
        'bedrooms': 2,
        'bathrooms': 2,
        'area': 110,
        'street': '5 Aminu Kano Crescent',
        'city': 'Abuja',
        'state': 'FCT',
        'amenities': {'parking': True, 'gym': True, 'security': True},
    },
    {
        'title': 'Detached Bungalow with Garden, Bodija',
        'property_type': 'house',
        'listing_type': LISTING_TYPE_SALE,
        'price': Decimal('62000000'),
        'bedrooms': 3,
        'bathrooms': 3,
        'area': 260,
        'street': '18 Oshuntokun Avenue',
        'city': 'Ibadan',
        'state': 'Oyo',
        'amenities': {'garden': True, 'parking': True},
    },
]


def create_sample_users():
    """Create one account per role"""
    print("Creating sample users...")

    users = {}
    for role, email, name, extra in [
        (USER_ROLE_ADMIN, 'admin@example.com', 'Ada Admin', {'is_staff': True}),
        (USER_ROLE_AGENT, 'agent@example.com', 'Tunde Agent',
         {'agency': 'Coastline Realty', 'agent_status': AGENT_STATUS_APPROVED}),
        (USER_ROLE_USER, 'user@example.com', 'Chioma Buyer', {}),
    ]:
        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_user(email=email, password=SAMPLE_PASSWORD, name=name, role=role, **extra)
        users[role] = user

    return users


def create_sample_properties(agent):
    """Create sample listings owned by the agent"""
    print("Creating sample properties...")

    description = (
        'Well maintained property in a quiet, secure neighbourhood with good road access, '
        'steady water supply and close proximity to schools, shops and hospitals.'
    )

    properties = []
    for data in SAMPLE_PROPERTIES:
        prop, created = Property.objects.get_or_create(
            title=data['title'],
            defaults={**data, 'description': description, 'agent': agent, 'owner': agent},
        )
        properties.append(prop)
    return properties


def create_sample_bookings(user, properties):
    """Create a pending viewing for each listing"""
    print("Creating sample bookings...")

    viewing_date = timezone.localdate() + timedelta(days=3)
    for hour, prop in enumerate(properties, start=10):
        Booking.objects.get_or_create(
            property=prop,
            user=user,
            booking_type=BOOKING_TYPE_VIEWING,
            defaults={
                'agent': prop.agent,
                'date': viewing_date,
                'start_time': f'{hour:02d}:00',
                'end_time': f'{hour + 1:02d}:00',
                'message': 'I would like to see the property this week.',
            },
        )


def main():
    users = create_sample_users()
    properties = create_sample_properties(users[USER_ROLE_AGENT])
    create_sample_bookings(users[USER_ROLE_USER], properties)
    print(f"Done. Log in with any sample account using password '{SAMPLE_PASSWORD}'.")


if __name__ == '__main__':
    main()
