from decimal import Decimal
from unittest import mock

from apps.notifications.models import Notification
from apps.properties.models import Property
from apps.properties.views import CITY_STATS_CACHE_KEY
from infrastructure.cache.redis_client import redis_client

PROPERTIES_URL = '/api/v1/properties/'


def test_colliding_slugs_get_numeric_suffix(make_property):
    first = make_property(title='Ocean View Apartment Lekki')
    second = make_property(title='Ocean View Apartment, Lekki!')
    third = make_property(title='Ocean view apartment lekki')

    assert first.slug == 'ocean-view-apartment-lekki'
    assert second.slug == 'ocean-view-apartment-lekki-2'
    assert third.slug == 'ocean-view-apartment-lekki-3'


def test_public_list_hides_inactive(api_client, make_property):
    visible = make_property()
    hidden = make_property()
    hidden.soft_delete()

    response = api_client.get(PROPERTIES_URL)

    assert response.status_code == 200
    assert [row['id'] for row in response.data['results']] == [str(visible.id)]


def test_list_filters(api_client, make_property):
    make_property(price=Decimal('20000000'), city='Abuja', bedrooms=2)
    make_property(price=Decimal('90000000'), city='Lagos', bedrooms=5)

    cheap = api_client.get(PROPERTIES_URL, {'max_price': 30000000})
    in_abuja = api_client.get(PROPERTIES_URL, {'city': 'abuja'})
    big = api_client.get(PROPERTIES_URL, {'min_bedrooms': 4})

    assert cheap.data['count'] == 1
    assert in_abuja.data['results'][0]['address']['city'] == 'Abuja'
    assert big.data['results'][0]['bedrooms'] == 5


def test_agent_creates_listing(auth_client, agent, listing_payload):
    response = auth_client(agent).post(PROPERTIES_URL, listing_payload, format='json')

    assert response.status_code == 201
    prop = Property.objects.get(id=response.data['id'])
    assert prop.agent == agent
    assert prop.owner == agent
    assert prop.status == 'available'


def test_user_cannot_create_listing(auth_client, user, listing_payload):
    response = auth_client(user).post(PROPERTIES_URL, listing_payload, format='json')

    assert response.status_code == 403


def test_short_description_rejected(auth_client, agent, listing_payload):
    listing_payload['description'] = 'Too short'

    response = auth_client(agent).post(PROPERTIES_URL, listing_payload, format='json')

    assert response.status_code == 400
    assert 'description' in response.data['errors']


def test_discount_must_be_below_price(auth_client, agent, listing_payload):
    listing_payload['price_discount'] = '40000000.00'

    response = auth_client(agent).post(PROPERTIES_URL, listing_payload, format='json')

    assert response.status_code == 400


def test_other_agent_cannot_edit(auth_client, other_agent, listing):
    response = auth_client(other_agent).patch(f'{PROPERTIES_URL}{listing.id}/', {'bedrooms': 9}, format='json')

    assert response.status_code == 403


def test_price_change_notifies_owner_when_admin_edits(auth_client, admin_user, agent, listing):
    response = auth_client(admin_user).patch(
        f'{PROPERTIES_URL}{listing.id}/', {'price': '45000000.00'}, format='json'
    )

    assert response.status_code == 200
    notification = Notification.objects.get(user=agent)
    assert notification.metadata['kind'] == 'price_change'


def test_delete_is_soft(auth_client, agent, listing):
    response = auth_client(agent).delete(f'{PROPERTIES_URL}{listing.id}/')

    assert response.status_code == 204
    assert not Property.objects.filter(id=listing.id).exists()
    assert Property.all_objects.filter(id=listing.id).exists()


def test_city_stats_cached_until_listing_changes(api_client, auth_client, agent, make_property, listing_payload):
    make_property(city='Lagos')
    make_property(city='Abuja', status='sold')

    first = api_client.get(f'{PROPERTIES_URL}stats/cities/')
    assert {row['city']: row['available'] for row in first.data} == {'Lagos': 1, 'Abuja': 0}
    assert redis_client.get(CITY_STATS_CACHE_KEY) is not None

    auth_client(agent).post(PROPERTIES_URL, listing_payload, format='json')
    assert redis_client.get(CITY_STATS_CACHE_KEY) is None

    second = api_client.get(f'{PROPERTIES_URL}stats/cities/')
    assert {row['city']: row['total'] for row in second.data} == {'Lagos': 2, 'Abuja': 1}


def test_cache_failure_falls_back_to_computing():
    with mock.patch('infrastructure.cache.redis_client.cache') as broken:
        broken.get.side_effect = ConnectionError('redis down')

        assert redis_client.get_or_set('estatehub:test', lambda: 42) == 42
        assert redis_client.get('estatehub:test') is None
        assert redis_client.make_key('a', 1) == 'estatehub:a:1'
