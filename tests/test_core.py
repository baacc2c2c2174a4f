from unittest import mock

from apps.core.exceptions import Conflict, custom_exception_handler


def test_health_check(api_client, db):
    response = api_client.get('/api/v1/health/')

    assert response.status_code == 200
    assert response.data['status'] == 'healthy'
    assert response.data['checks'] == {'database': 'ok', 'cache': 'ok'}


def test_health_check_degraded_when_cache_down(api_client, db):
    with mock.patch('apps.core.views.cache') as broken:
        broken.set.side_effect = ConnectionError('redis down')
        response = api_client.get('/api/v1/health/')

    assert response.status_code == 503
    assert response.data['checks']['cache'] == 'unavailable'


def test_handler_renders_api_exceptions():
    response = custom_exception_handler(Conflict('Slot taken'), {'view': None})

    assert response.status_code == 409
    assert response.data == {'status': 'fail', 'message': 'Slot taken', 'status_code': 409}


def test_unknown_route_is_404(api_client, db):
    assert api_client.get('/api/v1/nothing-here/').status_code == 404


def test_schema_is_served(api_client, db):
    response = api_client.get('/api/schema/')

    assert response.status_code == 200
