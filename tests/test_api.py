import pytest
import requests

from crop_support.models import Notification, User

from conftest import add_price, add_scheme, auth_header, day, make_user


# ==================== MAIN ====================

def test_index_lists_endpoints(client):
    body = client.get('/').get_json()
    assert body['success'] is True
    assert 'POST /api/auth' in body['endpoints']


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    body = response.get_json()
    assert body['store'] == 'ok'
    assert [t['name'] for t in body['tasks']] == ['mandi-prices', 'schemes']
    assert body['mandiUpdate']['isUpdating'] is False


# ==================== AUTH ====================

def _register(client, email='new@farm.in', password='harvest1', **extra):
    payload = dict(action='register', email=email, password=password, name='Asha', **extra)
    return client.post('/api/auth', json=payload)


def test_register_then_login(client):
    response = _register(client, farmSize='1.2', location='Karnal, Haryana')
    assert response.status_code == 201
    body = response.get_json()
    assert body['user']['farmSize'] == 1.2
    assert body['user']['role'] == 'farmer'
    assert body['token']

    login = client.post('/api/auth', json={'action': 'login', 'email': 'NEW@farm.in', 'password': 'harvest1'})
    assert login.status_code == 200
    assert login.get_json()['user']['email'] == 'new@farm.in'


def test_register_duplicate_email(client):
    _register(client)
    response = _register(client)
    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'message': 'Email already exists'}


def test_login_with_wrong_password(client):
    _register(client)
    response = client.post('/api/auth', json={'action': 'login', 'email': 'new@farm.in', 'password': 'nope'})
    assert response.status_code == 401
    assert response.get_json()['success'] is False


@pytest.mark.parametrize('payload', [
    {'action': 'logout', 'email': 'a@b.c', 'password': 'x'},
    {'action': 'login', 'email': '', 'password': 'x'},
    {'action': 'register', 'email': 'a@b.c'},
])
def test_auth_rejects_bad_requests(client, payload):
    assert client.post('/api/auth', json=payload).status_code == 400


def test_current_user_requires_token(client):
    response = client.get('/api/auth')
    assert response.status_code == 401
    assert response.get_json() == {'success': False, 'message': 'Authentication required'}

    bad = client.get('/api/auth', headers={'Authorization': 'Bearer not-a-token'})
    assert bad.status_code == 401


def test_current_user_from_token(app, client, store):
    user = make_user(store)
    response = client.get('/api/auth', headers=auth_header(app, user))
    assert response.status_code == 200
    assert response.get_json()['user']['email'] == 'farmer@test.com'


def test_profile_update(app, client, store):
    user = make_user(store)
    response = client.patch(f'/api/users/{user.id}', headers=auth_header(app, user),
                            json={'location': 'Ludhiana, Punjab', 'farmSize': '2.5'})
    assert response.status_code == 200
    body = response.get_json()['user']
    assert body['location'] == 'Ludhiana, Punjab'
    assert body['farmSize'] == 2.5


def test_profile_of_another_user_is_forbidden(app, client, store):
    user = make_user(store)
    other = make_user(store, email='other@test.com')
    response = client.get(f'/api/users/{other.id}', headers=auth_header(app, user))
    assert response.status_code == 403


def test_admin_can_read_any_profile(app, client, store):
    admin = make_user(store, email='admin@test.com', role='admin')
    farmer = make_user(store)
    response = client.get(f'/api/users/{farmer.id}', headers=auth_header(app, admin))
    assert response.status_code == 200


def test_profile_update_rejects_unknown_fields(app, client, store):
    user = make_user(store)
    response = client.patch(f'/api/users/{user.id}', headers=auth_header(app, user), json={'role': 'admin'})
    assert response.status_code == 400
    assert store.find_by_id(User, user.id).role == 'farmer'


# ==================== WEATHER ====================

def test_weather_without_api_key_uses_mock(app, client, monkeypatch):
    monkeypatch.delenv('WEATHER_API_KEY', raising=False)
    app.config['WEATHER_API_KEY'] = None

    body = client.get('/api/weather?location=Karnal').get_json()
    weather = body['weather']
    assert weather['location'] == 'Karnal'
    assert len(weather['forecast']) == 3
    assert weather['farmingAdvice'] == [
        'Good conditions for irrigation today',
        'Expected rainfall in next 2 days - delay watering',
        'High humidity may increase disease risk - monitor crops closely',
    ]
    assert body['lastUpdated']


def test_weather_falls_back_when_provider_fails(app, client, monkeypatch):
    app.config['WEATHER_API_KEY'] = 'test-key'

    def unreachable(*args, **kwargs):
        raise requests.ConnectionError('network down')

    monkeypatch.setattr('crop_support.utils.weather.requests.get', unreachable)
    response = client.get('/api/weather')
    assert response.status_code == 200
    assert response.get_json()['weather']['location'] == 'Delhi'


# ==================== ANALYTICS ====================

def test_full_analytics_snapshot(client):
    body = client.get('/api/admin/analytics').get_json()
    assert set(body['analytics']) == {
        'overview', 'engagement', 'diseaseDetection', 'mandiPrices', 'schemes', 'system', 'live',
    }
    assert len(body['analytics']['engagement']['dailyActiveUsers']) == 30


def test_single_metric_with_timeframe(client):
    body = client.get('/api/admin/analytics?metric=engagement&timeframe=7d').get_json()
    assert body['metric'] == 'engagement'
    series = body['data']['dailyActiveUsers']
    assert len(series) == 7
    assert series[-1]['date'] == day()
    assert all(200 <= point['value'] <= 800 for point in series)


def test_live_metric_reflects_store(client, store):
    make_user(store)
    data = client.get('/api/admin/analytics?metric=live').get_json()['data']
    assert data['totalUsers'] == 1
    assert data['timeframe'] == '30d'


def test_unknown_metric(client):
    assert client.get('/api/admin/analytics?metric=revenue').status_code == 404


@pytest.mark.parametrize('timeframe', ['week', '0d', '400d'])
def test_invalid_timeframe(client, timeframe):
    assert client.get(f'/api/admin/analytics?timeframe={timeframe}').status_code == 400


# ==================== NOTIFICATIONS ====================

def test_notifications_mark_read(client, store):
    first = store.create(Notification, user_id=1, title='Rain', message='Heavy rain expected', type='weather_alert')
    store.create(Notification, user_id=1, title='Price', message='Wheat up', type='price_update')

    body = client.get('/api/notifications?userId=1').get_json()
    assert len(body['notifications']) == 2
    assert body['unread'] == 2

    assert client.post(f'/api/notifications/{first.id}/read').status_code == 200
    unread = client.get('/api/notifications?userId=1&unreadOnly=true').get_json()['notifications']
    assert [n['title'] for n in unread] == ['Price']


def test_notifications_validation(client):
    assert client.get('/api/notifications').status_code == 400
    assert client.post('/api/notifications/999/read').status_code == 404


# ==================== MANDI PRICES ====================

def test_price_update_and_listing(client):
    update = client.post('/api/mandi-prices').get_json()
    assert update['result']['totalUpdated'] == 7
    assert update['message'] == 'Updated 7 prices from 3 sources'

    listing = client.get('/api/mandi-prices?state=uttar').get_json()
    assert listing['total'] == 2
    assert {p['crop'] for p in listing['prices']} == {'Potato', 'Sugarcane'}
    assert len(listing['filters']['crops']) == 7
    assert listing['lastUpdated'] is not None


def test_listing_respects_limit(client, store):
    for offset in range(-4, 1):
        add_price(store, 'Wheat', 2200 + offset, price_date=day(offset))
    body = client.get('/api/mandi-prices?crop=wheat&limit=2').get_json()
    assert body['total'] == 5
    assert [p['priceDate'] for p in body['prices']] == [day(0), day(-1)]


def test_price_trends_endpoint(client, store):
    add_price(store, 'Onion', 2000, price_date=day(-1))
    add_price(store, 'Onion', 2500, price_date=day(0))

    trends = client.get('/api/mandi-prices?action=trends&crop=Onion&days=7').get_json()['trends']
    assert trends['trend'] == 'up'

    assert client.get('/api/mandi-prices?action=trends').status_code == 400
    assert client.get('/api/mandi-prices?action=compare&crop=Saffron').status_code == 404


def test_price_status_endpoint(client):
    status = client.get('/api/mandi-prices?action=status').get_json()['status']
    assert status == {'isUpdating': False, 'lastUpdateTime': None, 'nextUpdateTime': None}


# ==================== SCHEMES ====================

def test_scheme_search_endpoint(client, store):
    add_scheme(store, 'PM-KISAN Samman Nidhi')
    add_scheme(store, 'Kisan Credit Card', category='Credit Support')

    body = client.get('/api/government-schemes?query=credit').get_json()
    assert body['total'] == 1
    assert body['schemes'][0]['title'] == 'Kisan Credit Card'


def test_eligibility_endpoint_uses_profile(client, store):
    scheme = add_scheme(store, 'PM-KISAN Samman Nidhi')
    farmer = make_user(store, farm_size=3.5)

    url = f'/api/government-schemes?action=eligibility&schemeId={scheme.id}&userId={farmer.id}'
    eligibility = client.get(url).get_json()['eligibility']
    assert eligibility['isEligible'] is False

    missing = client.get(f'/api/government-schemes?action=eligibility&schemeId={scheme.id}')
    assert missing.status_code == 400


def test_apply_and_submit(client, store):
    scheme = add_scheme(store, 'Kisan Credit Card', category='Credit Support')
    farmer = make_user(store)

    applied = client.post('/api/government-schemes', json={
        'action': 'apply', 'userId': farmer.id, 'schemeId': scheme.id,
        'documents': [{'type': 'Land Records', 'filename': 'khata.pdf'}],
    })
    assert applied.status_code == 201
    application_id = applied.get_json()['application']['id']

    submitted = client.post('/api/government-schemes', json={'action': 'submit', 'applicationId': application_id})
    assert submitted.get_json()['application']['status'] == 'submitted'

    again = client.post('/api/government-schemes', json={'action': 'submit', 'applicationId': application_id})
    assert again.status_code == 400

    fetched = client.get(f'/api/government-schemes?action=application&applicationId={application_id}')
    assert fetched.get_json()['application']['submittedAt'] is not None


def test_scheme_post_rejects_unknown_action(client):
    response = client.post('/api/government-schemes', json={'action': 'delete'})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Invalid action'


# ==================== ADMIN TASKS ====================

def test_task_status_is_public(client):
    tasks = client.get('/api/admin/tasks').get_json()['tasks']
    assert {t['name'] for t in tasks} == {'mandi-prices', 'schemes'}


def test_task_control_requires_admin(app, client, store):
    assert client.post('/api/admin/tasks', json={'action': 'stop_all'}).status_code == 401

    farmer = make_user(store)
    response = client.post('/api/admin/tasks', headers=auth_header(app, farmer), json={'action': 'stop_all'})
    assert response.status_code == 403


def test_admin_starts_and_stops_tasks(app, client, store):
    admin = make_user(store, email='admin@test.com', role='admin')
    headers = auth_header(app, admin)

    started = client.post('/api/admin/tasks', headers=headers,
                          json={'action': 'start', 'name': 'schemes', 'intervalSeconds': 120})
    tasks = {t['name']: t for t in started.get_json()['tasks']}
    assert tasks['schemes']['isRunning'] is True
    assert tasks['schemes']['intervalSeconds'] == 120
    assert tasks['mandi-prices']['isRunning'] is False

    stopped = client.post('/api/admin/tasks', headers=headers, json={'action': 'stop', 'name': 'schemes'})
    assert not any(t['isRunning'] for t in stopped.get_json()['tasks'])

    unknown = client.post('/api/admin/tasks', headers=headers, json={'action': 'start', 'name': 'weather'})
    assert unknown.status_code == 404


def test_admin_runs_a_task_once(app, client, store):
    admin = make_user(store, email='admin@test.com', role='admin')
    response = client.post('/api/admin/tasks', headers=auth_header(app, admin),
                           json={'action': 'run', 'name': 'mandi-prices'})
    assert response.status_code == 200
    assert len(store.events_by_type('mandi_price_update')) == 1


def test_register_race_on_the_same_email(client, services, monkeypatch):
    _register(client)
    lookup = services.store.get_user_by_email
    calls = []

    def miss_first_time(email):
        calls.append(email)
        return None if len(calls) == 1 else lookup(email)

    # the duplicate check misses, so the unique constraint has to catch it
    monkeypatch.setattr(services.store, 'get_user_by_email', miss_first_time)
    response = _register(client)
    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'message': 'Email already exists'}

    monkeypatch.undo()
    login = client.post('/api/auth', json={'action': 'login', 'email': 'new@farm.in', 'password': 'harvest1'})
    assert login.status_code == 200


def test_apply_rejects_malformed_documents(client, store):
    scheme = add_scheme(store, 'Kisan Credit Card', category='Credit Support')
    farmer = make_user(store)
    response = client.post('/api/government-schemes', json={
        'action': 'apply', 'userId': farmer.id, 'schemeId': scheme.id, 'documents': ['aadhaar.pdf'],
    })
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Documents must be a list of objects'
