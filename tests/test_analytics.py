import csv
import io
from datetime import datetime, timedelta

import pytest

from conftest import API, PASSWORD

ANALYTICS = f'{API}/analytics'


def _get(client, admin, path, **params):
    response = client.get(f'{ANALYTICS}{path}', params=params, headers=admin['headers'])
    assert response.status_code == 200, response.text
    return response.json()['data']


def _connect(client, requester, receiver, accept=None):
    connection = client.post(f'{API}/connections', json={'receiverId': receiver['id']}, headers=requester['headers']).json()['data']
    if accept is not None:
        client.patch(f"{API}/connections/{connection['id']}", json={'accepted': accept}, headers=receiver['headers'])
    return connection


@pytest.mark.parametrize('path', ['/users', '/engagement', '/platform', '/connections', '/profiles', '/dashboard', '/report'])
def test_admin_only(client, student, path):
    response = client.get(f'{ANALYTICS}{path}', headers=student['headers'])
    assert response.status_code == 403
    assert response.json()['error']['code'] == 'FORBIDDEN'


def test_user_statistics(client, student, alumni, admin):
    client.patch(f"{API}/users/{alumni['id']}/status", json={'status': 'suspended'}, headers=admin['headers'])

    stats = _get(client, admin, '/users')
    assert stats['totalUsers'] == 3
    assert stats['byRole'] == {'students': 1, 'alumni': 1, 'admins': 1}
    assert stats['byStatus'] == {'active': 2, 'inactive': 0, 'suspended': 1}
    assert stats['newUsersInRange'] == 3
    assert stats['lastMonthNewUsers'] == 3
    assert stats['retentionRate'] == pytest.approx(66.67)

    future = (datetime.utcnow() + timedelta(days=1)).isoformat()
    assert _get(client, admin, '/users', startDate=future)['newUsersInRange'] == 0


def test_range_validation(client, admin):
    now = datetime.utcnow()
    response = client.get(
        f'{ANALYTICS}/engagement',
        params={'startDate': now.isoformat(), 'endDate': (now - timedelta(days=1)).isoformat()},
        headers=admin['headers'],
    )
    assert response.status_code == 400


def test_timezone_aware_dates_are_normalized(client, admin):
    response = client.get(
        f'{ANALYTICS}/engagement',
        params={'startDate': '2024-01-01T00:00:00Z', 'endDate': '2024-01-05T00:00:00'},
        headers=admin['headers'],
    )
    assert response.status_code == 200, response.text
    assert len(response.json()['data']['messagesByDay']) == 5

    # 2024-01-05T03:00+05:00 is 2024-01-04T22:00 UTC, before the naive end date
    shifted = client.get(
        f'{ANALYTICS}/users',
        params={'startDate': '2024-01-05T03:00:00+05:00', 'endDate': '2024-01-04T23:00:00'},
        headers=admin['headers'],
    )
    assert shifted.status_code == 200

    recent = (datetime.utcnow() - timedelta(days=2)).strftime('%Y-%m-%dT%H:%M:%SZ')
    assert client.get(f'{ANALYTICS}/engagement', params={'startDate': recent}, headers=admin['headers']).status_code == 200
    assert client.get(f'{ANALYTICS}/report', params={'startDate': recent}, headers=admin['headers']).status_code == 200


def test_series_span_is_capped(client, admin):
    for params in (
        {'startDate': '0001-01-01T00:00:00', 'endDate': '9999-12-31T00:00:00'},
        {'startDate': '2020-01-01T00:00:00'},
        {'endDate': '0001-01-05T00:00:00'},
    ):
        for path in ('/engagement', '/dashboard'):
            response = client.get(f'{ANALYTICS}{path}', params=params, headers=admin['headers'])
            assert response.status_code == 400, (path, params)
            assert response.json()['success'] is False

    edge = client.get(
        f'{ANALYTICS}/engagement',
        params={'startDate': '9999-12-30T00:00:00', 'endDate': '9999-12-31T23:00:00'},
        headers=admin['headers'],
    )
    assert edge.status_code == 200
    assert [d['date'] for d in edge.json()['data']['messagesByDay']] == ['9999-12-30', '9999-12-31']

    # Plain filters have no series and accept any span
    wide = {'startDate': '0001-01-01T00:00:00', 'endDate': '9999-12-31T00:00:00'}
    assert client.get(f'{ANALYTICS}/users', params=wide, headers=admin['headers']).status_code == 200


def test_engagement_metrics(client, register, admin):
    users = [register('student') for _ in range(4)]
    _connect(client, users[0], users[1], accept=True)
    _connect(client, users[0], users[2], accept=False)
    _connect(client, users[0], users[3])
    for content in ('hi', 'there'):
        client.post(f'{API}/messages', json={'receiverId': users[1]['id'], 'content': content}, headers=users[0]['headers'])
    client.post(f'{API}/auth/login', json={'email': users[0]['email'], 'password': PASSWORD})

    start = (datetime.utcnow() - timedelta(days=2)).isoformat()
    metrics = _get(client, admin, '/engagement', startDate=start)
    assert metrics['totalMessages'] == 2
    assert metrics['acceptedConnections'] == 1
    assert metrics['rejectedConnections'] == 1
    assert metrics['pendingConnections'] == 1
    assert metrics['acceptanceRate'] == pytest.approx(33.33)
    assert metrics['uniqueActiveUsers'] == 1

    days = metrics['messagesByDay']
    assert len(days) == 3
    assert [d['count'] for d in days] == [0, 0, 2]
    assert days[-1]['date'] == datetime.utcnow().date().isoformat()


def test_engagement_defaults_to_thirty_days(client, admin):
    metrics = _get(client, admin, '/engagement')
    assert len(metrics['messagesByDay']) == 31
    assert metrics['acceptanceRate'] == 0
    assert metrics['totalMessages'] == 0


def test_platform_health(client, student, admin):
    health = _get(client, admin, '/platform')
    assert health['status'] == 'healthy'
    assert health['database'] == 'ok'
    assert health['uptimeSeconds'] >= 0
    assert health['totals']['users'] == 2
    assert health['totals']['profiles'] == 1

    client.post(f'{ANALYTICS}/log-event', json={'eventType': 'error', 'metadata': {'where': 'ui'}}, headers=student['headers'])
    degraded = _get(client, admin, '/platform')
    assert degraded['status'] == 'warning'
    assert degraded['recentErrors'] == 1


def test_connection_statistics(client, register, admin):
    users = [register('student') for _ in range(4)]
    _connect(client, users[0], users[1], accept=True)
    _connect(client, users[0], users[2])
    client.post(f"{API}/connections/block/{users[3]['id']}", headers=users[0]['headers'])

    stats = _get(client, admin, '/connections')
    assert stats == {
        'totalConnections': 1,
        'pendingRequests': 1,
        'rejectedConnections': 0,
        'blockedConnections': 1,
        'acceptanceRate': 50.0,
    }


def test_profile_completeness(client, make_alumni, student, admin):
    make_alumni(bio='Engineer', location='Berlin')

    completeness = _get(client, admin, '/profiles')
    assert completeness['averageCompleteness'] == 20.0
    assert completeness['byRole'] == {'alumni': 40.0, 'student': 0.0}


def test_dashboard(client, student, admin):
    dashboard = _get(client, admin, '/dashboard')
    assert set(dashboard) == {'users', 'engagement', 'platform', 'connections', 'profiles'}
    assert dashboard['users']['totalUsers'] == 2


def test_log_event_and_report(client, student, alumni, admin):
    logged = client.post(
        f'{ANALYTICS}/log-event',
        json={'eventType': 'page_view', 'metadata': {'page': '/alumni'}},
        headers=student['headers'],
    )
    assert logged.status_code == 201
    assert logged.json()['data'] == {'logged': True}
    assert client.post(f'{ANALYTICS}/log-event', json={'eventType': ''}, headers=student['headers']).status_code == 422
    assert client.post(f'{ANALYTICS}/log-event', json={'eventType': 'x'}).status_code == 401

    report = _get(client, admin, '/report', eventType='page_view')
    assert report['pagination']['total'] == 1
    event = report['data'][0]
    assert event['userId'] == student['id']
    assert event['metadata'] == {'page': '/alumni'}

    # Registration is logged for every account created through the API
    registrations = _get(client, admin, '/report', eventType='register')
    assert registrations['pagination']['total'] == 2
    assert _get(client, admin, '/report', userId=alumni['id'], eventType='register')['pagination']['total'] == 1


def test_export_csv(client, student, admin):
    client.post(f'{ANALYTICS}/log-event', json={'eventType': 'page_view', 'metadata': {'page': 'home'}}, headers=student['headers'])

    response = client.post(f'{ANALYTICS}/export', params={'eventType': 'page_view'}, headers=admin['headers'])
    assert response.status_code == 200
    assert response.headers['content-type'].startswith('text/csv')
    disposition = response.headers['content-disposition']
    assert disposition.startswith('attachment; filename="analytics_')
    assert disposition.endswith('.csv"')

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ['ID', 'Event Type', 'User ID', 'Created At', 'Metadata']
    assert len(rows) == 2
    assert rows[1][1] == 'page_view'
    assert rows[1][2] == student['id']
    assert rows[1][4] == '{"page": "home"}'
    assert response.text.startswith('"ID","Event Type"')


def test_export_json(client, student, admin):
    client.post(f'{ANALYTICS}/log-event', json={'eventType': 'page_view'}, headers=student['headers'])

    response = client.post(f'{ANALYTICS}/export', params={'format': 'json', 'eventType': 'page_view'}, headers=admin['headers'])
    assert response.status_code == 200
    assert response.headers['content-type'].startswith('application/json')
    assert response.headers['content-disposition'].endswith('.json"')
    events = response.json()
    assert [e['eventType'] for e in events] == ['page_view']

    assert client.post(f'{ANALYTICS}/export', params={'format': 'xml'}, headers=admin['headers']).status_code == 422
    assert client.post(f'{ANALYTICS}/export', headers=student['headers']).status_code == 403
