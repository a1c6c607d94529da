from datetime import datetime, timedelta

import pytest

from conftest import API, PASSWORD
from alnet.modules.audit.models.audit_log import AuditLog
from alnet.modules.audit.schemas.audit import AuditAction, AuditCategory
from alnet.modules.audit.services.audit import purge_audit_logs, record_audit, sanitize

AUDIT = f'{API}/audit'


def _entries(client, admin, path='', **params):
    response = client.get(f'{AUDIT}{path}', params=params, headers=admin['headers'])
    assert response.status_code == 200, response.text
    return response.json()['data']


def _login(client, email, password):
    return client.post(f'{API}/auth/login', json={'email': email, 'password': password})


@pytest.mark.parametrize('path', ['', '/security', '/failed-logins', '/users/someone'])
def test_admin_only(client, student, path):
    response = client.get(f'{AUDIT}{path}', headers=student['headers'])
    assert response.status_code == 403
    assert client.get(f'{AUDIT}{path}').status_code == 401


def test_failed_logins_are_recorded(client, student, admin):
    assert _login(client, student['email'], 'wrong-password').status_code == 401
    assert _login(client, 'nobody@alnet.dev', PASSWORD).status_code == 401

    failed = _entries(client, admin, '/failed-logins')
    assert len(failed) == 2
    by_email = {entry['userEmail']: entry for entry in failed}
    assert by_email[student['email']]['userId'] == student['id']
    assert by_email['nobody@alnet.dev']['userId'] is None
    for entry in failed:
        assert entry['action'] == 'FAILED_LOGIN'
        assert entry['category'] == 'SECURITY'
        assert entry['isSensitive'] is True
        assert entry['requestPath'] == f'{API}/auth/login'
        assert entry['requestMethod'] == 'POST'

    assert [e['action'] for e in _entries(client, admin, '/security')] == ['FAILED_LOGIN', 'FAILED_LOGIN']


def test_suspended_account_login_is_recorded(client, student, admin):
    client.patch(f"{API}/users/{student['id']}/status", json={'status': 'suspended'}, headers=admin['headers'])
    assert _login(client, student['email'], PASSWORD).status_code == 403

    failed = _entries(client, admin, '/failed-logins')
    assert len(failed) == 1
    assert failed[0]['description'] == 'Failed login attempt: Account is suspended'


def test_login_logout_and_rejected_refresh(client, student, admin):
    assert _login(client, student['email'], PASSWORD).status_code == 200
    client.post(f'{API}/auth/logout', headers=student['headers'])
    assert client.post(f'{API}/auth/refresh-token', json={'refreshToken': 'garbage'}).status_code == 401

    activity = _entries(client, admin, f"/users/{student['id']}")
    assert {entry['action'] for entry in activity} == {'LOGIN', 'LOGOUT'}
    assert all(entry['category'] == 'AUTHENTICATION' for entry in activity)

    security = _entries(client, admin, '/security')
    assert [entry['action'] for entry in security] == ['TOKEN_REJECTED']


def test_status_change_is_recorded(client, alumni, admin):
    client.patch(f"{API}/users/{alumni['id']}/status", json={'status': 'suspended'}, headers=admin['headers'])

    changes = _entries(client, admin, action='PERMISSION_CHANGE')
    assert changes['pagination']['total'] == 1
    entry = changes['data'][0]
    assert entry['userId'] == admin['id']
    assert entry['resourceId'] == alumni['id']
    assert entry['oldValue'] == {'status': 'active'}
    assert entry['newValue'] == {'status': 'suspended'}


def test_payments_and_exports_are_recorded(client, alumni, admin):
    donation = client.post(f'{API}/donations', json={'amount': '40.00'}, headers=alumni['headers']).json()['data']
    for new_status in ('completed', 'refunded'):
        client.patch(f"{API}/donations/{donation['id']}/status", json={'status': new_status}, headers=admin['headers'])
    client.post(f'{API}/analytics/export', params={'eventType': 'login'}, headers=admin['headers'])

    payments = _entries(client, admin, category='PAYMENT')['data']
    assert [entry['action'] for entry in payments] == ['REFUND', 'PAYMENT']
    assert payments[0]['metadata']['donor_id'] == alumni['id']
    assert payments[0]['resource'] == 'Donation'

    exports = _entries(client, admin, action='DATA_EXPORT')['data']
    assert len(exports) == 1
    assert exports[0]['metadata'] == {'event_type': 'login'}


def test_listing_filters(client, student, alumni, admin):
    _login(client, student['email'], PASSWORD)
    _login(client, alumni['email'], PASSWORD)
    _login(client, alumni['email'], 'wrong-password')

    assert _entries(client, admin, userId=alumni['id'])['pagination']['total'] == 2
    assert _entries(client, admin, category='AUTHENTICATION')['pagination']['total'] == 2
    assert _entries(client, admin, resource='User')['pagination']['total'] == 3
    assert _entries(client, admin, resource='Token')['pagination']['total'] == 0

    future = (datetime.utcnow() + timedelta(days=1)).strftime('%Y-%m-%dT%H:%M:%SZ')
    assert _entries(client, admin, startDate=future)['pagination']['total'] == 0

    now = datetime.utcnow()
    reversed_range = {'startDate': now.isoformat(), 'endDate': (now - timedelta(days=1)).isoformat()}
    assert client.get(AUDIT, params=reversed_range, headers=admin['headers']).status_code == 400
    assert client.get(AUDIT, params={'action': 'HACK'}, headers=admin['headers']).status_code == 422


def test_sanitize_masks_credentials():
    cleaned = sanitize({
        'password': 'hunter2',
        'refreshToken': 'abc',
        'nested': {'api-key': 'k', 'name': 'ok'},
        'amount': 10,
    })
    assert cleaned == {
        'password': '[REDACTED]',
        'refreshToken': '[REDACTED]',
        'nested': {'api-key': '[REDACTED]', 'name': 'ok'},
        'amount': 10,
    }
    assert sanitize(None) is None


def test_record_audit_never_raises(db, monkeypatch):
    def broken_commit():
        raise RuntimeError('database is gone')

    monkeypatch.setattr(db, 'commit', broken_commit)
    assert record_audit(db, AuditAction.LOGIN, AuditCategory.AUTHENTICATION, 'User') is None


def test_purge_keeps_sensitive_and_recent_entries(db):
    old = datetime.utcnow() - timedelta(days=400)
    db.add_all([
        AuditLog(action='LOGIN', category='AUTHENTICATION', resource='User', created_at=old),
        AuditLog(action='FAILED_LOGIN', category='SECURITY', resource='User', created_at=old, is_sensitive=True),
        AuditLog(action='LOGOUT', category='AUTHENTICATION', resource='User'),
    ])
    db.commit()

    assert purge_audit_logs(db, retention_days=365) == 1
    assert sorted(entry.action for entry in db.query(AuditLog).all()) == ['FAILED_LOGIN', 'LOGOUT']
