from conftest import API

ANNOUNCEMENTS = f'{API}/announcements'


def _publish(client, admin, **overrides):
    payload = {'title': 'Library hours', 'content': 'Open until midnight during exams'}
    payload.update(overrides)
    response = client.post(ANNOUNCEMENTS, json=payload, headers=admin['headers'])
    assert response.status_code == 201, response.text
    return response.json()['data']


def _titles(client, user):
    response = client.get(ANNOUNCEMENTS, headers=user['headers'])
    assert response.status_code == 200, response.text
    return {a['title'] for a in response.json()['data']['data']}


def test_publish_announcement(client, admin):
    announcement = _publish(client, admin)
    assert announcement['targetAudience'] == 'all'
    assert announcement['status'] == 'published'
    assert announcement['createdBy'] == admin['id']


def test_only_admins_publish(client, alumni, admin):
    payload = {'title': 'X', 'content': 'Y'}
    assert client.post(ANNOUNCEMENTS, json=payload, headers=alumni['headers']).status_code == 403
    assert client.post(ANNOUNCEMENTS, json=payload).status_code == 401
    bad = {'title': 'X', 'content': 'Y', 'targetAudience': 'faculty'}
    assert client.post(ANNOUNCEMENTS, json=bad, headers=admin['headers']).status_code == 422


def test_audience_targeting(client, student, alumni, admin):
    _publish(client, admin, title='Everyone')
    _publish(client, admin, title='Freshers', targetAudience='students')
    _publish(client, admin, title='Reunion', targetAudience='alumni')

    assert _titles(client, student) == {'Everyone', 'Freshers'}
    assert _titles(client, alumni) == {'Everyone', 'Reunion'}
    assert _titles(client, admin) == {'Everyone', 'Freshers', 'Reunion'}


def test_archived_announcements_are_hidden(client, student, admin):
    announcement = _publish(client, admin)
    archived = client.patch(f"{ANNOUNCEMENTS}/{announcement['id']}/archive", headers=admin['headers'])
    assert archived.status_code == 200
    assert archived.json()['data']['status'] == 'archived'
    assert _titles(client, student) == set()

    assert client.patch(f"{ANNOUNCEMENTS}/{announcement['id']}/archive", headers=student['headers']).status_code == 403
    assert client.patch(f'{ANNOUNCEMENTS}/missing/archive', headers=admin['headers']).status_code == 404
