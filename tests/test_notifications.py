from conftest import API

NOTIFICATIONS = f'{API}/notifications'


def _message(client, sender, receiver, content='ping'):
    response = client.post(f'{API}/messages', json={'receiverId': receiver['id'], 'content': content}, headers=sender['headers'])
    assert response.status_code == 201


def _list(client, user, **params):
    return client.get(NOTIFICATIONS, params=params, headers=user['headers']).json()['data']


def _unread(client, user):
    return client.get(f'{NOTIFICATIONS}/unread-count', headers=user['headers']).json()['data']['count']


def test_list_with_actor(client, student, alumni):
    _message(client, student, alumni)

    listing = _list(client, alumni)
    assert listing['pagination']['total'] == 1
    notification = listing['data'][0]
    assert notification['isRead'] is False
    assert notification['userId'] == alumni['id']
    assert notification['actor']['userId'] == student['id']
    assert notification['content'] == f"New message from {student['first_name']} {student['last_name']}"

    assert _list(client, student)['pagination']['total'] == 0


def test_read_and_unread_only(client, student, alumni):
    for i in range(3):
        _message(client, student, alumni, f'm{i}')
    assert _unread(client, alumni) == 3

    first = _list(client, alumni)['data'][0]
    marked = client.put(f"{NOTIFICATIONS}/{first['id']}", json={'isRead': True}, headers=alumni['headers'])
    assert marked.status_code == 200
    assert marked.json()['data']['isRead'] is True
    assert _unread(client, alumni) == 2

    unread = _list(client, alumni, unreadOnly='true')
    assert unread['pagination']['total'] == 2
    assert first['id'] not in {n['id'] for n in unread['data']}

    reopened = client.put(f"{NOTIFICATIONS}/{first['id']}", json={'isRead': False}, headers=alumni['headers'])
    assert reopened.json()['data']['isRead'] is False
    assert _unread(client, alumni) == 3


def test_mark_all_read(client, student, alumni):
    for i in range(2):
        _message(client, student, alumni, f'm{i}')

    response = client.put(f'{NOTIFICATIONS}/mark-all-read', headers=alumni['headers'])
    assert response.status_code == 200
    assert response.json()['data'] == {'message': 'Marked 2 notifications as read', 'count': 2}
    assert _unread(client, alumni) == 0

    again = client.put(f'{NOTIFICATIONS}/mark-all-read', headers=alumni['headers'])
    assert again.json()['data']['count'] == 0


def test_notifications_are_private(client, student, alumni):
    _message(client, student, alumni)
    notification = _list(client, alumni)['data'][0]

    assert client.put(f"{NOTIFICATIONS}/{notification['id']}", json={'isRead': True}, headers=student['headers']).status_code == 403
    assert client.delete(f"{NOTIFICATIONS}/{notification['id']}", headers=student['headers']).status_code == 403
    assert client.put(f'{NOTIFICATIONS}/missing', json={'isRead': True}, headers=alumni['headers']).status_code == 404


def test_delete(client, student, alumni):
    for i in range(3):
        _message(client, student, alumni, f'm{i}')
    notification = _list(client, alumni)['data'][0]

    deleted = client.delete(f"{NOTIFICATIONS}/{notification['id']}", headers=alumni['headers'])
    assert deleted.status_code == 200
    assert deleted.json()['data'] == {'message': 'Notification deleted'}
    assert _list(client, alumni)['pagination']['total'] == 2

    cleared = client.delete(NOTIFICATIONS, headers=alumni['headers'])
    assert cleared.json()['data']['count'] == 2
    assert _list(client, alumni)['pagination']['total'] == 0


def test_pagination(client, student, alumni):
    for i in range(5):
        _message(client, student, alumni, f'm{i}')

    second = _list(client, alumni, page=2, limit=2)
    assert second['pagination'] == {'total': 5, 'page': 2, 'limit': 2, 'pages': 3}
    assert len(second['data']) == 2
