from datetime import datetime, timedelta

from conftest import API

EVENTS = f'{API}/events'


def _in_days(days):
    return (datetime.utcnow() + timedelta(days=days)).replace(microsecond=0).isoformat()


def _create(client, organizer, **overrides):
    payload = {
        'title': 'Class of 2015 Reunion',
        'description': 'Dinner and campus tour',
        'eventDate': _in_days(10),
        'location': 'Main Hall',
        'eventType': 'Reunion',
        'tags': 'alumni, networking, Alumni',
    }
    payload.update(overrides)
    response = client.post(EVENTS, json=payload, headers=organizer['headers'])
    assert response.status_code == 201, response.text
    return response.json()['data']


def _rsvp(client, user, event, rsvp_status=None):
    body = {'status': rsvp_status} if rsvp_status else None
    return client.post(f"{EVENTS}/{event['id']}/rsvp", json=body, headers=user['headers'])


def _read(client, user, event):
    return client.get(f"{EVENTS}/{event['id']}", headers=user['headers']).json()['data']


def test_create_event(client, alumni, admin):
    event = _create(client, alumni)
    assert event['status'] == 'upcoming'
    assert event['createdBy'] == alumni['id']
    assert event['registeredCount'] == 0
    assert event['capacity'] == 0
    assert event['tags'] == ['alumni', 'networking']

    assert _create(client, admin, title='Town hall')['createdBy'] == admin['id']


def test_create_rules(client, student, alumni):
    forbidden = client.post(EVENTS, json={'title': 'X', 'description': 'Y', 'eventDate': _in_days(1)}, headers=student['headers'])
    assert forbidden.status_code == 403
    for payload in (
        {'description': 'No title', 'eventDate': _in_days(1)},
        {'title': 'No date', 'description': 'Y'},
        {'title': 'X', 'description': 'Y', 'eventDate': _in_days(1), 'capacity': -1},
    ):
        assert client.post(EVENTS, json=payload, headers=alumni['headers']).status_code == 422, payload
    assert client.post(EVENTS, json={'title': 'X', 'description': 'Y', 'eventDate': _in_days(1)}).status_code == 401


def test_timezone_aware_dates_are_stored_as_utc(client, alumni):
    event = _create(client, alumni, eventDate='2030-06-01T12:00:00+02:00')
    assert event['eventDate'].startswith('2030-06-01T10:00:00')


def test_listing_filters(client, alumni, student):
    later = _create(client, alumni, eventDate=_in_days(30), title='Career Fair', eventType='Fair', tags=['careers'])
    sooner = _create(client, alumni)
    past = _create(client, alumni, eventDate=_in_days(-5), title='Old Meetup', eventType='meetup', tags=[])
    cancelled = _create(client, alumni, title='Called off')
    client.put(f"{EVENTS}/{cancelled['id']}", json={'status': 'cancelled'}, headers=alumni['headers'])

    def ids(**params):
        response = client.get(EVENTS, params=params, headers=student['headers'])
        assert response.status_code == 200, response.text
        return [e['id'] for e in response.json()['data']['data']]

    # Soonest first, cancelled hidden by default
    assert ids() == [past['id'], sooner['id'], later['id']]
    assert ids(upcoming='true') == [sooner['id'], later['id']]
    assert ids(status='cancelled') == [cancelled['id']]
    assert ids(keyword='career') == [later['id']]
    assert ids(keyword='main hall') == [past['id'], sooner['id'], later['id']]
    assert ids(keyword='%') == []
    assert ids(eventType='MEETUP') == [past['id']]
    assert ids(tag='networking') == [sooner['id']]
    assert client.get(EVENTS, params={'status': 'postponed'}, headers=student['headers']).status_code == 422


def test_update_rules(client, register, admin):
    organizer = register('alumni')
    stranger = register('alumni')
    event = _create(client, organizer)

    updated = client.put(f"{EVENTS}/{event['id']}", json={'capacity': 50, 'location': 'Auditorium'}, headers=organizer['headers'])
    assert updated.status_code == 200
    assert updated.json()['data']['capacity'] == 50
    assert updated.json()['data']['location'] == 'Auditorium'
    assert updated.json()['data']['title'] == event['title']

    assert client.put(f"{EVENTS}/{event['id']}", json={'title': 'Mine'}, headers=stranger['headers']).status_code == 403
    by_admin = client.put(f"{EVENTS}/{event['id']}", json={'status': 'ongoing'}, headers=admin['headers'])
    assert by_admin.json()['data']['status'] == 'ongoing'
    assert client.put(f'{EVENTS}/missing', json={'title': 'X'}, headers=admin['headers']).status_code == 404


def test_delete_rules(client, register, admin):
    organizer = register('alumni')
    guest = register('student')
    event = _create(client, organizer)
    assert _rsvp(client, guest, event).status_code == 201

    assert client.delete(f"{EVENTS}/{event['id']}", headers=guest['headers']).status_code == 403
    deleted = client.delete(f"{EVENTS}/{event['id']}", headers=organizer['headers'])
    assert deleted.status_code == 200
    assert deleted.json()['data'] == {'message': 'Event deleted successfully'}
    assert client.get(f"{EVENTS}/{event['id']}", headers=admin['headers']).status_code == 404
    assert client.get(f'{EVENTS}/my-rsvps', headers=guest['headers']).json()['data']['pagination']['total'] == 0

    other = _create(client, organizer, title='Second')
    assert client.delete(f"{EVENTS}/{other['id']}", headers=admin['headers']).status_code == 200


def test_rsvp_counts_going_only(client, register):
    organizer = register('alumni')
    guest = register('student')
    event = _create(client, organizer)

    going = _rsvp(client, guest, event)
    assert going.status_code == 201
    assert going.json()['data']['status'] == 'going'
    assert going.json()['data']['userId'] == guest['id']
    assert _read(client, guest, event)['registeredCount'] == 1

    # Changing an RSVP updates the same record
    interested = _rsvp(client, guest, event, 'interested')
    assert interested.json()['data']['id'] == going.json()['data']['id']
    assert _read(client, guest, event)['registeredCount'] == 0

    mine = client.get(f'{EVENTS}/my-rsvps', headers=guest['headers']).json()['data']
    assert [e['id'] for e in mine['data']] == [event['id']]
    _rsvp(client, guest, event, 'not_going')
    assert client.get(f'{EVENTS}/my-rsvps', headers=guest['headers']).json()['data']['pagination']['total'] == 0
    assert _rsvp(client, guest, event, 'maybe').status_code == 422


def test_rsvp_notifies_organizer_once(client, register):
    organizer = register('alumni')
    guest = register('student')
    event = _create(client, organizer)

    _rsvp(client, guest, event)
    _rsvp(client, guest, event)
    _rsvp(client, organizer, event)

    notifications = client.get(f'{API}/notifications', headers=organizer['headers']).json()['data']['data']
    assert len(notifications) == 1
    assert notifications[0]['type'] == 'event_rsvp'
    assert notifications[0]['relatedId'] == event['id']
    assert notifications[0]['actorId'] == guest['id']


def test_capacity_is_enforced(client, register):
    organizer = register('alumni')
    first = register('student')
    second = register('student')
    event = _create(client, organizer, capacity=1)

    assert _rsvp(client, first, event).status_code == 201
    full = _rsvp(client, second, event)
    assert full.status_code == 409
    assert full.json()['error']['message'] == 'Event is full'

    # Interest does not take a seat, and a going guest can confirm again
    assert _rsvp(client, second, event, 'interested').status_code == 201
    assert _rsvp(client, first, event).status_code == 201

    assert client.delete(f"{EVENTS}/{event['id']}/rsvp", headers=first['headers']).status_code == 200
    assert _read(client, second, event)['registeredCount'] == 0
    assert _rsvp(client, second, event).status_code == 201


def test_rsvp_requires_an_open_event(client, alumni, student):
    event = _create(client, alumni)
    client.put(f"{EVENTS}/{event['id']}", json={'status': 'completed'}, headers=alumni['headers'])

    closed = _rsvp(client, student, event)
    assert closed.status_code == 409
    assert closed.json()['success'] is False
    assert client.post(f'{EVENTS}/missing/rsvp', headers=student['headers']).status_code == 404


def test_cancel_rsvp(client, alumni, student):
    event = _create(client, alumni)
    assert client.delete(f"{EVENTS}/{event['id']}/rsvp", headers=student['headers']).status_code == 404

    _rsvp(client, student, event)
    cancelled = client.delete(f"{EVENTS}/{event['id']}/rsvp", headers=student['headers'])
    assert cancelled.status_code == 200
    assert cancelled.json()['data'] == {'message': 'RSVP cancelled successfully'}
    assert _read(client, student, event)['registeredCount'] == 0


def test_attendees_visible_to_organizer(client, register, admin):
    organizer = register('alumni')
    guests = [register('student') for _ in range(3)]
    event = _create(client, organizer)
    _rsvp(client, guests[0], event)
    _rsvp(client, guests[1], event, 'interested')
    _rsvp(client, guests[2], event)

    listing = client.get(f"{EVENTS}/{event['id']}/attendees", headers=organizer['headers']).json()['data']
    assert listing['pagination']['total'] == 3
    assert [r['userId'] for r in listing['data']] == [g['id'] for g in guests]
    assert listing['data'][0]['attendee']['firstName'] == guests[0]['first_name']

    going = client.get(f"{EVENTS}/{event['id']}/attendees", params={'status': 'going'}, headers=admin['headers']).json()['data']
    assert {r['userId'] for r in going['data']} == {guests[0]['id'], guests[2]['id']}
    assert client.get(f"{EVENTS}/{event['id']}/attendees", headers=guests[0]['headers']).status_code == 403


def test_my_events_and_statistics(client, register, admin):
    organizer = register('alumni')
    guest = register('student')
    first = _create(client, organizer)
    _create(client, register('alumni'), title='Someone else')
    cancelled = _create(client, organizer, title='Dropped')
    client.put(f"{EVENTS}/{cancelled['id']}", json={'status': 'cancelled'}, headers=organizer['headers'])
    _rsvp(client, guest, first)

    mine = client.get(f'{EVENTS}/my-events', headers=organizer['headers']).json()['data']
    assert {e['id'] for e in mine['data']} == {first['id'], cancelled['id']}

    assert client.get(f'{EVENTS}/statistics', headers=organizer['headers']).status_code == 403
    stats = client.get(f'{EVENTS}/statistics', headers=admin['headers']).json()['data']
    assert stats == {'total': 3, 'byStatus': {'upcoming': 2, 'cancelled': 1}, 'totalRsvps': 1, 'going': 1}
