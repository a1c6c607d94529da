from decimal import Decimal

from conftest import API

DONATIONS = f'{API}/donations'


def _donate(client, donor, **overrides):
    payload = {'amount': '25.50', 'currency': 'usd', 'message': 'For the scholarship fund'}
    payload.update(overrides)
    response = client.post(DONATIONS, json=payload, headers=donor['headers'])
    assert response.status_code == 201, response.text
    return response.json()['data']


def _set_status(client, admin, donation, new_status):
    return client.patch(f"{DONATIONS}/{donation['id']}/status", json={'status': new_status}, headers=admin['headers'])


def test_create_donation(client, alumni):
    donation = _donate(client, alumni)
    assert donation['status'] == 'pending'
    assert donation['currency'] == 'USD'
    assert donation['type'] == 'one_time'
    assert donation['userId'] == alumni['id']
    assert Decimal(str(donation['amount'])) == Decimal('25.50')
    assert donation['completedAt'] is None


def test_create_validation(client, alumni):
    for payload in (
        {'amount': 0},
        {'amount': -5},
        {'amount': '10.999'},
        {'amount': 2_000_000},
        {'amount': 10, 'currency': 'US'},
        {'amount': 10, 'currency': '1$%'},
        {'amount': 10, 'type': 'monthly'},
    ):
        response = client.post(DONATIONS, json=payload, headers=alumni['headers'])
        assert response.status_code == 422, payload


def test_my_donations(client, register):
    donor = register('alumni')
    other = register('alumni')
    first = _donate(client, donor)
    second = _donate(client, donor, amount=10)
    _donate(client, other)

    mine = client.get(f'{DONATIONS}/my', headers=donor['headers']).json()['data']
    assert mine['pagination']['total'] == 2
    assert {d['id'] for d in mine['data']} == {first['id'], second['id']}


def test_status_transitions(client, alumni, admin):
    donation = _donate(client, alumni)

    assert _set_status(client, alumni, donation, 'completed').status_code == 403

    completed = _set_status(client, admin, donation, 'completed')
    assert completed.status_code == 200
    assert completed.json()['data']['completedAt'] is not None

    backwards = _set_status(client, admin, donation, 'pending')
    assert backwards.status_code == 409

    refunded = _set_status(client, admin, donation, 'refunded')
    assert refunded.json()['data']['status'] == 'refunded'
    assert refunded.json()['data']['refundedAt'] is not None

    # Refunded is terminal
    assert _set_status(client, admin, donation, 'completed').status_code == 409
    assert _set_status(client, admin, {'id': 'missing'}, 'completed').status_code == 404


def test_cancel_rules(client, register, admin):
    donor = register('alumni')
    stranger = register('student')

    pledge = _donate(client, donor)
    assert client.post(f"{DONATIONS}/{pledge['id']}/cancel", headers=stranger['headers']).status_code == 403
    cancelled = client.post(f"{DONATIONS}/{pledge['id']}/cancel", headers=donor['headers'])
    assert cancelled.status_code == 200
    assert cancelled.json()['data']['status'] == 'cancelled'
    assert client.post(f"{DONATIONS}/{pledge['id']}/cancel", headers=donor['headers']).status_code == 409

    one_time = _donate(client, donor)
    _set_status(client, admin, one_time, 'completed')
    assert client.post(f"{DONATIONS}/{one_time['id']}/cancel", headers=donor['headers']).status_code == 409

    recurring = _donate(client, donor, type='recurring')
    _set_status(client, admin, recurring, 'completed')
    stopped = client.post(f"{DONATIONS}/{recurring['id']}/cancel", headers=donor['headers'])
    assert stopped.status_code == 200
    assert stopped.json()['data']['status'] == 'cancelled'


def test_recent_feed_hides_anonymous_donors(client, register, admin, student):
    named_donor = register('alumni')
    hidden_donor = register('alumni')
    named = _donate(client, named_donor)
    hidden = _donate(client, hidden_donor, isAnonymous=True)
    _donate(client, named_donor, amount=5)

    _set_status(client, admin, named, 'completed')
    _set_status(client, admin, hidden, 'completed')

    feed = client.get(f'{DONATIONS}/recent', headers=student['headers']).json()['data']
    assert feed['pagination']['total'] == 2
    donors = {d['id']: d['userId'] for d in feed['data']}
    assert donors == {named['id']: named_donor['id'], hidden['id']: None}


def test_admin_listing_and_statistics(client, register, admin):
    first = register('alumni')
    second = register('alumni')
    a = _donate(client, first, amount='100.00')
    b = _donate(client, second, amount='50.25')
    _donate(client, second, amount='20', currency='EUR')
    for donation in (a, b):
        _set_status(client, admin, donation, 'completed')

    assert client.get(DONATIONS, headers=first['headers']).status_code == 403
    listing = client.get(DONATIONS, params={'status': 'completed'}, headers=admin['headers']).json()['data']
    assert {d['id'] for d in listing['data']} == {a['id'], b['id']}
    assert client.get(DONATIONS, params={'status': 'lost'}, headers=admin['headers']).status_code == 422

    assert client.get(f'{DONATIONS}/statistics', headers=first['headers']).status_code == 403
    stats = client.get(f'{DONATIONS}/statistics', headers=admin['headers']).json()['data']
    assert stats['count'] == 3
    assert stats['donors'] == 2
    assert stats['byStatus'] == {'completed': 2, 'pending': 1}
    totals = {currency: Decimal(str(amount)) for currency, amount in stats['completedTotalByCurrency'].items()}
    assert totals == {'USD': Decimal('150.25')}
