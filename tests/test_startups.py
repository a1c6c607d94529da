from conftest import API

STARTUPS = f'{API}/startups'


def _submit(client, founder, **overrides):
    payload = {
        'name': 'Campus Cart',
        'description': 'Groceries delivered to student halls',
        'tagline': 'Dinner in ten minutes',
        'industry': 'Retail',
        'location': 'Lahore',
        'stage': 'mvp',
        'fundingStage': 'pre_seed',
        'technologies': 'React, FastAPI',
        'contactEmail': 'team@campuscart.io',
    }
    payload.update(overrides)
    response = client.post(STARTUPS, json=payload, headers=founder['headers'])
    assert response.status_code == 201, response.text
    return response.json()['data']


def _approve(client, admin, startup, note=None):
    body = {'note': note} if note else None
    response = client.patch(f"{STARTUPS}/{startup['id']}/approve", json=body, headers=admin['headers'])
    assert response.status_code == 200, response.text
    return response.json()['data']


def test_submit_starts_pending(client, alumni):
    startup = _submit(client, alumni)
    assert startup['status'] == 'pending'
    assert startup['founderId'] == alumni['id']
    assert startup['technologies'] == ['React', 'FastAPI']

    mine = client.get(f'{STARTUPS}/my-startup', headers=alumni['headers'])
    assert mine.json()['data']['id'] == startup['id']


def test_one_startup_per_founder(client, alumni):
    _submit(client, alumni)
    again = client.post(STARTUPS, json={'name': 'Second', 'description': 'Another idea'}, headers=alumni['headers'])
    assert again.status_code == 409


def test_submit_validation(client, student):
    bad_stage = client.post(STARTUPS, json={'name': 'X', 'description': 'Y', 'stage': 'unicorn'}, headers=student['headers'])
    assert bad_stage.status_code == 422
    bad_email = client.post(STARTUPS, json={'name': 'X', 'description': 'Y', 'contactEmail': 'nope'}, headers=student['headers'])
    assert bad_email.status_code == 422
    assert client.get(f'{STARTUPS}/my-startup', headers=student['headers']).status_code == 404


def test_pending_startups_are_hidden(client, register, admin):
    founder = register('alumni')
    viewer = register('student')
    startup = _submit(client, founder)

    assert client.get(STARTUPS, headers=viewer['headers']).json()['data']['pagination']['total'] == 0
    assert client.get(f"{STARTUPS}/{startup['id']}", headers=viewer['headers']).status_code == 403
    assert client.get(f"{STARTUPS}/{startup['id']}", headers=founder['headers']).status_code == 200
    assert client.get(STARTUPS, params={'status': 'pending'}, headers=viewer['headers']).status_code == 403

    pending = client.get(f'{STARTUPS}/pending', headers=admin['headers']).json()['data']
    assert [s['id'] for s in pending['data']] == [startup['id']]
    assert client.get(f'{STARTUPS}/pending', headers=viewer['headers']).status_code == 403


def test_approval_publishes_and_notifies(client, alumni, student, admin):
    startup = _submit(client, alumni)
    approved = _approve(client, admin, startup, note='Looks great')
    assert approved['status'] == 'approved'
    assert approved['reviewNote'] == 'Looks great'

    listing = client.get(STARTUPS, headers=student['headers']).json()['data']
    assert [s['id'] for s in listing['data']] == [startup['id']]
    assert client.get(f"{STARTUPS}/{startup['id']}", headers=student['headers']).status_code == 200

    notifications = client.get(f'{API}/notifications', headers=alumni['headers']).json()['data']['data']
    assert notifications[0]['type'] == 'startup_reviewed'
    assert notifications[0]['relatedId'] == startup['id']

    assert client.patch(f"{STARTUPS}/{startup['id']}/reject", headers=student['headers']).status_code == 403
    rejected = client.patch(f"{STARTUPS}/{startup['id']}/reject", headers=admin['headers'])
    assert rejected.json()['data']['status'] == 'rejected'
    assert client.patch(f'{STARTUPS}/missing/approve', headers=admin['headers']).status_code == 404


def test_listing_filters(client, register, student, admin):
    cart = _approve(client, admin, _submit(client, register('alumni')))
    health = _approve(client, admin, _submit(
        client, register('alumni'),
        name='MedLink', description='Clinic scheduling', tagline='Care on time',
        industry='Healthcare', location='Karachi', stage='growth', fundingStage='seed', technologies=['Django'],
    ))

    def ids(**params):
        response = client.get(STARTUPS, params=params, headers=student['headers'])
        assert response.status_code == 200, response.text
        return {s['id'] for s in response.json()['data']['data']}

    assert ids() == {cart['id'], health['id']}
    assert ids(keyword='clinic') == {health['id']}
    assert ids(keyword='ten minutes') == {cart['id']}
    assert ids(stage='growth') == {health['id']}
    assert ids(fundingStage='pre_seed') == {cart['id']}
    assert ids(industry='retail') == {cart['id']}
    assert ids(location='karachi') == {health['id']}
    assert ids(technology='fastapi') == {cart['id']}
    assert ids(technology='%') == set()
    assert ids(keyword='_') == set()
    assert ids(status='approved') == {cart['id'], health['id']}


def test_update_rules(client, register, admin):
    founder = register('alumni')
    stranger = register('alumni')
    startup = _submit(client, founder)

    updated = client.put(f"{STARTUPS}/{startup['id']}", json={'stage': 'growth', 'teamSize': 4}, headers=founder['headers'])
    assert updated.status_code == 200
    assert updated.json()['data']['stage'] == 'growth'
    assert updated.json()['data']['teamSize'] == 4
    assert updated.json()['data']['name'] == 'Campus Cart'

    assert client.put(f"{STARTUPS}/{startup['id']}", json={'name': 'Mine'}, headers=stranger['headers']).status_code == 403
    self_approve = client.put(f"{STARTUPS}/{startup['id']}", json={'status': 'approved'}, headers=founder['headers'])
    assert self_approve.status_code == 403

    by_admin = client.put(f"{STARTUPS}/{startup['id']}", json={'status': 'approved'}, headers=admin['headers'])
    assert by_admin.json()['data']['status'] == 'approved'


def test_delete(client, alumni, student, admin):
    startup = _submit(client, alumni)
    assert client.delete(f"{STARTUPS}/{startup['id']}", headers=student['headers']).status_code == 403
    assert client.delete(f"{STARTUPS}/{startup['id']}", headers=alumni['headers']).status_code == 200
    assert client.get(f"{STARTUPS}/{startup['id']}", headers=admin['headers']).status_code == 404

    # The founder may register again afterwards
    _submit(client, alumni)


def test_statistics(client, register, admin):
    _approve(client, admin, _submit(client, register('alumni')))
    _submit(client, register('alumni'), stage='idea', fundingStage='bootstrapped')

    stats = client.get(f'{STARTUPS}/statistics', headers=admin['headers']).json()['data']
    assert stats['total'] == 2
    assert stats['pending'] == 1
    assert stats['approved'] == 1
    assert stats['rejected'] == 0
    assert stats['byStage'] == {'mvp': 1, 'idea': 1}
    assert stats['byFundingStage'] == {'pre_seed': 1, 'bootstrapped': 1}
