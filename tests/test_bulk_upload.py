from conftest import API, unique_email

UPLOAD = f'{API}/profiles/bulk-upload'


def _upload(client, headers, text, **data):
    return client.post(UPLOAD, files={'file': ('alumni.csv', text.encode('utf-8'), 'text/csv')}, data=data, headers=headers)


def test_bulk_upload_creates_and_updates(client, admin, alumni):
    new_email = unique_email()
    csv_text = (
        'Email,First Name,Last Name,currentCompany,skills,graduation_year\n'
        f'{new_email},Katherine,Johnson,NASA,Orbital Mechanics;Python,1937\n'
        f"{alumni['email']},{alumni['first_name']},{alumni['last_name']},Updated Corp,,\n"
        'not-an-email,Bad,Row,,,\n'
        f'{unique_email()},,Nameless,,,\n'
    )
    response = _upload(client, admin['headers'], csv_text)
    assert response.status_code == 200, response.text
    result = response.json()['data']
    assert result['processed'] == 4
    assert result['created'] == 1
    assert result['updated'] == 1
    assert result['failed'] == 2
    assert [e['row'] for e in result['errors']] == [4, 5]
    assert result['errors'][0]['email'] == 'not-an-email'

    updated = client.get(f'{API}/profiles/me', headers=alumni['headers']).json()['data']
    assert updated['currentCompany'] == 'Updated Corp'

    users = client.get(f'{API}/users', params={'q': new_email}, headers=admin['headers']).json()['data']['data']
    assert len(users) == 1
    created = client.get(f"{API}/profiles/{users[0]['id']}", headers=admin['headers']).json()['data']
    assert created['skills'] == ['Orbital Mechanics', 'Python']
    assert created['graduationYear'] == 1937
    assert created['profileType'] == 'alumni'


def test_bulk_upload_default_role(client, admin):
    email = unique_email()
    response = _upload(client, admin['headers'], f'email,firstName,lastName\n{email},Sam,Student\n', defaultRole='student')
    assert response.json()['data']['created'] == 1
    users = client.get(f'{API}/users', params={'q': email}, headers=admin['headers']).json()['data']['data']
    assert users[0]['role'] == 'student'


def test_bulk_upload_requires_columns(client, admin):
    response = _upload(client, admin['headers'], 'email,name\nx@alnet.dev,X\n')
    assert response.status_code == 400
    assert 'first_name' in response.json()['error']['message']


def test_bulk_upload_is_admin_only(client, alumni):
    response = _upload(client, alumni['headers'], 'email,firstName,lastName\n')
    assert response.status_code == 403
