import pytest

from conftest import API

SEARCH = f'{API}/profiles/alumni/search'


def _ids(response):
    assert response.status_code == 200, response.text
    return [p['userId'] for p in response.json()['data']['data']]


@pytest.fixture
def directory(make_alumni, register):
    """A small alumni directory plus a student and a private alumnus"""
    people = {
        'ada': make_alumni(firstName='Ada', lastName='Byron', currentCompany='Analytical Engines',
                           currentPosition='Principal Engineer', location='London', industry='Computing',
                           skills=['Python', 'Mathematics'], yearsOfExperience=12, graduationYear=2010,
                           offeringMentorship=True),
        'alan': make_alumni(firstName='Alan', lastName='Turing', currentCompany='Bletchley Labs',
                            currentPosition='Researcher', city='Manchester', industry='Research',
                            skills=['Cryptography', 'Go'], yearsOfExperience=5, graduationYear=2015),
        'grace': make_alumni(firstName='Grace', lastName='Hopper', currentCompany='Navy Systems',
                             currentPosition='Engineer', country='USA', industry='Computing',
                             skills=['COBOL'], yearsOfExperience=20, graduationYear=2010,
                             seekingMentorship=True),
        'hidden': make_alumni(firstName='Hidden', lastName='Person', currentCompany='Analytical Engines',
                              isPublic=False),
    }
    people['student'] = register('student', firstName='Stu', lastName='Dent')
    return people


def test_search_returns_public_alumni_only(client, directory):
    ids = _ids(client.get(SEARCH, headers=directory['ada']['headers']))
    assert ids == [directory['ada']['id'], directory['alan']['id'], directory['grace']['id']]


def test_search_requires_authentication(client):
    assert client.get(SEARCH).status_code == 401


def test_keyword_matches_names_case_insensitively(client, directory):
    headers = directory['student']['headers']
    assert _ids(client.get(SEARCH, params={'keyword': 'TURING'}, headers=headers)) == [directory['alan']['id']]


def test_company_and_position_filters(client, directory):
    headers = directory['student']['headers']
    assert _ids(client.get(SEARCH, params={'company': 'analytical'}, headers=headers)) == [directory['ada']['id']]
    assert _ids(client.get(SEARCH, params={'position': 'engineer'}, headers=headers)) == [
        directory['ada']['id'], directory['grace']['id'],
    ]


def test_location_matches_city_and_country(client, directory):
    headers = directory['student']['headers']
    assert _ids(client.get(SEARCH, params={'location': 'manchester'}, headers=headers)) == [directory['alan']['id']]
    assert _ids(client.get(SEARCH, params={'location': 'usa'}, headers=headers)) == [directory['grace']['id']]


def test_skills_match_any_requested_skill(client, directory):
    headers = directory['student']['headers']
    ids = _ids(client.get(SEARCH, params=[('skills', 'python'), ('skills', 'cobol')], headers=headers))
    assert ids == [directory['ada']['id'], directory['grace']['id']]
    # Comma separated and bracketed forms are accepted as well
    assert _ids(client.get(SEARCH, params={'skills': 'go,cobol'}, headers=headers)) == [
        directory['alan']['id'], directory['grace']['id'],
    ]
    assert _ids(client.get(SEARCH, params={'skills[]': 'cryptography'}, headers=headers)) == [directory['alan']['id']]


def test_wildcard_characters_match_literally(client, directory, make_alumni):
    headers = directory['student']['headers']
    lab = make_alumni(firstName='Lin', lastName='Wu', currentCompany='R_D Lab 100%', skills=['snake_case'])

    for company in ('_', '%', 'R_D', '100%'):
        response = client.get(SEARCH, params={'company': company}, headers=headers)
        assert _ids(response) == [lab['id']], company
        assert all(company in p['currentCompany'] for p in response.json()['data']['data'])

    assert _ids(client.get(SEARCH, params={'company': 'R%D'}, headers=headers)) == []
    assert _ids(client.get(SEARCH, params={'skills': '_'}, headers=headers)) == [lab['id']]
    assert _ids(client.get(SEARCH, params={'skills': 'e_c'}, headers=headers)) == [lab['id']]
    assert _ids(client.get(SEARCH, params={'skills': '%'}, headers=headers)) == []


def test_numeric_and_mentorship_filters(client, directory):
    headers = directory['student']['headers']
    assert _ids(client.get(SEARCH, params={'yearsOfExperience': 12}, headers=headers)) == [
        directory['ada']['id'], directory['grace']['id'],
    ]
    assert _ids(client.get(SEARCH, params={'graduationYear': 2010}, headers=headers)) == [
        directory['ada']['id'], directory['grace']['id'],
    ]
    assert _ids(client.get(SEARCH, params={'offeringMentorship': 'true'}, headers=headers)) == [directory['ada']['id']]
    assert _ids(client.get(SEARCH, params={'seekingMentorship': 'true'}, headers=headers)) == [directory['grace']['id']]


def test_filters_are_combined(client, directory):
    headers = directory['student']['headers']
    params = {'industry': 'computing', 'graduationYear': 2010, 'skills': 'python'}
    assert _ids(client.get(SEARCH, params=params, headers=headers)) == [directory['ada']['id']]
    params = {'industry': 'research', 'company': 'navy'}
    assert _ids(client.get(SEARCH, params=params, headers=headers)) == []


def test_sorting(client, directory):
    headers = directory['student']['headers']
    by_experience = _ids(client.get(SEARCH, params={'sortBy': 'yearsOfExperience'}, headers=headers))
    assert by_experience == [directory['grace']['id'], directory['ada']['id'], directory['alan']['id']]
    by_last_name = _ids(client.get(SEARCH, params={'sortBy': 'lastName', 'order': 'asc'}, headers=headers))
    assert by_last_name == [directory['ada']['id'], directory['grace']['id'], directory['alan']['id']]
    assert client.get(SEARCH, params={'sortBy': 'password'}, headers=headers).status_code == 422


def test_pagination_boundaries(client, directory):
    headers = directory['student']['headers']
    first = client.get(SEARCH, params={'page': 1, 'limit': 2}, headers=headers).json()['data']
    second = client.get(SEARCH, params={'page': 2, 'limit': 2}, headers=headers).json()['data']
    beyond = client.get(SEARCH, params={'page': 3, 'limit': 2}, headers=headers).json()['data']

    assert first['pagination'] == {'total': 3, 'page': 1, 'limit': 2, 'pages': 2}
    assert len(first['data']) == 2
    assert [p['userId'] for p in second['data']] == [directory['grace']['id']]
    assert beyond['data'] == []
    assert beyond['pagination']['total'] == 3

    assert client.get(SEARCH, params={'page': 0}, headers=headers).status_code == 422
    assert client.get(SEARCH, params={'limit': 101}, headers=headers).status_code == 422


def test_directory_lists_public_alumni(client, directory):
    response = client.get(f'{API}/profiles/alumni/directory', headers=directory['student']['headers'])
    assert response.json()['data']['pagination']['total'] == 3
