"""
AlNet - Test Configuration and Fixtures
"""
import os
import tempfile

# Set testing environment before the application reads its settings
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['REFRESH_SECRET_KEY'] = 'test-refresh-secret-key-for-testing-only'
os.environ['UPLOAD_DIRECTORY'] = tempfile.mkdtemp(prefix='alnet-test-uploads-')
os.environ['R2_ENDPOINT'] = ''
os.environ['R2_ACCESS_KEY_ID'] = ''
os.environ['R2_SECRET_ACCESS_KEY'] = ''
os.environ['R2_PUBLIC_URL'] = ''

from typing import Callable, Dict, Generator

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from alnet.main import app
from alnet.core.security import create_access_token
from alnet.db.base import Base
from alnet.db.session import SessionLocal, engine
from alnet.modules.auth.services.auth import create_admin_account

fake = Faker()

API = '/api'
PASSWORD = 'testpassword123'


def bearer(token: str) -> Dict[str, str]:
    return {'Authorization': f'Bearer {token}'}


def unique_email() -> str:
    return f'{fake.unique.user_name()}@alnet.dev'


@pytest.fixture(autouse=True)
def database() -> Generator[None, None, None]:
    """Fresh schema for each test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client: TestClient) -> Callable[..., dict]:
    """Register a user through the API and return its id, email and auth headers"""
    def _register(role: str = 'student', **overrides) -> dict:
        payload = {
            'email': unique_email(),
            'password': PASSWORD,
            'firstName': fake.first_name(),
            'lastName': fake.last_name(),
            'role': role,
        }
        payload.update(overrides)
        response = client.post(f'{API}/auth/register', json=payload)
        assert response.status_code == 201, response.text
        data = response.json()['data']
        return {
            'id': data['user']['id'],
            'email': payload['email'],
            'role': role,
            'first_name': payload['firstName'],
            'last_name': payload['lastName'],
            'headers': bearer(data['accessToken']),
            'refresh_token': data['refreshToken'],
        }
    return _register


@pytest.fixture
def student(register) -> dict:
    return register('student')


@pytest.fixture
def alumni(register) -> dict:
    return register('alumni')


@pytest.fixture
def admin() -> dict:
    """Admins cannot self-register, so this one is created directly"""
    session = SessionLocal()
    try:
        user = create_admin_account(session, unique_email(), PASSWORD)
        return {
            'id': user.id,
            'email': user.email,
            'role': 'admin',
            'headers': bearer(create_access_token(user.id, user.role)),
        }
    finally:
        session.close()


@pytest.fixture
def make_alumni(client: TestClient, register) -> Callable[..., dict]:
    """Register an alumnus and patch its profile in one step"""
    def _make(**profile) -> dict:
        user = register('alumni', **{k: profile.pop(k) for k in ('firstName', 'lastName') if k in profile})
        if profile:
            response = client.patch(f"{API}/profiles/{user['id']}", json=profile, headers=user['headers'])
            assert response.status_code == 200, response.text
        return user
    return _make
