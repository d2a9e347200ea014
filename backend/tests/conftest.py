"""
Driving School API - Test Configuration and Fixtures
"""
import os
from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set testing environment before the application reads its settings
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite://'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing-only-0123456789'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['SMTP_USER'] = ''
os.environ['SMTP_PASSWORD'] = ''

from driving_school.main import app
from driving_school.core.database import Base, enable_sqlite_foreign_keys, get_db
from driving_school.core.rate_limiter import limiter
from driving_school.models.admin import Admin
from driving_school.services.auth_service import auth_service

fake = Faker()

ADMIN_EMAIL = 'admin@test.com'
ADMIN_PASSWORD = 'password123'


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        'sqlite+aiosqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose requests each get their own session, like get_db"""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                if session.new or session.dirty or session.deleted:
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are kept in memory across tests"""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture
async def admin(session_factory) -> Admin:
    """The seeded school administrator"""
    async with session_factory() as session:
        return await auth_service.create_admin(session, "Admin", ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def auth_headers(admin: Admin) -> dict:
    """Generate authentication headers for the admin"""
    token = auth_service.issue_token(admin)
    return {'Authorization': f'Bearer {token}'}


# ==========================================
# Payload builders
# ==========================================

def phone_number() -> str:
    return fake.numerify('06########')


@pytest.fixture
def candidate_data() -> dict:
    return {
        'name': fake.name(),
        'email': fake.unique.email(),
        'phone': phone_number(),
        'license_type': 'B',
        'date_of_birth': (date.today() - timedelta(days=365 * 25)).isoformat(),
        'address': fake.street_address(),
    }


@pytest.fixture
def instructor_data() -> dict:
    return {
        'name': fake.name(),
        'email': fake.unique.email(),
        'phone': phone_number(),
        'specialization': 'Category B',
    }


@pytest.fixture
def vehicle_data() -> dict:
    return {
        'brand': 'Renault',
        'model': 'Clio',
        'license_plate': fake.unique.bothify('??-###-??'),
        'category': 'B',
    }


@pytest.fixture
def make_candidate(client: AsyncClient, auth_headers: dict):
    """Create a candidate through the API and return its data"""
    async def _make(**overrides) -> dict:
        payload = {
            'name': fake.name(),
            'email': fake.unique.email(),
            'phone': phone_number(),
            'license_type': 'B',
        }
        payload.update(overrides)
        response = await client.post('/api/v1/candidates', json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()['data']
    return _make


@pytest.fixture
def make_instructor(client: AsyncClient, auth_headers: dict):
    async def _make(**overrides) -> dict:
        payload = {
            'name': fake.name(),
            'email': fake.unique.email(),
            'phone': phone_number(),
        }
        payload.update(overrides)
        response = await client.post('/api/v1/instructors', json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()['data']
    return _make


@pytest.fixture
def make_vehicle(client: AsyncClient, auth_headers: dict):
    async def _make(**overrides) -> dict:
        payload = {
            'brand': 'Peugeot',
            'model': '208',
            'license_plate': fake.unique.bothify('??-###-??'),
        }
        payload.update(overrides)
        response = await client.post('/api/v1/vehicles', json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()['data']
    return _make


@pytest.fixture
def make_session(client: AsyncClient, auth_headers: dict):
    """Book a lesson; returns the raw response so tests can check refusals"""
    async def _make(candidate_id: str, instructor_id: str, **overrides):
        payload = {
            'candidate_id': candidate_id,
            'instructor_id': instructor_id,
            'date': (date.today() + timedelta(days=1)).isoformat(),
            'time': '10:00',
            'lesson_type': 'highway_code',
        }
        payload.update(overrides)
        return await client.post('/api/v1/schedule', json=payload, headers=auth_headers)
    return _make
