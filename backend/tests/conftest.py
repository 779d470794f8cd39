"""
Campus Voice API - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment before the app reads its settings
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_unused.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.database import Base, get_db
from app.models.user import User
from app.auth import hash_password, create_token

fake = Faker()

USER_PASSWORD = 'testpassword123'
ADMIN_PASSWORD = 'adminpassword123'


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh SQLite database per test"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={'check_same_thread': False},
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and asserting on stored state"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(session_factory, role: str, password: str, **fields) -> User:
    async with session_factory() as session:
        user = User(
            name=fields.pop('name', fake.name()[:50]),
            email=fields.pop('email', f"{fake.user_name()}{fake.random_int()}@example.com"),
            password=hash_password(password),
            role=role,
            department=fields.pop('department', 'Computer Science'),
            is_active=fields.pop('is_active', True),
            **fields,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
async def test_user(session_factory) -> User:
    """Create a regular user"""
    return await _make_user(session_factory, 'user', USER_PASSWORD)


@pytest.fixture
async def other_user(session_factory) -> User:
    """A second regular user, for ownership checks"""
    return await _make_user(session_factory, 'user', USER_PASSWORD)


@pytest.fixture
async def admin_user(session_factory) -> User:
    """Create an admin user"""
    return await _make_user(session_factory, 'admin', ADMIN_PASSWORD)


@pytest.fixture
def make_user(session_factory):
    async def factory(role: str = 'user', password: str = USER_PASSWORD, **fields) -> User:
        return await _make_user(session_factory, role, password, **fields)
    return factory


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Bearer header for the regular user"""
    return {'Authorization': f'Bearer {create_token(test_user)}'}


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return {'Authorization': f'Bearer {create_token(other_user)}'}


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    """Bearer header for the admin user"""
    return {'Authorization': f'Bearer {create_token(admin_user)}'}


@pytest.fixture
def create_complaint(client: AsyncClient):
    """Submit a complaint through the API and return its JSON"""
    async def factory(headers: dict, **fields) -> dict:
        data = {
            'title': fields.get('title', 'Broken projector'),
            'description': fields.get('description', 'The projector in room 101 does not turn on.'),
            'category': fields.get('category', 'Infrastructure'),
            'priority': fields.get('priority', 'medium'),
        }
        response = await client.post('/api/complaints', data=data, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()['data']
    return factory
