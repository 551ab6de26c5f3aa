"""
Shared fixtures for the account service tests.

Every test gets its own SQLite database file, so tests never share state
and no database server is needed.
"""
import os

os.environ.setdefault("APP_ENV", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from account_service.auth.jwt import Principal, encode_token
from account_service.auth.passwords import hash_password
from account_service.auth.service import AuthService
from account_service.base_service import Database
from account_service.config import Settings
from account_service.main import create_app
from account_service.users.models import UserRole, UserStatus
from account_service.users.service import UserService
from account_service.users.store import UserStore

TEST_SECRET = "test-secret-key-long-enough-for-hs256-signing"
TEST_PASSWORD = "Secret123!"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}",
        jwt_secret=TEST_SECRET,
        jwt_expires_in="1h",
        salt_work_factor=4,
        pagination_default_limit=10,
        pagination_max_limit=50,
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def store(database) -> UserStore:
    return UserStore(database)


@pytest.fixture
def auth_service(store, settings) -> AuthService:
    return AuthService(store, settings)


@pytest.fixture
def user_service(store, settings) -> UserService:
    return UserService(store, settings)


@pytest.fixture
def make_user(store):
    """Insert a user straight into the store."""
    async def _make_user(
        email: str = "user@example.com",
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        status: UserStatus = UserStatus.ACTIVE,
    ):
        return await store.create({
            "email": email,
            "name": name,
            "password_hash": hash_password(password, 4),
            "role": role.value,
            "status": status.value,
        })

    return _make_user


@pytest.fixture
def auth_headers(settings):
    """Build an Authorization header for a stored user."""
    def _auth_headers(user) -> dict:
        principal = Principal(user_id=user.id, email=user.email, role=UserRole(user.role))
        token = encode_token(principal, settings.jwt_secret, settings.jwt_expires_in)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest_asyncio.fixture
async def client(settings, database):
    app = create_app(settings, database)
    transport = ASGITransport(app=app)
    async with AsyncClient(base_url="http://test", transport=transport) as ac:
        yield ac
