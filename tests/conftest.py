"""Test fixtures — a fresh SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own Database on a throwaway SQLite file (aiosqlite),
   with all tables created up front.
2. get_db is overridden so every request opens its own session on that
   database, exactly like production does per request.
3. Users are seeded straight through UserService; tokens come either from
   the real /auth/login route or from the same TokenCodec the app uses.

Nothing is shared between tests, so there's no cleanup to get wrong.
"""

import os
from typing import Optional

# Must be set before taskboard.config builds its settings singleton.
os.environ.setdefault("TASKBOARD_ENVIRONMENT", "development")
os.environ.setdefault("TASKBOARD_BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taskboard.auth.jwt import TokenCodec
from taskboard.config import settings
from taskboard.db.engine import Database, get_db
from taskboard.db.models import Role
from taskboard.main import app
from taskboard.services.auth_service import claim_for
from taskboard.services.user_service import UserService

DEFAULT_PASSWORD = "password_123"


@pytest_asyncio.fixture()
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.create_tables()
    try:
        yield database
    finally:
        await database.dispose()


@pytest_asyncio.fixture()
async def db_session(database):
    """Session for seeding and inspecting state outside the HTTP layer."""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(database):
    """HTTP client with the app's get_db pointed at the test database."""

    async def override_get_db():
        async with database.session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def codec():
    return TokenCodec(settings)


@pytest.fixture
def make_user(db_session):
    """Factory: create a user directly in the DB (bypasses registration)."""
    counter = {"n": 0}

    async def _make_user(
        role: Role = Role.USER,
        email: Optional[str] = None,
        name: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
    ):
        counter["n"] += 1
        email = email or f"{role.value.lower()}{counter['n']}@example.com"
        name = name or f"{role.value.title()} {counter['n']}"
        return await UserService(db_session).create_user(email, password, name, role=role)

    return _make_user


@pytest.fixture
def auth_headers(codec):
    """Factory: bearer headers for a user, minted with the app's codec."""

    def _auth_headers(user) -> dict:
        token = codec.issue_access_token(claim_for(user))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest_asyncio.fixture()
async def admin(make_user):
    return await make_user(Role.ADMIN, email="admin@example.com", name="Admin A")


@pytest_asyncio.fixture()
async def member(make_user):
    return await make_user(Role.USER, email="bob@example.com", name="Bob")


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def member_headers(member, auth_headers):
    return auth_headers(member)


@pytest.fixture
def refresh_cookie():
    """Pull the refreshToken value out of a response's Set-Cookie headers."""

    def _refresh_cookie(response) -> Optional[str]:
        for header in response.headers.get_list("set-cookie"):
            name, _, rest = header.partition("=")
            if name.strip() == "refreshToken":
                return rest.split(";", 1)[0].strip('"') or None
        return None

    return _refresh_cookie


@pytest.fixture
def post_with_refresh_cookie(client):
    """POST to an auth route presenting exactly the given refresh token."""

    async def _post(path: str, token: Optional[str]):
        client.cookies.clear()
        headers = {"Cookie": f"refreshToken={token}"} if token else {}
        return await client.post(path, headers=headers)

    return _post
