"""
Test infrastructure for the Forum API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres instance is needed in CI.
- StaticPool makes every session share the single in-memory connection;
  a second connection would see an empty database.
- A fresh engine is built per test inside the test's own event loop, with
  the same connect-time PRAGMAs as production (foreign keys, so ON DELETE
  CASCADE/RESTRICT behave as on Postgres, and case-sensitive LIKE).
- The app's get_db dependency is overridden to use the test engine.
- Roles are seeded before each test because registration depends on them.
- The Redis cache is disabled by setting cache._redis = None; CacheManager
  treats that as "no cache", so services always hit the database.  Tests
  that exercise caching request ``redis_cache``, which installs an
  in-memory FakeRedis on the shared CacheManager.
"""
import fnmatch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.pool import StaticPool

from forum.cache import cache
from forum.database import Base, get_db, install_sqlite_pragmas
from forum.main import app
from forum.middleware import install_query_counter
from forum.schemas import UserRegister
from forum.seed import seed_roles
from forum.services import user_service

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "secret123"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine_test():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_query_counter(engine)
    install_sqlite_pragmas(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine_test):
    """
    Session factory bound to the test engine, installed as the app's
    ``get_db`` override for the duration of the test.
    """
    factory = async_sessionmaker(engine_test, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    cache._redis = None

    async with factory() as session:
        await seed_roles(session)
        await session.commit()

    yield factory
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncSession:
    """A live session for tests that call services or repositories directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(session_factory) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class FakeRedis:
    """In-memory stand-in implementing only the commands CacheManager issues."""

    def __init__(self, fail: bool = False):
        self.data: dict[str, str] = {}
        self.fail = fail

    def _check(self):
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value

    async def delete(self, *keys):
        self._check()
        for key in keys:
            self.data.pop(key, None)

    async def scan_iter(self, match):
        self._check()
        for key in list(self.data):
            if fnmatch.fnmatch(key, match):
                yield key


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def redis_cache(session_factory, fake_redis) -> FakeRedis:
    """Turn the listing cache on for one test, backed by ``fake_redis``."""
    cache._redis = fake_redis
    yield fake_redis
    cache._redis = None


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

async def _create_account(
    session_factory,
    email: str,
    password: str = DEFAULT_PASSWORD,
    role: str = "User",
    first_name: str = "Test",
    last_name: str = "User",
) -> None:
    async with session_factory() as session:
        data = UserRegister(email=email, password=password, first_name=first_name, last_name=last_name)
        await user_service.register(session, data, role)
        await session.commit()


async def _login_headers(client: AsyncClient, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    resp = await client.post("/api/auth/token", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def make_account(session_factory):
    """Async callable creating an account: ``await make_account(email, role="Admin")``."""

    async def _make(email: str, **kwargs) -> None:
        await _create_account(session_factory, email, **kwargs)

    return _make


@pytest.fixture
def login(async_client):
    """Async callable returning bearer headers for an existing account."""

    async def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        return await _login_headers(async_client, email, password)

    return _login


@pytest_asyncio.fixture
async def user_headers(session_factory, async_client) -> dict:
    await _create_account(session_factory, "user@example.com", first_name="Alex", last_name="Walker")
    return await _login_headers(async_client, "user@example.com")


@pytest_asyncio.fixture
async def other_user_headers(session_factory, async_client) -> dict:
    await _create_account(session_factory, "other@example.com", first_name="Sam", last_name="Rivers")
    return await _login_headers(async_client, "other@example.com")


@pytest_asyncio.fixture
async def moderator_headers(session_factory, async_client) -> dict:
    await _create_account(session_factory, "mod@example.com", role="Moderator")
    return await _login_headers(async_client, "mod@example.com")


@pytest_asyncio.fixture
async def admin_headers(session_factory, async_client) -> dict:
    await _create_account(session_factory, "admin@example.com", role="Admin")
    return await _login_headers(async_client, "admin@example.com")


@pytest_asyncio.fixture
async def category(async_client, admin_headers) -> dict:
    resp = await async_client.post(
        "/api/categories",
        json={"name": "Programming", "description": "Code talk"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest_asyncio.fixture
async def post(async_client, user_headers, category) -> dict:
    resp = await async_client.post(
        "/api/posts",
        json={"title": "First post", "content": "Hello forum", "category_id": category["id"]},
        headers=user_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
