"""
Shared fixtures.

Tests run against an in-memory SQLite database and without Redis, so rate
limiting fails open unless a test installs a mocked client.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret-that-is-long-enough-for-hs256"
os.environ["ENCRYPTION_KEY"] = "test-encryption-key-for-stored-tokens"
os.environ["SESSION_SECRET"] = "test-session-secret-for-signed-cookies"
os.environ["DEV_MODE"] = "true"
os.environ["REDIS_ENABLED"] = "false"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from api.main import create_app  # noqa: E402
from core.config import get_settings  # noqa: E402
from core.redis import set_redis_client  # noqa: E402
from db.session import create_engine, create_session_factory  # noqa: E402
from models import Base  # noqa: E402

ClientFactory = Callable[[str | None], Awaitable[AsyncClient]]


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with all tables created."""
    get_settings.cache_clear()
    engine = create_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session for calling services directly."""
    session_factory = create_session_factory(db_engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(db_engine: AsyncEngine) -> FastAPI:
    """Application wired to the test database, with no Redis client installed."""
    set_redis_client(None)
    return create_app(engine=db_engine)


@pytest.fixture
async def client_factory(app: FastAPI) -> AsyncGenerator[ClientFactory]:
    """
    Build clients against the app.

    Passing an email signs the client in through /auth/dev-login; passing None
    returns an anonymous client.
    """
    clients: list[AsyncClient] = []

    async def _make(email: str | None) -> AsyncClient:
        new_client = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        )
        clients.append(new_client)
        if email is not None:
            response = await new_client.post(
                "/auth/dev-login",
                json={"email": email, "name": email.split("@")[0]},
            )
            assert response.status_code == 200, response.text
        return new_client

    yield _make

    for c in clients:
        await c.aclose()


@pytest.fixture
async def client(client_factory: ClientFactory) -> AsyncClient:
    """Client signed in as user@example.com."""
    return await client_factory("user@example.com")


@pytest.fixture
async def other_client(client_factory: ClientFactory) -> AsyncClient:
    """Client signed in as a second, unrelated user."""
    return await client_factory("other@example.com")


@pytest.fixture
async def anon_client(client_factory: ClientFactory) -> AsyncClient:
    """Client with no session and no token."""
    return await client_factory(None)


@pytest.fixture
async def bearer_token(client: AsyncClient) -> str:
    """A CLI token issued to the `client` user."""
    response = await client.post("/api/tokens", json={"name": "laptop"})
    assert response.status_code == 201, response.text
    return response.json()["data"]["token"]


@pytest.fixture
async def token_client(client_factory: ClientFactory, bearer_token: str) -> AsyncClient:
    """Client that authenticates only with the `client` user's Bearer token."""
    cli = await client_factory(None)
    cli.headers["Authorization"] = f"Bearer {bearer_token}"
    return cli


@pytest.fixture
async def folder_id(client: AsyncClient) -> int:
    """A folder owned by the `client` user."""
    response = await client.post("/api/folders", json={"name": "Work"})
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]
