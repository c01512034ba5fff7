"""Tests for GET /health."""
from unittest.mock import AsyncMock, MagicMock

from httpx import AsyncClient

from core.redis import RedisClient, set_redis_client


async def test__health__needs_no_auth(anon_client: AsyncClient) -> None:
    response = await anon_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": "healthy",
        "redis": "unavailable",
    }


async def test__health__disabled_redis_is_unavailable(anon_client: AsyncClient) -> None:
    """A disabled client never connects; the app stays healthy."""
    disabled = RedisClient("redis://localhost:6379", enabled=False)
    await disabled.connect()
    set_redis_client(disabled)
    try:
        data = (await anon_client.get("/health")).json()
    finally:
        set_redis_client(None)

    assert data["status"] == "healthy"
    assert data["redis"] == "unavailable"


async def test__health__reports_connected_redis(anon_client: AsyncClient) -> None:
    redis_client = MagicMock(spec=RedisClient)
    redis_client.ping = AsyncMock(return_value=True)
    set_redis_client(redis_client)
    try:
        data = (await anon_client.get("/health")).json()
    finally:
        set_redis_client(None)

    assert data["redis"] == "connected"


async def test__health__failed_ping_is_unavailable(anon_client: AsyncClient) -> None:
    redis_client = MagicMock(spec=RedisClient)
    redis_client.ping = AsyncMock(return_value=False)
    set_redis_client(redis_client)
    try:
        data = (await anon_client.get("/health")).json()
    finally:
        set_redis_client(None)

    assert data["redis"] == "unavailable"
    assert data["status"] == "healthy"
