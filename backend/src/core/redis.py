"""
Redis connection used for rate limiting.

The API works without Redis: every operation here reports "unavailable"
(False / None) instead of raising, and callers fall back accordingly.
"""
import logging
from collections.abc import Sequence
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import NoScriptError, RedisError

logger = logging.getLogger(__name__)

# Both scripts take ARGV = {now, window_seconds, limit, member} and reply
# {allowed, remaining, seconds_until_reset}. While denied, the last value is
# also how long to wait.

# Per-minute limits: sorted set of request timestamps trimmed to the window.
SLIDING_WINDOW_SCRIPT = """
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])

redis.call('ZREMRANGEBYSCORE', KEYS[1], '-inf', now - window)
local used = redis.call('ZCARD', KEYS[1])

if used >= limit then
    local first = redis.call('ZRANGE', KEYS[1], 0, 0, 'WITHSCORES')
    local wait = window
    if first[2] then
        wait = math.ceil(tonumber(first[2]) + window - now)
    end
    return {0, 0, wait}
end

redis.call('ZADD', KEYS[1], now, now .. ':' .. ARGV[4])
redis.call('EXPIRE', KEYS[1], window)
return {1, limit - used - 1, window}
"""

# Daily limits: a counter that expires with its window.
FIXED_WINDOW_SCRIPT = """
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])

local used = redis.call('INCR', KEYS[1])
if used == 1 then
    redis.call('EXPIRE', KEYS[1], window)
end
local ttl = redis.call('TTL', KEYS[1])
if ttl < 0 then
    ttl = window
end

if used > limit then
    return {0, 0, ttl}
end
return {1, limit - used, ttl}
"""

SLIDING_WINDOW = "sliding_window"
FIXED_WINDOW = "fixed_window"

SCRIPTS: dict[str, str] = {
    SLIDING_WINDOW: SLIDING_WINDOW_SCRIPT,
    FIXED_WINDOW: FIXED_WINDOW_SCRIPT,
}


class RedisClient:
    """Owns the Redis connection and the SHAs of the loaded scripts."""

    def __init__(self, url: str, enabled: bool = True) -> None:
        self._url = url
        self._enabled = enabled
        self._client: Redis | None = None
        self._shas: dict[str, str] = {}

    async def connect(self) -> None:
        """Connect and load SCRIPTS. Leaves the client disconnected on failure."""
        if not self._enabled:
            logger.info("redis_disabled")
            return
        client = Redis.from_url(self._url, max_connections=10)
        try:
            await client.ping()
            for name, source in SCRIPTS.items():
                self._shas[name] = await client.script_load(source)
        except RedisError as e:
            logger.warning("redis_connect_failed", extra={"error": str(e)})
            self._shas.clear()
            await client.aclose()
            return
        self._client = client
        logger.info("redis_connected", extra={"scripts": sorted(self._shas)})

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._shas.clear()

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def ping(self) -> bool:
        """Return True if Redis answers."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def run_script(
        self, name: str, keys: Sequence[str], args: Sequence[Any],
    ) -> Any:
        """
        Run one of SCRIPTS by name.

        A script flushed from the server (e.g. after a restart) is loaded again
        and retried once. Returns None if Redis is unavailable or errors.
        """
        if self._client is None or name not in self._shas:
            return None
        try:
            try:
                return await self._client.evalsha(self._shas[name], len(keys), *keys, *args)
            except NoScriptError:
                self._shas[name] = await self._client.script_load(SCRIPTS[name])
                return await self._client.evalsha(self._shas[name], len(keys), *keys, *args)
        except RedisError as e:
            logger.warning("redis_script_failed", extra={"script": name, "error": str(e)})
            return None


class _RedisState:
    """Holds the client opened by the app lifespan."""

    client: RedisClient | None = None


_state = _RedisState()


def get_redis_client() -> RedisClient | None:
    """The process Redis client, if the lifespan installed one."""
    return _state.client


def set_redis_client(client: RedisClient | None) -> None:
    _state.client = client
