"""Redis-backed enforcement of the limits in rate_limit_config.py."""
import logging
import time
import uuid
from dataclasses import dataclass

from fastapi import Request

from core.rate_limit_config import (
    RATE_LIMITS,
    OperationType,
    RateLimitExceededError,
    RateLimitResult,
    get_operation_type,
)
from core.redis import FIXED_WINDOW, SLIDING_WINDOW, get_redis_client
from schemas.auth import AuthenticatedUser, AuthSource

logger = logging.getLogger(__name__)

MINUTE = 60
DAY = 86400


@dataclass(frozen=True)
class _Window:
    name: str  # for logs
    script: str
    key: str
    limit: int
    seconds: int


def _fail_open(limit: int) -> RateLimitResult:
    return RateLimitResult(
        allowed=True, limit=limit, remaining=limit, reset=0, retry_after=0,
    )


def _windows(
    user_id: int, auth_source: AuthSource, operation_type: OperationType,
    per_minute: int, per_day: int,
) -> list[_Window]:
    # Minute buckets are per caller type and operation; the daily budget is
    # shared by reads and writes, with sensitive operations counted apart.
    daily_pool = "sensitive" if operation_type is OperationType.SENSITIVE else "general"
    return [
        _Window(
            name="per_minute",
            script=SLIDING_WINDOW,
            key=f"rate:{user_id}:{auth_source.value}:{operation_type.value}:min",
            limit=per_minute,
            seconds=MINUTE,
        ),
        _Window(
            name="daily",
            script=FIXED_WINDOW,
            key=f"rate:{user_id}:daily:{daily_pool}",
            limit=per_day,
            seconds=DAY,
        ),
    ]


class RedisRateLimiter:
    """Checks a request against its per-minute and daily windows, in that order."""

    async def check(
        self,
        user_id: int,
        auth_source: AuthSource,
        operation_type: OperationType,
    ) -> RateLimitResult:
        """
        Count the request and report whether it is allowed.

        The first window that denies decides the result. When all allow, the
        per-minute result is returned since that is what clients see move.
        Requests are allowed when Redis is unavailable.
        """
        config = RATE_LIMITS.get((auth_source, operation_type))
        if config is None:
            # e.g. TOKEN + SENSITIVE: the route's auth dependency rejects those
            return _fail_open(0)

        redis_client = get_redis_client()
        if redis_client is None or not redis_client.is_connected:
            logger.warning("redis_unavailable", extra={"operation": "rate_limit"})
            return _fail_open(config.requests_per_minute)

        now = int(time.time())
        windows = _windows(
            user_id, auth_source, operation_type,
            config.requests_per_minute, config.requests_per_day,
        )
        results = []
        for window in windows:
            result = await self._consume(window, now)
            if not result.allowed:
                logger.warning(
                    "rate_limit_exceeded",
                    extra={
                        "user_id": user_id,
                        "auth_source": auth_source.value,
                        "operation": operation_type.value,
                        "limit_type": window.name,
                    },
                )
                return result
            results.append(result)
        return results[0]

    async def _consume(self, window: _Window, now: int) -> RateLimitResult:
        redis_client = get_redis_client()
        if redis_client is None:
            return _fail_open(window.limit)

        reply = await redis_client.run_script(
            window.script,
            [window.key],
            [now, window.seconds, window.limit, uuid.uuid4().hex],
        )
        if reply is None:
            return _fail_open(window.limit)

        allowed, remaining, reset_in = (int(v) for v in reply)
        return RateLimitResult(
            allowed=bool(allowed),
            limit=window.limit,
            remaining=max(0, remaining),
            reset=now + reset_in,
            retry_after=0 if allowed else max(1, reset_in),
        )


rate_limiter = RedisRateLimiter()


async def enforce_rate_limit(request: Request, user: AuthenticatedUser) -> RateLimitResult:
    """
    Apply the caller's limit to this request.

    Stores the result in request.state for RateLimitHeadersMiddleware and raises
    RateLimitExceededError (handled as 429) when the caller is over the limit.
    """
    operation_type = get_operation_type(request.method, request.url.path)
    result = await rate_limiter.check(user.id, user.source, operation_type)
    if not result.allowed:
        raise RateLimitExceededError(result)

    request.state.rate_limit_info = {
        "limit": result.limit,
        "remaining": result.remaining,
        "reset": result.reset,
    }
    return result
