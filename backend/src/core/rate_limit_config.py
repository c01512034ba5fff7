"""
Rate limiting policy: how many requests each kind of caller may make.

Enforcement lives in rate_limiter.py. Change limits in RATE_LIMITS; mark an
endpoint as credential-issuing in SENSITIVE_ENDPOINTS.
"""
from dataclasses import dataclass
from enum import Enum

from schemas.auth import AuthSource


class OperationType(Enum):
    """Request category a limit applies to."""

    READ = "read"
    WRITE = "write"
    SENSITIVE = "sensitive"


@dataclass
class RateLimitConfig:
    requests_per_minute: int
    requests_per_day: int


@dataclass
class RateLimitResult:
    """
    Outcome of one check, in the form the X-RateLimit-* headers need.

    `reset` is a Unix timestamp; `retry_after` is in seconds and 0 when allowed.
    """

    allowed: bool
    limit: int
    remaining: int
    reset: int
    retry_after: int


class RateLimitExceededError(Exception):
    """Raised by the auth dependencies; rendered as 429 with Retry-After."""

    def __init__(self, result: RateLimitResult) -> None:
        self.result = result
        super().__init__("Rate limit exceeded")


# CLI tokens run mnemonics from scripts, so they get more read headroom per
# minute than the browser. Only sessions can issue tokens.
RATE_LIMITS: dict[tuple[AuthSource, OperationType], RateLimitConfig] = {
    (AuthSource.TOKEN, OperationType.READ): RateLimitConfig(240, 4000),
    (AuthSource.TOKEN, OperationType.WRITE): RateLimitConfig(60, 2000),
    (AuthSource.SESSION, OperationType.READ): RateLimitConfig(180, 4000),
    (AuthSource.SESSION, OperationType.WRITE): RateLimitConfig(120, 4000),
    (AuthSource.SESSION, OperationType.SENSITIVE): RateLimitConfig(10, 50),
}

# (method, path without query string or trailing slash)
SENSITIVE_ENDPOINTS: frozenset[tuple[str, str]] = frozenset({
    ("POST", "/api/tokens"),
})


def get_operation_type(method: str, path: str) -> OperationType:
    """Classify a request for rate limiting."""
    if (method, path.rstrip("/")) in SENSITIVE_ENDPOINTS:
        return OperationType.SENSITIVE
    if method in ("GET", "HEAD"):
        return OperationType.READ
    return OperationType.WRITE
