"""Redis-backed rate limiting for the authentication routes."""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Callable, Protocol, runtime_checkable

from fastapi import status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.types import ASGIApp

from core import settings

logger = logging.getLogger(__name__)

AUTH_PATH_PREFIX = "/api/v1/auth"


@runtime_checkable
class SupportsRateLimitClient(Protocol):
    async def incr(self, key: str) -> int: ...

    async def expire(self, key: str, ttl: int) -> None: ...


def default_client_identifier(request: Request) -> str:
    """Key requests by the connecting client address."""
    host = request.client.host if request.client else None
    return host or "anonymous"


class RateLimiter:
    """Fixed-window counter per client key."""

    def __init__(
        self,
        redis_client: SupportsRateLimitClient,
        limit: int,
        window_seconds: int,
        prefix: str = "rate-limit",
    ) -> None:
        self.redis = redis_client
        self.limit = max(limit, 0)
        self.window_seconds = max(window_seconds, 0)
        self.prefix = prefix

    async def allow(self, key: str) -> bool:
        """Return True when the request is within the current window's budget."""
        if self.limit == 0 or self.window_seconds == 0:
            return True

        bucket = int(time.time()) // self.window_seconds
        redis_key = f"{self.prefix}:{key}:{bucket}"

        count = await self.redis.incr(redis_key)
        if count == 1:
            await self.redis.expire(redis_key, self.window_seconds)
        return count <= self.limit


@lru_cache
def get_redis_client(url: str) -> SupportsRateLimitClient:
    return Redis.from_url(url, decode_responses=False)


_cached_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter | None:
    """Return the shared limiter, or None when no Redis is configured."""
    global _cached_rate_limiter
    if _cached_rate_limiter is None and settings.redis_url:
        _cached_rate_limiter = RateLimiter(
            redis_client=get_redis_client(settings.redis_url),
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _cached_rate_limiter


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    """Override the shared limiter (used by tests)."""
    global _cached_rate_limiter
    _cached_rate_limiter = limiter


def _is_auth_path(path: str) -> bool:
    return path == AUTH_PATH_PREFIX or path.startswith(f"{AUTH_PATH_PREFIX}/")


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limiter_factory: Callable[[], RateLimiter | None] = get_rate_limiter,
        client_identifier: Callable[[Request], str] | None = None,
    ) -> None:
        super().__init__(app)
        self.limiter_factory = limiter_factory
        self.client_identifier = client_identifier or default_client_identifier

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        if not _is_auth_path(request.url.path):
            return await call_next(request)

        limiter = self.limiter_factory()
        if limiter is None:
            return await call_next(request)

        try:
            is_allowed = await limiter.allow(self.client_identifier(request))
        except Exception:
            logger.exception("Rate limiter backend failed")
            return JSONResponse(
                {"detail": "Service unavailable"},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if not is_allowed:
            return JSONResponse(
                {"detail": "Too Many Requests"},
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            )
        return await call_next(request)
