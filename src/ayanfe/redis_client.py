"""Shared Redis client for rate limiting and unlock notifications.

Redis is optional for this service: nothing here is the source of truth,
so callers treat a missing or unreachable Redis as "skip the feature".
"""

import redis.asyncio as redis

from ayanfe.config import Settings

_pool: redis.Redis | None = None


async def init_redis(settings: Settings) -> redis.Redis:
    """Create the client. Short socket timeouts keep a dead Redis from stalling requests."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
        socket_timeout=settings.redis_socket_timeout_seconds,
    )
    return _pool


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
        _pool = None


def get_optional_redis() -> redis.Redis | None:
    """The Redis client, or None when it was never initialized (tests, local runs)."""
    return _pool
