"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from ayanfe.achievements.catalog import AchievementCatalog
from ayanfe.redis_client import get_optional_redis


async def get_redis_dep() -> object:
    """Return the Redis client, or None when running without Redis."""
    return get_optional_redis()


async def get_catalog(request: Request) -> AchievementCatalog:
    """Return the achievement catalog loaded at startup."""
    catalog: AchievementCatalog | None = getattr(request.app.state, "catalog", None)
    if catalog is None:
        return AchievementCatalog.empty()
    return catalog
