"""API usage recording. Each proxied call counts toward API achievements."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.achievements.activity import api_call_events, command_used_events
from ayanfe.achievements.catalog import AchievementCatalog
from ayanfe.achievements.router import unlock_responses
from ayanfe.achievements.tracker import AchievementTracker, ActivityEvent
from ayanfe.auth.dependencies import get_current_user
from ayanfe.config import get_settings
from ayanfe.database import get_session
from ayanfe.db.models import ApiUsage, User
from ayanfe.dependencies import get_catalog, get_redis_dep
from ayanfe.usage.schemas import UsageCreateRequest, UsageCreateResponse, UsageResponse

router = APIRouter(prefix="/api/v1", tags=["Usage"])


def usage_response(usage: ApiUsage) -> UsageResponse:
    return UsageResponse(
        id=usage.id,
        endpoint=usage.endpoint,
        category=usage.category,
        method=usage.method,
        status=usage.status,
        response_time_ms=usage.response_time_ms,
        timestamp=usage.timestamp,
    )


@router.post("/usage", response_model=UsageCreateResponse, status_code=201)
async def record_usage(
    body: UsageCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    catalog: AchievementCatalog = Depends(get_catalog),
):
    """Record one API call. Only successful calls advance achievements."""
    occurred_at = body.occurred_at or datetime.now(timezone.utc)
    usage = ApiUsage(
        user_id=user.id,
        endpoint=body.endpoint,
        category=body.category,
        method=body.method.upper(),
        status=body.status,
        response_time_ms=body.response_time_ms,
        timestamp=occurred_at,
    )
    db.add(usage)
    await db.commit()

    events: list[ActivityEvent] = []
    if body.status < 400:
        if body.category:
            events += api_call_events(user.id, body.category, occurred_at)
        command = body.command or body.category
        if command:
            events += command_used_events(user.id, command, occurred_at)

    unlocks = await AchievementTracker(db, redis, catalog).record(events) if events else []
    return UsageCreateResponse(usage=usage_response(usage), unlocked=unlock_responses(unlocks))


@router.get("/users/me/usage", response_model=list[UsageResponse])
async def get_my_usage(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Most recent API calls, newest first."""
    result = await db.execute(
        select(ApiUsage)
        .where(ApiUsage.user_id == user.id)
        .order_by(ApiUsage.timestamp.desc(), ApiUsage.id.desc())
        .limit(get_settings().usage_history_limit)
    )
    return [usage_response(u) for u in result.scalars().all()]
