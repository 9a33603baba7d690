"""Badge and achievement API endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.achievements.catalog import AchievementCatalog, badge_tier
from ayanfe.achievements.progress import SUPPORTED_TYPES
from ayanfe.achievements.schemas import (
    AchievementProgressResponse,
    AchievementResponse,
    ActivityEventRequest,
    ActivityResponse,
    BadgeResponse,
    UnlockResponse,
    UserAchievementResponse,
    UserBadgeResponse,
    UserBadgeUpdateRequest,
)
from ayanfe.achievements.service import (
    get_achievement,
    get_badge,
    list_badges,
    list_user_achievements,
    list_user_badges,
    list_visible_achievements,
    set_badge_displayed,
)
from ayanfe.achievements.tracker import AchievementTracker, ActivityEvent, Unlock, state_from_row
from ayanfe.auth.dependencies import get_current_user, get_optional_user
from ayanfe.database import get_session
from ayanfe.db.models import Achievement, Badge, User, UserAchievementProgress, UserBadge
from ayanfe.dependencies import get_catalog, get_redis_dep

router = APIRouter(prefix="/api/v1", tags=["Achievements"])


def badge_response(badge: Badge) -> BadgeResponse:
    return BadgeResponse(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        icon=badge.icon,
        image_url=badge.image_url,
        category=badge.category,
        level=badge.level,
        tier=badge_tier(badge.level),
        points=badge.points,
    )


def achievement_response(achievement: Achievement) -> AchievementResponse:
    return AchievementResponse(
        id=achievement.id,
        name=achievement.name,
        description=achievement.description,
        badge_id=achievement.badge_id,
        type=achievement.type,
        required_count=achievement.required_count,
        conditions=achievement.conditions or {},
        is_secret=achievement.is_secret,
    )


def progress_response(row: UserAchievementProgress | None) -> AchievementProgressResponse:
    if row is None:
        return AchievementProgressResponse()
    status = state_from_row(row).status
    return AchievementProgressResponse(
        progress=row.progress,
        current_count=row.current_count,
        completed=row.completed,
        completed_at=row.completed_at,
        last_updated=row.last_updated,
        status=status.value,
    )


def user_badge_response(user_badge: UserBadge) -> UserBadgeResponse:
    return UserBadgeResponse(
        id=user_badge.id,
        badge_id=user_badge.badge_id,
        earned_at=user_badge.earned_at,
        displayed=user_badge.displayed,
        progress=user_badge.progress,
        completed_steps=user_badge.completed_steps or {},
        badge=badge_response(user_badge.badge),
    )


def unlock_responses(unlocks: list[Unlock]) -> list[UnlockResponse]:
    return [UnlockResponse(**u.to_payload()) for u in unlocks]


# ── Public endpoints ──


@router.get("/badges", response_model=list[BadgeResponse])
async def get_badges(db: AsyncSession = Depends(get_session)):
    """All badge definitions."""
    return [badge_response(b) for b in await list_badges(db)]


@router.get("/badges/category/{category}", response_model=list[BadgeResponse])
async def get_badges_by_category(category: str, db: AsyncSession = Depends(get_session)):
    """Badge definitions in one category."""
    return [badge_response(b) for b in await list_badges(db, category=category)]


@router.get("/badges/{badge_id}", response_model=BadgeResponse)
async def get_badge_detail(badge_id: int, db: AsyncSession = Depends(get_session)):
    badge = await get_badge(db, badge_id)
    if badge is None:
        raise HTTPException(status_code=404, detail="Badge not found")
    return badge_response(badge)


@router.get("/achievements", response_model=list[AchievementResponse])
async def get_achievements(
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    """Achievement definitions. Secret ones only for admins or users who completed them."""
    return [achievement_response(a) for a in await list_visible_achievements(db, viewer)]


@router.get("/achievements/{achievement_id}", response_model=AchievementResponse)
async def get_achievement_detail(
    achievement_id: int,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    achievement = await get_achievement(db, achievement_id)
    if achievement is None:
        raise HTTPException(status_code=404, detail="Achievement not found")
    if achievement.is_secret:
        visible = await list_visible_achievements(db, viewer)
        if achievement.id not in {a.id for a in visible}:
            raise HTTPException(status_code=403, detail="Access to secret achievement denied")
    return achievement_response(achievement)


# ── Authenticated endpoints ──


@router.get("/users/me/badges", response_model=list[UserBadgeResponse])
async def get_my_badges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Badges the current user has earned, newest first."""
    return [user_badge_response(ub) for ub in await list_user_badges(db, user.id)]


@router.patch("/users/me/badges/{user_badge_id}", response_model=UserBadgeResponse)
async def update_my_badge(
    user_badge_id: int,
    body: UserBadgeUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Show or hide an earned badge on the profile."""
    user_badge = await set_badge_displayed(db, user.id, user_badge_id, body.displayed)
    if user_badge is None:
        raise HTTPException(status_code=404, detail="User badge not found")
    return user_badge_response(user_badge)


@router.get("/users/me/achievements", response_model=list[UserAchievementResponse])
async def get_my_achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Achievements with the current user's progress."""
    pairs = await list_user_achievements(db, user)
    return [
        UserAchievementResponse(achievement=achievement_response(a), progress=progress_response(p))
        for a, p in pairs
    ]


@router.post("/users/me/activity", response_model=ActivityResponse)
async def post_activity(
    body: ActivityEventRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    catalog: AchievementCatalog = Depends(get_catalog),
):
    """Feed one activity event to the achievement tracker."""
    if body.event_type not in SUPPORTED_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown event type: {body.event_type}")

    occurred_at = body.occurred_at or datetime.now(timezone.utc)
    tracker = AchievementTracker(db, redis, catalog)
    unlocks = await tracker.record([ActivityEvent(user.id, body.event_type, body.measurement, occurred_at)])
    return ActivityResponse(unlocked=unlock_responses(unlocks))
