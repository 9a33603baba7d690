"""Badge award service with duplicate prevention."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.db.models import Badge, UserBadge

logger = logging.getLogger(__name__)


class BadgeNotFoundError(LookupError):
    """The badge referenced by an achievement does not exist."""


async def get_user_badge(db: AsyncSession, user_id: int, badge_id: int) -> UserBadge | None:
    """Fetch the user's row for a badge, if earned."""
    result = await db.execute(
        select(UserBadge).where(
            UserBadge.user_id == user_id,
            UserBadge.badge_id == badge_id,
        )
    )
    return result.unique().scalar_one_or_none()


async def has_badge(db: AsyncSession, user_id: int, badge_id: int) -> bool:
    """Check if user already has a specific badge."""
    return await get_user_badge(db, user_id, badge_id) is not None


async def award_badge(
    db: AsyncSession,
    user_id: int,
    badge_id: int,
    earned_at: datetime,
    completed_steps: dict | None = None,
) -> tuple[UserBadge, bool]:
    """Award a badge to a user.

    Returns (user_badge, created). ``created`` is False when the user already
    owned the badge; the existing row is returned untouched.

    Raises:
        BadgeNotFoundError: If no badge with ``badge_id`` exists.
    """
    if await db.get(Badge, badge_id) is None:
        msg = f"Badge {badge_id} not found"
        raise BadgeNotFoundError(msg)

    existing = await get_user_badge(db, user_id, badge_id)
    if existing is not None:
        return existing, False

    user_badge = UserBadge(
        user_id=user_id,
        badge_id=badge_id,
        earned_at=earned_at,
        displayed=True,
        progress=100,
        completed_steps=completed_steps or {"completed": True},
    )
    try:
        async with db.begin_nested():
            db.add(user_badge)
            await db.flush()
    except IntegrityError:
        # Race: a concurrent request awarded it first
        existing = await get_user_badge(db, user_id, badge_id)
        if existing is None:
            raise
        return existing, False

    logger.info("Awarded badge %s to user %s", badge_id, user_id)
    return user_badge, True
