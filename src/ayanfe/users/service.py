"""User lookup and daily activity streak bookkeeping."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from ayanfe.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by primary key."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by username."""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_or_create_user(
    db: AsyncSession,
    username: str,
    *,
    display_name: str | None = None,
    is_admin: bool = False,
) -> tuple[User, bool]:
    """
    Get existing user or create a new one.

    Returns:
        Tuple of (user, created) where created is True if a new user was made.
    """
    user = await get_user_by_username(db, username)
    if user is not None:
        return user, False

    user = User(
        username=username,
        display_name=display_name or username,
        is_admin=is_admin,
        created_at=datetime.now(timezone.utc),
        current_streak=0,
        longest_streak=0,
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, username=username)
    return user, True


def touch_daily_streak(user: User, today: date) -> int:
    """
    Record activity on ``today`` and return the consecutive-day streak.

    Same day: unchanged. Next day: +1. Any gap (or first activity): reset to 1.
    """
    last = user.last_active_on
    if last == today:
        return user.current_streak
    if last is not None and last == today - timedelta(days=1):
        user.current_streak += 1
    elif last is None or last < today:
        user.current_streak = 1
    else:
        # Clock went backwards (event from an earlier local day); keep state.
        return user.current_streak

    user.last_active_on = today
    user.longest_streak = max(user.longest_streak, user.current_streak)
    return user.current_streak
