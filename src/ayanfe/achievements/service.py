"""Badge and achievement queries for the listing endpoints."""

from __future__ import annotations

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.db.models import Achievement, Badge, User, UserAchievementProgress, UserBadge


async def list_badges(db: AsyncSession, category: str | None = None) -> list[Badge]:
    stmt = select(Badge).order_by(Badge.id)
    if category is not None:
        stmt = stmt.where(Badge.category == category)
    return list((await db.execute(stmt)).scalars().all())


async def get_badge(db: AsyncSession, badge_id: int) -> Badge | None:
    return await db.get(Badge, badge_id)


async def get_achievement(db: AsyncSession, achievement_id: int) -> Achievement | None:
    result = await db.execute(select(Achievement).where(Achievement.id == achievement_id))
    return result.unique().scalar_one_or_none()


def _completed_by(user_id: int) -> Select[tuple[int]]:
    return (
        select(UserAchievementProgress.achievement_id)
        .where(
            UserAchievementProgress.user_id == user_id,
            UserAchievementProgress.completed.is_(True),
        )
    )


async def list_visible_achievements(db: AsyncSession, viewer: User | None) -> list[Achievement]:
    """Achievements the viewer may see.

    Secret achievements are hidden unless the viewer is an admin or has
    completed them.
    """
    stmt = select(Achievement).order_by(Achievement.id)
    if viewer is None:
        stmt = stmt.where(Achievement.is_secret.is_(False))
    elif not viewer.is_admin:
        stmt = stmt.where(
            or_(
                Achievement.is_secret.is_(False),
                Achievement.id.in_(_completed_by(viewer.id)),
            )
        )
    return list((await db.execute(stmt)).unique().scalars().all())


async def list_user_achievements(
    db: AsyncSession, user: User
) -> list[tuple[Achievement, UserAchievementProgress | None]]:
    """Visible achievements paired with the user's progress row (None if not started).

    Secret achievements appear only once completed, even for admins.
    """
    stmt = (
        select(Achievement)
        .where(
            or_(
                Achievement.is_secret.is_(False),
                Achievement.id.in_(_completed_by(user.id)),
            )
        )
        .order_by(Achievement.id)
    )
    achievements = (await db.execute(stmt)).unique().scalars().all()

    progress_rows = (
        (await db.execute(select(UserAchievementProgress).where(UserAchievementProgress.user_id == user.id)))
        .unique()
        .scalars()
        .all()
    )
    by_achievement = {p.achievement_id: p for p in progress_rows}
    return [(a, by_achievement.get(a.id)) for a in achievements]


async def list_user_badges(db: AsyncSession, user_id: int) -> list[UserBadge]:
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.desc())
    )
    return list(result.unique().scalars().all())


async def set_badge_displayed(
    db: AsyncSession, user_id: int, user_badge_id: int, displayed: bool
) -> UserBadge | None:
    """Toggle whether an earned badge is shown. Does not affect ownership."""
    result = await db.execute(
        select(UserBadge).where(UserBadge.id == user_badge_id, UserBadge.user_id == user_id)
    )
    user_badge = result.unique().scalar_one_or_none()
    if user_badge is None:
        return None
    user_badge.displayed = displayed
    await db.commit()
    return user_badge
