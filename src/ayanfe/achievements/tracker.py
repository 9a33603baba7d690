"""Achievement tracker: applies activity events to per-user progress rows."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.achievements.badge_service import BadgeNotFoundError, award_badge
from ayanfe.achievements.catalog import AchievementCatalog, AchievementDef, BadgeDef
from ayanfe.achievements.progress import ProgressState, advance
from ayanfe.config import get_settings
from ayanfe.db.models import UserAchievementProgress

logger = structlog.get_logger()


@dataclass(frozen=True)
class ActivityEvent:
    """Something a user did. ``event_type`` names the achievement type it feeds."""

    user_id: int
    event_type: str
    measurement: Any
    occurred_at: datetime


@dataclass(frozen=True)
class Unlock:
    """An achievement completed by an event, with the badge it awarded."""

    user_id: int
    achievement: AchievementDef
    badge: BadgeDef
    completed_at: datetime
    user_badge_id: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "achievement": {
                "id": self.achievement.id,
                "name": self.achievement.name,
                "description": self.achievement.description,
                "type": self.achievement.type,
            },
            "badge": {
                "id": self.badge.id,
                "name": self.badge.name,
                "description": self.badge.description,
                "icon": self.badge.icon,
                "image_url": self.badge.image_url,
                "category": self.badge.category,
                "level": self.badge.level,
                "tier": self.badge.tier,
                "points": self.badge.points,
            },
            "completed_at": self.completed_at.isoformat(),
        }


def state_from_row(row: UserAchievementProgress) -> ProgressState:
    return ProgressState(
        current_count=row.current_count or 0,
        progress=row.progress or 0,
        completed=bool(row.completed),
        completed_at=row.completed_at,
        metadata=dict(row.progress_metadata or {}),
    )


def apply_state(row: UserAchievementProgress, state: ProgressState, now: datetime) -> None:
    row.current_count = state.current_count
    row.progress = state.progress
    row.completed = state.completed
    row.completed_at = state.completed_at
    row.progress_metadata = dict(state.metadata)
    row.last_updated = now


class AchievementTracker:
    """Evaluates activity events against the achievement catalog.

    Each (event, achievement) pair runs in its own SAVEPOINT with the progress
    row locked, so one bad achievement never blocks the rest of the batch.
    """

    def __init__(
        self,
        db: AsyncSession,
        redis: object,
        catalog: AchievementCatalog,
        channel: str | None = None,
    ) -> None:
        self.db = db
        self.redis = redis
        self.catalog = catalog
        self.channel = channel or get_settings().achievement_channel

    async def record(self, events: list[ActivityEvent]) -> list[Unlock]:
        """Apply events, commit, then publish unlock notifications.

        Returns the achievements completed by this batch (may be empty).
        """
        unlocks: list[Unlock] = []
        for event in events:
            for achievement in self.catalog.for_type(event.event_type):
                unlock = await self._evaluate_safely(event, achievement)
                if unlock is not None:
                    unlocks.append(unlock)

        await self.db.commit()
        await self._publish(unlocks)
        return unlocks

    async def _evaluate_safely(self, event: ActivityEvent, achievement: AchievementDef) -> Unlock | None:
        badge = self.catalog.badge_for(achievement)
        if badge is None:
            logger.warning(
                "achievement_badge_missing",
                achievement_id=achievement.id,
                badge_id=achievement.badge_id,
            )
            return None

        try:
            async with self.db.begin_nested():
                return await self._evaluate(event, achievement, badge)
        except BadgeNotFoundError:
            logger.warning(
                "achievement_badge_missing",
                achievement_id=achievement.id,
                badge_id=achievement.badge_id,
            )
        except SQLAlchemyError:
            logger.exception(
                "achievement_progress_failed",
                achievement_id=achievement.id,
                user_id=event.user_id,
            )
        return None

    async def _evaluate(self, event: ActivityEvent, achievement: AchievementDef, badge: BadgeDef) -> Unlock | None:
        row = await self._lock_progress_row(event.user_id, achievement.id, event.occurred_at)
        transition = advance(state_from_row(row), achievement.rule, event.measurement, event.occurred_at)
        if not transition.changed:
            return None

        apply_state(row, transition.state, event.occurred_at)
        await self.db.flush()
        if not transition.just_completed:
            return None

        user_badge, _ = await award_badge(self.db, event.user_id, badge.id, event.occurred_at)
        logger.info(
            "achievement_completed",
            user_id=event.user_id,
            achievement_id=achievement.id,
            badge_id=badge.id,
        )
        return Unlock(
            user_id=event.user_id,
            achievement=achievement,
            badge=badge,
            completed_at=event.occurred_at,
            user_badge_id=user_badge.id,
        )

    async def _lock_progress_row(self, user_id: int, achievement_id: int, now: datetime) -> UserAchievementProgress:
        """SELECT ... FOR UPDATE the progress row, creating it if absent."""
        stmt = (
            select(UserAchievementProgress)
            .where(
                UserAchievementProgress.user_id == user_id,
                UserAchievementProgress.achievement_id == achievement_id,
            )
            .with_for_update(of=UserAchievementProgress)
        )
        row = (await self.db.execute(stmt)).unique().scalar_one_or_none()
        if row is not None:
            return row

        row = UserAchievementProgress(
            user_id=user_id,
            achievement_id=achievement_id,
            progress=0,
            current_count=0,
            completed=False,
            last_updated=now,
            progress_metadata={},
        )
        try:
            async with self.db.begin_nested():
                self.db.add(row)
                await self.db.flush()
        except IntegrityError:
            # Lost the insert race; lock the winner's row instead
            row = (await self.db.execute(stmt)).unique().scalar_one()
        return row

    async def _publish(self, unlocks: list[Unlock]) -> None:
        """Fire-and-forget push of unlocks to the UI channel."""
        if self.redis is None or not unlocks:
            return
        for unlock in unlocks:
            try:
                await self.redis.publish(self.channel, json.dumps(unlock.to_payload()))  # type: ignore[attr-defined]
            except Exception:
                logger.warning("achievement_notification_failed", user_id=unlock.user_id, exc_info=True)
