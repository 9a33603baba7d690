"""Static badge and achievement definitions, loaded once at startup."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.achievements.progress import AchievementRule
from ayanfe.db.models import Achievement, Badge

BADGE_TIERS: Mapping[int, str] = MappingProxyType({1: "bronze", 2: "gold", 3: "diamond"})


def badge_tier(level: int) -> str:
    """Map a badge level to its display tier, clamping into 1..3."""
    return BADGE_TIERS[min(max(level, 1), 3)]


@dataclass(frozen=True)
class BadgeDef:
    id: int
    name: str
    description: str
    icon: str
    category: str
    level: int
    points: int
    image_url: str | None = None

    @property
    def tier(self) -> str:
        return badge_tier(self.level)


@dataclass(frozen=True)
class AchievementDef:
    id: int
    name: str
    description: str
    badge_id: int
    type: str
    required_count: int
    conditions: dict[str, Any] = field(default_factory=dict)
    is_secret: bool = False

    @property
    def rule(self) -> AchievementRule:
        return AchievementRule(self.type, self.required_count, self.conditions)


@dataclass(frozen=True)
class AchievementCatalog:
    """Immutable snapshot of badge and achievement definitions."""

    badges: Mapping[int, BadgeDef]
    achievements: tuple[AchievementDef, ...]

    @classmethod
    def empty(cls) -> AchievementCatalog:
        return cls(badges=MappingProxyType({}), achievements=())

    @classmethod
    def build(cls, badges: list[BadgeDef], achievements: list[AchievementDef]) -> AchievementCatalog:
        return cls(
            badges=MappingProxyType({b.id: b for b in badges}),
            achievements=tuple(achievements),
        )

    def for_type(self, achievement_type: str) -> list[AchievementDef]:
        """Achievements evaluated for an event of ``achievement_type``."""
        return [a for a in self.achievements if a.type == achievement_type]

    def badge_for(self, achievement: AchievementDef) -> BadgeDef | None:
        return self.badges.get(achievement.badge_id)


def badge_def_from_row(badge: Badge) -> BadgeDef:
    return BadgeDef(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        icon=badge.icon,
        category=badge.category,
        level=badge.level,
        points=badge.points,
        image_url=badge.image_url,
    )


def achievement_def_from_row(achievement: Achievement) -> AchievementDef:
    return AchievementDef(
        id=achievement.id,
        name=achievement.name,
        description=achievement.description,
        badge_id=achievement.badge_id,
        type=achievement.type,
        required_count=achievement.required_count or 1,
        conditions=dict(achievement.conditions or {}),
        is_secret=bool(achievement.is_secret),
    )


async def load_catalog(db: AsyncSession) -> AchievementCatalog:
    """Read all badge and achievement definitions into an AchievementCatalog."""
    badge_rows = (await db.execute(select(Badge).order_by(Badge.id))).scalars().all()
    achievement_rows = (
        (await db.execute(select(Achievement).order_by(Achievement.id))).unique().scalars().all()
    )
    return AchievementCatalog.build(
        [badge_def_from_row(b) for b in badge_rows],
        [achievement_def_from_row(a) for a in achievement_rows],
    )
