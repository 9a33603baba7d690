"""Badge and achievement seed data: the default AYANFE AI achievement set."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.db.models import Achievement, Badge

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    {
        "name": "Welcome",
        "description": "Welcome to Ayanfe AI. Earned by signing up and completing your first chat.",
        "icon": "\U0001f44b",
        "category": "onboarding",
        "level": 1,
        "points": 10,
    },
    {
        "name": "Chat Master",
        "description": "Sent 10 messages to Ayanfe AI.",
        "icon": "\U0001f4ac",
        "category": "engagement",
        "level": 1,
        "points": 20,
    },
    {
        "name": "Media Explorer",
        "description": "Used 3 different media commands (images, videos, music).",
        "icon": "\U0001f3ac",
        "category": "exploration",
        "level": 1,
        "points": 30,
    },
    {
        "name": "Command Pro",
        "description": "Used 5 different commands.",
        "icon": "\U0001f50d",
        "category": "expertise",
        "level": 2,
        "points": 40,
    },
    {
        "name": "Daily User",
        "description": "Used Ayanfe AI for 5 consecutive days.",
        "icon": "\U0001f4c6",
        "category": "loyalty",
        "level": 2,
        "points": 50,
    },
    {
        "name": "API Explorer",
        "description": "Used all available API endpoints at least once.",
        "icon": "\U0001f310",
        "category": "expertise",
        "level": 3,
        "points": 100,
    },
    {
        "name": "Emoji Master",
        "description": "Used 10 different emoji reactions.",
        "icon": "\U0001f600",
        "category": "engagement",
        "level": 1,
        "points": 25,
    },
    {
        "name": "Night Owl",
        "description": "Used Ayanfe AI between 12 AM and 4 AM.",
        "icon": "\U0001f989",
        "category": "engagement",
        "level": 1,
        "points": 15,
    },
    {
        "name": "Early Bird",
        "description": "Used Ayanfe AI between 5 AM and 8 AM.",
        "icon": "\U0001f426",
        "category": "engagement",
        "level": 1,
        "points": 15,
    },
]

# "badge" refers to a BADGE_SEED_DATA name; resolved to badge_id at seed time.
ACHIEVEMENT_SEED_DATA: list[dict] = [
    {
        "name": "First Conversation",
        "description": "Send your first message to Ayanfe AI.",
        "badge": "Welcome",
        "type": "message_count",
        "required_count": 1,
        "conditions": {"messageCount": 1},
    },
    {
        "name": "Active Chatter",
        "description": "Send 10 messages to Ayanfe AI.",
        "badge": "Chat Master",
        "type": "message_count",
        "required_count": 10,
        "conditions": {"messageCount": 10},
    },
    {
        "name": "Media Enthusiast",
        "description": "Use 3 different media commands.",
        "badge": "Media Explorer",
        "type": "unique_commands",
        "required_count": 3,
        "conditions": {"commandTypes": ["image", "video", "music"]},
    },
    {
        "name": "Command Expert",
        "description": "Use 5 different commands.",
        "badge": "Command Pro",
        "type": "unique_commands",
        "required_count": 5,
        "conditions": {"anyCommands": True},
    },
    {
        "name": "Regular User",
        "description": "Use Ayanfe AI for 5 consecutive days.",
        "badge": "Daily User",
        "type": "login_streak",
        "required_count": 5,
        "conditions": {"daysInARow": 5},
    },
    {
        "name": "API Master",
        "description": "Used all major API categories.",
        "badge": "API Explorer",
        "type": "api_usage",
        "required_count": 8,
        "conditions": {
            "categories": ["image", "video", "music", "anime", "quote", "lyrics", "translation", "chat"],
        },
    },
    {
        "name": "Emoji Fan",
        "description": "Use 10 different emoji reactions.",
        "badge": "Emoji Master",
        "type": "emoji_reactions",
        "required_count": 10,
        "conditions": {"uniqueEmojis": 10},
    },
    {
        "name": "Night Session",
        "description": "Use Ayanfe AI during late night hours.",
        "badge": "Night Owl",
        "type": "time_of_day",
        "required_count": 1,
        "conditions": {"startHour": 0, "endHour": 4},
    },
    {
        "name": "Morning Person",
        "description": "Use Ayanfe AI during early morning hours.",
        "badge": "Early Bird",
        "type": "time_of_day",
        "required_count": 1,
        "conditions": {"startHour": 5, "endHour": 8},
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Insert missing badges by name. Idempotent. Returns the number inserted."""
    existing = set((await db.execute(select(Badge.name))).scalars())
    now = datetime.now(timezone.utc)
    inserted = 0
    for data in BADGE_SEED_DATA:
        if data["name"] in existing:
            continue
        db.add(Badge(**data, created_at=now))
        inserted += 1
    await db.commit()
    logger.info("Seeded %d badge definitions", inserted)
    return inserted


async def seed_achievements(db: AsyncSession) -> int:
    """Insert missing achievements by name, linking them to seeded badges.

    Achievements whose badge does not exist are skipped.
    """
    badge_ids = {name: badge_id for badge_id, name in (await db.execute(select(Badge.id, Badge.name))).all()}
    existing = set((await db.execute(select(Achievement.name))).scalars())
    now = datetime.now(timezone.utc)
    inserted = 0
    for data in ACHIEVEMENT_SEED_DATA:
        if data["name"] in existing:
            continue
        badge_id = badge_ids.get(data["badge"])
        if badge_id is None:
            logger.warning("Skipping achievement %s due to missing badge %s", data["name"], data["badge"])
            continue
        fields = {k: v for k, v in data.items() if k != "badge"}
        db.add(Achievement(**fields, badge_id=badge_id, is_secret=False, created_at=now))
        inserted += 1
    await db.commit()
    logger.info("Seeded %d achievement definitions", inserted)
    return inserted


async def seed_all(db: AsyncSession) -> None:
    """Seed badges then achievements."""
    await seed_badges(db)
    await seed_achievements(db)
