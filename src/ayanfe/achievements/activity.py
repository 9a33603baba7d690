"""Translate application actions into tracker events."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.achievements.tracker import ActivityEvent
from ayanfe.db.models import Message, User
from ayanfe.users.service import touch_daily_streak


async def count_user_messages(db: AsyncSession, user_id: int) -> int:
    """Number of messages the user (not the bot) has sent."""
    result = await db.execute(
        select(func.count())
        .select_from(Message)
        .where(Message.user_id == user_id, Message.is_bot.is_(False))
    )
    return result.scalar_one()


def visit_events(user: User, occurred_at: datetime) -> list[ActivityEvent]:
    """Events for any user visit: day streak and local hour.

    ``occurred_at`` should carry the user's local UTC offset; its wall-clock
    hour and date are what time_of_day and login_streak measure.
    """
    streak = touch_daily_streak(user, occurred_at.date())
    return [
        ActivityEvent(user.id, "login_streak", streak, occurred_at),
        ActivityEvent(user.id, "time_of_day", occurred_at.hour, occurred_at),
    ]


async def message_sent_events(db: AsyncSession, user: User, occurred_at: datetime) -> list[ActivityEvent]:
    total = await count_user_messages(db, user.id)
    return [ActivityEvent(user.id, "message_count", total, occurred_at), *visit_events(user, occurred_at)]


def command_used_events(user_id: int, command: str, occurred_at: datetime) -> list[ActivityEvent]:
    return [ActivityEvent(user_id, "unique_commands", command.lower(), occurred_at)]


def api_call_events(user_id: int, category: str, occurred_at: datetime) -> list[ActivityEvent]:
    return [ActivityEvent(user_id, "api_usage", category.lower(), occurred_at)]


def reaction_added_events(user_id: int, emoji: str, occurred_at: datetime) -> list[ActivityEvent]:
    return [ActivityEvent(user_id, "emoji_reactions", emoji, occurred_at)]
