"""Chat history persistence."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.db.models import Message, MessageReaction


async def create_message(db: AsyncSession, user_id: int, content: str, *, is_bot: bool = False) -> Message:
    message = Message(
        user_id=user_id,
        content=content,
        is_bot=is_bot,
        timestamp=datetime.now(timezone.utc),
    )
    db.add(message)
    await db.flush()
    return message


async def list_messages(
    db: AsyncSession, user_id: int, limit: int, before_id: int | None = None
) -> list[Message]:
    """The user's latest ``limit`` messages, oldest first."""
    stmt = select(Message).where(Message.user_id == user_id)
    if before_id is not None:
        stmt = stmt.where(Message.id < before_id)
    stmt = stmt.order_by(Message.id.desc()).limit(limit)
    rows = list((await db.execute(stmt)).scalars().all())
    rows.reverse()
    return rows


async def get_user_message(db: AsyncSession, user_id: int, message_id: int) -> Message | None:
    result = await db.execute(
        select(Message).where(Message.id == message_id, Message.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def list_reactions(db: AsyncSession, message_id: int) -> list[MessageReaction]:
    result = await db.execute(
        select(MessageReaction)
        .where(MessageReaction.message_id == message_id)
        .order_by(MessageReaction.created_at, MessageReaction.id)
    )
    return list(result.scalars().all())


async def find_reaction(db: AsyncSession, message_id: int, user_id: int, emoji: str) -> MessageReaction | None:
    result = await db.execute(
        select(MessageReaction).where(
            MessageReaction.message_id == message_id,
            MessageReaction.user_id == user_id,
            MessageReaction.emoji == emoji,
        )
    )
    return result.scalar_one_or_none()


async def toggle_reaction(
    db: AsyncSession, message_id: int, user_id: int, emoji: str
) -> tuple[MessageReaction | None, bool]:
    """Add the reaction, or remove it if the user already reacted with this emoji.

    Returns (reaction, added). On removal the reaction is None. Commits.
    """
    existing = await find_reaction(db, message_id, user_id, emoji)
    if existing is not None:
        await db.delete(existing)
        await db.commit()
        return None, False

    reaction = MessageReaction(
        message_id=message_id,
        user_id=user_id,
        emoji=emoji,
        created_at=datetime.now(timezone.utc),
    )
    try:
        async with db.begin_nested():
            db.add(reaction)
            await db.flush()
    except IntegrityError:
        # A concurrent request added the same reaction first; keep theirs
        reaction = await find_reaction(db, message_id, user_id, emoji)
        if reaction is None:
            raise
    await db.commit()
    return reaction, True


async def delete_reaction(db: AsyncSession, user_id: int, reaction_id: int) -> bool:
    """Delete the user's own reaction. Returns False if not found."""
    result = await db.execute(
        select(MessageReaction).where(
            MessageReaction.id == reaction_id,
            MessageReaction.user_id == user_id,
        )
    )
    reaction = result.scalar_one_or_none()
    if reaction is None:
        return False
    await db.delete(reaction)
    await db.commit()
    return True
