"""Chat history and reaction endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.achievements.activity import message_sent_events, reaction_added_events
from ayanfe.achievements.catalog import AchievementCatalog
from ayanfe.achievements.router import unlock_responses
from ayanfe.achievements.tracker import AchievementTracker
from ayanfe.auth.dependencies import get_current_user
from ayanfe.chat.schemas import (
    MessageCreateRequest,
    MessageCreateResponse,
    MessageResponse,
    ParsedContentResponse,
    ReactionCreateRequest,
    ReactionCreateResponse,
    ReactionResponse,
)
from ayanfe.chat.service import (
    create_message,
    delete_reaction,
    get_user_message,
    list_messages,
    list_reactions,
    toggle_reaction,
)
from ayanfe.config import get_settings
from ayanfe.content.classifier import classify_content
from ayanfe.database import get_session
from ayanfe.db.models import Message, MessageReaction, User
from ayanfe.dependencies import get_catalog, get_redis_dep

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Chat"])


def message_response(message: Message) -> MessageResponse:
    parsed = classify_content(message.content)
    return MessageResponse(
        id=message.id,
        user_id=message.user_id,
        content=message.content,
        timestamp=message.timestamp,
        is_bot=message.is_bot,
        parsed=ParsedContentResponse(type=parsed.type, content=parsed.content, metadata=parsed.metadata),
    )


def reaction_response(reaction: MessageReaction) -> ReactionResponse:
    return ReactionResponse(
        id=reaction.id,
        message_id=reaction.message_id,
        user_id=reaction.user_id,
        emoji=reaction.emoji,
        created_at=reaction.created_at,
    )


@router.get("/messages", response_model=list[MessageResponse])
async def get_messages(
    limit: int | None = Query(None, ge=1, le=500),
    before_id: int | None = Query(None, ge=1),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Chat history, oldest first, each message with its render classification."""
    limit = limit or get_settings().messages_page_size
    return [message_response(m) for m in await list_messages(db, user.id, limit, before_id)]


@router.post("/messages", response_model=MessageCreateResponse, status_code=201)
async def post_message(
    body: MessageCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    catalog: AchievementCatalog = Depends(get_catalog),
):
    """Store a chat turn. User turns also advance chat achievements."""
    message = await create_message(db, user.id, body.content, is_bot=body.is_bot)
    await db.commit()

    unlocks = []
    if not body.is_bot:
        occurred_at = body.client_time or datetime.now(timezone.utc)
        events = await message_sent_events(db, user, occurred_at)
        unlocks = await AchievementTracker(db, redis, catalog).record(events)

    logger.info("message_created", user_id=user.id, message_id=message.id, unlocked=len(unlocks))
    return MessageCreateResponse(message=message_response(message), unlocked=unlock_responses(unlocks))


@router.get("/messages/{message_id}/reactions", response_model=list[ReactionResponse])
async def get_message_reactions(
    message_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if await get_user_message(db, user.id, message_id) is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return [reaction_response(r) for r in await list_reactions(db, message_id)]


@router.post("/messages/{message_id}/reactions", response_model=ReactionCreateResponse, status_code=201)
async def post_message_reaction(
    message_id: int,
    body: ReactionCreateRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    catalog: AchievementCatalog = Depends(get_catalog),
):
    """Toggle an emoji reaction on a message.

    The first POST adds it (201) and feeds emoji achievements; repeating the
    same emoji removes it again (200) without touching earned progress.
    """
    if await get_user_message(db, user.id, message_id) is None:
        raise HTTPException(status_code=404, detail="Message not found")

    reaction, added = await toggle_reaction(db, message_id, user.id, body.emoji)
    if not added:
        response.status_code = 200
        return ReactionCreateResponse(emoji=body.emoji, removed=True)

    events = reaction_added_events(user.id, body.emoji, reaction.created_at)
    unlocks = await AchievementTracker(db, redis, catalog).record(events)
    return ReactionCreateResponse(
        emoji=body.emoji,
        reaction=reaction_response(reaction),
        unlocked=unlock_responses(unlocks),
    )


@router.delete("/reactions/{reaction_id}", status_code=204)
async def remove_reaction(
    reaction_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Remove one of the user's reactions. Earned progress is kept."""
    if not await delete_reaction(db, user.id, reaction_id):
        raise HTTPException(status_code=404, detail="Reaction not found")
    return Response(status_code=204)
