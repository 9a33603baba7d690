"""Pydantic models for chat endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ayanfe.achievements.schemas import UnlockResponse
from ayanfe.content.classifier import ContentType


class ParsedContentResponse(BaseModel):
    type: ContentType
    content: str
    metadata: dict[str, Any] | None = None


class MessageCreateRequest(BaseModel):
    content: str = Field(min_length=1)
    is_bot: bool = False
    client_time: datetime | None = Field(
        default=None,
        description="Send time on the user's clock, with UTC offset. Drives time-of-day achievements.",
    )


class MessageResponse(BaseModel):
    id: int
    user_id: int
    content: str
    timestamp: datetime
    is_bot: bool
    parsed: ParsedContentResponse


class MessageCreateResponse(BaseModel):
    message: MessageResponse
    unlocked: list[UnlockResponse] = []


class ReactionCreateRequest(BaseModel):
    emoji: str = Field(min_length=1, max_length=32)


class ReactionResponse(BaseModel):
    id: int
    message_id: int
    user_id: int
    emoji: str
    created_at: datetime


class ReactionCreateResponse(BaseModel):
    """A POST toggles: ``removed`` is True (and ``reaction`` None) when it undid an existing reaction."""

    emoji: str
    removed: bool = False
    reaction: ReactionResponse | None = None
    unlocked: list[UnlockResponse] = []
