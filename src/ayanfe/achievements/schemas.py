"""Pydantic models for badge and achievement endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from ayanfe.achievements.progress import SUPPORTED_TYPES

# --- Badge ---


class BadgeResponse(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    image_url: str | None = None
    category: str
    level: int
    tier: str
    points: int


class UserBadgeResponse(BaseModel):
    id: int
    badge_id: int
    earned_at: datetime
    displayed: bool
    progress: int
    completed_steps: dict = {}
    badge: BadgeResponse


class UserBadgeUpdateRequest(BaseModel):
    displayed: bool


# --- Achievement ---


class AchievementResponse(BaseModel):
    id: int
    name: str
    description: str
    badge_id: int
    type: str
    required_count: int
    conditions: dict = {}
    is_secret: bool


class AchievementProgressResponse(BaseModel):
    progress: int = 0
    current_count: int = 0
    completed: bool = False
    completed_at: datetime | None = None
    last_updated: datetime | None = None
    status: Literal["not_started", "in_progress", "completed"] = "not_started"


class UserAchievementResponse(BaseModel):
    achievement: AchievementResponse
    progress: AchievementProgressResponse


# --- Activity ---


class UnlockResponse(BaseModel):
    achievement: dict[str, Any]
    badge: dict[str, Any]
    completed_at: datetime


class ActivityEventRequest(BaseModel):
    event_type: str = Field(description=f"One of: {', '.join(sorted(SUPPORTED_TYPES))}")
    measurement: int | str
    occurred_at: datetime | None = None


class ActivityResponse(BaseModel):
    unlocked: list[UnlockResponse]
