"""Pydantic models for user endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    username: str
    display_name: str | None = None
    is_admin: bool
    created_at: datetime | None = None
    current_streak: int
    longest_streak: int
    last_active_on: date | None = None
    badges_earned: int
