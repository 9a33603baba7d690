"""Pydantic models for API usage tracking."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ayanfe.achievements.schemas import UnlockResponse


class UsageCreateRequest(BaseModel):
    endpoint: str = Field(min_length=1, max_length=256)
    category: str | None = Field(default=None, max_length=32)
    command: str | None = Field(default=None, max_length=64)
    method: str = "GET"
    status: int = 200
    response_time_ms: int | None = Field(default=None, ge=0)
    occurred_at: datetime | None = None


class UsageResponse(BaseModel):
    id: int
    endpoint: str
    category: str | None = None
    method: str
    status: int
    response_time_ms: int | None = None
    timestamp: datetime


class UsageCreateResponse(BaseModel):
    usage: UsageResponse
    unlocked: list[UnlockResponse] = []
