"""Integration tests for the current-user endpoint."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from ayanfe.auth.jwt import create_access_token


class TestMe:
    """GET /users/me."""

    @pytest.mark.asyncio
    async def test_profile(self, client: AsyncClient, user):
        response = await client.get("/api/v1/users/me", headers=user.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "tester"
        assert data["current_streak"] == 0
        assert data["badges_earned"] == 0

    @pytest.mark.asyncio
    async def test_badges_earned_counts(self, client: AsyncClient, user):
        await client.post(
            "/api/v1/messages",
            json={"content": "hi", "client_time": "2026-10-19T12:00:00+00:00"},
            headers=user.headers,
        )
        data = (await client.get("/api/v1/users/me", headers=user.headers)).json()
        assert data["badges_earned"] == 1
        assert data["current_streak"] == 1
        assert data["last_active_on"] == "2026-10-19"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_deleted_user_token(self, client: AsyncClient):
        token = create_access_token(4242, "ghost")
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json() == {"detail": "User not found"}
