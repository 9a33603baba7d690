"""Integration tests for API usage recording."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _record(client: AsyncClient, user, **body) -> dict:
    payload = {"endpoint": f"/api/{body.get('category', 'x')}", **body}
    response = await client.post("/api/v1/usage", json=payload, headers=user.headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestUsageRecording:
    """POST /usage and GET /users/me/usage."""

    @pytest.mark.asyncio
    async def test_record_and_list(self, client: AsyncClient, user):
        await _record(client, user, category="image", method="get", response_time_ms=120)
        await _record(client, user, category="quote", status=500)

        response = await client.get("/api/v1/users/me/usage", headers=user.headers)
        assert response.status_code == 200
        history = response.json()
        assert [u["category"] for u in history] == ["quote", "image"]
        assert history[1]["method"] == "GET"
        assert history[1]["response_time_ms"] == 120

    @pytest.mark.asyncio
    async def test_three_media_commands_unlock_media_enthusiast(self, client: AsyncClient, user):
        assert (await _record(client, user, category="image"))["unlocked"] == []
        assert (await _record(client, user, category="video"))["unlocked"] == []
        body = await _record(client, user, category="music")
        assert [u["achievement"]["name"] for u in body["unlocked"]] == ["Media Enthusiast"]

    @pytest.mark.asyncio
    async def test_failed_calls_do_not_count(self, client: AsyncClient, user):
        await _record(client, user, category="image", status=502)

        mine = (await client.get("/api/v1/users/me/achievements", headers=user.headers)).json()
        progress = {e["achievement"]["name"]: e["progress"] for e in mine}
        assert progress["API Master"]["status"] == "not_started"
        assert progress["Media Enthusiast"]["status"] == "not_started"

    @pytest.mark.asyncio
    async def test_all_categories_unlock_api_master(self, client: AsyncClient, user):
        categories = ["image", "video", "music", "anime", "quote", "lyrics", "translation", "chat"]
        unlocked = []
        for category in categories + ["image"]:
            body = await _record(client, user, category=category)
            unlocked += [u["achievement"]["name"] for u in body["unlocked"]]
        assert unlocked.count("API Master") == 1
        assert "Command Expert" in unlocked

    @pytest.mark.asyncio
    async def test_explicit_command_is_lowercased(self, client: AsyncClient, user):
        await _record(client, user, category="chat", command="IMAGE")
        await _record(client, user, category="chat", command="Video")
        body = await _record(client, user, category="chat", command="music")
        assert "Media Enthusiast" in [u["achievement"]["name"] for u in body["unlocked"]]
