"""Integration tests for badge and achievement endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select

from ayanfe.achievements.seed import ACHIEVEMENT_SEED_DATA, BADGE_SEED_DATA
from ayanfe.database import get_session_factory
from ayanfe.db.models import Achievement, Badge, UserAchievementProgress

NOON = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def secret_achievement(app) -> int:
    """A hidden achievement attached to the Welcome badge."""
    async with get_session_factory()() as db:
        badge_id = (await db.execute(select(Badge.id).where(Badge.name == "Welcome"))).scalar_one()
        secret = Achievement(
            name="Hidden Gem",
            description="Find the easter egg.",
            badge_id=badge_id,
            type="unique_commands",
            required_count=1,
            conditions={"commandTypes": ["egg"]},
            is_secret=True,
            created_at=NOON,
        )
        db.add(secret)
        await db.commit()
        return secret.id


async def _complete(user_id: int, achievement_id: int) -> None:
    async with get_session_factory()() as db:
        db.add(
            UserAchievementProgress(
                user_id=user_id,
                achievement_id=achievement_id,
                progress=100,
                current_count=1,
                completed=True,
                completed_at=NOON,
                last_updated=NOON,
                progress_metadata={},
            )
        )
        await db.commit()


class TestBadgesEndpoints:
    """Test /badges endpoints (public)."""

    @pytest.mark.asyncio
    async def test_list_badges(self, client: AsyncClient):
        response = await client.get("/api/v1/badges")
        assert response.status_code == 200
        names = {b["name"] for b in response.json()}
        assert names == {b["name"] for b in BADGE_SEED_DATA}

    @pytest.mark.asyncio
    async def test_badges_have_tier(self, client: AsyncClient):
        badges = {b["name"]: b for b in (await client.get("/api/v1/badges")).json()}
        assert badges["Welcome"]["tier"] == "bronze"
        assert badges["Command Pro"]["tier"] == "gold"
        assert badges["API Explorer"]["tier"] == "diamond"

    @pytest.mark.asyncio
    async def test_badges_by_category(self, client: AsyncClient):
        response = await client.get("/api/v1/badges/category/expertise")
        assert response.status_code == 200
        assert {b["name"] for b in response.json()} == {"Command Pro", "API Explorer"}

    @pytest.mark.asyncio
    async def test_get_badge(self, client: AsyncClient):
        badge_id = (await client.get("/api/v1/badges")).json()[0]["id"]
        response = await client.get(f"/api/v1/badges/{badge_id}")
        assert response.status_code == 200
        assert response.json()["id"] == badge_id

    @pytest.mark.asyncio
    async def test_get_badge_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/badges/9999")
        assert response.status_code == 404
        assert response.json() == {"detail": "Badge not found"}


class TestAchievementVisibility:
    """Secret achievements stay hidden until completed (admins see all)."""

    @pytest.mark.asyncio
    async def test_anonymous_listing_hides_secrets(self, client: AsyncClient, secret_achievement):
        response = await client.get("/api/v1/achievements")
        assert response.status_code == 200
        names = [a["name"] for a in response.json()]
        assert "Hidden Gem" not in names
        assert len(names) == len(ACHIEVEMENT_SEED_DATA)

    @pytest.mark.asyncio
    async def test_secret_detail_forbidden(self, client: AsyncClient, user, secret_achievement):
        response = await client.get(f"/api/v1/achievements/{secret_achievement}", headers=user.headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_sees_secrets(self, client: AsyncClient, admin, secret_achievement):
        response = await client.get("/api/v1/achievements", headers=admin.headers)
        assert "Hidden Gem" in [a["name"] for a in response.json()]
        detail = await client.get(f"/api/v1/achievements/{secret_achievement}", headers=admin.headers)
        assert detail.status_code == 200

    @pytest.mark.asyncio
    async def test_completed_secret_becomes_visible(self, client: AsyncClient, user, secret_achievement):
        await _complete(user.id, secret_achievement)

        listing = await client.get("/api/v1/achievements", headers=user.headers)
        assert "Hidden Gem" in [a["name"] for a in listing.json()]

        mine = await client.get("/api/v1/users/me/achievements", headers=user.headers)
        entry = next(e for e in mine.json() if e["achievement"]["name"] == "Hidden Gem")
        assert entry["progress"]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_my_achievements_hide_uncompleted_secret(self, client: AsyncClient, admin, secret_achievement):
        mine = await client.get("/api/v1/users/me/achievements", headers=admin.headers)
        assert "Hidden Gem" not in [e["achievement"]["name"] for e in mine.json()]

    @pytest.mark.asyncio
    async def test_achievement_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/achievements/9999")
        assert response.status_code == 404


class TestMyProgress:
    """Test /users/me/achievements and /users/me/activity."""

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me/achievements")
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_not_started_by_default(self, client: AsyncClient, user):
        response = await client.get("/api/v1/users/me/achievements", headers=user.headers)
        assert response.status_code == 200
        assert all(e["progress"]["status"] == "not_started" for e in response.json())

    @pytest.mark.asyncio
    async def test_activity_event_unlocks(self, client: AsyncClient, user):
        for command in ["image", "video"]:
            response = await client.post(
                "/api/v1/users/me/activity",
                json={"event_type": "unique_commands", "measurement": command},
                headers=user.headers,
            )
            assert response.json()["unlocked"] == []

        response = await client.post(
            "/api/v1/users/me/activity",
            json={"event_type": "unique_commands", "measurement": "music"},
            headers=user.headers,
        )
        assert response.status_code == 200
        unlocked = response.json()["unlocked"]
        assert [u["achievement"]["name"] for u in unlocked] == ["Media Enthusiast"]
        assert unlocked[0]["badge"]["name"] == "Media Explorer"

        mine = await client.get("/api/v1/users/me/achievements", headers=user.headers)
        progress = {e["achievement"]["name"]: e["progress"] for e in mine.json()}
        assert progress["Media Enthusiast"]["status"] == "completed"
        assert progress["Command Expert"]["status"] == "in_progress"
        assert progress["Command Expert"]["progress"] == 60

    @pytest.mark.asyncio
    async def test_unknown_event_type(self, client: AsyncClient, user):
        response = await client.post(
            "/api/v1/users/me/activity",
            json={"event_type": "telepathy", "measurement": 1},
            headers=user.headers,
        )
        assert response.status_code == 400


class TestMyBadges:
    """Test /users/me/badges."""

    @pytest.mark.asyncio
    async def test_earned_badge_listed_and_toggled(self, client: AsyncClient, user):
        await client.post(
            "/api/v1/users/me/activity",
            json={"event_type": "message_count", "measurement": 1},
            headers=user.headers,
        )

        badges = (await client.get("/api/v1/users/me/badges", headers=user.headers)).json()
        assert [b["badge"]["name"] for b in badges] == ["Welcome"]
        assert badges[0]["displayed"] is True

        response = await client.patch(
            f"/api/v1/users/me/badges/{badges[0]['id']}",
            json={"displayed": False},
            headers=user.headers,
        )
        assert response.status_code == 200
        assert response.json()["displayed"] is False

    @pytest.mark.asyncio
    async def test_toggle_unknown_badge(self, client: AsyncClient, user):
        response = await client.patch(
            "/api/v1/users/me/badges/9999",
            json={"displayed": False},
            headers=user.headers,
        )
        assert response.status_code == 404
