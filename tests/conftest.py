"""Shared test fixtures.

Every test gets a fresh SQLite database file with the schema created from the
ORM metadata and the default achievement set seeded. Redis is not started;
the app treats it as optional.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.achievements.catalog import AchievementCatalog
from ayanfe.auth.jwt import create_access_token
from ayanfe.config import get_settings
from ayanfe.database import close_db, get_engine, get_session_factory, init_db
from ayanfe.db import models  # noqa: F401
from ayanfe.db.base import Base
from ayanfe.main import create_app, load_achievement_state
from ayanfe.users.service import get_or_create_user


@dataclass
class TestUser:
    __test__ = False

    id: int
    username: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest_asyncio.fixture
async def app(tmp_path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[FastAPI, None]:
    """Application bound to a throwaway SQLite database."""
    monkeypatch.setenv("AYANFE_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'ayanfe.db'}")
    get_settings.cache_clear()

    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    application = create_app()
    await load_achievement_state(application)

    yield application

    await close_db()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def catalog(app: FastAPI) -> AchievementCatalog:
    return app.state.catalog


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app (lifespan is handled by ``app``)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """A session for direct service calls.

    Commit before issuing HTTP requests in the same test: SQLite allows a
    single writer.
    """
    async with get_session_factory()() as session:
        yield session


async def make_user(username: str, *, is_admin: bool = False) -> TestUser:
    async with get_session_factory()() as db:
        user, _ = await get_or_create_user(db, username, is_admin=is_admin)
        await db.commit()
        return TestUser(id=user.id, username=user.username, token=create_access_token(user.id, user.username))


@pytest_asyncio.fixture
async def user(app: FastAPI) -> TestUser:
    return await make_user("tester")


@pytest_asyncio.fixture
async def admin(app: FastAPI) -> TestUser:
    return await make_user("admin", is_admin=True)


@pytest_asyncio.fixture
async def user_factory(app: FastAPI):
    return make_user
