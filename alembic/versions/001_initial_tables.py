"""Initial tables: users, chat history, API usage and achievements.

Revision ID: 001_initial_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            username VARCHAR(64) UNIQUE NOT NULL,
            display_name VARCHAR(128),
            email VARCHAR(320),
            is_admin BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            last_active_on DATE,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0
        )
    """)

    # --- Chat history ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS messages (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            content TEXT NOT NULL,
            timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            is_bot BOOLEAN NOT NULL DEFAULT false
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_messages_user
        ON messages(user_id, id)
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS message_reactions (
            id SERIAL PRIMARY KEY,
            message_id INTEGER NOT NULL REFERENCES messages(id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            emoji VARCHAR(32) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT message_reactions_message_user_emoji_key UNIQUE(message_id, user_id, emoji)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_message_reactions_message
        ON message_reactions(message_id)
    """)

    # --- API usage ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS api_usage (
            id BIGSERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            endpoint VARCHAR(256) NOT NULL,
            category VARCHAR(32),
            method VARCHAR(8) NOT NULL,
            status INTEGER NOT NULL,
            response_time_ms INTEGER,
            timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_api_usage_user_time
        ON api_usage(user_id, timestamp DESC)
    """)

    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id SERIAL PRIMARY KEY,
            name VARCHAR(128) UNIQUE NOT NULL,
            description TEXT NOT NULL,
            icon VARCHAR(64) NOT NULL,
            image_url VARCHAR(256),
            category VARCHAR(32) NOT NULL,
            level INTEGER NOT NULL DEFAULT 1,
            points INTEGER NOT NULL DEFAULT 10,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_badges_category
        ON badges(category)
    """)

    # --- Achievements ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS achievements (
            id SERIAL PRIMARY KEY,
            name VARCHAR(128) UNIQUE NOT NULL,
            description TEXT NOT NULL,
            badge_id INTEGER NOT NULL REFERENCES badges(id) ON DELETE CASCADE,
            type VARCHAR(32) NOT NULL,
            required_count INTEGER NOT NULL DEFAULT 1,
            conditions JSONB NOT NULL DEFAULT '{}',
            is_secret BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_achievements_type
        ON achievements(type)
    """)

    # --- Per-user progress ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_achievement_progress (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            achievement_id INTEGER NOT NULL REFERENCES achievements(id) ON DELETE CASCADE,
            progress INTEGER NOT NULL DEFAULT 0,
            current_count INTEGER NOT NULL DEFAULT 0,
            completed BOOLEAN NOT NULL DEFAULT false,
            completed_at TIMESTAMPTZ,
            last_updated TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            metadata JSONB NOT NULL DEFAULT '{}',
            CONSTRAINT user_achievement_progress_user_achievement_key UNIQUE(user_id, achievement_id),
            CHECK (progress BETWEEN 0 AND 100),
            CHECK (current_count >= 0)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_id INTEGER NOT NULL REFERENCES badges(id) ON DELETE CASCADE,
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            displayed BOOLEAN NOT NULL DEFAULT true,
            progress INTEGER NOT NULL DEFAULT 0,
            completed_steps JSONB NOT NULL DEFAULT '{}',
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE(user_id, badge_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_badges_user
        ON user_badges(user_id)
    """)


def downgrade() -> None:
    for table in [
        "user_badges",
        "user_achievement_progress",
        "achievements",
        "badges",
        "api_usage",
        "message_reactions",
        "messages",
        "users",
    ]:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
