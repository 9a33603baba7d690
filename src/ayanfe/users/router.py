"""User profile endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ayanfe.auth.dependencies import get_current_user
from ayanfe.database import get_session
from ayanfe.db.models import User, UserBadge
from ayanfe.users.schemas import UserResponse

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Current user with streak and badge count."""
    badges_earned = await db.execute(
        select(func.count()).select_from(UserBadge).where(UserBadge.user_id == user.id)
    )
    return UserResponse(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        is_admin=user.is_admin,
        created_at=user.created_at,
        current_streak=user.current_streak,
        longest_streak=user.longest_streak,
        last_active_on=user.last_active_on,
        badges_earned=badges_earned.scalar_one(),
    )
