"""
Heart: Shared lookups for route handlers.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from heart.errors import NotFoundError, storage_errors
from heart.models.user import User


async def get_user_or_404(
    user_id: int,
    db: AsyncSession,
    label: str = "User",
) -> User:
    """Load a user or raise ``NotFoundError``."""
    stmt = select(User).where(User.id == user_id)
    with storage_errors("user lookup"):
        result = await db.execute(stmt)
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError(f"{label} {user_id} not found.")
    return user
