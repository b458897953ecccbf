"""
Heart: Match-membership gate for chat access.
"""

from __future__ import annotations

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from heart.errors import AuthorizationError, storage_errors
from heart.models.match import Match

logger = structlog.get_logger("heart.chat_guard")


class ChatGuard:
    """Answers "may this user read or write this match's messages?"."""

    async def authorize(
        self,
        match_id: int,
        user_id: int,
        db_session: AsyncSession,
    ) -> bool:
        """True iff match ``match_id`` exists and ``user_id`` is one of its
        two participants."""
        stmt = (
            select(Match.id)
            .where(
                Match.id == match_id,
                or_(Match.low_id == user_id, Match.high_id == user_id),
            )
            .limit(1)
        )
        with storage_errors("chat authorization"):
            result = await db_session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def require(
        self,
        match_id: int,
        user_id: int,
        db_session: AsyncSession,
    ) -> None:
        """Raise ``AuthorizationError`` unless ``authorize`` passes.

        A missing match is reported the same way as a foreign one.
        """
        if not await self.authorize(match_id, user_id, db_session):
            logger.warning("chat_access_denied", match_id=match_id, user_id=user_id)
            raise AuthorizationError("No access to this match.")
