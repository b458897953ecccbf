"""
Heart: Ordered, append-only message store per match.

Messages are listed by ``sent_at`` ascending with the row id as the
tiebreak, so two messages stored within the same clock tick keep their
insertion order.
"""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from heart.errors import ValidationError, storage_errors
from heart.models.message import Message
from heart.services.chat_guard import ChatGuard

logger = structlog.get_logger("heart.message_log")


class MessageLog:
    def __init__(self, guard: ChatGuard | None = None) -> None:
        self.guard = guard or ChatGuard()

    async def append(
        self,
        match_id: int,
        sender_id: int,
        content: str,
        db_session: AsyncSession,
    ) -> int:
        """Store a message and return its id.

        The sender's participation is checked in the same session as the
        insert; non-participants get ``AuthorizationError``.
        """
        if content is None or not content.strip():
            raise ValidationError("content must not be empty.")

        await self.guard.require(match_id, sender_id, db_session)

        message = Message(match_id=match_id, sender_id=sender_id, content=content)
        with storage_errors("message append"):
            db_session.add(message)
            await db_session.flush()
            message_id = message.id
            await db_session.commit()

        logger.info(
            "message_appended",
            message_id=message_id,
            match_id=match_id,
            sender_id=sender_id,
            length=len(content),
        )
        return message_id

    async def list(
        self,
        match_id: int,
        db_session: AsyncSession,
    ) -> list[Message]:
        """Every message of ``match_id`` in conversation order."""
        stmt = (
            select(Message)
            .where(Message.match_id == match_id)
            .order_by(Message.sent_at.asc(), Message.id.asc())
        )
        with storage_errors("message listing"):
            result = await db_session.execute(stmt)
        return list(result.scalars().all())
