"""
Heart: Chat API

Both endpoints pass through the chat guard before the message log is
touched: only the two participants of a match may read or write it.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from heart.database import get_db
from heart.schemas.message import MessageCreate, MessageCreated, MessageResponse
from heart.services.chat_guard import ChatGuard
from heart.services.message_log import MessageLog

logger = structlog.get_logger("heart.api.messages")

router = APIRouter()

# ── Service singletons ────────────────────────────────────────────────────────

_chat_guard: ChatGuard | None = None
_message_log: MessageLog | None = None


def _get_chat_guard() -> ChatGuard:
    global _chat_guard
    if _chat_guard is None:
        _chat_guard = ChatGuard()
    return _chat_guard


def _get_message_log() -> MessageLog:
    global _message_log
    if _message_log is None:
        _message_log = MessageLog(guard=_get_chat_guard())
    return _message_log


# ──────────────────────────────────────────────────────────────────────────────
# GET /messages: Read a match's conversation
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/messages",
    response_model=list[MessageResponse],
    summary="List messages of a match",
)
async def list_messages(
    match_id: int = Query(..., alias="matchId", gt=0),
    user_id: int = Query(..., alias="userId", gt=0),
    db: AsyncSession = Depends(get_db),
) -> list[MessageResponse]:
    """Return the conversation in send order.  403 for non-participants."""
    log = logger.bind(match_id=match_id, user_id=user_id)

    await _get_chat_guard().require(match_id, user_id, db)
    messages = await _get_message_log().list(match_id, db)

    log.info("list_messages_complete", count=len(messages))
    return [
        MessageResponse(
            id=m.id,
            match_id=m.match_id,
            sender_id=m.sender_id,
            content=m.content,
            sent_at=m.sent_at,
        )
        for m in messages
    ]


# ──────────────────────────────────────────────────────────────────────────────
# POST /messages: Send a message
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/messages",
    response_model=MessageCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message to a match",
)
async def send_message(
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
) -> MessageCreated:
    message_id = await _get_message_log().append(
        payload.match_id,
        payload.sender_id,
        payload.content,
        db,
    )
    return MessageCreated(message_id=message_id)
