"""
Heart: Swipe API

Records a swipe and reports whether it completed a match.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from heart.api.dependencies import get_user_or_404
from heart.database import get_db
from heart.schemas.swipe import SwipeCreate, SwipeResponse
from heart.services.match_resolver import MatchResolver

logger = structlog.get_logger("heart.api.swipes")

router = APIRouter()

# ── Service singleton ─────────────────────────────────────────────────────────

_match_resolver: MatchResolver | None = None


def _get_match_resolver() -> MatchResolver:
    global _match_resolver
    if _match_resolver is None:
        _match_resolver = MatchResolver()
    return _match_resolver


# ──────────────────────────────────────────────────────────────────────────────
# POST /swipe: Record swipe and resolve match
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/swipe",
    response_model=SwipeResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Record a swipe and resolve a match",
)
async def record_swipe(
    payload: SwipeCreate,
    db: AsyncSession = Depends(get_db),
) -> SwipeResponse:
    """Record a left or right swipe.

    A right swipe that meets an earlier right swipe from the target creates
    the pair's match, or returns the existing one when it already exists.
    Self-swipes are rejected by the request schema before anything is
    written.
    """
    log = logger.bind(
        swiper_id=payload.swiper_id,
        target_id=payload.target_id,
        direction=payload.direction.value,
    )
    log.info("record_swipe_start")

    await get_user_or_404(payload.swiper_id, db, label="Swiper")
    await get_user_or_404(payload.target_id, db, label="Target")

    outcome = await _get_match_resolver().on_swipe(
        payload.swiper_id,
        payload.target_id,
        payload.direction,
        db,
    )

    log.info("record_swipe_complete", outcome=outcome.kind.value, match_id=outcome.match_id)
    return SwipeResponse(matched=outcome.matched, match_id=outcome.match_id)
