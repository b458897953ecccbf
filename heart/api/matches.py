"""
Heart: Matches API
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from heart.api.dependencies import get_user_or_404
from heart.database import get_db
from heart.schemas.match import MatchSummary
from heart.services.match_resolver import MatchResolver

logger = structlog.get_logger("heart.api.matches")

router = APIRouter()

_match_resolver: MatchResolver | None = None


def _get_match_resolver() -> MatchResolver:
    global _match_resolver
    if _match_resolver is None:
        _match_resolver = MatchResolver()
    return _match_resolver


@router.get(
    "/matches",
    response_model=list[MatchSummary],
    summary="List a user's matches, most recent first",
)
async def list_matches(
    user_id: int = Query(..., alias="userId", gt=0),
    db: AsyncSession = Depends(get_db),
) -> list[MatchSummary]:
    log = logger.bind(user_id=user_id)
    log.info("list_matches")

    await get_user_or_404(user_id, db)
    rows = await _get_match_resolver().list_user_matches(user_id, db)

    log.info("list_matches_complete", count=len(rows))
    return [MatchSummary(**row) for row in rows]
