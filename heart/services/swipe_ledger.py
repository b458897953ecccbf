"""
Heart: Swipe ledger.

Append-only record of directional swipe decisions.  Every call to
``record`` inserts a new row; earlier decisions for the same ordered pair
are neither deduplicated nor superseded.  Reciprocity is an existence
question: any right swipe in the opposite direction qualifies.
"""

from __future__ import annotations

import structlog
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from heart.errors import ValidationError, storage_errors
from heart.models.swipe import Swipe, SwipeDirection

logger = structlog.get_logger("heart.swipe_ledger")


def parse_direction(direction: str | SwipeDirection) -> SwipeDirection:
    try:
        return SwipeDirection(direction)
    except ValueError:
        raise ValidationError(
            f"direction must be one of {[d.value for d in SwipeDirection]}."
        ) from None


class SwipeLedger:
    """Writes and queries the ``swipes`` table."""

    async def record(
        self,
        swiper_id: int,
        target_id: int,
        direction: str | SwipeDirection,
        db_session: AsyncSession,
    ) -> Swipe:
        """Append a swipe event and flush it so it receives an id.

        The caller owns the transaction boundary.
        """
        if swiper_id == target_id:
            raise ValidationError("A user cannot swipe on themselves.")
        parsed = parse_direction(direction)

        swipe = Swipe(
            swiper_id=swiper_id,
            target_id=target_id,
            direction=parsed.value,
        )
        with storage_errors("swipe recording"):
            db_session.add(swipe)
            await db_session.flush()

        logger.info(
            "swipe_recorded",
            swipe_id=swipe.id,
            swiper_id=swiper_id,
            target_id=target_id,
            direction=parsed.value,
        )
        return swipe

    async def has_reciprocal_right(
        self,
        swiper_id: int,
        target_id: int,
        db_session: AsyncSession,
    ) -> bool:
        """True iff ``target_id`` has ever swiped right on ``swiper_id``."""
        stmt = (
            select(Swipe.id)
            .where(
                Swipe.swiper_id == target_id,
                Swipe.target_id == swiper_id,
                Swipe.direction == SwipeDirection.RIGHT.value,
            )
            .limit(1)
        )
        with storage_errors("reciprocity check"):
            result = await db_session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    def swiped_target_ids(swiper_id: int) -> Select:
        """Selectable of every user ``swiper_id`` has swiped on, either way."""
        return select(Swipe.target_id).where(Swipe.swiper_id == swiper_id)
