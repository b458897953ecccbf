"""
Heart: Swipe-to-match resolution.

Turns a stream of directional swipes into durable, duplicate-free match
records:

  1. Reject self-swipes before anything is written.
  2. Append the swipe to the ledger and commit it.
  3. A left swipe ends there.
  4. A right swipe checks whether the target already swiped right on the
     swiper.
  5. On reciprocity the canonical pair is created with a single
     conditional insert guarded by ``uq_match_pair``.  A conflict means
     another request (or an earlier swipe) already created the match, and
     the existing row's id is returned instead.

Matching is recomputed from ledger state on every right swipe, so a swipe
whose match step failed is picked up again by the next attempt.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import case, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from heart.errors import TransientStorageError, ValidationError, storage_errors
from heart.models.match import Match
from heart.models.swipe import SwipeDirection
from heart.models.user import User
from heart.services.pairing import CanonicalPair, canonicalize
from heart.services.swipe_ledger import SwipeLedger, parse_direction

logger = structlog.get_logger("heart.match_resolver")

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# A conflicting row can vanish (account deletion) before it is read back.
_FIND_OR_CREATE_ATTEMPTS = 2


class OutcomeKind(str, enum.Enum):
    NOT_RIGHT = "not_right"
    NO_RECIPROCITY = "no_reciprocity"
    ALREADY_MATCHED = "already_matched"
    NEW_MATCH = "new_match"


@dataclass(frozen=True)
class SwipeOutcome:
    kind: OutcomeKind
    match_id: int | None = None

    @property
    def matched(self) -> bool:
        return self.kind in (OutcomeKind.ALREADY_MATCHED, OutcomeKind.NEW_MATCH)


class MatchResolver:
    """Reciprocity detection and idempotent match creation.

    The ledger is injected so that tests can substitute a double.
    """

    def __init__(self, ledger: SwipeLedger | None = None) -> None:
        self.ledger = ledger or SwipeLedger()

    # ── Public API ────────────────────────────────────────────────────────

    async def on_swipe(
        self,
        swiper_id: int,
        target_id: int,
        direction: str | SwipeDirection,
        db_session: AsyncSession,
    ) -> SwipeOutcome:
        """Record a swipe and resolve whether it completes a match.

        Parameters
        ----------
        swiper_id:
            User performing the swipe.
        target_id:
            User being swiped on.
        direction:
            ``"left"`` or ``"right"``.
        db_session:
            Active SQLAlchemy async session; committed by this method.

        Returns
        -------
        SwipeOutcome
            ``NOT_RIGHT`` and ``NO_RECIPROCITY`` carry no match id;
            ``ALREADY_MATCHED`` and ``NEW_MATCH`` carry the pair's match id.
        """
        if swiper_id == target_id:
            raise ValidationError("A user cannot swipe on themselves.")
        parsed = parse_direction(direction)

        log = logger.bind(swiper_id=swiper_id, target_id=target_id, direction=parsed.value)

        await self.ledger.record(swiper_id, target_id, parsed, db_session)
        with storage_errors("swipe commit"):
            await db_session.commit()

        if parsed is not SwipeDirection.RIGHT:
            log.info("swipe_resolved", outcome=OutcomeKind.NOT_RIGHT.value)
            return SwipeOutcome(OutcomeKind.NOT_RIGHT)

        if not await self.ledger.has_reciprocal_right(swiper_id, target_id, db_session):
            log.info("swipe_resolved", outcome=OutcomeKind.NO_RECIPROCITY.value)
            return SwipeOutcome(OutcomeKind.NO_RECIPROCITY)

        outcome = await self.find_or_create(canonicalize(swiper_id, target_id), db_session)
        log.info("swipe_resolved", outcome=outcome.kind.value, match_id=outcome.match_id)
        return outcome

    async def find_or_create(
        self,
        pair: CanonicalPair,
        db_session: AsyncSession,
    ) -> SwipeOutcome:
        """Create the match for ``pair`` unless it already exists.

        Issues ``INSERT ... ON CONFLICT (low_id, high_id) DO NOTHING
        RETURNING id``; the database decides the single winner among
        concurrent callers.  Losers read back the committed row.
        """
        insert = _INSERT_BY_DIALECT.get(db_session.get_bind().dialect.name)
        if insert is None:
            raise RuntimeError(
                f"Conditional insert not supported on {db_session.get_bind().dialect.name!r}"
            )

        for _ in range(_FIND_OR_CREATE_ATTEMPTS):
            stmt = (
                insert(Match)
                .values(low_id=pair.low_id, high_id=pair.high_id)
                .on_conflict_do_nothing(index_elements=["low_id", "high_id"])
                .returning(Match.id)
            )
            with storage_errors("match creation"):
                new_id = (await db_session.execute(stmt)).scalar_one_or_none()
                await db_session.commit()

            if new_id is not None:
                logger.info("match_created", match_id=new_id, low_id=pair.low_id, high_id=pair.high_id)
                return SwipeOutcome(OutcomeKind.NEW_MATCH, new_id)

            existing_id = await self.get_match_id(pair, db_session)
            if existing_id is not None:
                logger.info("match_already_exists", match_id=existing_id, low_id=pair.low_id, high_id=pair.high_id)
                return SwipeOutcome(OutcomeKind.ALREADY_MATCHED, existing_id)

        raise TransientStorageError("Match state changed concurrently, please retry.")

    async def get_match_id(
        self,
        pair: CanonicalPair,
        db_session: AsyncSession,
    ) -> int | None:
        stmt = select(Match.id).where(
            Match.low_id == pair.low_id,
            Match.high_id == pair.high_id,
        )
        with storage_errors("match lookup"):
            result = await db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_user_matches(
        self,
        user_id: int,
        db_session: AsyncSession,
    ) -> list[dict[str, Any]]:
        """Return every match involving ``user_id``, most recent first.

        Each item carries the other participant's id and a short profile
        summary (username, location, photo reference).
        """
        other_id = case(
            (Match.low_id == user_id, Match.high_id),
            else_=Match.low_id,
        )
        stmt = (
            select(
                Match.id.label("match_id"),
                other_id.label("other_id"),
                Match.matched_at,
                User.username,
                User.location,
                User.photo,
            )
            .join(User, User.id == other_id)
            .where(or_(Match.low_id == user_id, Match.high_id == user_id))
            .order_by(Match.matched_at.desc(), Match.id.desc())
        )
        with storage_errors("match listing"):
            result = await db_session.execute(stmt)
        rows = [dict(row) for row in result.mappings().all()]

        logger.debug("user_matches_listed", user_id=user_id, count=len(rows))
        return rows
