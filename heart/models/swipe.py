"""
Heart: Swipe ledger model.

Rows are append-only: several rows may exist for the same ordered
(swiper, target) pair.
"""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from heart.database import Base


class SwipeDirection(str, enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class Swipe(Base):
    __tablename__ = "swipes"
    __table_args__ = (
        CheckConstraint("direction IN ('left', 'right')", name="ck_swipe_direction"),
        CheckConstraint("swiper_id <> target_id", name="ck_swipe_not_self"),
        Index("ix_swipes_swiper_target_direction", "swiper_id", "target_id", "direction"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    swiper_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    target_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    direction: Mapped[str] = mapped_column(String(8), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Swipe {self.swiper_id} -> {self.target_id} dir={self.direction!r}>"
