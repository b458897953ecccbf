from pydantic import Field, model_validator

from heart.models.swipe import SwipeDirection
from heart.schemas.base import CamelModel


class SwipeCreate(CamelModel):
    swiper_id: int = Field(gt=0)
    target_id: int = Field(gt=0)
    direction: SwipeDirection

    @model_validator(mode="after")
    def _reject_self_swipe(self) -> "SwipeCreate":
        if self.swiper_id == self.target_id:
            raise ValueError("A user cannot swipe on themselves.")
        return self


class SwipeResponse(CamelModel):
    matched: bool
    match_id: int | None = None
