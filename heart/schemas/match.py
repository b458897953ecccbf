from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MatchSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    match_id: int
    other_id: int
    matched_at: datetime = Field(alias="matchedAt")
    username: str
    location: Optional[str] = None
    photo: Optional[str] = None
