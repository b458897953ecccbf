from datetime import datetime

from pydantic import Field

from heart.schemas.base import CamelModel


class MessageCreate(CamelModel):
    match_id: int = Field(gt=0)
    sender_id: int = Field(gt=0)
    content: str = Field(min_length=1)


class MessageCreated(CamelModel):
    message_id: int


class MessageResponse(CamelModel):
    id: int
    match_id: int
    sender_id: int
    content: str
    sent_at: datetime
