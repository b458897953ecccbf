from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from heart.schemas.base import CamelModel


class UserCreate(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    username: str = Field(min_length=1, max_length=80)
    bio: Optional[str] = None
    gender: Optional[str] = Field(None, max_length=32)
    birthdate: Optional[date] = None
    location: Optional[str] = Field(None, max_length=120)


class UserCreated(CamelModel):
    user_id: int


class ProfileCard(CamelModel):
    id: int
    username: str
    bio: Optional[str] = None
    gender: Optional[str] = None
    birthdate: Optional[date] = None
    location: Optional[str] = None
    photo: Optional[str] = None

    model_config = {"from_attributes": True}


class UserResponse(ProfileCard):
    email: str


class ProfileUpdate(CamelModel):
    user_id: int = Field(gt=0)
    username: Optional[str] = Field(None, min_length=1, max_length=80)
    bio: Optional[str] = None
    gender: Optional[str] = Field(None, max_length=32)
    birthdate: Optional[date] = None
    location: Optional[str] = Field(None, max_length=120)

    @field_validator("username")
    @classmethod
    def _username_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("username cannot be null")
        return v


class PhotoUploaded(CamelModel):
    photo: str
    url: str
