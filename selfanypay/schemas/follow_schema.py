# selfanypay/schemas/follow_schema.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from selfanypay.schemas.common_schema import UserSummary


class FollowCreated(BaseModel):
    message: str
    follow_id: str


class FollowerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    follower_id: str
    following_id: str
    created_at: datetime
    follower: UserSummary


class FollowingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    follower_id: str
    following_id: str
    created_at: datetime
    following: UserSummary


class UserSuggestions(BaseModel):
    users: list[UserSummary]
    total: int
