"""Friend request and public profile schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.social_service.models.enums import FriendRequestStatus
from services.users_service.models.enums import RankLevel


class FriendRequestCreate(BaseModel):
    to_auth_id: Optional[str] = None
    student_id: Optional[str] = Field(None, min_length=4, max_length=20)


class FriendRequestResponse(BaseModel):
    id: uuid.UUID
    from_auth_id: str
    to_auth_id: str
    status: FriendRequestStatus
    created_at: datetime
    responded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FriendSummary(BaseModel):
    auth_id: str
    display_name: Optional[str] = None
    student_id: Optional[str] = None
    avatar_url: Optional[str] = None
    rank_level: RankLevel
    green_points: int

    model_config = ConfigDict(from_attributes=True)


class FriendSearchResponse(BaseModel):
    user: FriendSummary
    is_friend: bool
    request_pending: bool


class PublicProfileResponse(BaseModel):
    auth_id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    rank_level: RankLevel
    lifetime_green_points: int
    total_cups_saved: int
    best_streak: int
    is_friend: bool = False

    model_config = ConfigDict(from_attributes=True)
