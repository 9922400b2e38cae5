"""Profile request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.users_service.models.enums import EkycStatus, RankLevel


class ProfileResponse(BaseModel):
    id: uuid.UUID
    auth_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    student_id: Optional[str] = None
    avatar_url: Optional[str] = None
    green_points: int
    lifetime_green_points: int
    rank_level: RankLevel
    ekyc_status: EkycStatus
    is_profile_public: bool
    is_blacklisted: bool
    green_streak: int
    best_streak: int
    total_cups_saved: int
    last_return_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateRequest(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    student_id: Optional[str] = Field(None, pattern=r"^[A-Za-z0-9]{4,20}$")
    avatar_url: Optional[str] = None
    is_profile_public: Optional[bool] = None


class RankProgressResponse(BaseModel):
    rank: RankLevel
    rank_label: str
    next_rank: Optional[RankLevel] = None
    points: int
    points_to_next: int
    progress_percent: int
    borrow_limit: int


class LeaderboardEntry(BaseModel):
    position: int
    auth_id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    rank_level: RankLevel
    lifetime_green_points: int
    total_cups_saved: int


class AdminProfileListResponse(BaseModel):
    users: list[ProfileResponse]
    total: int
    skip: int
    limit: int


class BlacklistRequest(BaseModel):
    reason: str = Field(..., min_length=3)


class AdjustPointsRequest(BaseModel):
    delta: int = Field(..., description="Positive to award, negative to deduct")
    reason: str = Field(..., min_length=3)
