"""Challenge schemas."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import ensure_utc
from pydantic import BaseModel, ConfigDict, Field, model_validator
from services.rewards_service.models.enums import (
    ChallengeType,
    RequirementType,
    UserChallengeStatus,
)


class ChallengeResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    challenge_type: ChallengeType
    requirement_type: RequirementType
    requirement_value: int
    reward_points: int
    start_date: datetime
    end_date: datetime
    max_participants: Optional[int] = None
    is_active: bool
    participant_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class ChallengeCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    challenge_type: ChallengeType
    requirement_type: RequirementType
    requirement_value: int = Field(..., gt=0)
    reward_points: int = Field(0, ge=0)
    start_date: datetime
    end_date: datetime
    max_participants: Optional[int] = Field(None, gt=0)
    is_active: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if ensure_utc(self.end_date) <= ensure_utc(self.start_date):
            raise ValueError("end_date must be after start_date")
        return self


class ChallengeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    reward_points: Optional[int] = Field(None, ge=0)
    end_date: Optional[datetime] = None
    max_participants: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None


class UserChallengeResponse(BaseModel):
    id: uuid.UUID
    challenge_id: uuid.UUID
    progress: int
    status: UserChallengeStatus
    joined_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MyChallengeResponse(BaseModel):
    participation: UserChallengeResponse
    challenge: ChallengeResponse
