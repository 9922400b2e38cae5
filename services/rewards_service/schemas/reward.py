"""Reward, claim and voucher schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.rewards_service.models.enums import (
    ClaimStatus,
    RewardCategory,
    VoucherStatus,
)


class RewardResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    points_cost: int
    stock: int
    category: RewardCategory
    is_active: bool
    valid_until: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RewardCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = None
    points_cost: int = Field(..., gt=0)
    stock: int = Field(0, ge=0)
    category: RewardCategory
    is_active: bool = True
    valid_until: Optional[datetime] = None


class RewardUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = None
    points_cost: Optional[int] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[RewardCategory] = None
    is_active: Optional[bool] = None
    valid_until: Optional[datetime] = None


class RewardClaimResponse(BaseModel):
    id: uuid.UUID
    reward_id: uuid.UUID
    auth_id: str
    points_spent: int
    claim_code: str
    status: ClaimStatus
    claimed_at: datetime
    fulfilled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClaimResultResponse(BaseModel):
    claim: RewardClaimResponse
    remaining_points: int
    remaining_stock: int


class VoucherResponse(BaseModel):
    id: uuid.UUID
    code: str
    discount_percent: int
    source: str
    status: VoucherStatus
    expires_at: datetime
    used_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
