"""Topup request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.wallet_service.models.enums import PaymentMethod, TopupStatus


class TopupInitiateRequest(BaseModel):
    amount: int = Field(..., ge=10000, le=10000000, description="VND (10.000–10.000.000)")
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER


class TopupResponse(BaseModel):
    id: uuid.UUID
    wallet_id: uuid.UUID
    auth_id: str
    reference: str
    amount: int
    payment_method: PaymentMethod
    status: TopupStatus
    payment_reference: Optional[str] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TopupListResponse(BaseModel):
    topups: list[TopupResponse]
    total: int
    skip: int
    limit: int


class ConfirmTopupRequest(BaseModel):
    payment_reference: str = Field(..., min_length=1)


class FailTopupRequest(BaseModel):
    reason: str = Field(..., min_length=3)
