"""Wallet request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.wallet_service.models.enums import WalletStatus


class WalletResponse(BaseModel):
    id: uuid.UUID
    auth_id: str
    balance: int
    lifetime_topped_up: int
    lifetime_spent: int
    lifetime_received: int
    status: WalletStatus
    frozen_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminWalletListResponse(BaseModel):
    wallets: list[WalletResponse]
    total: int
    skip: int
    limit: int


class AdjustBalanceRequest(BaseModel):
    amount: int = Field(..., description="Positive to credit, negative to debit")
    reason: str = Field(..., min_length=5)


class FreezeWalletRequest(BaseModel):
    reason: str = Field(..., min_length=5)
