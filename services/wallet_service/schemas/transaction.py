"""Ledger entry schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field
from services.wallet_service.models.enums import TransactionDirection, TransactionType


class TransactionResponse(BaseModel):
    id: uuid.UUID
    wallet_id: uuid.UUID
    transaction_type: TransactionType
    direction: TransactionDirection
    amount: int
    balance_before: int
    balance_after: int
    description: str
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    performed_by: Optional[str] = None
    details: Optional[dict] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def signed_amount(self) -> int:
        """Negative for debits, so clients can sum a statement directly."""
        if self.direction == TransactionDirection.DEBIT:
            return -self.amount
        return self.amount


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    total: int
    skip: int
    limit: int
