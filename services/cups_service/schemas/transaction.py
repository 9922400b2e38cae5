"""Borrow/return request and cup transaction schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.cups_service.models.enums import CupTransactionStatus


class BorrowRequest(BaseModel):
    # Accepts a bare 8-digit id or the raw scanned QR text
    cup_id: str = Field(..., min_length=1, max_length=500)
    store_id: uuid.UUID


class ReturnRequest(BaseModel):
    cup_id: str = Field(..., min_length=1, max_length=500)
    store_id: uuid.UUID


class CupTransactionResponse(BaseModel):
    id: uuid.UUID
    auth_id: str
    cup_id: str
    borrow_store_id: uuid.UUID
    return_store_id: Optional[uuid.UUID] = None
    status: CupTransactionStatus
    borrow_time: datetime
    due_time: datetime
    return_time: Optional[datetime] = None
    deposit_amount: int
    discount_amount: int
    late_fee: int
    refund_amount: int
    points_earned: int
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class BorrowedCupResponse(CupTransactionResponse):
    is_overdue: bool = False
    overdue_hours: int = 0


class TransactionListResponse(BaseModel):
    transactions: list[CupTransactionResponse]
    total: int
    skip: int
    limit: int


class BorrowResponse(BaseModel):
    transaction_id: uuid.UUID
    cup_id: str
    due_time: datetime
    deposit_amount: int
    discount_amount: int
    balance: int
    message: str


class ReturnResponse(BaseModel):
    transaction_id: uuid.UUID
    cup_id: str
    points_earned: int
    late_fee: int
    refund_amount: int
    balance: int
    green_streak: int
    voucher_code: Optional[str] = None
    message: str


class TransactionOverrideRequest(BaseModel):
    status: CupTransactionStatus
    reason: str = Field(..., min_length=3, max_length=500)


class OverdueSweepResponse(BaseModel):
    marked_overdue: int
