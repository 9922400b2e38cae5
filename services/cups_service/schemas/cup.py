"""Cup request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.cups_service.models.enums import CupMaterial, CupStatus


class CupResponse(BaseModel):
    id: str
    material: CupMaterial
    status: CupStatus
    current_store_id: Optional[uuid.UUID] = None
    current_transaction_id: Optional[uuid.UUID] = None
    total_uses: int
    last_cleaned_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CupListResponse(BaseModel):
    cups: list[CupResponse]
    total: int
    skip: int
    limit: int


class BulkCupCreate(BaseModel):
    store_id: uuid.UUID
    count: int = Field(..., ge=1, le=500)
    material: CupMaterial = CupMaterial.PP_PLASTIC


class BulkCupResponse(BaseModel):
    created: int
    cups: list[CupResponse]


class CupStatusUpdate(BaseModel):
    status: CupStatus
    reason: Optional[str] = Field(None, max_length=500)
    store_id: Optional[uuid.UUID] = None


class ScanRequest(BaseModel):
    qr_code: str = Field(..., min_length=1, max_length=500)


class ScanResponse(BaseModel):
    cup: CupResponse
    payload: str
    can_borrow: bool
    store_name: Optional[str] = None
