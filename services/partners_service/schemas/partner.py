"""Partner registration and contract schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from services.cups_service.models.enums import PartnerType
from services.partners_service.models.enums import ContractStatus, ContractType


class PartnerRegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    address: str = Field(..., min_length=3)
    gps_lat: float = Field(..., ge=-90, le=90)
    gps_lng: float = Field(..., ge=-180, le=180)
    partner_type: PartnerType = PartnerType.CAFE
    contact_name: Optional[str] = Field(None, max_length=100)
    contact_phone: Optional[str] = Field(None, max_length=20)
    contact_email: Optional[str] = Field(None, max_length=200)
    opening_hours: Optional[str] = Field(None, max_length=100)


class PartnerStatusRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class CupRequestCreate(BaseModel):
    """A partner asking the hub for more cups."""

    store_id: uuid.UUID
    quantity: int = Field(..., ge=1, le=500)
    notes: Optional[str] = Field(None, max_length=500)


class ContractCreate(BaseModel):
    store_id: uuid.UUID
    contract_type: ContractType
    revenue_share_percent: float = Field(0, ge=0, le=100)
    fixed_monthly_fee: int = Field(0, ge=0)
    start_date: date
    end_date: Optional[date] = None
    status: ContractStatus = ContractStatus.DRAFT
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ContractUpdate(BaseModel):
    contract_type: Optional[ContractType] = None
    revenue_share_percent: Optional[float] = Field(None, ge=0, le=100)
    fixed_monthly_fee: Optional[int] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ContractStatus] = None
    notes: Optional[str] = None


class ContractResponse(BaseModel):
    id: uuid.UUID
    store_id: uuid.UUID
    contract_type: ContractType
    revenue_share_percent: float
    fixed_monthly_fee: int
    start_date: date
    end_date: Optional[date] = None
    status: ContractStatus
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
