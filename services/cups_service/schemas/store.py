"""Store request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.cups_service.models.enums import PartnerStatus, PartnerType


class StoreInventory(BaseModel):
    available: int = 0
    in_use: int = 0
    cleaning: int = 0
    lost: int = 0


class StoreResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: str
    gps_lat: float
    gps_lng: float
    partner_type: PartnerType
    partner_status: PartnerStatus
    owner_auth_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    opening_hours: Optional[str] = None
    created_at: datetime
    inventory: StoreInventory = Field(default_factory=StoreInventory)

    model_config = ConfigDict(from_attributes=True)


class StoreCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    address: str = Field(..., min_length=3)
    gps_lat: float = Field(..., ge=-90, le=90)
    gps_lng: float = Field(..., ge=-180, le=180)
    partner_type: PartnerType = PartnerType.CAFE
    partner_status: PartnerStatus = PartnerStatus.ACTIVE
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    opening_hours: Optional[str] = None


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    address: Optional[str] = Field(None, min_length=3)
    gps_lat: Optional[float] = Field(None, ge=-90, le=90)
    gps_lng: Optional[float] = Field(None, ge=-180, le=180)
    partner_type: Optional[PartnerType] = None
    partner_status: Optional[PartnerStatus] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    opening_hours: Optional[str] = None
