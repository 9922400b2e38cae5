"""Redistribution order schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.partners_service.models.enums import OrderPriority, RedistributionStatus


class OrderCreate(BaseModel):
    from_store_id: Optional[uuid.UUID] = None
    to_store_id: uuid.UUID
    quantity: int = Field(..., ge=1, le=500)
    priority: OrderPriority = OrderPriority.MEDIUM
    notes: Optional[str] = Field(None, max_length=500)


class OrderSourceUpdate(BaseModel):
    from_store_id: uuid.UUID


class OrderResponse(BaseModel):
    id: uuid.UUID
    from_store_id: Optional[uuid.UUID] = None
    to_store_id: uuid.UUID
    quantity: int
    priority: OrderPriority
    status: RedistributionStatus
    requested_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    dispatched_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RecommendationResponse(BaseModel):
    from_store_id: uuid.UUID
    from_store_name: str
    to_store_id: uuid.UUID
    to_store_name: str
    quantity: int
    distance_km: float
    priority: OrderPriority
