"""Green trip schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.mobility_service.models.enums import TripType
from services.mobility_service.schemas.ebike import RentalResponse


class RouteInfoRequest(BaseModel):
    origin: str = Field(..., min_length=1, max_length=200, alias="from")
    destination: str = Field(..., min_length=1, max_length=200, alias="to")
    distance_km: float = Field(..., ge=0.1, le=500)
    route_name: Optional[str] = Field(None, max_length=100)
    vehicle_number: Optional[str] = Field(None, max_length=30)

    model_config = ConfigDict(populate_by_name=True)


class ScanPayRequest(BaseModel):
    partner_id: uuid.UUID
    trip_type: TripType
    fare: int = Field(..., ge=5000, le=200000)
    route_info: RouteInfoRequest


class GreenTripResponse(BaseModel):
    id: uuid.UUID
    partner_store_id: uuid.UUID
    trip_type: TripType
    origin: str
    destination: str
    route_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    distance_km: float
    fare: int
    platform_commission: int
    partner_amount: int
    co2_saved_kg: float
    points_earned: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ScanPayResponse(BaseModel):
    trip: GreenTripResponse
    balance: int
    message: str


class TripTotals(BaseModel):
    trips: int = 0
    rentals: int = 0
    distance_km: float = 0
    co2_saved_kg: float = 0
    points_earned: int = 0
    amount_spent: int = 0


class TripHistoryResponse(BaseModel):
    trips: list[GreenTripResponse]
    rentals: list[RentalResponse]
    totals: TripTotals
