"""Station, bike and rental schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.mobility_service.models.enums import BikeStatus, RentalStatus


class StationResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: str
    gps_lat: float
    gps_lng: float
    total_slots: int
    solar_panel_capacity_kw: float
    solar_energy_today_kwh: float
    solar_energy_total_kwh: float
    battery_storage_percent: int
    telemetry_updated_at: Optional[datetime] = None
    is_active: bool
    available_bikes: int = 0
    free_slots: int = 0

    model_config = ConfigDict(from_attributes=True)


class StationCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    address: str = Field(..., min_length=3)
    gps_lat: float = Field(..., ge=-90, le=90)
    gps_lng: float = Field(..., ge=-180, le=180)
    total_slots: int = Field(..., gt=0, le=200)
    solar_panel_capacity_kw: float = Field(0, ge=0)
    is_active: bool = True


class StationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    address: Optional[str] = Field(None, min_length=3)
    total_slots: Optional[int] = Field(None, gt=0, le=200)
    solar_panel_capacity_kw: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class SolarTelemetryUpdate(BaseModel):
    solar_energy_today_kwh: float = Field(..., ge=0)
    solar_energy_total_kwh: Optional[float] = Field(None, ge=0)
    battery_storage_percent: int = Field(..., ge=0, le=100)


class BikeResponse(BaseModel):
    id: uuid.UUID
    bike_code: str
    station_id: Optional[uuid.UUID] = None
    battery_level: int
    is_locked: bool
    status: BikeStatus
    total_km: float

    model_config = ConfigDict(from_attributes=True)


class BikeCreate(BaseModel):
    bike_code: str = Field(..., min_length=4, max_length=20)
    station_id: uuid.UUID
    battery_level: int = Field(100, ge=0, le=100)


class BikeUpdate(BaseModel):
    status: Optional[BikeStatus] = None
    battery_level: Optional[int] = Field(None, ge=0, le=100)
    station_id: Optional[uuid.UUID] = None


class UnlockRequest(BaseModel):
    bike_code: str = Field(..., min_length=4, max_length=20)
    station_id: uuid.UUID
    planned_hours: int = Field(..., ge=1, le=24)


class UnlockResponse(BaseModel):
    rental_id: uuid.UUID
    bike_code: str
    fare: int
    planned_hours: int
    balance: int
    message: str


class ReturnBikeRequest(BaseModel):
    rental_id: uuid.UUID
    station_id: uuid.UUID
    distance_km: float = Field(..., ge=0.1, le=500)
    battery_level: Optional[int] = Field(None, ge=0, le=100)


class RentalResponse(BaseModel):
    id: uuid.UUID
    auth_id: str
    bike_id: uuid.UUID
    start_station_id: uuid.UUID
    end_station_id: Optional[uuid.UUID] = None
    status: RentalStatus
    planned_hours: int
    fare: int
    platform_commission: int
    partner_amount: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    distance_km: Optional[float] = None
    co2_saved_kg: float
    points_earned: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
