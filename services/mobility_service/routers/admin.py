"""Admin station, fleet and rental management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, StateConflict
from libs.common.logging import get_logger
from libs.db.audit import record_audit
from libs.db.session import atomic, get_async_db
from services.mobility_service.models import (
    BikeStatus,
    Ebike,
    EbikeRental,
    EbikeStation,
    RentalStatus,
)
from services.mobility_service.routers._helpers import stations_with_counts
from services.mobility_service.schemas import (
    BikeCreate,
    BikeResponse,
    BikeUpdate,
    RentalResponse,
    SolarTelemetryUpdate,
    StationCreate,
    StationResponse,
    StationUpdate,
)
from services.mobility_service.services.ebike_ops import get_station
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/admin/mobility", tags=["admin-mobility"])


# ---------------------------------------------------------------------------
# Stations
# ---------------------------------------------------------------------------


@router.get("/stations", response_model=list[StationResponse])
async def list_all_stations(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(EbikeStation).order_by(EbikeStation.name))
    return await stations_with_counts(db, list(result.scalars().all()))


@router.post(
    "/stations", response_model=StationResponse, status_code=status.HTTP_201_CREATED
)
async def create_station(
    body: StationCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        station = EbikeStation(**body.model_dump())
        db.add(station)
        await db.flush()
    return (await stations_with_counts(db, [station]))[0]


@router.patch("/stations/{station_id}", response_model=StationResponse)
async def update_station(
    station_id: uuid.UUID,
    body: StationUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        station = await get_station(db, station_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(station, field, value)
        await db.flush()
    return (await stations_with_counts(db, [station]))[0]


@router.put("/stations/{station_id}/solar", response_model=StationResponse)
async def update_solar_telemetry(
    station_id: uuid.UUID,
    body: SolarTelemetryUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        station = await get_station(db, station_id)
        station.solar_energy_today_kwh = body.solar_energy_today_kwh
        if body.solar_energy_total_kwh is not None:
            station.solar_energy_total_kwh = body.solar_energy_total_kwh
        station.battery_storage_percent = body.battery_storage_percent
        station.telemetry_updated_at = utc_now()
        await db.flush()
    return (await stations_with_counts(db, [station]))[0]


@router.delete("/stations/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_station(
    station_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Take a station out of service; it stops accepting unlocks and returns."""
    async with atomic(db):
        station = await get_station(db, station_id)
        station.is_active = False
        await record_audit(
            db,
            entity_type="ebike_station",
            entity_id=station.id,
            action="archived",
            performed_by=admin.email or admin.user_id,
        )
    logger.info("Archived station %s", station_id)


# ---------------------------------------------------------------------------
# Bikes
# ---------------------------------------------------------------------------


@router.get("/bikes", response_model=list[BikeResponse])
async def list_bikes(
    bike_status: Optional[BikeStatus] = Query(None, alias="status"),
    station_id: Optional[uuid.UUID] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Ebike)
    if bike_status:
        query = query.where(Ebike.status == bike_status)
    if station_id:
        query = query.where(Ebike.station_id == station_id)
    result = await db.execute(query.order_by(Ebike.bike_code))
    return list(result.scalars().all())


@router.post("/bikes", response_model=BikeResponse, status_code=status.HTTP_201_CREATED)
async def create_bike(
    body: BikeCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await get_station(db, body.station_id)
        existing = await db.execute(
            select(Ebike.id).where(Ebike.bike_code == body.bike_code)
        )
        if existing.scalar_one_or_none():
            raise StateConflict("Bike code already exists", code="duplicate_bike_code")
        bike = Ebike(**body.model_dump())
        db.add(bike)
        await db.flush()
    logger.info("Registered bike %s at station %s", bike.bike_code, bike.station_id)
    return bike


@router.patch("/bikes/{bike_id}", response_model=BikeResponse)
async def update_bike(
    bike_id: uuid.UUID,
    body: BikeUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        result = await db.execute(select(Ebike).where(Ebike.id == bike_id))
        bike = result.scalar_one_or_none()
        if not bike:
            raise NotFound("Bike not found")
        if bike.status == BikeStatus.IN_USE:
            raise StateConflict("Bike is currently rented", code="bike_in_use")
        if body.status == BikeStatus.IN_USE:
            raise StateConflict("Bikes enter use only through a rental")
        if body.station_id:
            await get_station(db, body.station_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(bike, field, value)
        await db.flush()
    return bike


@router.delete("/bikes/{bike_id}", status_code=status.HTTP_204_NO_CONTENT)
async def retire_bike(
    bike_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Undock a bike and park it in maintenance; rental history is kept."""
    async with atomic(db):
        result = await db.execute(select(Ebike).where(Ebike.id == bike_id))
        bike = result.scalar_one_or_none()
        if not bike:
            raise NotFound("Bike not found")
        if bike.status == BikeStatus.IN_USE:
            raise StateConflict("Bike is currently rented", code="bike_in_use")
        old_station = bike.station_id
        bike.status = BikeStatus.MAINTENANCE
        bike.station_id = None
        bike.is_locked = True
        await record_audit(
            db,
            entity_type="ebike",
            entity_id=bike.id,
            action="retired",
            performed_by=admin.email or admin.user_id,
            old_value={"station_id": str(old_station) if old_station else None},
        )
    logger.info("Retired bike %s", bike.bike_code)


# ---------------------------------------------------------------------------
# Rentals
# ---------------------------------------------------------------------------


@router.get("/rentals", response_model=list[RentalResponse])
async def list_rentals(
    rental_status: Optional[RentalStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(EbikeRental)
    if rental_status:
        query = query.where(EbikeRental.status == rental_status)
    result = await db.execute(query.order_by(desc(EbikeRental.created_at)).limit(limit))
    return list(result.scalars().all())
