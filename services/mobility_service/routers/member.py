"""Member e-bike rental and green-trip endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.currency import format_vnd
from libs.db.session import atomic, get_async_db
from services.mobility_service.models import (
    BikeStatus,
    Ebike,
    EbikeRental,
    EbikeStation,
    GreenTrip,
    RentalStatus,
)
from services.mobility_service.routers._helpers import stations_with_counts
from services.mobility_service.schemas import (
    BikeResponse,
    GreenTripResponse,
    RentalResponse,
    ReturnBikeRequest,
    ScanPayRequest,
    ScanPayResponse,
    StationResponse,
    TripHistoryResponse,
    TripTotals,
    UnlockRequest,
    UnlockResponse,
)
from services.mobility_service.services.ebike_ops import (
    get_active_rental,
    get_station,
    return_bike,
    unlock_bike,
)
from services.mobility_service.services.trip_ops import RouteInfo, pay_green_trip
from services.users_service.services.profile_ops import get_or_create_profile
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/mobility", tags=["mobility"])


# ---------------------------------------------------------------------------
# Stations
# ---------------------------------------------------------------------------


@router.get("/stations", response_model=list[StationResponse])
async def list_stations(
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(EbikeStation)
        .where(EbikeStation.is_active.is_(True))
        .order_by(EbikeStation.name)
    )
    return await stations_with_counts(db, list(result.scalars().all()))


@router.get("/stations/{station_id}/bikes", response_model=list[BikeResponse])
async def list_station_bikes(
    station_id: uuid.UUID,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Bikes ready to unlock at a station, fullest battery first."""
    await get_station(db, station_id)
    result = await db.execute(
        select(Ebike)
        .where(Ebike.station_id == station_id, Ebike.status == BikeStatus.AVAILABLE)
        .order_by(desc(Ebike.battery_level))
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# E-bike rentals
# ---------------------------------------------------------------------------


@router.post("/ebike/unlock", response_model=UnlockResponse)
async def unlock(
    body: UnlockRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_or_create_profile(
            db, current_user.user_id, email=current_user.email
        )
        result = await unlock_bike(
            db,
            profile,
            bike_code=body.bike_code,
            station_id=body.station_id,
            planned_hours=body.planned_hours,
        )
    return UnlockResponse(
        rental_id=result.rental.id,
        bike_code=result.bike.bike_code,
        fare=result.rental.fare,
        planned_hours=result.rental.planned_hours,
        balance=result.balance,
        message=result.message,
    )


@router.post("/ebike/return", response_model=RentalResponse)
async def return_(
    body: ReturnBikeRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_or_create_profile(
            db, current_user.user_id, email=current_user.email
        )
        rental = await return_bike(
            db,
            profile,
            rental_id=body.rental_id,
            station_id=body.station_id,
            distance_km=body.distance_km,
            battery_level=body.battery_level,
        )
    return rental


@router.get("/ebike/active", response_model=Optional[RentalResponse])
async def my_active_rental(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_active_rental(db, current_user.user_id)


# ---------------------------------------------------------------------------
# Bus / metro
# ---------------------------------------------------------------------------


@router.post("/scan", response_model=ScanPayResponse)
async def scan_and_pay(
    body: ScanPayRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    route = RouteInfo(
        origin=body.route_info.origin,
        destination=body.route_info.destination,
        distance_km=body.route_info.distance_km,
        route_name=body.route_info.route_name,
        vehicle_number=body.route_info.vehicle_number,
    )
    async with atomic(db):
        profile = await get_or_create_profile(
            db, current_user.user_id, email=current_user.email
        )
        result = await pay_green_trip(
            db,
            profile,
            partner_id=body.partner_id,
            trip_type=body.trip_type,
            fare=body.fare,
            route=route,
        )
    trip = result.trip
    return ScanPayResponse(
        trip=GreenTripResponse.model_validate(trip),
        balance=result.balance,
        message=(
            f"Thanh toán {format_vnd(trip.fare)} thành công! "
            f"+{trip.points_earned} điểm xanh."
        ),
    )


@router.get("/trips", response_model=TripHistoryResponse)
async def trip_history(
    limit: int = Query(50, ge=1, le=200),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Recent trips and completed rentals with lifetime totals."""
    auth_id = current_user.user_id
    trips = list(
        (
            await db.execute(
                select(GreenTrip)
                .where(GreenTrip.auth_id == auth_id)
                .order_by(desc(GreenTrip.created_at))
            )
        )
        .scalars()
        .all()
    )
    rentals = list(
        (
            await db.execute(
                select(EbikeRental)
                .where(
                    EbikeRental.auth_id == auth_id,
                    EbikeRental.status == RentalStatus.COMPLETED,
                )
                .order_by(desc(EbikeRental.created_at))
            )
        )
        .scalars()
        .all()
    )

    totals = TripTotals(
        trips=len(trips),
        rentals=len(rentals),
        distance_km=round(
            sum(t.distance_km for t in trips) + sum(r.distance_km or 0 for r in rentals), 2
        ),
        co2_saved_kg=round(
            sum(t.co2_saved_kg for t in trips) + sum(r.co2_saved_kg for r in rentals), 3
        ),
        points_earned=sum(t.points_earned for t in trips)
        + sum(r.points_earned for r in rentals),
        amount_spent=sum(t.fare for t in trips) + sum(r.fare for r in rentals),
    )
    return TripHistoryResponse(trips=trips[:limit], rentals=rentals[:limit], totals=totals)
