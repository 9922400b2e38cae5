"""Shared helpers for mobility routers."""

import uuid

from services.mobility_service.models import BikeStatus, Ebike, EbikeStation
from services.mobility_service.schemas import StationResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def stations_with_counts(
    db: AsyncSession, stations: list[EbikeStation]
) -> list[StationResponse]:
    ids: list[uuid.UUID] = [station.id for station in stations]
    docked: dict[uuid.UUID, int] = {}
    available: dict[uuid.UUID, int] = {}
    if ids:
        result = await db.execute(
            select(Ebike.station_id, Ebike.status, func.count())
            .where(Ebike.station_id.in_(ids))
            .group_by(Ebike.station_id, Ebike.status)
        )
        for station_id, status, count in result.all():
            docked[station_id] = docked.get(station_id, 0) + count
            if status == BikeStatus.AVAILABLE:
                available[station_id] = count

    responses = []
    for station in stations:
        response = StationResponse.model_validate(station)
        response.available_bikes = available.get(station.id, 0)
        response.free_slots = max(0, station.total_slots - docked.get(station.id, 0))
        responses.append(response)
    return responses
