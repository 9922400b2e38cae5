"""Mobility Service schemas package."""

from services.mobility_service.schemas.ebike import (  # noqa: F401
    BikeCreate,
    BikeResponse,
    BikeUpdate,
    RentalResponse,
    ReturnBikeRequest,
    SolarTelemetryUpdate,
    StationCreate,
    StationResponse,
    StationUpdate,
    UnlockRequest,
    UnlockResponse,
)
from services.mobility_service.schemas.trip import (  # noqa: F401
    GreenTripResponse,
    RouteInfoRequest,
    ScanPayRequest,
    ScanPayResponse,
    TripHistoryResponse,
    TripTotals,
)

__all__ = [
    "BikeCreate",
    "BikeResponse",
    "BikeUpdate",
    "GreenTripResponse",
    "RentalResponse",
    "ReturnBikeRequest",
    "RouteInfoRequest",
    "ScanPayRequest",
    "ScanPayResponse",
    "SolarTelemetryUpdate",
    "StationCreate",
    "StationResponse",
    "StationUpdate",
    "TripHistoryResponse",
    "TripTotals",
    "UnlockRequest",
    "UnlockResponse",
]
