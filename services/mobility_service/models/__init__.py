"""Mobility Service models package.

Re-exports all models and enums so that SQLAlchemy's mapper registry sees
every model class on import. When adding a new model, list it here.
"""

from services.mobility_service.models.ebike import (  # noqa: F401
    Ebike,
    EbikeRental,
    EbikeStation,
)
from services.mobility_service.models.enums import (  # noqa: F401
    BikeStatus,
    RentalStatus,
    TripType,
)
from services.mobility_service.models.trip import GreenTrip  # noqa: F401

__all__ = [
    # Enums
    "BikeStatus",
    "RentalStatus",
    "TripType",
    # Models
    "EbikeStation",
    "Ebike",
    "EbikeRental",
    "GreenTrip",
]
