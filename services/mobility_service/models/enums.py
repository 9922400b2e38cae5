"""Enums for the Mobility Service models."""

import enum

from libs.db.types import enum_values

__all__ = ["BikeStatus", "RentalStatus", "TripType", "enum_values"]


class BikeStatus(str, enum.Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"
    CHARGING = "charging"


class RentalStatus(str, enum.Enum):
    REQUESTED = "requested"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TripType(str, enum.Enum):
    BUS = "bus"
    METRO = "metro"
