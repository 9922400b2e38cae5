"""Enums for the Cups Service models."""

import enum

from libs.db.types import enum_values

__all__ = [
    "CupMaterial",
    "CupStatus",
    "CupTransactionStatus",
    "PartnerStatus",
    "PartnerType",
    "enum_values",
]


class PartnerType(str, enum.Enum):
    CAFE = "cafe"
    TRANSPORT = "transport"


class PartnerStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    PAUSED = "paused"


class CupMaterial(str, enum.Enum):
    PP_PLASTIC = "pp_plastic"
    BAMBOO_FIBER = "bamboo_fiber"


class CupStatus(str, enum.Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    CLEANING = "cleaning"
    LOST = "lost"


class CupTransactionStatus(str, enum.Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


OPEN_STATUSES = (CupTransactionStatus.ONGOING, CupTransactionStatus.OVERDUE)
