"""Enums for the Partners Service models."""

import enum

from libs.db.types import enum_values

__all__ = [
    "ContractStatus",
    "ContractType",
    "OrderPriority",
    "PaymentProvider",
    "RedistributionStatus",
    "enum_values",
]


class ContractType(str, enum.Enum):
    REVENUE_SHARE = "revenue_share"
    FIXED_FEE = "fixed_fee"
    HYBRID = "hybrid"


class ContractStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class OrderPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RedistributionStatus(str, enum.Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentProvider(str, enum.Enum):
    MOMO = "momo"
    VNPAY = "vnpay"
    BANK_TRANSFER = "bank_transfer"
