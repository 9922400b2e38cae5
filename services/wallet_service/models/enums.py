"""Enums for the Wallet Service models."""

import enum

from libs.db.types import enum_values

__all__ = [
    "PaymentMethod",
    "TopupStatus",
    "TransactionDirection",
    "TransactionType",
    "WalletStatus",
    "enum_values",
]


class WalletStatus(str, enum.Enum):
    ACTIVE = "active"
    FROZEN = "frozen"


class TransactionType(str, enum.Enum):
    TOPUP = "topup"
    CUP_DEPOSIT = "cup_deposit"
    DEPOSIT_REFUND = "deposit_refund"
    BORROW_DISCOUNT = "borrow_discount"
    LATE_FEE = "late_fee"
    EBIKE_FARE = "ebike_fare"
    MOBILITY_FARE = "mobility_fare"
    ADMIN_ADJUSTMENT = "admin_adjustment"


class TransactionDirection(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TopupStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    BANK_TRANSFER = "bank_transfer"
    MOMO = "momo"
    VNPAY = "vnpay"
    ADMIN_GRANT = "admin_grant"
