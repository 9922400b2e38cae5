"""Enums for the Rewards Service models."""

import enum

from libs.db.types import enum_values

__all__ = [
    "ChallengeType",
    "ClaimStatus",
    "RequirementType",
    "RewardCategory",
    "UserChallengeStatus",
    "VoucherStatus",
    "enum_values",
]


class RewardCategory(str, enum.Enum):
    VOUCHER = "voucher"
    MERCHANDISE = "merchandise"
    PRIVILEGE = "privilege"
    CHARITY = "charity"


class ClaimStatus(str, enum.Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class VoucherStatus(str, enum.Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class ChallengeType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SPECIAL = "special"


class RequirementType(str, enum.Enum):
    CUPS = "cups"
    POINTS = "points"
    FRIENDS = "friends"
    POSTS = "posts"
    STREAK = "streak"
    TRIPS = "trips"


class UserChallengeStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
