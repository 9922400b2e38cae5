"""Enums for the Users Service models."""

import enum

from libs.common.gamification import RankLevel
from libs.db.types import enum_values

__all__ = ["EkycStatus", "NotificationType", "PointSource", "RankLevel", "enum_values"]


class EkycStatus(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PointSource(str, enum.Enum):
    CUP_RETURN = "cup_return"
    EBIKE_RIDE = "ebike_ride"
    GREEN_TRIP = "green_trip"
    MINI_GAME = "mini_game"
    TREE = "tree"
    CHALLENGE = "challenge"
    REWARD_CLAIM = "reward_claim"
    ADMIN_ADJUSTMENT = "admin_adjustment"


class NotificationType(str, enum.Enum):
    BORROW = "borrow"
    RETURN = "return"
    OVERDUE = "overdue"
    REWARD = "reward"
    CHALLENGE = "challenge"
    EKYC = "ekyc"
    FRIEND = "friend"
    SYSTEM = "system"
