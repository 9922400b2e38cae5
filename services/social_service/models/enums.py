"""Enums for the Social Service models."""

import enum

from libs.db.types import enum_values

__all__ = ["FriendRequestStatus", "StoryType", "enum_values"]


class FriendRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class StoryType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    ACHIEVEMENT = "achievement"
