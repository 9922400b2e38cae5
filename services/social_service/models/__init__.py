"""Social Service models package."""

from services.social_service.models.enums import (  # noqa: F401
    FriendRequestStatus,
    StoryType,
)
from services.social_service.models.friend import FriendRequest, Friendship  # noqa: F401
from services.social_service.models.story import Story, StoryLike, StoryView  # noqa: F401

__all__ = [
    # Enums
    "FriendRequestStatus",
    "StoryType",
    # Models
    "FriendRequest",
    "Friendship",
    "Story",
    "StoryLike",
    "StoryView",
]
