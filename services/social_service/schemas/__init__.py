"""Social Service schemas package."""

from services.social_service.schemas.friend import (  # noqa: F401
    FriendRequestCreate,
    FriendRequestResponse,
    FriendSearchResponse,
    FriendSummary,
    PublicProfileResponse,
)
from services.social_service.schemas.story import StoryCreate, StoryResponse  # noqa: F401

__all__ = [
    "FriendRequestCreate",
    "FriendRequestResponse",
    "FriendSearchResponse",
    "FriendSummary",
    "PublicProfileResponse",
    "StoryCreate",
    "StoryResponse",
]
