"""Users Service schemas package."""

from services.users_service.schemas.engagement import (  # noqa: F401
    GameScoreRequest,
    GameScoreResponse,
    NotificationResponse,
    PointEntryResponse,
    PointHistoryResponse,
    TreeResponse,
    WaterTreeResponse,
)
from services.users_service.schemas.profile import (  # noqa: F401
    AdjustPointsRequest,
    AdminProfileListResponse,
    BlacklistRequest,
    LeaderboardEntry,
    ProfileResponse,
    ProfileUpdateRequest,
    RankProgressResponse,
)

__all__ = [
    "AdjustPointsRequest",
    "AdminProfileListResponse",
    "BlacklistRequest",
    "GameScoreRequest",
    "GameScoreResponse",
    "LeaderboardEntry",
    "NotificationResponse",
    "PointEntryResponse",
    "PointHistoryResponse",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "RankProgressResponse",
    "TreeResponse",
    "WaterTreeResponse",
]
