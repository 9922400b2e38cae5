"""Rewards Service schemas package."""

from services.rewards_service.schemas.challenge import (  # noqa: F401
    ChallengeCreate,
    ChallengeResponse,
    ChallengeUpdate,
    MyChallengeResponse,
    UserChallengeResponse,
)
from services.rewards_service.schemas.reward import (  # noqa: F401
    ClaimResultResponse,
    RewardClaimResponse,
    RewardCreate,
    RewardResponse,
    RewardUpdate,
    VoucherResponse,
)

__all__ = [
    "ChallengeCreate",
    "ChallengeResponse",
    "ChallengeUpdate",
    "ClaimResultResponse",
    "MyChallengeResponse",
    "RewardClaimResponse",
    "RewardCreate",
    "RewardResponse",
    "RewardUpdate",
    "UserChallengeResponse",
    "VoucherResponse",
]
