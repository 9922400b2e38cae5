"""Rewards Service models package.

Re-exports all models and enums so that SQLAlchemy's mapper registry sees
every model class on import. When adding a new model, list it here.
"""

from services.rewards_service.models.challenge import (  # noqa: F401
    Challenge,
    UserChallenge,
)
from services.rewards_service.models.enums import (  # noqa: F401
    ChallengeType,
    ClaimStatus,
    RequirementType,
    RewardCategory,
    UserChallengeStatus,
    VoucherStatus,
)
from services.rewards_service.models.reward import (  # noqa: F401
    Reward,
    RewardClaim,
    Voucher,
)

__all__ = [
    # Enums
    "ChallengeType",
    "ClaimStatus",
    "RequirementType",
    "RewardCategory",
    "UserChallengeStatus",
    "VoucherStatus",
    # Models
    "Reward",
    "RewardClaim",
    "Voucher",
    "Challenge",
    "UserChallenge",
]
