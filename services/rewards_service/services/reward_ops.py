"""Reward claims and streak vouchers.

Claims validate everything up front, then apply two conditional updates
(stock, points) in the caller's transaction. If either update loses a race
the caller's ``atomic`` block rolls both back, so there is no partial claim.
"""

import secrets
import uuid
from datetime import timedelta

from libs.common.datetime_utils import ensure_utc, utc_now
from libs.common.errors import (
    InsufficientPoints,
    NotFound,
    OutOfStock,
    StateConflict,
)
from libs.common.gamification import StreakVoucher
from libs.common.logging import get_logger
from libs.db.session import conditional_update
from services.rewards_service.models import (
    ClaimStatus,
    Reward,
    RewardClaim,
    Voucher,
    VoucherStatus,
)
from services.users_service.models import NotificationType, PointSource, UserProfile
from services.users_service.services.profile_ops import (
    ensure_not_blacklisted,
    notify,
    spend_points,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

VOUCHER_VALIDITY = timedelta(days=30)


def _code(prefix: str) -> str:
    return f"{prefix}-{secrets.token_hex(4).upper()}"


async def get_reward(db: AsyncSession, reward_id: uuid.UUID) -> Reward:
    result = await db.execute(select(Reward).where(Reward.id == reward_id))
    reward = result.scalar_one_or_none()
    if not reward:
        raise NotFound("Reward not found")
    return reward


async def claim_reward(
    db: AsyncSession, profile: UserProfile, reward_id: uuid.UUID
) -> RewardClaim:
    """Spend points on a reward; stock and points move together or not at all."""
    ensure_not_blacklisted(profile)
    reward = await get_reward(db, reward_id)

    if not reward.is_active:
        raise StateConflict("Reward is not available", code="reward_inactive")
    if reward.valid_until and ensure_utc(reward.valid_until) < utc_now():
        raise StateConflict("Reward has expired", code="reward_expired")
    if reward.stock <= 0:
        raise OutOfStock()
    if profile.green_points < reward.points_cost:
        raise InsufficientPoints(
            f"Insufficient points. Required: {reward.points_cost}, "
            f"Available: {profile.green_points}"
        )

    taken = await conditional_update(
        db,
        Reward,
        Reward.id == reward.id,
        Reward.stock > 0,
        stock=Reward.stock - 1,
    )
    if not taken:
        raise OutOfStock()

    claim = RewardClaim(
        reward_id=reward.id,
        auth_id=profile.auth_id,
        points_spent=reward.points_cost,
        claim_code=_code("RW"),
        status=ClaimStatus.PENDING,
    )
    db.add(claim)
    await db.flush()

    await spend_points(
        db,
        profile,
        reward.points_cost,
        source=PointSource.REWARD_CLAIM,
        description=f"Đổi quà: {reward.name}",
        reference_id=str(claim.id),
    )
    await db.refresh(reward)
    await notify(
        db,
        profile.auth_id,
        "Đổi quà thành công",
        f"Bạn đã đổi {reward.name}. Mã nhận quà: {claim.claim_code}",
        NotificationType.REWARD,
    )
    logger.info(
        "User %s claimed reward %s for %d points", profile.auth_id, reward.id, reward.points_cost
    )
    return claim


async def issue_streak_voucher(
    db: AsyncSession, auth_id: str, voucher: StreakVoucher
) -> Voucher:
    issued = Voucher(
        auth_id=auth_id,
        code=_code("STREAK"),
        discount_percent=voucher.discount_percent,
        source="streak",
        status=VoucherStatus.ACTIVE,
        expires_at=utc_now() + VOUCHER_VALIDITY,
    )
    db.add(issued)
    await db.flush()
    await notify(
        db,
        auth_id,
        "Chuỗi trả ly đúng hạn!",
        f"Bạn đã trả đúng hạn {voucher.streak_length} lần liên tiếp và nhận voucher "
        f"giảm {voucher.discount_percent}% ({issued.code}).",
        NotificationType.REWARD,
    )
    logger.info("Issued streak voucher %s to %s", issued.code, auth_id)
    return issued
