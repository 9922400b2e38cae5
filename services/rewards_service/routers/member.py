"""Member-facing rewards, vouchers and challenges endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.db.session import atomic, get_async_db
from services.rewards_service.models import (
    Challenge,
    Reward,
    RewardCategory,
    RewardClaim,
    UserChallenge,
    Voucher,
)
from services.rewards_service.schemas import (
    ChallengeResponse,
    ClaimResultResponse,
    MyChallengeResponse,
    RewardClaimResponse,
    RewardResponse,
    UserChallengeResponse,
    VoucherResponse,
)
from services.rewards_service.services.challenge_ops import (
    expire_finished_challenges,
    join_challenge,
)
from services.rewards_service.services.reward_ops import claim_reward
from services.users_service.services.profile_ops import get_or_create_profile
from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/rewards", tags=["rewards"])
challenges_router = APIRouter(prefix="/challenges", tags=["challenges"])


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------


@router.get("", response_model=list[RewardResponse])
async def list_rewards(
    category: Optional[RewardCategory] = None,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Active, unexpired rewards, cheapest first."""
    query = select(Reward).where(
        Reward.is_active.is_(True),
        or_(Reward.valid_until.is_(None), Reward.valid_until >= utc_now()),
    )
    if category:
        query = query.where(Reward.category == category)
    result = await db.execute(query.order_by(Reward.points_cost))
    return list(result.scalars().all())


@router.post(
    "/{reward_id}/claim",
    response_model=ClaimResultResponse,
    status_code=status.HTTP_201_CREATED,
)
async def claim(
    reward_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_or_create_profile(db, current_user.user_id)
        reward_claim = await claim_reward(db, profile, reward_id)
        remaining_stock = (
            await db.execute(select(Reward.stock).where(Reward.id == reward_id))
        ).scalar_one()
    return ClaimResultResponse(
        claim=RewardClaimResponse.model_validate(reward_claim),
        remaining_points=profile.green_points,
        remaining_stock=remaining_stock,
    )


@router.get("/claims/me", response_model=list[RewardClaimResponse])
async def my_claims(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(RewardClaim)
        .where(RewardClaim.auth_id == current_user.user_id)
        .order_by(desc(RewardClaim.claimed_at))
    )
    return list(result.scalars().all())


@router.get("/vouchers/me", response_model=list[VoucherResponse])
async def my_vouchers(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Voucher)
        .where(Voucher.auth_id == current_user.user_id)
        .order_by(desc(Voucher.created_at))
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


async def _with_counts(db: AsyncSession, challenges: list[Challenge]) -> list[ChallengeResponse]:
    if not challenges:
        return []
    counts = dict(
        (
            await db.execute(
                select(UserChallenge.challenge_id, func.count())
                .where(UserChallenge.challenge_id.in_([c.id for c in challenges]))
                .group_by(UserChallenge.challenge_id)
            )
        ).all()
    )
    responses = []
    for challenge in challenges:
        response = ChallengeResponse.model_validate(challenge)
        response.participant_count = counts.get(challenge.id, 0)
        responses.append(response)
    return responses


@challenges_router.get("", response_model=list[ChallengeResponse])
async def list_active_challenges(
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    now = utc_now()
    result = await db.execute(
        select(Challenge)
        .where(
            Challenge.is_active.is_(True),
            Challenge.start_date <= now,
            Challenge.end_date >= now,
        )
        .order_by(Challenge.end_date)
    )
    return await _with_counts(db, list(result.scalars().all()))


@challenges_router.post(
    "/{challenge_id}/join",
    response_model=UserChallengeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join(
    challenge_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        participation = await join_challenge(db, current_user.user_id, challenge_id)
    return participation


@challenges_router.get("/me", response_model=list[MyChallengeResponse])
async def my_challenges(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await expire_finished_challenges(db)
    result = await db.execute(
        select(UserChallenge, Challenge)
        .join(Challenge, Challenge.id == UserChallenge.challenge_id)
        .where(UserChallenge.auth_id == current_user.user_id)
        .order_by(desc(UserChallenge.joined_at))
    )
    return [
        MyChallengeResponse(
            participation=UserChallengeResponse.model_validate(participation),
            challenge=ChallengeResponse.model_validate(challenge),
        )
        for participation, challenge in result.all()
    ]
