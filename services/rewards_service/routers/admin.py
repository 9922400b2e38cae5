"""Admin reward catalogue and challenge management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, StateConflict
from libs.db.audit import record_audit
from libs.db.session import atomic, get_async_db
from services.rewards_service.models import (
    Challenge,
    ClaimStatus,
    Reward,
    RewardClaim,
)
from services.rewards_service.schemas import (
    ChallengeCreate,
    ChallengeResponse,
    ChallengeUpdate,
    RewardClaimResponse,
    RewardCreate,
    RewardResponse,
    RewardUpdate,
)
from services.rewards_service.services.challenge_ops import get_challenge
from services.rewards_service.services.reward_ops import get_reward
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/rewards", tags=["admin-rewards"])
challenges_router = APIRouter(prefix="/admin/challenges", tags=["admin-challenges"])


@router.get("", response_model=list[RewardResponse])
async def list_all_rewards(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(Reward).order_by(desc(Reward.created_at)))
    return list(result.scalars().all())


@router.post("", response_model=RewardResponse, status_code=status.HTTP_201_CREATED)
async def create_reward(
    body: RewardCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        reward = Reward(**body.model_dump())
        db.add(reward)
        await db.flush()
    return reward


@router.patch("/{reward_id}", response_model=RewardResponse)
async def update_reward(
    reward_id: uuid.UUID,
    body: RewardUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        reward = await get_reward(db, reward_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(reward, field, value)
        await db.flush()
    return reward


@router.delete("/{reward_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_reward(
    reward_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Withdraw a reward from the catalogue; claims already made stay valid."""
    async with atomic(db):
        reward = await get_reward(db, reward_id)
        reward.is_active = False
        await record_audit(
            db,
            entity_type="reward",
            entity_id=reward.id,
            action="archived",
            performed_by=admin.email or admin.user_id,
        )


@router.get("/claims", response_model=list[RewardClaimResponse])
async def list_claims(
    claim_status: Optional[ClaimStatus] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(RewardClaim)
    if claim_status:
        query = query.where(RewardClaim.status == claim_status)
    result = await db.execute(query.order_by(desc(RewardClaim.claimed_at)))
    return list(result.scalars().all())


@router.post("/claims/{claim_id}/fulfill", response_model=RewardClaimResponse)
async def fulfill_claim(
    claim_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        result = await db.execute(select(RewardClaim).where(RewardClaim.id == claim_id))
        reward_claim = result.scalar_one_or_none()
        if reward_claim is None:
            raise NotFound("Claim not found")
        if reward_claim.status != ClaimStatus.PENDING:
            raise StateConflict(f"Claim is already {reward_claim.status.value}")
        reward_claim.status = ClaimStatus.FULFILLED
        reward_claim.fulfilled_at = utc_now()
        await db.flush()
    return reward_claim


@challenges_router.get("", response_model=list[ChallengeResponse])
async def list_all_challenges(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(Challenge).order_by(desc(Challenge.created_at)))
    return list(result.scalars().all())


@challenges_router.post(
    "", response_model=ChallengeResponse, status_code=status.HTTP_201_CREATED
)
async def create_challenge(
    body: ChallengeCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        challenge = Challenge(**body.model_dump())
        db.add(challenge)
        await db.flush()
    return challenge


@challenges_router.patch("/{challenge_id}", response_model=ChallengeResponse)
async def update_challenge(
    challenge_id: uuid.UUID,
    body: ChallengeUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        challenge = await get_challenge(db, challenge_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(challenge, field, value)
        await db.flush()
    return challenge


@challenges_router.delete("/{challenge_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_challenge(
    challenge_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Hide a challenge from listings and joins; existing progress is kept."""
    async with atomic(db):
        challenge = await get_challenge(db, challenge_id)
        challenge.is_active = False
        await record_audit(
            db,
            entity_type="challenge",
            entity_id=challenge.id,
            action="archived",
            performed_by=admin.email or admin.user_id,
        )
