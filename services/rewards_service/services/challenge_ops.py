"""Challenge participation and progress tracking."""

import uuid

from libs.common.datetime_utils import ensure_utc, utc_now
from libs.common.errors import NotFound, StateConflict
from libs.common.logging import get_logger
from libs.db.session import conditional_update
from services.rewards_service.models import (
    Challenge,
    RequirementType,
    UserChallenge,
    UserChallengeStatus,
)
from services.users_service.models import NotificationType, PointSource
from services.users_service.services.profile_ops import (
    award_points,
    get_or_create_profile,
    notify,
)
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_challenge(db: AsyncSession, challenge_id: uuid.UUID) -> Challenge:
    result = await db.execute(select(Challenge).where(Challenge.id == challenge_id))
    challenge = result.scalar_one_or_none()
    if not challenge:
        raise NotFound("Challenge not found")
    return challenge


async def participant_count(db: AsyncSession, challenge_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(UserChallenge)
        .where(UserChallenge.challenge_id == challenge_id)
    )
    return result.scalar() or 0


async def join_challenge(
    db: AsyncSession, auth_id: str, challenge_id: uuid.UUID
) -> UserChallenge:
    challenge = await get_challenge(db, challenge_id)
    now = utc_now()
    if not challenge.is_active or ensure_utc(challenge.end_date) < now:
        raise StateConflict("Thử thách đã kết thúc", code="challenge_closed")
    if ensure_utc(challenge.start_date) > now:
        raise StateConflict("Thử thách chưa bắt đầu", code="challenge_not_started")

    existing = await db.execute(
        select(UserChallenge).where(
            UserChallenge.challenge_id == challenge_id,
            UserChallenge.auth_id == auth_id,
        )
    )
    if existing.scalar_one_or_none():
        raise StateConflict("Bạn đã tham gia thử thách này", code="already_joined")

    if challenge.max_participants is not None:
        if await participant_count(db, challenge_id) >= challenge.max_participants:
            raise StateConflict("Thử thách đã đủ người tham gia", code="challenge_full")

    participation = UserChallenge(
        challenge_id=challenge_id,
        auth_id=auth_id,
        progress=0,
        status=UserChallengeStatus.IN_PROGRESS,
    )
    db.add(participation)
    await db.flush()
    logger.info("User %s joined challenge %s", auth_id, challenge_id)
    return participation


async def expire_finished_challenges(db: AsyncSession) -> int:
    """Mark in-progress participations of ended challenges as failed."""
    ended = select(Challenge.id).where(Challenge.end_date < utc_now())
    result = await db.execute(
        update(UserChallenge)
        .where(
            UserChallenge.status == UserChallengeStatus.IN_PROGRESS,
            UserChallenge.challenge_id.in_(ended),
        )
        .values(status=UserChallengeStatus.FAILED)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def record_progress(
    db: AsyncSession,
    auth_id: str,
    requirement_type: RequirementType,
    amount: int = 1,
) -> list[UserChallenge]:
    """Advance the user's open challenges of one type; returns newly completed ones."""
    now = utc_now()
    result = await db.execute(
        select(UserChallenge, Challenge)
        .join(Challenge, Challenge.id == UserChallenge.challenge_id)
        .where(
            UserChallenge.auth_id == auth_id,
            UserChallenge.status == UserChallengeStatus.IN_PROGRESS,
            Challenge.requirement_type == requirement_type,
            Challenge.is_active.is_(True),
        )
    )

    completed: list[UserChallenge] = []
    for participation, challenge in result.all():
        if ensure_utc(challenge.end_date) < now:
            participation.status = UserChallengeStatus.FAILED
            continue
        await conditional_update(
            db,
            UserChallenge,
            UserChallenge.id == participation.id,
            UserChallenge.status == UserChallengeStatus.IN_PROGRESS,
            progress=UserChallenge.progress + amount,
        )
        await db.refresh(participation)
        if participation.progress < challenge.requirement_value:
            continue

        # Only the request that flips the status pays the reward
        finished = await conditional_update(
            db,
            UserChallenge,
            UserChallenge.id == participation.id,
            UserChallenge.status == UserChallengeStatus.IN_PROGRESS,
            progress=challenge.requirement_value,
            status=UserChallengeStatus.COMPLETED,
            completed_at=now,
        )
        await db.refresh(participation)
        if finished:
            completed.append(participation)

            profile = await get_or_create_profile(db, auth_id)
            await award_points(
                db,
                profile,
                challenge.reward_points,
                source=PointSource.CHALLENGE,
                description=f"Hoàn thành thử thách: {challenge.title}",
                reference_id=str(challenge.id),
            )
            await notify(
                db,
                auth_id,
                "Hoàn thành thử thách!",
                f"Bạn đã hoàn thành '{challenge.title}' và nhận "
                f"{challenge.reward_points} điểm xanh.",
                NotificationType.CHALLENGE,
            )
            logger.info("User %s completed challenge %s", auth_id, challenge.id)

    await db.flush()
    return completed
