"""Profile and green point operations.

Operations flush but never commit; the caller owns the unit of work.
"""

from typing import Optional

from libs.common.errors import InsufficientPoints, NotFound, PermissionDenied
from libs.common.gamification import compute_rank
from libs.common.logging import get_logger
from libs.db.session import conditional_update
from services.users_service.models import (
    GreenPointEntry,
    Notification,
    NotificationType,
    PointSource,
    UserProfile,
)
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


async def get_profile(db: AsyncSession, auth_id: str) -> UserProfile:
    """Get a profile by auth id. Raises 404 if missing."""
    result = await db.execute(select(UserProfile).where(UserProfile.auth_id == auth_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise NotFound("User not found")
    return profile


async def get_or_create_profile(
    db: AsyncSession,
    auth_id: str,
    *,
    email: Optional[str] = None,
) -> UserProfile:
    """Return the profile for ``auth_id``, creating an empty one on first access."""
    result = await db.execute(select(UserProfile).where(UserProfile.auth_id == auth_id))
    profile = result.scalar_one_or_none()
    if profile:
        return profile

    profile = UserProfile(
        auth_id=auth_id,
        email=email,
        display_name=email.split("@")[0] if email else None,
    )
    db.add(profile)
    await db.flush()
    logger.info("Created profile for %s", auth_id)
    return profile


def ensure_not_blacklisted(profile: UserProfile) -> None:
    if profile.is_blacklisted:
        raise PermissionDenied(
            "Tài khoản của bạn đã bị khóa. Vui lòng liên hệ quản trị viên.",
            code="blacklisted",
        )


# ---------------------------------------------------------------------------
# Green points
# ---------------------------------------------------------------------------


async def award_points(
    db: AsyncSession,
    profile: UserProfile,
    amount: int,
    *,
    source: PointSource,
    description: str,
    reference_id: Optional[str] = None,
) -> Optional[GreenPointEntry]:
    """Add points to both balances, recompute rank and write a ledger entry.

    Balances are incremented in SQL so a spend committed by another request
    since ``profile`` was loaded is kept.
    """
    if amount <= 0:
        return None

    await conditional_update(
        db,
        UserProfile,
        UserProfile.id == profile.id,
        green_points=UserProfile.green_points + amount,
        lifetime_green_points=UserProfile.lifetime_green_points + amount,
    )
    await db.refresh(profile)
    new_rank = compute_rank(profile.lifetime_green_points)
    if new_rank != profile.rank_level:
        logger.info(
            "User %s rank %s -> %s", profile.auth_id, profile.rank_level.value, new_rank.value
        )
        profile.rank_level = new_rank

    entry = GreenPointEntry(
        auth_id=profile.auth_id,
        amount=amount,
        balance_after=profile.green_points,
        source=source,
        reference_id=reference_id,
        description=description,
    )
    db.add(entry)
    await db.flush()
    return entry


async def spend_points(
    db: AsyncSession,
    profile: UserProfile,
    amount: int,
    *,
    source: PointSource,
    description: str,
    reference_id: Optional[str] = None,
) -> GreenPointEntry:
    """Deduct spendable points with a conditional update; balance never goes negative."""
    spent = await conditional_update(
        db,
        UserProfile,
        UserProfile.id == profile.id,
        UserProfile.green_points >= amount,
        green_points=UserProfile.green_points - amount,
    )
    await db.refresh(profile)
    if not spent:
        raise InsufficientPoints(
            f"Insufficient points. Required: {amount}, Available: {profile.green_points}"
        )

    entry = GreenPointEntry(
        auth_id=profile.auth_id,
        amount=-amount,
        balance_after=profile.green_points,
        source=source,
        reference_id=reference_id,
        description=description,
    )
    db.add(entry)
    await db.flush()
    return entry


async def adjust_points(
    db: AsyncSession, profile: UserProfile, delta: int, *, description: str
) -> Optional[GreenPointEntry]:
    """Admin correction in either direction."""
    if delta > 0:
        return await award_points(
            db, profile, delta, source=PointSource.ADMIN_ADJUSTMENT, description=description
        )
    if delta < 0:
        return await spend_points(
            db, profile, -delta, source=PointSource.ADMIN_ADJUSTMENT, description=description
        )
    return None


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


async def register_return(db: AsyncSession, profile: UserProfile, *, on_time: bool) -> int:
    """Count a completed return and move the on-time streak; returns the new streak."""
    if on_time:
        streak_values = {
            "green_streak": UserProfile.green_streak + 1,
            "best_streak": case(
                (UserProfile.best_streak > UserProfile.green_streak, UserProfile.best_streak),
                else_=UserProfile.green_streak + 1,
            ),
        }
    else:
        streak_values = {"green_streak": 0}
    await conditional_update(
        db,
        UserProfile,
        UserProfile.id == profile.id,
        total_cups_saved=UserProfile.total_cups_saved + 1,
        **streak_values,
    )
    await db.refresh(profile)
    return profile.green_streak


async def reset_streak(db: AsyncSession, profile: UserProfile) -> None:
    await conditional_update(db, UserProfile, UserProfile.id == profile.id, green_streak=0)
    await db.refresh(profile)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


async def notify(
    db: AsyncSession,
    auth_id: str,
    title: str,
    message: str,
    type: NotificationType = NotificationType.SYSTEM,
) -> Notification:
    notification = Notification(auth_id=auth_id, title=title, message=message, type=type)
    db.add(notification)
    await db.flush()
    return notification
