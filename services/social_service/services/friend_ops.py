"""Friend graph operations.

Friendships are stored once per pair with the ids ordered, so lookups never
need to check both directions.
"""

import uuid
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, PermissionDenied, StateConflict, ValidationFailed
from libs.common.logging import get_logger
from libs.db.session import conditional_update
from services.social_service.models import FriendRequest, FriendRequestStatus, Friendship
from services.users_service.models import NotificationType, UserProfile
from services.users_service.services.profile_ops import get_profile, notify
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _ordered(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a < b else (b, a)


async def are_friends(db: AsyncSession, a: str, b: str) -> bool:
    if a == b:
        return False
    low, high = _ordered(a, b)
    result = await db.execute(
        select(Friendship.id).where(Friendship.user_low == low, Friendship.user_high == high)
    )
    return result.scalar_one_or_none() is not None


async def friend_ids(db: AsyncSession, auth_id: str) -> list[str]:
    result = await db.execute(
        select(Friendship.user_low, Friendship.user_high).where(
            or_(Friendship.user_low == auth_id, Friendship.user_high == auth_id)
        )
    )
    return [high if low == auth_id else low for low, high in result.all()]


async def find_by_student_id(db: AsyncSession, student_id: str) -> UserProfile:
    result = await db.execute(
        select(UserProfile).where(UserProfile.student_id == student_id.strip())
    )
    profile = result.scalar_one_or_none()
    if not profile:
        raise NotFound("Không tìm thấy sinh viên với mã này")
    return profile


async def pending_between(db: AsyncSession, a: str, b: str) -> Optional[FriendRequest]:
    result = await db.execute(
        select(FriendRequest).where(
            FriendRequest.status == FriendRequestStatus.PENDING,
            or_(
                (FriendRequest.from_auth_id == a) & (FriendRequest.to_auth_id == b),
                (FriendRequest.from_auth_id == b) & (FriendRequest.to_auth_id == a),
            ),
        )
    )
    return result.scalars().first()


async def send_request(db: AsyncSession, from_auth_id: str, to_auth_id: str) -> FriendRequest:
    if from_auth_id == to_auth_id:
        raise ValidationFailed("Cannot send a friend request to yourself")
    sender = await get_profile(db, from_auth_id)
    await get_profile(db, to_auth_id)

    if await are_friends(db, from_auth_id, to_auth_id):
        raise StateConflict("Already friends", code="already_friends")
    if await pending_between(db, from_auth_id, to_auth_id):
        raise StateConflict("Friend request already exists", code="request_exists")

    request = FriendRequest(
        from_auth_id=from_auth_id,
        to_auth_id=to_auth_id,
        status=FriendRequestStatus.PENDING,
    )
    db.add(request)
    await db.flush()

    name = sender.display_name or "Một người dùng"
    await notify(
        db,
        to_auth_id,
        "Lời mời kết bạn",
        f"{name} muốn kết bạn với bạn.",
        NotificationType.FRIEND,
    )
    logger.info("Friend request %s: %s -> %s", request.id, from_auth_id, to_auth_id)
    return request


async def respond_request(
    db: AsyncSession, request_id: uuid.UUID, auth_id: str, *, accept: bool
) -> FriendRequest:
    """Accept or reject a pending request addressed to ``auth_id``."""
    result = await db.execute(select(FriendRequest).where(FriendRequest.id == request_id))
    request = result.scalar_one_or_none()
    if not request:
        raise NotFound("Friend request not found")
    if request.to_auth_id != auth_id:
        raise PermissionDenied("This request is not addressed to you")

    target = FriendRequestStatus.ACCEPTED if accept else FriendRequestStatus.REJECTED
    updated = await conditional_update(
        db,
        FriendRequest,
        FriendRequest.id == request.id,
        FriendRequest.status == FriendRequestStatus.PENDING,
        status=target,
        responded_at=utc_now(),
    )
    await db.refresh(request)
    if not updated:
        raise StateConflict(f"Request is already {request.status.value}")

    if accept and not await are_friends(db, request.from_auth_id, request.to_auth_id):
        low, high = _ordered(request.from_auth_id, request.to_auth_id)
        db.add(Friendship(user_low=low, user_high=high))
        await db.flush()
        await notify(
            db,
            request.from_auth_id,
            "Đã kết bạn",
            "Lời mời kết bạn của bạn đã được chấp nhận.",
            NotificationType.FRIEND,
        )
    logger.info("Friend request %s %s", request.id, target.value)
    return request


async def remove_friend(db: AsyncSession, auth_id: str, friend_auth_id: str) -> None:
    low, high = _ordered(auth_id, friend_auth_id)
    result = await db.execute(
        delete(Friendship).where(Friendship.user_low == low, Friendship.user_high == high)
    )
    if not result.rowcount:
        raise NotFound("Friendship not found")
    logger.info("Friendship removed: %s / %s", auth_id, friend_auth_id)


async def pending_requests(db: AsyncSession, auth_id: str) -> list[FriendRequest]:
    result = await db.execute(
        select(FriendRequest)
        .where(
            FriendRequest.to_auth_id == auth_id,
            FriendRequest.status == FriendRequestStatus.PENDING,
        )
        .order_by(FriendRequest.created_at.desc())
    )
    return list(result.scalars().all())


async def can_view_profile(db: AsyncSession, viewer: str, profile: UserProfile) -> bool:
    if profile.is_profile_public or profile.auth_id == viewer:
        return True
    return await are_friends(db, viewer, profile.auth_id)
