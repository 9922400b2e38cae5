"""Member-facing profile, points, garden and notification endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import NotFound, StateConflict
from libs.common.gamification import RANK_LABELS_VI, borrow_limit, rank_progress
from libs.db.session import atomic, get_async_db
from services.users_service.models import GreenPointEntry, Notification, UserProfile
from services.users_service.schemas import (
    GameScoreRequest,
    GameScoreResponse,
    LeaderboardEntry,
    NotificationResponse,
    PointHistoryResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RankProgressResponse,
    TreeResponse,
    WaterTreeResponse,
)
from services.users_service.services.engagement_ops import (
    get_or_create_tree,
    submit_game_score,
    water,
)
from services.users_service.services.profile_ops import get_or_create_profile
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get (or lazily create) the caller's profile."""
    async with atomic(db):
        profile = await get_or_create_profile(
            db, current_user.user_id, email=current_user.email
        )
    return profile


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: ProfileUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_or_create_profile(
            db, current_user.user_id, email=current_user.email
        )
        updates = body.model_dump(exclude_unset=True)
        student_id = updates.get("student_id")
        if student_id and student_id != profile.student_id:
            taken = await db.execute(
                select(UserProfile.id).where(UserProfile.student_id == student_id)
            )
            if taken.scalar_one_or_none():
                raise StateConflict("Mã số sinh viên đã được sử dụng")
        for field, value in updates.items():
            setattr(profile, field, value)
        await db.flush()
    return profile


@router.get("/me/rank", response_model=RankProgressResponse)
async def get_my_rank(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_or_create_profile(db, current_user.user_id)
    progress = rank_progress(profile.lifetime_green_points)
    return RankProgressResponse(
        rank=progress.rank,
        rank_label=RANK_LABELS_VI[progress.rank],
        next_rank=progress.next_rank,
        points=progress.points,
        points_to_next=progress.points_to_next,
        progress_percent=progress.progress_percent,
        borrow_limit=borrow_limit(progress.rank),
    )


@router.get("/me/points", response_model=PointHistoryResponse)
async def get_my_points_history(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    where = GreenPointEntry.auth_id == current_user.user_id
    total = (
        await db.execute(select(func.count()).select_from(GreenPointEntry).where(where))
    ).scalar() or 0
    result = await db.execute(
        select(GreenPointEntry)
        .where(where)
        .order_by(desc(GreenPointEntry.created_at))
        .offset(skip)
        .limit(limit)
    )
    return PointHistoryResponse(
        entries=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Top public profiles by lifetime green points."""
    result = await db.execute(
        select(UserProfile)
        .where(
            UserProfile.is_profile_public.is_(True),
            UserProfile.is_blacklisted.is_(False),
        )
        .order_by(desc(UserProfile.lifetime_green_points), UserProfile.created_at)
        .limit(limit)
    )
    return [
        LeaderboardEntry(
            position=i,
            auth_id=p.auth_id,
            display_name=p.display_name,
            avatar_url=p.avatar_url,
            rank_level=p.rank_level,
            lifetime_green_points=p.lifetime_green_points,
            total_cups_saved=p.total_cups_saved,
        )
        for i, p in enumerate(result.scalars().all(), start=1)
    ]


# ---------------------------------------------------------------------------
# Mini-games and garden
# ---------------------------------------------------------------------------


@router.post("/me/games/score", response_model=GameScoreResponse)
async def post_game_score(
    body: GameScoreRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_or_create_profile(db, current_user.user_id)
        entry = await submit_game_score(
            db, profile, game_type=body.game_type, score=body.score
        )
    return GameScoreResponse(
        id=entry.id,
        game_type=entry.game_type,
        score=entry.score,
        points_earned=entry.points_earned,
        green_points=profile.green_points,
    )


@router.get("/me/tree", response_model=TreeResponse)
async def get_my_tree(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        tree = await get_or_create_tree(db, current_user.user_id)
    return tree


@router.post("/me/tree/water", response_model=WaterTreeResponse)
async def water_my_tree(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_or_create_profile(db, current_user.user_id)
        tree, bonus = await water(db, profile)
    return WaterTreeResponse(
        tree=TreeResponse.model_validate(tree),
        leveled_up=bonus > 0,
        bonus_points=bonus,
    )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@router.get("/me/notifications", response_model=list[NotificationResponse])
async def list_my_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Notification).where(Notification.auth_id == current_user.user_id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    result = await db.execute(
        query.order_by(desc(Notification.created_at)).limit(limit)
    )
    return list(result.scalars().all())


@router.post(
    "/me/notifications/{notification_id}/read", response_model=NotificationResponse
)
async def mark_notification_read(
    notification_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.auth_id == current_user.user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFound("Notification not found")
        notification.is_read = True
        await db.flush()
    return notification
