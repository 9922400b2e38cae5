"""Admin user management endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.audit import record_audit
from libs.db.session import atomic, get_async_db
from services.users_service.models import EkycStatus, UserProfile
from services.users_service.schemas import (
    AdjustPointsRequest,
    AdminProfileListResponse,
    BlacklistRequest,
    ProfileResponse,
)
from services.users_service.services.profile_ops import adjust_points, get_profile
from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get("", response_model=AdminProfileListResponse)
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    search: Optional[str] = None,
    blacklisted: Optional[bool] = None,
    ekyc_status: Optional[EkycStatus] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List users (paginated, filterable)."""
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                UserProfile.email.ilike(pattern),
                UserProfile.display_name.ilike(pattern),
                UserProfile.student_id.ilike(pattern),
            )
        )
    if blacklisted is not None:
        filters.append(UserProfile.is_blacklisted.is_(blacklisted))
    if ekyc_status:
        filters.append(UserProfile.ekyc_status == ekyc_status)

    total = (
        await db.execute(select(func.count()).select_from(UserProfile).where(*filters))
    ).scalar() or 0
    result = await db.execute(
        select(UserProfile)
        .where(*filters)
        .order_by(desc(UserProfile.created_at))
        .offset(skip)
        .limit(limit)
    )
    return AdminProfileListResponse(
        users=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


@router.get("/{auth_id}", response_model=ProfileResponse)
async def get_user(
    auth_id: str,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_profile(db, auth_id)


@router.post("/{auth_id}/blacklist", response_model=ProfileResponse)
async def blacklist_user(
    auth_id: str,
    body: BlacklistRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Block a user from borrowing, renting and paying."""
    async with atomic(db):
        profile = await get_profile(db, auth_id)
        profile.is_blacklisted = True
        profile.blacklist_reason = body.reason
        await record_audit(
            db,
            entity_type="user",
            entity_id=auth_id,
            action="blacklist",
            performed_by=admin.email or admin.user_id,
            new_value={"is_blacklisted": True},
            reason=body.reason,
        )
    return profile


@router.post("/{auth_id}/unblacklist", response_model=ProfileResponse)
async def unblacklist_user(
    auth_id: str,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        profile = await get_profile(db, auth_id)
        profile.is_blacklisted = False
        profile.blacklist_reason = None
        await record_audit(
            db,
            entity_type="user",
            entity_id=auth_id,
            action="unblacklist",
            performed_by=admin.email or admin.user_id,
            new_value={"is_blacklisted": False},
        )
    return profile


@router.post("/{auth_id}/points", response_model=ProfileResponse)
async def adjust_user_points(
    auth_id: str,
    body: AdjustPointsRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Manually award or deduct green points (audited)."""
    async with atomic(db):
        profile = await get_profile(db, auth_id)
        before = profile.green_points
        await adjust_points(db, profile, body.delta, description=body.reason)
        await record_audit(
            db,
            entity_type="user",
            entity_id=auth_id,
            action="adjust_points",
            performed_by=admin.email or admin.user_id,
            old_value={"green_points": before},
            new_value={"green_points": profile.green_points},
            reason=body.reason,
        )
    return profile
