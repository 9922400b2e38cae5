"""Admin eKYC review queue."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import atomic, get_async_db
from services.kyc_service.models import (
    EkycStatus,
    EkycVerification,
    EkycVerificationLog,
)
from services.kyc_service.schemas import (
    RejectVerificationRequest,
    VerificationListResponse,
    VerificationLogResponse,
    VerificationResponse,
)
from services.kyc_service.services.verification_ops import (
    approve_verification,
    get_verification_by_id,
    reject_verification,
)
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/kyc", tags=["admin-kyc"])


@router.get("/verifications", response_model=VerificationListResponse)
async def list_verifications(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    ekyc_status: Optional[EkycStatus] = Query(None, alias="status"),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    filters = []
    if ekyc_status:
        filters.append(EkycVerification.status == ekyc_status)
    total = (
        await db.execute(
            select(func.count()).select_from(EkycVerification).where(*filters)
        )
    ).scalar() or 0
    result = await db.execute(
        select(EkycVerification)
        .where(*filters)
        .order_by(desc(EkycVerification.submitted_at))
        .offset(skip)
        .limit(limit)
    )
    return VerificationListResponse(
        verifications=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


@router.get("/verifications/{verification_id}", response_model=VerificationResponse)
async def get_verification_detail(
    verification_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_verification_by_id(db, verification_id)


@router.post(
    "/verifications/{verification_id}/approve", response_model=VerificationResponse
)
async def approve(
    verification_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        record = await approve_verification(
            db, verification_id, reviewed_by=admin.email or admin.user_id
        )
    return record


@router.post(
    "/verifications/{verification_id}/reject", response_model=VerificationResponse
)
async def reject(
    verification_id: uuid.UUID,
    body: RejectVerificationRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        record = await reject_verification(
            db,
            verification_id,
            reviewed_by=admin.email or admin.user_id,
            reason=body.reason,
        )
    return record


@router.get(
    "/verifications/{verification_id}/logs",
    response_model=list[VerificationLogResponse],
)
async def verification_logs(
    verification_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    await get_verification_by_id(db, verification_id)
    result = await db.execute(
        select(EkycVerificationLog)
        .where(EkycVerificationLog.verification_id == verification_id)
        .order_by(EkycVerificationLog.created_at)
    )
    return list(result.scalars().all())
