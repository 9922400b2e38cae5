"""Admin wallet management endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.audit import record_audit
from libs.db.session import atomic, get_async_db
from services.wallet_service.models import (
    TopupStatus,
    TransactionType,
    Wallet,
    WalletStatus,
    WalletTopup,
)
from services.wallet_service.schemas import (
    AdjustBalanceRequest,
    AdminWalletListResponse,
    ConfirmTopupRequest,
    FailTopupRequest,
    FreezeWalletRequest,
    TopupListResponse,
    TopupResponse,
    TransactionResponse,
    WalletResponse,
)
from services.wallet_service.services.topup_ops import (
    confirm_topup,
    fail_topup,
    get_topup,
)
from services.wallet_service.services.wallet_ops import (
    credit_wallet,
    debit_wallet,
    get_or_create_wallet,
    get_wallet_by_auth_id,
)
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/admin/wallet", tags=["admin-wallet"])


# ---------------------------------------------------------------------------
# Wallet management
# ---------------------------------------------------------------------------


@router.get("/wallets", response_model=AdminWalletListResponse)
async def list_wallets(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    wallet_status: Optional[WalletStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List all wallets (paginated, filterable)."""
    filters = []
    if wallet_status:
        filters.append(Wallet.status == wallet_status)
    if search:
        filters.append(Wallet.auth_id.ilike(f"%{search}%"))

    total = (
        await db.execute(select(func.count()).select_from(Wallet).where(*filters))
    ).scalar() or 0
    result = await db.execute(
        select(Wallet)
        .where(*filters)
        .order_by(desc(Wallet.created_at))
        .offset(skip)
        .limit(limit)
    )
    return AdminWalletListResponse(
        wallets=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


@router.post("/wallets/{auth_id}/adjust", response_model=TransactionResponse)
async def adjust_balance(
    auth_id: str,
    body: AdjustBalanceRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Manual credit (positive) or debit (negative), audited."""
    performed_by = admin.email or admin.user_id
    kwargs = dict(
        auth_id=auth_id,
        amount=abs(body.amount),
        idempotency_key=f"admin-adjust-{uuid.uuid4()}",
        transaction_type=TransactionType.ADMIN_ADJUSTMENT,
        description=f"Điều chỉnh bởi quản trị viên: {body.reason}",
        performed_by=performed_by,
    )
    async with atomic(db):
        wallet = await get_or_create_wallet(db, auth_id)
        before = wallet.balance
        if body.amount >= 0:
            txn = await credit_wallet(db, **kwargs)
        else:
            txn = await debit_wallet(db, **kwargs)
        await record_audit(
            db,
            entity_type="wallet",
            entity_id=wallet.id,
            action="admin_credit" if body.amount >= 0 else "admin_debit",
            performed_by=performed_by,
            old_value={"balance": before},
            new_value={"balance": txn.balance_after},
            reason=body.reason,
        )
    return txn


@router.post("/wallets/{auth_id}/freeze", response_model=WalletResponse)
async def freeze_wallet(
    auth_id: str,
    body: FreezeWalletRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        wallet = await get_wallet_by_auth_id(db, auth_id)
        wallet.status = WalletStatus.FROZEN
        wallet.frozen_reason = body.reason
        await record_audit(
            db,
            entity_type="wallet",
            entity_id=wallet.id,
            action="freeze",
            performed_by=admin.email or admin.user_id,
            reason=body.reason,
        )
    return wallet


@router.post("/wallets/{auth_id}/unfreeze", response_model=WalletResponse)
async def unfreeze_wallet(
    auth_id: str,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        wallet = await get_wallet_by_auth_id(db, auth_id)
        wallet.status = WalletStatus.ACTIVE
        wallet.frozen_reason = None
        await record_audit(
            db,
            entity_type="wallet",
            entity_id=wallet.id,
            action="unfreeze",
            performed_by=admin.email or admin.user_id,
        )
    return wallet


# ---------------------------------------------------------------------------
# Top-ups
# ---------------------------------------------------------------------------


@router.get("/topups", response_model=TopupListResponse)
async def list_topups(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    topup_status: Optional[TopupStatus] = Query(None, alias="status"),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    filters = [WalletTopup.status == topup_status] if topup_status else []
    total = (
        await db.execute(select(func.count()).select_from(WalletTopup).where(*filters))
    ).scalar() or 0
    result = await db.execute(
        select(WalletTopup)
        .where(*filters)
        .order_by(desc(WalletTopup.created_at))
        .offset(skip)
        .limit(limit)
    )
    return TopupListResponse(
        topups=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


@router.post("/topups/{topup_id}/confirm", response_model=TopupResponse)
async def confirm_pending_topup(
    topup_id: uuid.UUID,
    body: ConfirmTopupRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Confirm a received payment and credit the wallet."""
    async with atomic(db):
        topup = await get_topup(db, topup_id)
        await confirm_topup(
            db,
            topup,
            payment_reference=body.payment_reference,
            confirmed_by=admin.email or admin.user_id,
        )
    return topup


@router.post("/topups/{topup_id}/fail", response_model=TopupResponse)
async def fail_pending_topup(
    topup_id: uuid.UUID,
    body: FailTopupRequest,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        topup = await get_topup(db, topup_id)
        await fail_topup(db, topup, reason=body.reason)
    return topup
